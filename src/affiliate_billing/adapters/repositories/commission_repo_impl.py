from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum

from affiliate_billing.core.domain.entities.commission_entity import CommissionEntity
from affiliate_billing.core.domain.repositories.commission_repository import CommissionRepository
from convenio_core.adapters.repositories._helpers import get_or_none, paginate
from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.exceptions import AlreadyPaidError
from plugins.django_interface.models import Commission as CommissionModel

ZERO = Decimal("0.00")
PAYMENT_FIELDS = (
    "status", "paid_at", "paid_by_id", "paid_method",
    "receipt_reference", "external_payment_reference",
)


def _period_q(start: datetime | None, end: datetime | None) -> Q:
    paid = Q(status=CommissionModel.Status.PAID)
    pending = Q(status=CommissionModel.Status.PENDING)
    if start is not None:
        paid &= Q(paid_at__gte=start)
        pending &= Q(created_at__gte=start)
    if end is not None:
        paid &= Q(paid_at__lt=end)
        pending &= Q(created_at__lt=end)
    return paid | pending


class CommissionRepoImpl(CommissionRepository):
    def _qs(self):
        return CommissionModel.objects.select_related("source_user")

    def find_by_id(self, commission_id: str, *, for_update: bool = False) -> CommissionEntity | None:
        qs = self._qs()
        if for_update:
            qs = qs.select_for_update(of=("self",))
        m = get_or_none(qs, id=commission_id)
        return CommissionEntity.from_model(m) if m else None

    def add_pending(self, entity: CommissionEntity) -> tuple[CommissionEntity, bool]:
        try:
            with transaction.atomic():
                m = CommissionModel.objects.create(
                    id=entity.id,
                    affiliate_id=entity.affiliate_id,
                    source_user_id=entity.source_user_id,
                    amount=entity.amount,
                    status=CommissionModel.Status.PENDING,
                    created_at=entity.created_at,
                )
        except IntegrityError:
            existing = self._qs().filter(source_user_id=entity.source_user_id).first()
            if existing is None:
                raise
            return CommissionEntity.from_model(existing), False
        return self.find_by_id(m.id), True

    def save_payment(self, entity: CommissionEntity) -> CommissionEntity:
        # só transiciona a partir de `pending`; corrida perdida vira AlreadyPaid
        updated = CommissionModel.objects.filter(
            id=entity.id, status=CommissionModel.Status.PENDING
        ).update(**{k: getattr(entity, k) for k in PAYMENT_FIELDS})
        if not updated:
            raise AlreadyPaidError()
        return self.find_by_id(entity.id)

    def list_by_affiliate(self, affiliate_id: str, filtros: dict, page: int, page_size: int) -> PagedResult[CommissionEntity]:
        qs = self._qs().filter(affiliate_id=affiliate_id)
        filtros = {k: v for k, v in (filtros or {}).items() if v not in (None, "")}
        if filtros:
            qs = qs.filter(**filtros)
        return paginate(qs.order_by("-created_at"), page, page_size, CommissionEntity.from_model)

    def list_by_period(self, start: datetime, end: datetime, status: str | None = None) -> list[CommissionEntity]:
        qs = self._qs().filter(_period_q(start, end))
        if status:
            qs = qs.filter(status=status)
        return [CommissionEntity.from_model(m) for m in qs.order_by("-created_at")]

    def totals_by_affiliate(self, start: datetime | None = None, end: datetime | None = None) -> dict:
        qs = CommissionModel.objects.all()
        if start is not None or end is not None:
            qs = qs.filter(_period_q(start, end))
        rows = qs.values("affiliate_id").annotate(
            pending_total=Sum("amount", filter=Q(status=CommissionModel.Status.PENDING)),
            paid_total=Sum("amount", filter=Q(status=CommissionModel.Status.PAID)),
            count=Count("id"),
        )
        return {
            r["affiliate_id"]: {
                "pending_total": r["pending_total"] or ZERO,
                "paid_total": r["paid_total"] or ZERO,
                "count": r["count"],
            }
            for r in rows
        }

    def monthly_totals(self, start: datetime, end: datetime) -> list[dict]:
        months: dict[str, dict] = defaultdict(
            lambda: {"pending_total": ZERO, "paid_total": ZERO, "count": 0}
        )
        for c in self.list_by_period(start, end):
            key = c.reporting_instant.astimezone(timezone.utc).strftime("%Y-%m")
            bucket = months[key]
            bucket["paid_total" if c.is_paid else "pending_total"] += c.amount
            bucket["count"] += 1
        return [{"month": k, **v} for k, v in sorted(months.items())]
