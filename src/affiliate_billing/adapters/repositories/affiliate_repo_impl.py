from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from affiliate_billing.core.domain.entities.affiliate_entity import AffiliateEntity
from affiliate_billing.core.domain.repositories.affiliate_repository import AffiliateRepository
from convenio_core.adapters.repositories._helpers import get_or_none, paginate
from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.exceptions import ConflictError
from plugins.django_interface.models import Affiliate as AffiliateModel

PERSISTED = ("referral_code", "status", "commission_amount", "pix_key")


class AffiliateRepoImpl(AffiliateRepository):
    def _qs(self):
        return AffiliateModel.objects.select_related("user")

    def find_by_id(self, affiliate_id: str) -> AffiliateEntity | None:
        m = get_or_none(self._qs(), id=affiliate_id)
        return AffiliateEntity.from_model(m) if m else None

    def find_by_user(self, user_id: str) -> AffiliateEntity | None:
        m = get_or_none(self._qs(), user_id=user_id)
        return AffiliateEntity.from_model(m) if m else None

    def find_by_reference(self, reference: str) -> AffiliateEntity | None:
        reference = (reference or "").strip()
        if not reference:
            return None
        m = self._qs().filter(referral_code__iexact=reference).first()
        if m is None:
            try:
                legacy_id = uuid.UUID(reference)
            except ValueError:
                return None
            m = self._qs().filter(id=legacy_id).first()
        return AffiliateEntity.from_model(m) if m else None

    def code_exists(self, code: str) -> bool:
        return AffiliateModel.objects.filter(referral_code__iexact=code).exists()

    def create(self, entity: AffiliateEntity) -> AffiliateEntity:
        try:
            with transaction.atomic():
                m = AffiliateModel.objects.create(
                    id=entity.id,
                    user_id=entity.user_id,
                    **{k: getattr(entity, k) for k in PERSISTED},
                )
        except IntegrityError as exc:
            raise ConflictError(
                "Usuário já é afiliado ou código de indicação em uso.", error="AFFILIATE_EXISTS"
            ) from exc
        return self.find_by_id(m.id)

    def update(self, entity: AffiliateEntity) -> AffiliateEntity:
        try:
            with transaction.atomic():
                AffiliateModel.objects.filter(id=entity.id).update(
                    **{k: getattr(entity, k) for k in PERSISTED}
                )
        except IntegrityError as exc:
            raise ConflictError("Código de indicação em uso.", error="REFERRAL_CODE_EXISTS") from exc
        return self.find_by_id(entity.id)

    def update_commission_amount(self, affiliate_id: str, amount: Decimal) -> None:
        AffiliateModel.objects.filter(id=affiliate_id).update(commission_amount=amount)

    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[AffiliateEntity]:
        filtros = dict(filtros or {})
        qs = self._qs()
        search = filtros.pop("search", None)
        if search:
            qs = qs.filter(
                Q(referral_code__icontains=search)
                | Q(user__name__icontains=search)
                | Q(user__email__icontains=search)
            )
        if filtros:
            qs = qs.filter(**filtros)
        return paginate(qs.order_by("-created_at"), page, page_size, AffiliateEntity.from_model)

    def status_counts(self) -> dict[str, int]:
        return AffiliateModel.objects.aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(status=AffiliateModel.Status.ACTIVE)),
        )
