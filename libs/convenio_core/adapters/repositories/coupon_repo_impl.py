from __future__ import annotations

from django.db import IntegrityError, transaction
from django.db.models import Q

from convenio_core.adapters.repositories._helpers import get_or_none, paginate
from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.entities.coupon_entity import CouponEntity
from convenio_core.core.domain.exceptions import ConflictError
from convenio_core.core.domain.repositories.coupon_repository import CouponRepository
from plugins.django_interface.models import Coupon as CouponModel

PERSISTED = (
    "code", "target", "final_price", "discount_value", "valid_from",
    "valid_until", "description", "is_active", "created_by_id",
)


class CouponRepoImpl(CouponRepository):
    def find_by_id(self, coupon_id: str) -> CouponEntity | None:
        m = get_or_none(CouponModel.objects, id=coupon_id)
        return CouponEntity.from_model(m) if m else None

    def find_by_code(self, code: str) -> CouponEntity | None:
        m = CouponModel.objects.filter(code__iexact=(code or "").strip()).first()
        return CouponEntity.from_model(m) if m else None

    def save(self, entity: CouponEntity) -> CouponEntity:
        try:
            with transaction.atomic():
                m, _ = CouponModel.objects.update_or_create(
                    id=entity.id,
                    defaults={k: getattr(entity, k) for k in PERSISTED},
                )
        except IntegrityError as exc:
            raise ConflictError(f"Já existe um cupom com o código {entity.code!r}.", error="COUPON_CODE_EXISTS") from exc
        return CouponEntity.from_model(m)

    def delete(self, coupon_id: str) -> None:
        CouponModel.objects.filter(id=coupon_id).delete()

    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[CouponEntity]:
        filtros = dict(filtros or {})
        qs = CouponModel.objects.all()
        search = filtros.pop("search", None)
        if search:
            qs = qs.filter(Q(code__icontains=search) | Q(description__icontains=search))
        if filtros:
            qs = qs.filter(**filtros)
        return paginate(qs.order_by("-created_at"), page, page_size, CouponEntity.from_model)
