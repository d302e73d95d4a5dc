import uuid
from dataclasses import replace

import structlog

from convenio_core.core.application.commands.coupon_commands import (
    CreateCouponCommand,
    DeleteCouponCommand,
    ToggleCouponCommand,
    UpdateCouponCommand,
)
from convenio_core.core.application.cqrs import CommandHandler, QueryHandler
from convenio_core.core.application.queries.coupon_queries import (
    GetCouponQuery,
    ListCouponsQuery,
    ResolveCouponQuery,
)
from convenio_core.core.application.services.coupon_service import CouponService
from convenio_core.core.application.services.revenue_split_service import round_money
from convenio_core.core.domain.entities.coupon_entity import CouponEntity, CouponQuote
from convenio_core.core.domain.exceptions import ConflictError, NotFoundError, ValidationError
from convenio_core.core.domain.repositories.coupon_repository import CouponRepository

logger = structlog.get_logger(__name__)


def _ensure_window(coupon: CouponEntity) -> None:
    if coupon.valid_from and coupon.valid_until and coupon.valid_until < coupon.valid_from:
        raise ValidationError("valid_until deve ser posterior a valid_from.", error="COUPON_WINDOW")


class CreateCouponHandler(CommandHandler[CreateCouponCommand]):
    def __init__(self, repo: CouponRepository, coupon_service: CouponService):
        self.repo = repo
        self.coupons = coupon_service

    def handle(self, command: CreateCouponCommand) -> CouponEntity:
        p = command.payload
        if self.repo.find_by_code(p.code) is not None:
            raise ConflictError("Já existe cupom com este código.", error="COUPON_CODE_EXISTS")

        discount = self.coupons.discount_for(p.target, p.final_price)
        entity = CouponEntity(
            id=uuid.uuid4(),
            code=p.code,
            target=p.target,
            final_price=round_money(p.final_price),
            discount_value=discount,
            valid_from=p.valid_from,
            valid_until=p.valid_until,
            description=p.description,
            is_active=p.is_active,
            created_by_id=command.created_by,
        )
        saved = self.repo.save(entity)
        logger.info("coupon.created", code=saved.code, target=saved.target, final_price=str(saved.final_price))
        return saved


class UpdateCouponHandler(CommandHandler[UpdateCouponCommand]):
    def __init__(self, repo: CouponRepository, coupon_service: CouponService):
        self.repo = repo
        self.coupons = coupon_service

    def handle(self, command: UpdateCouponCommand) -> CouponEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Cupom não encontrado.")

        changes = command.payload.model_dump(exclude_unset=True)
        if "code" in changes and changes["code"]:
            changes["code"] = changes["code"].strip()
            other = self.repo.find_by_code(changes["code"])
            if other is not None and other.id != current.id:
                raise ConflictError("Já existe cupom com este código.", error="COUPON_CODE_EXISTS")
        for required in ("code", "target", "final_price", "is_active", "description"):
            if required in changes and changes[required] is None:
                changes.pop(required)

        updated = replace(current, **changes)
        updated.final_price = round_money(updated.final_price)
        updated.discount_value = self.coupons.discount_for(updated.target, updated.final_price)
        _ensure_window(updated)
        saved = self.repo.save(updated)
        logger.info("coupon.updated", code=saved.code, fields=sorted(changes))
        return saved


class ToggleCouponHandler(CommandHandler[ToggleCouponCommand]):
    def __init__(self, repo: CouponRepository):
        self.repo = repo

    def handle(self, command: ToggleCouponCommand) -> CouponEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Cupom não encontrado.")
        current.is_active = not current.is_active
        saved = self.repo.save(current)
        logger.info("coupon.toggled", code=saved.code, is_active=saved.is_active)
        return saved


class DeleteCouponHandler(CommandHandler[DeleteCouponCommand]):
    def __init__(self, repo: CouponRepository):
        self.repo = repo

    def handle(self, command: DeleteCouponCommand) -> None:
        if self.repo.find_by_id(command.id) is None:
            raise NotFoundError("Cupom não encontrado.")
        self.repo.delete(command.id)


class GetCouponHandler(QueryHandler[GetCouponQuery, CouponEntity]):
    def __init__(self, repo: CouponRepository):
        self.repo = repo

    def handle(self, query: GetCouponQuery) -> CouponEntity:
        coupon = self.repo.find_by_id(query.id)
        if coupon is None:
            raise NotFoundError("Cupom não encontrado.")
        return coupon


class ListCouponsHandler(QueryHandler[ListCouponsQuery, object]):
    def __init__(self, repo: CouponRepository):
        self.repo = repo

    def handle(self, query: ListCouponsQuery):
        return self.repo.list(query.filtros, query.page, query.page_size)


class ResolveCouponHandler(QueryHandler[ResolveCouponQuery, CouponQuote]):
    def __init__(self, coupon_service: CouponService, clock):
        self.coupons = coupon_service
        self.clock = clock

    def handle(self, query: ResolveCouponQuery) -> CouponQuote:
        return self.coupons.resolve(query.code, query.target, self.clock.now())
