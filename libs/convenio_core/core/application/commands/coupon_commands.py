from dataclasses import dataclass

from convenio_core.core.application.cqrs import CommandDTO
from convenio_core.core.application.dtos.coupon_dto import CreateCouponDTO, UpdateCouponDTO


@dataclass(frozen=True)
class CreateCouponCommand(CommandDTO):
    payload: CreateCouponDTO
    created_by: str | None = None

@dataclass(frozen=True)
class UpdateCouponCommand(CommandDTO):
    id: str
    payload: UpdateCouponDTO

@dataclass(frozen=True)
class ToggleCouponCommand(CommandDTO):
    id: str

@dataclass(frozen=True)
class DeleteCouponCommand(CommandDTO):
    id: str
