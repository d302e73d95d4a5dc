from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from convenio_core.core.application.dtos.common import Money, UtcDatetime


class ActivateSubscriptionDTO(BaseModel):
    member_id: UUID
    expires_at: UtcDatetime


class ActivateDependentDTO(BaseModel):
    dependent_id: UUID
    expires_at: UtcDatetime


class PaymentConfirmedDTO(BaseModel):
    """Payload do webhook de confirmação de pagamento."""
    user_id: UUID
    amount_paid: Money
    payment_reference: str = Field(min_length=1, max_length=120)
    target: Literal["titular", "dependente"]
    coupon_code: str | None = None
    dependent_id: UUID | None = None

    @model_validator(mode="after")
    def _dependent_required(self):
        if self.target == "dependente" and self.dependent_id is None:
            raise ValueError("dependent_id é obrigatório quando target = dependente")
        if self.coupon_code is not None and not self.coupon_code.strip():
            self.coupon_code = None
        return self
