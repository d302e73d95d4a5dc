from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Literal

from convenio_core.core.domain.entities._base import EntityMixin
from convenio_core.core.domain.exceptions import CouponInvalidError

CouponTarget = Literal["titular", "dependente"]


@dataclass(slots=True)
class CouponEntity(EntityMixin):
    id: uuid.UUID
    code: str
    target: CouponTarget
    final_price: Decimal
    discount_value: Decimal
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    description: str = ""
    is_active: bool = True
    created_by_id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def ensure_applicable(self, target: str, now: datetime) -> None:
        """Levanta CouponInvalidError se o cupom não vale para `target` em `now`."""
        if not self.is_active:
            raise CouponInvalidError("Cupom desativado.", error="COUPON_DISABLED")
        if self.target != target:
            raise CouponInvalidError("Cupom não se aplica a este tipo de assinatura.", error="COUPON_TARGET_MISMATCH")
        if self.valid_from is not None and now < self.valid_from:
            raise CouponInvalidError("Cupom ainda não está válido.", error="COUPON_NOT_STARTED")
        if self.valid_until is not None and now > self.valid_until:
            raise CouponInvalidError("Cupom expirado.", error="COUPON_EXPIRED")


@dataclass(frozen=True, slots=True)
class CouponQuote:
    """Preço resolvido para um código + público."""
    code: str
    target: CouponTarget
    final_price: Decimal
    discount_value: Decimal
