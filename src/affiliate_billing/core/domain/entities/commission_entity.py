from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from convenio_core.core.domain.entities._base import EntityMixin
from convenio_core.core.domain.exceptions import AlreadyPaidError, ValidationError

CommissionStatus = Literal["pending", "paid"]


@dataclass(slots=True)
class CommissionEntity(EntityMixin):
    id: uuid.UUID
    affiliate_id: uuid.UUID
    source_user_id: uuid.UUID
    amount: Decimal
    created_at: datetime
    status: CommissionStatus = "pending"
    paid_at: datetime | None = None
    paid_by_id: uuid.UUID | None = None
    paid_method: str | None = None
    receipt_reference: str | None = None
    external_payment_reference: str | None = None
    source_user_name: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"

    @property
    def reporting_instant(self) -> datetime:
        """Instante que define o mês da comissão: pagamento se paga, criação se pendente."""
        return self.paid_at if self.is_paid and self.paid_at else self.created_at

    def pay(
        self,
        *,
        paid_by: uuid.UUID,
        paid_method: str,
        now: datetime,
        receipt_reference: str | None = None,
        external_payment_reference: str | None = None,
    ) -> None:
        if self.is_paid:
            raise AlreadyPaidError()
        if not (paid_method or "").strip():
            raise ValidationError("Informe o método de pagamento.", error="PAID_METHOD_REQUIRED")
        self.status = "paid"
        self.paid_at = now
        self.paid_by_id = paid_by
        self.paid_method = paid_method.strip()
        self.receipt_reference = receipt_reference or None
        self.external_payment_reference = external_payment_reference or None

    @classmethod
    def from_model(cls, model: Any) -> CommissionEntity:
        return cls(
            id=model.id,
            affiliate_id=model.affiliate_id,
            source_user_id=model.source_user_id,
            amount=model.amount,
            created_at=model.created_at,
            status=model.status,
            paid_at=model.paid_at,
            paid_by_id=model.paid_by_id,
            paid_method=model.paid_method,
            receipt_reference=model.receipt_reference,
            external_payment_reference=model.external_payment_reference,
            source_user_name=model.source_user.name,
        )
