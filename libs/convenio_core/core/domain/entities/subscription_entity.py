from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from convenio_core.core.domain.entities._base import EntityMixin

SubscriptionStatus = Literal["pending", "active", "expired"]


@dataclass(slots=True)
class SubscriptionEntity(EntityMixin):
    """
    Estado de assinatura de um titular ou dependente.

    Transições válidas: pending → active, active → expired, expired → active
    (e active → active na renovação). Não existe aresta pending ↔ expired.
    """
    subject_id: uuid.UUID
    status: SubscriptionStatus = "pending"
    expires_at: datetime | None = None
    has_been_active: bool = False
    member_id: uuid.UUID | None = None  # dono, quando o sujeito é um dependente

    @classmethod
    def from_member_model(cls, model: Any) -> SubscriptionEntity:
        return cls(
            subject_id=model.id,
            status=model.subscription_status,
            expires_at=model.subscription_expiry,
            has_been_active=model.has_been_active,
        )

    @classmethod
    def from_dependent_model(cls, model: Any) -> SubscriptionEntity:
        return cls(
            subject_id=model.id,
            status=model.subscription_status,
            expires_at=model.subscription_expiry,
            has_been_active=model.subscription_status != "pending",
            member_id=model.member_id,
        )

    def is_active(self, now: datetime) -> bool:
        return self.status == "active" and self.expires_at is not None and self.expires_at > now

    def is_same_activation(self, expires_at: datetime) -> bool:
        return self.status == "active" and self.expires_at == expires_at

    def activate(self, expires_at: datetime) -> bool:
        """Aplica a ativação e devolve True se for a primeira da vida do sujeito."""
        first = not self.has_been_active
        self.status = "active"
        self.expires_at = expires_at
        self.has_been_active = True
        return first

    def expire(self) -> None:
        if self.status != "active":
            raise ValueError(f"Transição inválida: {self.status} → expired")
        self.status = "expired"


@dataclass(slots=True)
class SubscriptionPaymentEntity(EntityMixin):
    id: uuid.UUID
    payment_reference: str
    target: Literal["titular", "dependente"]
    member_id: uuid.UUID
    dependent_id: uuid.UUID | None
    amount_paid: Decimal
    coupon_code: str | None
    expires_at: datetime
    processed_at: datetime

    def matches(self, *, member_id, dependent_id, amount_paid: Decimal, coupon_code: str | None, target: str) -> bool:
        """Replays só são idempotentes se o payload for o mesmo do primeiro processamento."""
        return (
            str(self.member_id) == str(member_id)
            and str(self.dependent_id or "") == str(dependent_id or "")
            and self.amount_paid == amount_paid
            and (self.coupon_code or "").lower() == (coupon_code or "").lower()
            and self.target == target
        )
