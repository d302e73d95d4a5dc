from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ───────────────────────────────────────────────
# Event Base e Domain Events
# ───────────────────────────────────────────────
@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)

# ╭──────────────────────────────────────────────╮
# │ 1. Usuários                                 │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True, kw_only=True)
class MemberRegisteredEvent(DomainEvent):
    user_id: uuid.UUID
    visitor_identifier: str | None = None

# ╭──────────────────────────────────────────────╮
# │ 2. Assinaturas                              │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True, kw_only=True)
class SubscriptionActivatedEvent(DomainEvent):
    """
    Titular passou a `active`. `first_activation` indica que o titular
    nunca havia estado ativo antes desta transição.
    """
    member_id: uuid.UUID
    expires_at: datetime
    first_activation: bool
    source: str  # "payment" | "admin"
    payment_reference: str | None = None

@dataclass(frozen=True, kw_only=True)
class DependentSubscriptionActivatedEvent(DomainEvent):
    dependent_id: uuid.UUID
    member_id: uuid.UUID
    expires_at: datetime
    source: str

@dataclass(frozen=True, kw_only=True)
class SubscriptionsExpiredEvent(DomainEvent):
    members: int
    dependents: int
    swept_at: datetime
