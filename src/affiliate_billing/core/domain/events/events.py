from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal

from convenio_core.core.domain.events.events import DomainEvent


# ───────────────────────────────────────────────
# Eventos do programa de afiliados
# ───────────────────────────────────────────────
@dataclass(frozen=True, kw_only=True)
class ReferralStageRecordedEvent(DomainEvent):
    affiliate_id: uuid.UUID
    stage: str
    visitor_identifier: str
    user_id: uuid.UUID | None = None

@dataclass(frozen=True, kw_only=True)
class CommissionAccruedEvent(DomainEvent):
    commission_id: uuid.UUID
    affiliate_id: uuid.UUID
    source_user_id: uuid.UUID
    amount: Decimal

@dataclass(frozen=True, kw_only=True)
class CommissionPaidEvent(DomainEvent):
    commission_id: uuid.UUID
    affiliate_id: uuid.UUID
    amount: Decimal
    paid_method: str
