from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from convenio_core.core.domain.entities._base import EntityMixin

ReferralStage = Literal["click", "registration", "conversion"]


@dataclass(slots=True)
class ReferralEventEntity(EntityMixin):
    """Um marco do funil de indicação: clique → cadastro → conversão."""
    id: uuid.UUID
    affiliate_id: uuid.UUID
    visitor_identifier: str
    stage: ReferralStage
    created_at: datetime
    linked_user_id: uuid.UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ReferredUserEntity(EntityMixin):
    """Atribuição usuário → afiliado. Uma vez gravada, não muda."""
    id: uuid.UUID
    user_id: uuid.UUID
    affiliate_id: uuid.UUID
    attributed_at: datetime
    registration_event_id: uuid.UUID | None = None
