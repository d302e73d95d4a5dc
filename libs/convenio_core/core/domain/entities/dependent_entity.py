from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime

from convenio_core.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class DependentEntity(EntityMixin):
    id: uuid.UUID
    member_id: uuid.UUID
    name: str
    cpf: str
    birth_date: date | None = None
    subscription_status: str = "pending"
    subscription_expiry: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
