from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from convenio_core.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class ProfessionalEntity(EntityMixin):
    id: uuid.UUID
    name: str
    email: str
    phone: str | None
    category: str | None
    percentage: Decimal
    registration_number: str | None = None
    is_active: bool = True
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, model: Any) -> ProfessionalEntity:
        user = model.user
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            category=model.category,
            percentage=model.percentage,
            registration_number=model.registration_number,
            is_active=user.is_active,
            created_at=model.created_at,
        )
