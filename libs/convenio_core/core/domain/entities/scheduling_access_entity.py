from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from convenio_core.core.domain.entities._base import EntityMixin

AccessState = Literal["absent", "active", "expired"]


@dataclass(slots=True)
class SchedulingAccessEntity(EntityMixin):
    professional_id: uuid.UUID
    has_access: bool = False
    expires_at: datetime | None = None
    granted_by_id: uuid.UUID | None = None
    granted_at: datetime | None = None
    reason: str | None = None
    revoked_at: datetime | None = None

    def state(self, now: datetime) -> AccessState:
        if not self.has_access:
            return "absent"
        if self.expires_at is None or self.expires_at <= now:
            return "expired"
        return "active"

    def days_remaining(self, now: datetime) -> int:
        if self.state(now) != "active":
            return 0
        return max((self.expires_at - now).days, 0)
