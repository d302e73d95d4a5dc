from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from convenio_core.core.domain.entities._base import EntityMixin

AffiliateStatus = Literal["active", "inactive"]


@dataclass(slots=True)
class AffiliateEntity(EntityMixin):
    id: uuid.UUID
    user_id: uuid.UUID
    referral_code: str
    commission_amount: Decimal
    status: AffiliateStatus = "active"
    pix_key: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @classmethod
    def from_model(cls, model: Any) -> AffiliateEntity:
        return cls(
            id=model.id,
            user_id=model.user_id,
            referral_code=model.referral_code,
            commission_amount=model.commission_amount,
            status=model.status,
            pix_key=model.pix_key,
            user_name=model.user.name,
            user_email=model.user.email,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
