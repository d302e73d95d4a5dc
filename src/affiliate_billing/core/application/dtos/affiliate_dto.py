from __future__ import annotations

import uuid
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from convenio_core.core.application.dtos.common import Money

REFERRAL_CODE_PATTERN = r"^[A-Za-z0-9_-]{3,50}$"


class CreateAffiliateDTO(BaseModel):
    user_id: uuid.UUID
    referral_code: str | None = Field(None, pattern=REFERRAL_CODE_PATTERN)
    commission_amount: Money | None = None
    pix_key: str | None = Field(None, max_length=140)


class UpdateAffiliateDTO(BaseModel):
    status: Literal["active", "inactive"] | None = None
    commission_amount: Money | None = None
    pix_key: str | None = Field(None, max_length=140)


class ReferralClickDTO(BaseModel):
    referral_code: str = Field(..., min_length=1, max_length=64)
    visitor_identifier: str = Field(..., min_length=1, max_length=128)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("referral_code", "visitor_identifier")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("campo obrigatório")
        return v


class MarkCommissionPaidDTO(BaseModel):
    paid_method: str = Field(..., min_length=1, max_length=50)
    receipt: str | None = Field(None, max_length=500)
    external_payment_reference: str | None = Field(None, max_length=120)
