from uuid import UUID

from pydantic import BaseModel

from convenio_core.core.application.dtos.common import UtcDatetime


class GrantSchedulingAccessDTO(BaseModel):
    professional_id: UUID
    expires_at: UtcDatetime
    reason: str | None = None


class ExtendSchedulingAccessDTO(BaseModel):
    professional_id: UUID
    expires_at: UtcDatetime
    reason: str | None = None


class RevokeSchedulingAccessDTO(BaseModel):
    professional_id: UUID
    reason: str | None = None
