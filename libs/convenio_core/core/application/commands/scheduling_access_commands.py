from dataclasses import dataclass
from datetime import datetime

from convenio_core.core.application.cqrs import CommandDTO


@dataclass(frozen=True)
class GrantSchedulingAccessCommand(CommandDTO):
    professional_id: str
    expires_at: datetime
    granted_by: str
    reason: str | None = None

@dataclass(frozen=True)
class ExtendSchedulingAccessCommand(CommandDTO):
    professional_id: str
    expires_at: datetime
    reason: str | None = None

@dataclass(frozen=True)
class RevokeSchedulingAccessCommand(CommandDTO):
    professional_id: str
    reason: str | None = None
