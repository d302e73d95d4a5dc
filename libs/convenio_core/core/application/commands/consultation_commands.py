from dataclasses import dataclass

from convenio_core.core.application.cqrs import CommandDTO
from convenio_core.core.application.dtos.consultation_dto import (
    RecordConsultationDTO,
    RecordRecurringConsultationsDTO,
    UpdateConsultationDTO,
)


@dataclass(frozen=True)
class RecordConsultationCommand(CommandDTO):
    professional_id: str
    payload: RecordConsultationDTO

@dataclass(frozen=True)
class RecordRecurringConsultationsCommand(CommandDTO):
    """Cria a série inteira ou nada."""
    professional_id: str
    payload: RecordRecurringConsultationsDTO

@dataclass(frozen=True)
class UpdateConsultationCommand(CommandDTO):
    id: str
    payload: UpdateConsultationDTO

@dataclass(frozen=True)
class DeleteConsultationCommand(CommandDTO):
    id: str

@dataclass(frozen=True)
class CancelConsultationCommand(CommandDTO):
    id: str
    cancelled_by: str
    reason: str | None = None
