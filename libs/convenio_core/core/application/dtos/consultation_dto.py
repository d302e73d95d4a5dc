from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from convenio_core.core.application.dtos.common import Money, UtcDatetime

PatientKind = Literal["member", "dependent", "private"]
Status = Literal["scheduled", "confirmed", "completed", "cancelled"]

MAX_OCCURRENCES = 120


class RecordConsultationDTO(BaseModel):
    patient_kind: PatientKind
    patient_id: UUID
    service_id: UUID
    date: UtcDatetime
    value: Money | None = None  # ausente → preço-base do serviço
    location_id: UUID | None = None
    status: Status = "scheduled"
    notes: str | None = Field(default=None, max_length=2000)


class RecordRecurringConsultationsDTO(RecordConsultationDTO):
    """Série de consultas: a partir de `date`, a cada `recurrence_interval` dias, semanas ou meses."""
    recurrence_type: Literal["daily", "weekly", "monthly"]
    recurrence_interval: int = Field(default=1, ge=1, le=365)
    occurrences: int = Field(..., ge=1, le=MAX_OCCURRENCES)
    end_date: UtcDatetime | None = None  # inclusiva; interrompe a série antes de `occurrences`

    @model_validator(mode="after")
    def _check_end(self):
        if self.end_date is not None and self.end_date < self.date:
            raise ValueError("end_date anterior à data inicial")
        return self


class UpdateConsultationDTO(BaseModel):
    patient_kind: PatientKind | None = None  # aceito apenas se igual ao atual
    patient_id: UUID | None = None
    professional_id: UUID | None = None
    service_id: UUID | None = None
    location_id: UUID | None = None
    date: UtcDatetime | None = None
    value: Money | None = None
    status: Status | None = None
    notes: str | None = Field(default=None, max_length=2000)


class CancelConsultationDTO(BaseModel):
    reason: str | None = Field(default=None, max_length=2000)
