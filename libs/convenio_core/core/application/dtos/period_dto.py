from uuid import UUID

from pydantic import BaseModel, model_validator

from convenio_core.core.application.dtos.common import UtcDatetime


class PeriodDTO(BaseModel):
    """Janela [start_date, end_date) vinda da query string."""
    start_date: UtcDatetime
    end_date: UtcDatetime
    professional_id: UUID | None = None
    status: str | None = None

    @model_validator(mode="after")
    def _ordered(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date deve ser posterior a start_date")
        return self
