from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from convenio_core.core.application.dtos.common import Cpf


class CreateDependentDTO(BaseModel):
    member_id: UUID
    name: str = Field(min_length=1, max_length=150)
    cpf: Cpf
    birth_date: date | None = None


class UpdateDependentDTO(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    cpf: Cpf | None = None
    birth_date: date | None = None
