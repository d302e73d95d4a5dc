from dataclasses import dataclass

from convenio_core.core.application.cqrs import CommandDTO
from convenio_core.core.application.dtos.catalog_dto import (
    AttendanceLocationDTO,
    PrivatePatientDTO,
    ServiceDTO,
    UpdateAttendanceLocationDTO,
    UpdatePrivatePatientDTO,
    UpdateServiceDTO,
)

# ——— SERVIÇOS ———————————————————————————————————————————————

@dataclass(frozen=True)
class CreateServiceCommand(CommandDTO):
    payload: ServiceDTO

@dataclass(frozen=True)
class UpdateServiceCommand(CommandDTO):
    id: str
    payload: UpdateServiceDTO

@dataclass(frozen=True)
class DeleteServiceCommand(CommandDTO):
    id: str

# ——— LOCAIS DE ATENDIMENTO ——————————————————————————————————

@dataclass(frozen=True)
class CreateAttendanceLocationCommand(CommandDTO):
    professional_id: str
    payload: AttendanceLocationDTO

@dataclass(frozen=True)
class UpdateAttendanceLocationCommand(CommandDTO):
    id: str
    payload: UpdateAttendanceLocationDTO

@dataclass(frozen=True)
class DeleteAttendanceLocationCommand(CommandDTO):
    id: str

# ——— PACIENTES PARTICULARES —————————————————————————————————

@dataclass(frozen=True)
class CreatePrivatePatientCommand(CommandDTO):
    professional_id: str
    payload: PrivatePatientDTO

@dataclass(frozen=True)
class UpdatePrivatePatientCommand(CommandDTO):
    id: str
    payload: UpdatePrivatePatientDTO

@dataclass(frozen=True)
class DeletePrivatePatientCommand(CommandDTO):
    id: str
