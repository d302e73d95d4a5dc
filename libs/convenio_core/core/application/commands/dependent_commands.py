from dataclasses import dataclass

from convenio_core.core.application.cqrs import CommandDTO
from convenio_core.core.application.dtos.dependent_dto import CreateDependentDTO, UpdateDependentDTO


@dataclass(frozen=True)
class CreateDependentCommand(CommandDTO):
    payload: CreateDependentDTO

@dataclass(frozen=True)
class UpdateDependentCommand(CommandDTO):
    id: str
    payload: UpdateDependentDTO

@dataclass(frozen=True)
class DeleteDependentCommand(CommandDTO):
    id: str
