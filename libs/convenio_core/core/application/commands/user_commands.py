from dataclasses import dataclass

from convenio_core.core.application.cqrs import CommandDTO
from convenio_core.core.application.dtos.user_dto import (
    CreateProfessionalDTO,
    RegisterMemberDTO,
    UpdateProfessionalDTO,
)


@dataclass(frozen=True)
class RegisterMemberCommand(CommandDTO):
    payload: RegisterMemberDTO

@dataclass(frozen=True)
class GrantRoleCommand(CommandDTO):
    user_id: str
    role: str

@dataclass(frozen=True)
class RevokeRoleCommand(CommandDTO):
    user_id: str
    role: str
    requested_by: str

@dataclass(frozen=True)
class CreateProfessionalCommand(CommandDTO):
    payload: CreateProfessionalDTO

@dataclass(frozen=True)
class UpdateProfessionalCommand(CommandDTO):
    id: str
    payload: UpdateProfessionalDTO
