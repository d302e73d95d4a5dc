from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from convenio_core.core.application.dtos.common import Cpf, Percentage

Role = Literal["member", "professional", "admin", "affiliate"]


class RegisterMemberDTO(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    cpf: Cpf
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str | None = None
    visitor_identifier: str | None = Field(default=None, max_length=128)


class RoleDTO(BaseModel):
    role: Role


class CreateProfessionalDTO(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    cpf: Cpf
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str | None = None
    category: str | None = None
    percentage: Percentage
    registration_number: str | None = None


class UpdateProfessionalDTO(BaseModel):
    name: str | None = None
    phone: str | None = None
    category: str | None = None
    percentage: Percentage | None = None
    registration_number: str | None = None
    is_active: bool | None = None
