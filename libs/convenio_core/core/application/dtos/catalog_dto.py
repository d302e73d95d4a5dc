from datetime import date

from pydantic import BaseModel, EmailStr, Field

from convenio_core.core.application.dtos.common import Money


class ServiceDTO(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    base_price: Money
    description: str | None = None
    category: str | None = None
    is_base_service: bool = False


class UpdateServiceDTO(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    base_price: Money | None = None
    description: str | None = None
    category: str | None = None
    is_base_service: bool | None = None


class AttendanceLocationDTO(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    address: str = Field(min_length=1, max_length=255)
    address_number: str | None = None
    address_complement: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = Field(default=None, max_length=2)
    zip_code: str | None = None
    phone: str | None = None
    is_default: bool = False


class UpdateAttendanceLocationDTO(BaseModel):
    name: str | None = None
    address: str | None = None
    address_number: str | None = None
    address_complement: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = Field(default=None, max_length=2)
    zip_code: str | None = None
    phone: str | None = None
    is_default: bool | None = None


class PrivatePatientDTO(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    cpf: str | None = Field(default=None, max_length=14)
    email: EmailStr | None = None
    phone: str | None = None
    birth_date: date | None = None
    notes: str | None = None


class UpdatePrivatePatientDTO(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    cpf: str | None = Field(default=None, max_length=14)
    email: EmailStr | None = None
    phone: str | None = None
    birth_date: date | None = None
    notes: str | None = None
