from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from convenio_core.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class ServiceEntity(EntityMixin):
    id: uuid.UUID
    name: str
    base_price: Decimal
    description: str | None = None
    category: str | None = None
    is_base_service: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True)
class AttendanceLocationEntity(EntityMixin):
    id: uuid.UUID
    professional_id: uuid.UUID
    name: str
    address: str
    address_number: str | None = None
    address_complement: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    phone: str | None = None
    is_default: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True)
class PrivatePatientEntity(EntityMixin):
    id: uuid.UUID
    professional_id: uuid.UUID
    name: str
    cpf: str | None = None
    email: str | None = None
    phone: str | None = None
    birth_date: date | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
