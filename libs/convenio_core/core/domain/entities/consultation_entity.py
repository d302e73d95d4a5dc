from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from convenio_core.core.domain.entities._base import EntityMixin

PatientKind = Literal["member", "dependent", "private"]
ConsultationStatus = Literal["scheduled", "confirmed", "completed", "cancelled"]

REPORTABLE_STATUSES: tuple[str, ...] = ("confirmed", "completed")

# ───────────────────────────────────────────────
# Referência de paciente (variante rotulada)
# ───────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class PatientRef:
    kind: PatientKind
    id: uuid.UUID

    def __post_init__(self):
        if self.kind not in ("member", "dependent", "private"):
            raise ValueError(f"Tipo de paciente inválido: {self.kind}")

    @property
    def is_convenio(self) -> bool:
        return self.kind in ("member", "dependent")

    @property
    def patient_type(self) -> str:
        return "convenio" if self.is_convenio else "private"

    def as_columns(self) -> dict[str, uuid.UUID | None]:
        """Explode a variante nas três FKs do modelo (apenas uma preenchida)."""
        return {
            "member_id": self.id if self.kind == "member" else None,
            "dependent_id": self.id if self.kind == "dependent" else None,
            "private_patient_id": self.id if self.kind == "private" else None,
        }

    @classmethod
    def from_columns(cls, kind: str, member_id, dependent_id, private_patient_id) -> PatientRef:
        ref_id = {"member": member_id, "dependent": dependent_id, "private": private_patient_id}[kind]
        return cls(kind=kind, id=ref_id)


@dataclass(slots=True)
class ConsultationEntity(EntityMixin):
    id: uuid.UUID
    professional_id: uuid.UUID
    patient: PatientRef
    service_id: uuid.UUID
    value: Decimal
    date: datetime
    status: ConsultationStatus = "scheduled"
    location_id: uuid.UUID | None = None
    notes: str | None = None
    cancelled_at: datetime | None = None
    cancelled_by_id: uuid.UUID | None = None
    cancellation_reason: str | None = None
    cancelled_by_name: str | None = None
    patient_name: str | None = None
    professional_name: str | None = None
    service_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: Any) -> ConsultationEntity:
        patient = PatientRef.from_columns(
            model.patient_kind, model.member_id, model.dependent_id, model.private_patient_id
        )
        return cls(
            id=model.id,
            professional_id=model.professional_id,
            patient=patient,
            service_id=model.service_id,
            value=model.value,
            date=model.date,
            status=model.status,
            location_id=model.location_id,
            notes=model.notes,
            cancelled_at=model.cancelled_at,
            cancelled_by_id=model.cancelled_by_id,
            cancellation_reason=model.cancellation_reason,
            cancelled_by_name=model.cancelled_by.name if model.cancelled_by_id else None,
            patient_name=_patient_name(model),
            professional_name=model.professional.name,
            service_name=model.service.name,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @property
    def patient_type(self) -> str:
        return self.patient.patient_type


def _patient_name(model: Any) -> str | None:
    source = {
        "member": model.member,
        "dependent": model.dependent,
        "private": model.private_patient,
    }.get(model.patient_kind)
    return getattr(source, "name", None)
