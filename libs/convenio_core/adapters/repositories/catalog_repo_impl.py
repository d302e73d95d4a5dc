from __future__ import annotations

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError, Q

from convenio_core.adapters.repositories._helpers import get_or_none, paginate
from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.entities.catalog_entities import (
    AttendanceLocationEntity,
    PrivatePatientEntity,
    ServiceEntity,
)
from convenio_core.core.domain.exceptions import ConflictError
from convenio_core.core.domain.repositories.catalog_repositories import (
    AttendanceLocationRepository,
    PrivatePatientRepository,
    ServiceRepository,
)
from plugins.django_interface.models import AttendanceLocation as AttendanceLocationModel
from plugins.django_interface.models import PrivatePatient as PrivatePatientModel
from plugins.django_interface.models import Service as ServiceModel

_AUTO = ("id", "created_at", "updated_at")


def _defaults(entity) -> dict:
    return {k: v for k, v in entity.to_dict().items() if k not in _AUTO}


# ───────────────────────────────────────────────
# Serviços
# ───────────────────────────────────────────────
class ServiceRepoImpl(ServiceRepository):
    def find_by_id(self, service_id: str) -> ServiceEntity | None:
        m = get_or_none(ServiceModel.objects, id=service_id)
        return ServiceEntity.from_model(m) if m else None

    def save(self, entity: ServiceEntity) -> ServiceEntity:
        m, _ = ServiceModel.objects.update_or_create(id=entity.id, defaults=_defaults(entity))
        return ServiceEntity.from_model(m)

    def delete(self, service_id: str) -> None:
        try:
            ServiceModel.objects.filter(id=service_id).delete()
        except ProtectedError as exc:
            raise ConflictError("Serviço possui consultas vinculadas.", error="SERVICE_IN_USE") from exc

    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[ServiceEntity]:
        filtros = dict(filtros or {})
        qs = ServiceModel.objects.all()
        search = filtros.pop("search", None)
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(category__icontains=search))
        if filtros:
            qs = qs.filter(**filtros)
        return paginate(qs.order_by("name"), page, page_size, ServiceEntity.from_model)


# ───────────────────────────────────────────────
# Locais de atendimento
# ───────────────────────────────────────────────
class AttendanceLocationRepoImpl(AttendanceLocationRepository):
    def find_by_id(self, location_id: str) -> AttendanceLocationEntity | None:
        m = get_or_none(AttendanceLocationModel.objects, id=location_id)
        return AttendanceLocationEntity.from_model(m) if m else None

    @transaction.atomic
    def save(self, entity: AttendanceLocationEntity) -> AttendanceLocationEntity:
        if entity.is_default:
            (AttendanceLocationModel.objects
             .select_for_update()
             .filter(professional_id=entity.professional_id, is_default=True)
             .exclude(id=entity.id)
             .update(is_default=False))
        m, _ = AttendanceLocationModel.objects.update_or_create(id=entity.id, defaults=_defaults(entity))
        return AttendanceLocationEntity.from_model(m)

    def delete(self, location_id: str) -> None:
        AttendanceLocationModel.objects.filter(id=location_id).delete()

    def list_by_professional(self, professional_id: str) -> list[AttendanceLocationEntity]:
        qs = AttendanceLocationModel.objects.filter(professional_id=professional_id).order_by("-is_default", "name")
        return [AttendanceLocationEntity.from_model(m) for m in qs]


# ───────────────────────────────────────────────
# Pacientes particulares
# ───────────────────────────────────────────────
class PrivatePatientRepoImpl(PrivatePatientRepository):
    def find_by_id(self, patient_id: str) -> PrivatePatientEntity | None:
        m = get_or_none(PrivatePatientModel.objects, id=patient_id)
        return PrivatePatientEntity.from_model(m) if m else None

    def save(self, entity: PrivatePatientEntity) -> PrivatePatientEntity:
        try:
            with transaction.atomic():
                m, _ = PrivatePatientModel.objects.update_or_create(id=entity.id, defaults=_defaults(entity))
        except IntegrityError as exc:
            raise ConflictError("Paciente com este CPF já cadastrado.", error="PRIVATE_PATIENT_EXISTS") from exc
        return PrivatePatientEntity.from_model(m)

    def delete(self, patient_id: str) -> None:
        try:
            PrivatePatientModel.objects.filter(id=patient_id).delete()
        except ProtectedError as exc:
            raise ConflictError("Paciente possui consultas vinculadas.", error="PATIENT_IN_USE") from exc

    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[PrivatePatientEntity]:
        filtros = dict(filtros or {})
        qs = PrivatePatientModel.objects.all()
        search = filtros.pop("search", None)
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(cpf__icontains=search))
        if filtros:
            qs = qs.filter(**filtros)
        return paginate(qs.order_by("name"), page, page_size, PrivatePatientEntity.from_model)
