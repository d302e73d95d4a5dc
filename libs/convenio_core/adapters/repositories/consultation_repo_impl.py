from __future__ import annotations

from datetime import datetime

from django.db.models import Q

from convenio_core.adapters.repositories._helpers import get_or_none, paginate
from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.application.dtos.report_dto import ReportRowDTO
from convenio_core.core.domain.entities.consultation_entity import ConsultationEntity, PatientRef
from convenio_core.core.domain.repositories.consultation_repository import ConsultationRepository
from plugins.django_interface.models import Consultation as ConsultationModel
from plugins.django_interface.models import Dependent as DependentModel
from plugins.django_interface.models import PrivatePatient as PrivatePatientModel
from plugins.django_interface.models import User as UserModel

MUTABLE = (
    "professional_id", "member_id", "dependent_id", "private_patient_id", "service_id",
    "location_id", "value", "date", "status", "notes",
    "cancelled_at", "cancelled_by_id", "cancellation_reason",
)


class ConsultationRepoImpl(ConsultationRepository):
    """Implementação Django do livro de consultas."""

    def _qs(self):
        return ConsultationModel.objects.select_related(
            "professional", "service", "member", "dependent", "private_patient", "cancelled_by"
        )

    def _columns(self, entity: ConsultationEntity) -> dict:
        return dict(
            professional_id=entity.professional_id,
            service_id=entity.service_id,
            location_id=entity.location_id,
            value=entity.value,
            date=entity.date,
            status=entity.status,
            notes=entity.notes,
            cancelled_at=entity.cancelled_at,
            cancelled_by_id=entity.cancelled_by_id,
            cancellation_reason=entity.cancellation_reason,
            **entity.patient.as_columns(),
        )

    # ────────────────────────────────── #
    # Leitura
    # ────────────────────────────────── #
    def find_by_id(self, consultation_id: str) -> ConsultationEntity | None:
        m = get_or_none(self._qs(), id=consultation_id)
        return ConsultationEntity.from_model(m) if m else None

    def patient_exists(self, patient: PatientRef, professional_id: str) -> bool:
        if patient.kind == "member":
            return UserModel.objects.filter(id=patient.id, roles__role="member").exists()
        if patient.kind == "dependent":
            return DependentModel.objects.filter(id=patient.id).exists()
        return PrivatePatientModel.objects.filter(id=patient.id, professional_id=professional_id).exists()

    # ────────────────────────────────── #
    # Escrita
    # ────────────────────────────────── #
    def create(self, entity: ConsultationEntity) -> ConsultationEntity:
        m = ConsultationModel.objects.create(
            id=entity.id,
            patient_kind=entity.patient.kind,
            **self._columns(entity),
        )
        return self.find_by_id(m.id)

    def update(self, entity: ConsultationEntity) -> ConsultationEntity:
        m = ConsultationModel.objects.get(id=entity.id)
        for k, v in self._columns(entity).items():
            setattr(m, k, v)
        m.save(update_fields=[*(f.removesuffix("_id") for f in MUTABLE), "updated_at"])
        return self.find_by_id(m.id)

    def delete(self, consultation_id: str) -> None:
        ConsultationModel.objects.filter(id=consultation_id).delete()

    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[ConsultationEntity]:
        filtros = dict(filtros or {})
        qs = self._qs()
        start = filtros.pop("start", None)
        end = filtros.pop("end", None)
        if start is not None:
            qs = qs.filter(date__gte=start)
        if end is not None:
            qs = qs.filter(date__lt=end)
        search = filtros.pop("search", None)
        if search:
            qs = qs.filter(
                Q(member__name__icontains=search)
                | Q(dependent__name__icontains=search)
                | Q(private_patient__name__icontains=search)
            )
        if filtros:
            qs = qs.filter(**filtros)
        return paginate(qs.order_by("-date"), page, page_size, ConsultationEntity.from_model)

    # ────────────────────────────────── #
    # Relatórios
    # ────────────────────────────────── #
    def report_rows(
        self,
        start: datetime,
        end: datetime,
        *,
        statuses: tuple[str, ...],
        professional_id: str | None = None,
    ) -> list[ReportRowDTO]:
        qs = (
            self._qs()
            .select_related("professional__professional_profile")
            .filter(date__gte=start, date__lt=end, status__in=statuses)
        )
        if professional_id:
            qs = qs.filter(professional_id=professional_id)

        rows: list[ReportRowDTO] = []
        for m in qs.order_by("date"):
            profile = getattr(m.professional, "professional_profile", None)
            entity = ConsultationEntity.from_model(m)
            rows.append(ReportRowDTO(
                consultation_id=m.id,
                professional_id=m.professional_id,
                professional_name=m.professional.name,
                percentage=profile.percentage if profile else 0,
                service_id=m.service_id,
                service_name=m.service.name,
                patient_kind=m.patient_kind,
                patient_name=entity.patient_name,
                value=m.value,
                date=m.date,
                status=m.status,
            ))
        return rows

    def list_cancelled(
        self, start: datetime, end: datetime, professional_id: str | None = None
    ) -> list[ConsultationEntity]:
        qs = self._qs().filter(status="cancelled", date__gte=start, date__lt=end)
        if professional_id:
            qs = qs.filter(professional_id=professional_id)
        return [ConsultationEntity.from_model(m) for m in qs.order_by("-cancelled_at", "-date")]
