from __future__ import annotations

import uuid
from datetime import datetime, timedelta

import structlog

from convenio_core.core.application.commands.consultation_commands import (
    CancelConsultationCommand,
    DeleteConsultationCommand,
    RecordConsultationCommand,
    RecordRecurringConsultationsCommand,
    UpdateConsultationCommand,
)
from convenio_core.core.application.cqrs import CommandHandler, QueryHandler
from convenio_core.core.application.dtos.consultation_dto import (
    RecordConsultationDTO,
    RecordRecurringConsultationsDTO,
)
from convenio_core.core.application.queries.consultation_queries import (
    GetConsultationQuery,
    ListConsultationsQuery,
)
from convenio_core.core.domain.entities.consultation_entity import ConsultationEntity, PatientRef
from convenio_core.core.domain.exceptions import NotFoundError, ValidationError
from convenio_core.core.domain.repositories.catalog_repositories import (
    AttendanceLocationRepository,
    ServiceRepository,
)
from convenio_core.core.domain.repositories.consultation_repository import ConsultationRepository
from convenio_core.core.domain.repositories.professional_repository import ProfessionalRepository
from convenio_core.core.domain.services.clock import add_months

logger = structlog.get_logger(__name__)


class _ConsultationRules:
    """Validações de referência compartilhadas entre registro e edição."""

    def __init__(
        self,
        repo: ConsultationRepository,
        professional_repo: ProfessionalRepository,
        service_repo: ServiceRepository,
        location_repo: AttendanceLocationRepository,
    ):
        self.repo = repo
        self.professional_repo = professional_repo
        self.service_repo = service_repo
        self.location_repo = location_repo

    def _professional(self, professional_id):
        if self.professional_repo.find_by_id(str(professional_id)) is None:
            raise NotFoundError("Profissional não encontrado.")

    def _service(self, service_id):
        service = self.service_repo.find_by_id(str(service_id))
        if service is None:
            raise NotFoundError("Serviço não encontrado.")
        return service

    def _patient(self, patient: PatientRef, professional_id):
        if not self.repo.patient_exists(patient, str(professional_id)):
            raise NotFoundError("Paciente não encontrado.", error="PATIENT_NOT_FOUND")

    def _location(self, location_id, professional_id):
        if location_id is None:
            return
        loc = self.location_repo.find_by_id(str(location_id))
        if loc is None or str(loc.professional_id) != str(professional_id):
            raise ValidationError("Local de atendimento não pertence ao profissional.", error="LOCATION_NOT_OWNED")

    def _new_consultations(self, p: RecordConsultationDTO, professional_id, dates: list[datetime]) -> list[ConsultationEntity]:
        if p.status == "cancelled":
            raise ValidationError("Use o cancelamento para cancelar uma consulta.", error="USE_CANCEL")

        patient = PatientRef(kind=p.patient_kind, id=p.patient_id)
        self._professional(professional_id)
        service = self._service(p.service_id)
        self._patient(patient, professional_id)
        self._location(p.location_id, professional_id)

        return [
            ConsultationEntity(
                id=uuid.uuid4(),
                professional_id=professional_id,
                patient=patient,
                service_id=p.service_id,
                value=p.value if p.value is not None else service.base_price,
                date=date,
                status=p.status,
                location_id=p.location_id,
                notes=p.notes,
            )
            for date in dates
        ]


class RecordConsultationHandler(_ConsultationRules, CommandHandler[RecordConsultationCommand]):
    def handle(self, command: RecordConsultationCommand) -> ConsultationEntity:
        p = command.payload
        (entity,) = self._new_consultations(p, command.professional_id, [p.date])
        saved = self.repo.create(entity)
        logger.info(
            "consultation.recorded",
            consultation_id=str(saved.id),
            professional_id=str(command.professional_id),
            patient_type=saved.patient_type,
            value=str(saved.value),
        )
        return saved


def recurrence_dates(p: RecordRecurringConsultationsDTO) -> list[datetime]:
    """
    Datas da série, sempre contadas a partir da inicial (31/01 mensal →
    28/02, 31/03, ...). `end_date` corta a série antes de `occurrences`.
    """
    dates = []
    for i in range(p.occurrences):
        step = i * p.recurrence_interval
        if p.recurrence_type == "daily":
            moment = p.date + timedelta(days=step)
        elif p.recurrence_type == "weekly":
            moment = p.date + timedelta(weeks=step)
        else:
            moment = add_months(p.date, step)
        if p.end_date is not None and moment > p.end_date:
            break
        dates.append(moment)
    return dates


class RecordRecurringConsultationsHandler(_ConsultationRules, CommandHandler[RecordRecurringConsultationsCommand]):
    """Valida uma vez e grava todas as ocorrências na mesma transação do bus."""

    def handle(self, command: RecordRecurringConsultationsCommand) -> list[ConsultationEntity]:
        p = command.payload
        entities = self._new_consultations(p, command.professional_id, recurrence_dates(p))
        saved = [self.repo.create(e) for e in entities]
        logger.info(
            "consultation.recurring_recorded",
            professional_id=str(command.professional_id),
            recurrence_type=p.recurrence_type,
            created=len(saved),
        )
        return saved


class UpdateConsultationHandler(_ConsultationRules, CommandHandler[UpdateConsultationCommand]):
    """O tipo de paciente é fixo; só o referenciado dentro do mesmo tipo pode mudar."""

    def handle(self, command: UpdateConsultationCommand) -> ConsultationEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Consulta não encontrada.")
        if current.status == "cancelled":
            raise ValidationError("Consulta cancelada não pode ser alterada.", error="CONSULTATION_CANCELLED")

        p = command.payload
        if p.patient_kind is not None and p.patient_kind != current.patient.kind:
            raise ValidationError("O tipo de paciente não pode ser alterado.", error="PATIENT_KIND_IMMUTABLE")
        if p.status == "cancelled":
            raise ValidationError("Use o cancelamento para cancelar uma consulta.", error="USE_CANCEL")

        if p.professional_id is not None:
            self._professional(p.professional_id)
            current.professional_id = p.professional_id
        if p.patient_id is not None:
            current.patient = PatientRef(kind=current.patient.kind, id=p.patient_id)
        if p.patient_id is not None or p.professional_id is not None:
            self._patient(current.patient, current.professional_id)
        if p.service_id is not None:
            self._service(p.service_id)
            current.service_id = p.service_id
        if "location_id" in p.model_fields_set:
            current.location_id = p.location_id
        if p.location_id is not None or p.professional_id is not None:
            self._location(current.location_id, current.professional_id)
        for name in ("date", "value", "status"):
            value = getattr(p, name)
            if value is not None:
                setattr(current, name, value)
        if "notes" in p.model_fields_set:
            current.notes = p.notes

        saved = self.repo.update(current)
        logger.info("consultation.updated", consultation_id=command.id, fields=sorted(p.model_fields_set))
        return saved


class DeleteConsultationHandler(CommandHandler[DeleteConsultationCommand]):
    def __init__(self, repo: ConsultationRepository):
        self.repo = repo

    def handle(self, command: DeleteConsultationCommand) -> None:
        if self.repo.find_by_id(command.id) is None:
            raise NotFoundError("Consulta não encontrada.")
        self.repo.delete(command.id)
        logger.info("consultation.deleted", consultation_id=command.id)


class CancelConsultationHandler(CommandHandler[CancelConsultationCommand]):
    def __init__(self, repo: ConsultationRepository, clock):
        self.repo = repo
        self.clock = clock

    def handle(self, command: CancelConsultationCommand) -> ConsultationEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Consulta não encontrada.")
        if current.status == "cancelled":
            raise ValidationError("Consulta já está cancelada.", error="ALREADY_CANCELLED")
        current.status = "cancelled"
        current.cancelled_at = self.clock.now()
        current.cancelled_by_id = command.cancelled_by
        current.cancellation_reason = command.reason
        saved = self.repo.update(current)
        logger.info("consultation.cancelled", consultation_id=command.id, cancelled_by=str(command.cancelled_by))
        return saved


class GetConsultationHandler(QueryHandler[GetConsultationQuery, ConsultationEntity]):
    def __init__(self, repo: ConsultationRepository):
        self.repo = repo

    def handle(self, query: GetConsultationQuery) -> ConsultationEntity:
        c = self.repo.find_by_id(query.id)
        if c is None:
            raise NotFoundError("Consulta não encontrada.")
        return c


class ListConsultationsHandler(QueryHandler[ListConsultationsQuery, object]):
    def __init__(self, repo: ConsultationRepository):
        self.repo = repo

    def handle(self, query: ListConsultationsQuery):
        return self.repo.list(query.filtros, query.page, query.page_size)
