import uuid
from dataclasses import replace

import structlog

from convenio_core.core.application.commands.catalog_commands import (
    CreateAttendanceLocationCommand,
    CreatePrivatePatientCommand,
    CreateServiceCommand,
    DeleteAttendanceLocationCommand,
    DeletePrivatePatientCommand,
    DeleteServiceCommand,
    UpdateAttendanceLocationCommand,
    UpdatePrivatePatientCommand,
    UpdateServiceCommand,
)
from convenio_core.core.application.cqrs import CommandHandler, QueryHandler
from convenio_core.core.application.queries.catalog_queries import (
    GetAttendanceLocationQuery,
    GetPrivatePatientQuery,
    GetServiceQuery,
    ListAttendanceLocationsQuery,
    ListPrivatePatientsQuery,
    ListServicesQuery,
)
from convenio_core.core.domain.entities.catalog_entities import (
    AttendanceLocationEntity,
    PrivatePatientEntity,
    ServiceEntity,
)
from convenio_core.core.domain.exceptions import NotFoundError
from convenio_core.core.domain.repositories.catalog_repositories import (
    AttendanceLocationRepository,
    PrivatePatientRepository,
    ServiceRepository,
)
from convenio_core.core.domain.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)


def _patch(entity, payload):
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    return replace(entity, **changes)


def _require_professional(user_repo: UserRepository, professional_id: str):
    user = user_repo.find_by_id(professional_id)
    if user is None or not user.has_role("professional"):
        raise NotFoundError("Profissional não encontrado.")
    return user


# ——— SERVIÇOS ———————————————————————————————————————————————

class CreateServiceHandler(CommandHandler[CreateServiceCommand]):
    def __init__(self, repo: ServiceRepository):
        self.repo = repo

    def handle(self, command: CreateServiceCommand) -> ServiceEntity:
        data = command.payload.model_dump()
        data["id"] = uuid.uuid4()
        return self.repo.save(ServiceEntity.from_dict(data))

class UpdateServiceHandler(CommandHandler[UpdateServiceCommand]):
    def __init__(self, repo: ServiceRepository):
        self.repo = repo

    def handle(self, command: UpdateServiceCommand) -> ServiceEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Serviço não encontrado.")
        return self.repo.save(_patch(current, command.payload))

class DeleteServiceHandler(CommandHandler[DeleteServiceCommand]):
    def __init__(self, repo: ServiceRepository):
        self.repo = repo

    def handle(self, command: DeleteServiceCommand) -> None:
        if self.repo.find_by_id(command.id) is None:
            raise NotFoundError("Serviço não encontrado.")
        self.repo.delete(command.id)

class GetServiceHandler(QueryHandler[GetServiceQuery, ServiceEntity]):
    def __init__(self, repo: ServiceRepository):
        self.repo = repo

    def handle(self, query: GetServiceQuery) -> ServiceEntity:
        svc = self.repo.find_by_id(query.id)
        if svc is None:
            raise NotFoundError("Serviço não encontrado.")
        return svc

class ListServicesHandler(QueryHandler[ListServicesQuery, object]):
    def __init__(self, repo: ServiceRepository):
        self.repo = repo

    def handle(self, query: ListServicesQuery):
        return self.repo.list(query.filtros, query.page, query.page_size)


# ——— LOCAIS DE ATENDIMENTO ——————————————————————————————————

class CreateAttendanceLocationHandler(CommandHandler[CreateAttendanceLocationCommand]):
    def __init__(self, repo: AttendanceLocationRepository, user_repo: UserRepository):
        self.repo = repo
        self.user_repo = user_repo

    def handle(self, command: CreateAttendanceLocationCommand) -> AttendanceLocationEntity:
        owner = _require_professional(self.user_repo, command.professional_id)
        data = command.payload.model_dump()
        data.update(id=uuid.uuid4(), professional_id=owner.id)
        saved = self.repo.save(AttendanceLocationEntity.from_dict(data))
        logger.info("location.created", location_id=str(saved.id), is_default=saved.is_default)
        return saved

class UpdateAttendanceLocationHandler(CommandHandler[UpdateAttendanceLocationCommand]):
    def __init__(self, repo: AttendanceLocationRepository):
        self.repo = repo

    def handle(self, command: UpdateAttendanceLocationCommand) -> AttendanceLocationEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Local de atendimento não encontrado.")
        return self.repo.save(_patch(current, command.payload))

class DeleteAttendanceLocationHandler(CommandHandler[DeleteAttendanceLocationCommand]):
    def __init__(self, repo: AttendanceLocationRepository):
        self.repo = repo

    def handle(self, command: DeleteAttendanceLocationCommand) -> None:
        if self.repo.find_by_id(command.id) is None:
            raise NotFoundError("Local de atendimento não encontrado.")
        self.repo.delete(command.id)

class GetAttendanceLocationHandler(QueryHandler[GetAttendanceLocationQuery, AttendanceLocationEntity]):
    def __init__(self, repo: AttendanceLocationRepository):
        self.repo = repo

    def handle(self, query: GetAttendanceLocationQuery) -> AttendanceLocationEntity:
        loc = self.repo.find_by_id(query.id)
        if loc is None:
            raise NotFoundError("Local de atendimento não encontrado.")
        return loc

class ListAttendanceLocationsHandler(QueryHandler[ListAttendanceLocationsQuery, list]):
    def __init__(self, repo: AttendanceLocationRepository):
        self.repo = repo

    def handle(self, query: ListAttendanceLocationsQuery) -> list[AttendanceLocationEntity]:
        return self.repo.list_by_professional(query.professional_id)


# ——— PACIENTES PARTICULARES —————————————————————————————————

class CreatePrivatePatientHandler(CommandHandler[CreatePrivatePatientCommand]):
    def __init__(self, repo: PrivatePatientRepository, user_repo: UserRepository):
        self.repo = repo
        self.user_repo = user_repo

    def handle(self, command: CreatePrivatePatientCommand) -> PrivatePatientEntity:
        owner = _require_professional(self.user_repo, command.professional_id)
        data = command.payload.model_dump()
        data.update(id=uuid.uuid4(), professional_id=owner.id, cpf=data.get("cpf") or None)
        return self.repo.save(PrivatePatientEntity.from_dict(data))

class UpdatePrivatePatientHandler(CommandHandler[UpdatePrivatePatientCommand]):
    def __init__(self, repo: PrivatePatientRepository):
        self.repo = repo

    def handle(self, command: UpdatePrivatePatientCommand) -> PrivatePatientEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Paciente não encontrado.")
        return self.repo.save(_patch(current, command.payload))

class DeletePrivatePatientHandler(CommandHandler[DeletePrivatePatientCommand]):
    def __init__(self, repo: PrivatePatientRepository):
        self.repo = repo

    def handle(self, command: DeletePrivatePatientCommand) -> None:
        if self.repo.find_by_id(command.id) is None:
            raise NotFoundError("Paciente não encontrado.")
        self.repo.delete(command.id)

class GetPrivatePatientHandler(QueryHandler[GetPrivatePatientQuery, PrivatePatientEntity]):
    def __init__(self, repo: PrivatePatientRepository):
        self.repo = repo

    def handle(self, query: GetPrivatePatientQuery) -> PrivatePatientEntity:
        patient = self.repo.find_by_id(query.id)
        if patient is None:
            raise NotFoundError("Paciente não encontrado.")
        return patient

class ListPrivatePatientsHandler(QueryHandler[ListPrivatePatientsQuery, object]):
    def __init__(self, repo: PrivatePatientRepository):
        self.repo = repo

    def handle(self, query: ListPrivatePatientsQuery):
        return self.repo.list(query.filtros, query.page, query.page_size)
