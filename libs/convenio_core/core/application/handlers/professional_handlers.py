import uuid
from dataclasses import replace

import structlog

from convenio_core.adapters.security.hash_service import HashService
from convenio_core.core.application.commands.user_commands import (
    CreateProfessionalCommand,
    UpdateProfessionalCommand,
)
from convenio_core.core.application.cqrs import CommandHandler, QueryHandler
from convenio_core.core.application.queries.professional_queries import (
    GetProfessionalQuery,
    ListProfessionalsQuery,
)
from convenio_core.core.domain.entities.professional_entity import ProfessionalEntity
from convenio_core.core.domain.entities.user_entity import UserEntity
from convenio_core.core.domain.exceptions import ConflictError, NotFoundError
from convenio_core.core.domain.repositories.professional_repository import ProfessionalRepository
from convenio_core.core.domain.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)


class CreateProfessionalHandler(CommandHandler[CreateProfessionalCommand]):
    def __init__(self, repo: ProfessionalRepository, user_repo: UserRepository, hash_service: HashService):
        self.repo = repo
        self.user_repo = user_repo
        self.hash_service = hash_service

    def handle(self, command: CreateProfessionalCommand) -> ProfessionalEntity:
        p = command.payload
        if self.user_repo.exists(email=p.email, cpf=p.cpf):
            raise ConflictError("Já existe usuário com este e-mail ou CPF.", error="USER_EXISTS")
        user = self.user_repo.create(UserEntity(
            id=uuid.uuid4(),
            name=p.name.strip(),
            cpf=p.cpf,
            email=str(p.email).lower(),
            phone=p.phone,
            password_hash=self.hash_service.hash_password(p.password),
            roles=("professional",),
        ))
        prof = self.repo.create_profile(
            str(user.id),
            category=p.category,
            percentage=p.percentage,
            registration_number=p.registration_number,
        )
        logger.info("professional.created", professional_id=str(user.id), percentage=str(p.percentage))
        return prof


class UpdateProfessionalHandler(CommandHandler[UpdateProfessionalCommand]):
    """`percentage` vale para relatórios futuros: os relatórios leem o percentual atual."""

    def __init__(self, repo: ProfessionalRepository, user_repo: UserRepository):
        self.repo = repo
        self.user_repo = user_repo

    def handle(self, command: UpdateProfessionalCommand) -> ProfessionalEntity:
        if self.repo.find_by_id(command.id) is None:
            raise NotFoundError("Profissional não encontrado.")
        changes = {k: v for k, v in command.payload.model_dump(exclude_unset=True).items() if v is not None}

        user_changes = {k: changes[k] for k in ("name", "phone", "is_active") if k in changes}
        if user_changes:
            user = self.user_repo.find_by_id(command.id)
            self.user_repo.update(replace(user, **user_changes))

        prof = self.repo.update_profile(command.id, changes)
        logger.info("professional.updated", professional_id=command.id, fields=sorted(changes))
        return self.repo.find_by_id(command.id) or prof


class GetProfessionalHandler(QueryHandler[GetProfessionalQuery, ProfessionalEntity]):
    def __init__(self, repo: ProfessionalRepository):
        self.repo = repo

    def handle(self, query: GetProfessionalQuery) -> ProfessionalEntity:
        prof = self.repo.find_by_id(query.id)
        if prof is None:
            raise NotFoundError("Profissional não encontrado.")
        return prof


class ListProfessionalsHandler(QueryHandler[ListProfessionalsQuery, object]):
    def __init__(self, repo: ProfessionalRepository):
        self.repo = repo

    def handle(self, query: ListProfessionalsQuery):
        return self.repo.list(query.filtros, query.page, query.page_size)
