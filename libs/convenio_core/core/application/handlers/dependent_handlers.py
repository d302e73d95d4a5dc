import uuid

import structlog

from convenio_core.core.application.commands.dependent_commands import (
    CreateDependentCommand,
    DeleteDependentCommand,
    UpdateDependentCommand,
)
from convenio_core.core.application.cqrs import CommandHandler, QueryHandler
from convenio_core.core.application.queries.dependent_queries import GetDependentQuery, ListDependentsQuery
from convenio_core.core.domain.entities.dependent_entity import DependentEntity
from convenio_core.core.domain.exceptions import NotFoundError, ValidationError
from convenio_core.core.domain.repositories.dependent_repository import DependentRepository
from convenio_core.core.domain.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)


class CreateDependentHandler(CommandHandler[CreateDependentCommand]):
    def __init__(self, repo: DependentRepository, user_repo: UserRepository, max_dependents: int):
        self.repo = repo
        self.user_repo = user_repo
        self.max_dependents = max_dependents

    def handle(self, command: CreateDependentCommand) -> DependentEntity:
        p = command.payload
        owner = self.user_repo.find_by_id(str(p.member_id))
        if owner is None or not owner.has_role("member"):
            raise NotFoundError("Titular não encontrado.")

        if self.repo.count_by_member(str(p.member_id), lock=True) >= self.max_dependents:
            raise ValidationError(
                f"Limite de {self.max_dependents} dependentes por titular atingido.",
                error="DEPENDENT_LIMIT",
            )

        entity = DependentEntity(
            id=uuid.uuid4(),
            member_id=p.member_id,
            name=p.name.strip(),
            cpf=p.cpf,
            birth_date=p.birth_date,
        )
        saved = self.repo.save(entity)
        logger.info("dependent.created", dependent_id=str(saved.id), member_id=str(p.member_id))
        return saved


class UpdateDependentHandler(CommandHandler[UpdateDependentCommand]):
    def __init__(self, repo: DependentRepository):
        self.repo = repo

    def handle(self, command: UpdateDependentCommand) -> DependentEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Dependente não encontrado.")
        for k, v in command.payload.model_dump(exclude_unset=True).items():
            if v is not None:
                setattr(current, k, v)
        return self.repo.save(current)


class DeleteDependentHandler(CommandHandler[DeleteDependentCommand]):
    """Só dependentes que nunca foram ativados podem ser excluídos."""

    def __init__(self, repo: DependentRepository):
        self.repo = repo

    def handle(self, command: DeleteDependentCommand) -> None:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Dependente não encontrado.")
        if current.subscription_status != "pending":
            raise ValidationError(
                "Dependente com assinatura ativada não pode ser excluído.",
                error="DEPENDENT_NOT_PENDING",
            )
        self.repo.delete(command.id)
        logger.info("dependent.deleted", dependent_id=command.id)


class GetDependentHandler(QueryHandler[GetDependentQuery, DependentEntity]):
    def __init__(self, repo: DependentRepository):
        self.repo = repo

    def handle(self, query: GetDependentQuery) -> DependentEntity:
        dep = self.repo.find_by_id(query.id)
        if dep is None:
            raise NotFoundError("Dependente não encontrado.")
        return dep


class ListDependentsHandler(QueryHandler[ListDependentsQuery, list]):
    def __init__(self, repo: DependentRepository):
        self.repo = repo

    def handle(self, query: ListDependentsQuery) -> list[DependentEntity]:
        return self.repo.list_by_member(query.member_id)
