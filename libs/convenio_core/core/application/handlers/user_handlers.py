import uuid

import structlog

from convenio_core.adapters.security.hash_service import HashService
from convenio_core.core.application.commands.user_commands import (
    GrantRoleCommand,
    RegisterMemberCommand,
    RevokeRoleCommand,
)
from convenio_core.core.application.cqrs import CommandHandler, HandlerOutcome, QueryHandler
from convenio_core.core.application.queries.user_queries import GetUserQuery, ListUsersQuery
from convenio_core.core.domain.entities.user_entity import UserEntity
from convenio_core.core.domain.events.events import MemberRegisteredEvent
from convenio_core.core.domain.exceptions import ConflictError, NotFoundError, ValidationError
from convenio_core.core.domain.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)


# ——— CADASTRO ————————————————————————————————————————————————

class RegisterMemberHandler(CommandHandler[RegisterMemberCommand]):
    """
    Cadastro público de titular. O evento `MemberRegisteredEvent` leva o
    `visitor_identifier` para que o rastreador de afiliados promova o clique
    a cadastro dentro da mesma transação.
    """

    def __init__(self, repo: UserRepository, hash_service: HashService):
        self.repo = repo
        self.hash_service = hash_service

    def handle(self, command: RegisterMemberCommand) -> HandlerOutcome[UserEntity]:
        p = command.payload
        if self.repo.exists(email=p.email, cpf=p.cpf):
            raise ConflictError("Já existe usuário com este e-mail ou CPF.", error="USER_EXISTS")

        entity = UserEntity(
            id=uuid.uuid4(),
            name=p.name.strip(),
            cpf=p.cpf,
            email=str(p.email).lower(),
            phone=p.phone,
            password_hash=self.hash_service.hash_password(p.password),
            roles=("member",),
        )
        user = self.repo.create(entity)
        logger.info("user.registered", user_id=str(user.id), referred=bool(p.visitor_identifier))
        return HandlerOutcome(
            result=user,
            events=[MemberRegisteredEvent(user_id=user.id, visitor_identifier=p.visitor_identifier)],
        )


# ——— PAPÉIS ——————————————————————————————————————————————————

class GrantRoleHandler(CommandHandler[GrantRoleCommand]):
    def __init__(self, repo: UserRepository):
        self.repo = repo

    def handle(self, command: GrantRoleCommand) -> UserEntity:
        user = self.repo.add_role(command.user_id, command.role)
        logger.info("user.role_granted", user_id=command.user_id, role=command.role)
        return user


class RevokeRoleHandler(CommandHandler[RevokeRoleCommand]):
    def __init__(self, repo: UserRepository):
        self.repo = repo

    def handle(self, command: RevokeRoleCommand) -> UserEntity:
        user = self.repo.find_by_id(command.user_id)
        if user is None:
            raise NotFoundError("Usuário não encontrado.")
        if (
            command.role == "admin"
            and str(command.user_id) == str(command.requested_by)
            and user.has_role("admin")
            and self.repo.count_with_role("admin") <= 1
        ):
            raise ValidationError("Não é possível remover o último admin do sistema.", error="LAST_ADMIN")
        user = self.repo.remove_role(command.user_id, command.role)
        logger.info("user.role_revoked", user_id=command.user_id, role=command.role)
        return user


# ——— CONSULTAS ———————————————————————————————————————————————

class GetUserHandler(QueryHandler[GetUserQuery, UserEntity]):
    def __init__(self, repo: UserRepository):
        self.repo = repo

    def handle(self, query: GetUserQuery) -> UserEntity:
        user = self.repo.find_by_id(query.id)
        if user is None:
            raise NotFoundError("Usuário não encontrado.")
        return user


class ListUsersHandler(QueryHandler[ListUsersQuery, object]):
    def __init__(self, repo: UserRepository):
        self.repo = repo

    def handle(self, query: ListUsersQuery):
        return self.repo.list(query.filtros, query.page, query.page_size)
