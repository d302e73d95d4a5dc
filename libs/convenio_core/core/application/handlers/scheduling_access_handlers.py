"""
Acesso promocional à agenda.

Estado derivado: `absent` (sem concessão ou revogada), `expired`
(validade ≤ agora) ou `active`. Independe da assinatura do convênio.
"""
from __future__ import annotations

import structlog

from convenio_core.core.application.commands.scheduling_access_commands import (
    ExtendSchedulingAccessCommand,
    GrantSchedulingAccessCommand,
    RevokeSchedulingAccessCommand,
)
from convenio_core.core.application.cqrs import CommandHandler, QueryHandler
from convenio_core.core.application.queries.scheduling_access_queries import (
    GetSchedulingAccessQuery,
    ListSchedulingAccessQuery,
)
from convenio_core.core.domain.entities.scheduling_access_entity import SchedulingAccessEntity
from convenio_core.core.domain.exceptions import NotFoundError, ValidationError
from convenio_core.core.domain.repositories.scheduling_access_repository import SchedulingAccessRepository
from convenio_core.core.domain.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)


def access_view(professional_id, access: SchedulingAccessEntity | None, now) -> dict:
    """Representação de leitura usada pela API e pela listagem do admin."""
    if access is None:
        return {
            "professional_id": professional_id,
            "state": "absent",
            "has_access": False,
            "expires_at": None,
            "days_remaining": 0,
            "granted_by_id": None,
            "granted_at": None,
            "reason": None,
            "revoked_at": None,
        }
    state = access.state(now)
    return {
        "professional_id": access.professional_id,
        "state": state,
        "has_access": state == "active",
        "expires_at": access.expires_at,
        "days_remaining": access.days_remaining(now),
        "granted_by_id": access.granted_by_id,
        "granted_at": access.granted_at,
        "reason": access.reason,
        "revoked_at": access.revoked_at,
    }


class GrantSchedulingAccessHandler(CommandHandler[GrantSchedulingAccessCommand]):
    def __init__(self, repo: SchedulingAccessRepository, user_repo: UserRepository, clock):
        self.repo = repo
        self.user_repo = user_repo
        self.clock = clock

    def handle(self, command: GrantSchedulingAccessCommand) -> SchedulingAccessEntity:
        now = self.clock.now()
        if command.expires_at <= now:
            raise ValidationError("A data de expiração deve ser futura.", error="EXPIRY_IN_PAST")
        professional = self.user_repo.find_by_id(command.professional_id)
        if professional is None or not professional.has_role("professional"):
            raise NotFoundError("Profissional não encontrado.")

        self.repo.find(command.professional_id, for_update=True)
        saved = self.repo.save(SchedulingAccessEntity(
            professional_id=professional.id,
            has_access=True,
            expires_at=command.expires_at,
            granted_by_id=command.granted_by,
            granted_at=now,
            reason=command.reason,
            revoked_at=None,
        ))
        logger.info(
            "scheduling_access.granted",
            professional_id=command.professional_id,
            expires_at=command.expires_at.isoformat(),
            granted_by=command.granted_by,
        )
        return saved


class ExtendSchedulingAccessHandler(CommandHandler[ExtendSchedulingAccessCommand]):
    def __init__(self, repo: SchedulingAccessRepository, clock):
        self.repo = repo
        self.clock = clock

    def handle(self, command: ExtendSchedulingAccessCommand) -> SchedulingAccessEntity:
        current = self.repo.find(command.professional_id, for_update=True)
        if current is None:
            raise NotFoundError("Profissional não possui acesso concedido.")
        if not current.has_access:
            raise ValidationError("Acesso revogado; conceda novamente.", error="ACCESS_REVOKED")
        if command.expires_at <= current.expires_at or command.expires_at <= self.clock.now():
            raise ValidationError(
                "A nova data deve ser posterior à validade atual.",
                error="EXTEND_NOT_LATER",
            )
        current.expires_at = command.expires_at
        if command.reason:
            current.reason = command.reason
        saved = self.repo.save(current)
        logger.info(
            "scheduling_access.extended",
            professional_id=command.professional_id,
            expires_at=command.expires_at.isoformat(),
        )
        return saved


class RevokeSchedulingAccessHandler(CommandHandler[RevokeSchedulingAccessCommand]):
    def __init__(self, repo: SchedulingAccessRepository, clock):
        self.repo = repo
        self.clock = clock

    def handle(self, command: RevokeSchedulingAccessCommand) -> SchedulingAccessEntity:
        current = self.repo.find(command.professional_id, for_update=True)
        if current is None or not current.has_access:
            raise NotFoundError("Profissional não possui acesso ativo para revogar.")
        current.has_access = False
        current.revoked_at = self.clock.now()
        if command.reason:
            current.reason = command.reason
        saved = self.repo.save(current)
        logger.info("scheduling_access.revoked", professional_id=command.professional_id)
        return saved


class GetSchedulingAccessHandler(QueryHandler[GetSchedulingAccessQuery, dict]):
    def __init__(self, repo: SchedulingAccessRepository, clock):
        self.repo = repo
        self.clock = clock

    def handle(self, query: GetSchedulingAccessQuery) -> dict:
        return access_view(query.professional_id, self.repo.find(query.professional_id), self.clock.now())


class ListSchedulingAccessHandler(QueryHandler[ListSchedulingAccessQuery, list]):
    def __init__(self, repo: SchedulingAccessRepository, clock):
        self.repo = repo
        self.clock = clock

    def handle(self, query: ListSchedulingAccessQuery) -> list[dict]:
        now = self.clock.now()
        return [
            {**info, "access": access_view(info["id"], access, now)}
            for info, access in self.repo.list_professionals()
        ]
