from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandError

from convenio_core.adapters.config.composition_root import container as core_container
from convenio_core.adapters.repositories.user_repo_impl import UserRepoImpl
from convenio_core.core.application.commands.user_commands import GrantRoleCommand, RegisterMemberCommand
from convenio_core.core.application.dtos.user_dto import RegisterMemberDTO
from convenio_core.core.domain.exceptions import DomainError


class Command(BaseCommand):
    """
    Cria ou promove o administrador do sistema.
    Idempotente: se o e-mail já existir, apenas garante o papel `admin`.
    """
    help = "Cria ou atualiza o usuário administrador."

    def add_arguments(self, parser) -> None:
        parser.add_argument("--email", type=str, required=True, help="E-mail do administrador.")
        parser.add_argument("--password", type=str, required=True, help="Senha do administrador.")
        parser.add_argument("--cpf", type=str, required=True, help="CPF do administrador.")
        parser.add_argument("--name", type=str, default="Administrador", help="Nome exibido.")

    def handle(self, *args: Any, **opt: Any) -> None:
        self.stdout.write(self.style.NOTICE("--- Iniciando criação do usuário Admin ---"))
        cmd_bus = core_container.command_bus()

        try:
            existing = UserRepoImpl().find_by_email(opt["email"].lower())
            if existing is None:
                existing = cmd_bus.dispatch(
                    RegisterMemberCommand(
                        payload=RegisterMemberDTO(
                            name=opt["name"], cpf=opt["cpf"], email=opt["email"], password=opt["password"],
                        )
                    )
                )
            user = cmd_bus.dispatch(GrantRoleCommand(user_id=str(existing.id), role="admin"))
        except DomainError as e:
            raise CommandError(f"Falha ao criar usuário Admin '{opt['email']}': {e.message}") from e

        self.stdout.write(self.style.SUCCESS(f"✅ Admin '{user.email}' pronto. ID: {user.id}"))
