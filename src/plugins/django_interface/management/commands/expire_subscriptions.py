from datetime import datetime

from django.core.management.base import BaseCommand, CommandError

from convenio_core.adapters.config.composition_root import container as core_container
from convenio_core.core.application.commands.subscription_commands import ExpireSubscriptionsCommand
from convenio_core.core.application.dtos.common import to_utc


class Command(BaseCommand):
    help = "Marca como expiradas as assinaturas ativas com validade vencida."

    def add_arguments(self, parser):
        parser.add_argument(
            "--now",
            help="Instante de referência ISO-8601 (default: agora, UTC)",
        )

    def handle(self, *args, **opts):
        now = None
        if opts.get("now"):
            try:
                now = to_utc(datetime.fromisoformat(opts["now"]))
            except ValueError as exc:
                raise CommandError(f"--now inválido: {opts['now']}") from exc

        result = core_container.command_bus().dispatch(ExpireSubscriptionsCommand(now=now))
        self.stdout.write(self.style.SUCCESS(f"Resultado expire_sweep: {result}"))
