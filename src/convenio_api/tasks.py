from __future__ import annotations

from datetime import datetime

import structlog
from celery import Task, shared_task

from convenio_core.adapters.config import composition_root as core_root
from convenio_core.core.application.commands.subscription_commands import ExpireSubscriptionsCommand
from convenio_core.core.application.dtos.common import to_utc

log = structlog.get_logger(__name__)

QUEUE_MAINTENANCE = "maintenance"

# ──────────────────────────────────────────────────────────────────────────
# Base Task com DLQ
# ──────────────────────────────────────────────────────────────────────────
class BaseTaskWithDLQ(Task):
    """
    Envia p/ Dead Letter Queue quando falhar após todas as retentativas.
    Em 'task_always_eager' não há broker: apenas registra.
    """
    def on_failure(self, exc, task_id, args, kwargs, einfo):
        if getattr(self.app.conf, "task_always_eager", False):
            log.critical("task.failed_eager_mode", task=self.name, task_id=task_id, error=str(exc))
        else:
            log.critical("task.failed_dlq_redirect", task=self.name, task_id=task_id, error=str(exc), queue="dead_letter")
            self.app.send_task(
                self.name,
                args=args,
                kwargs=kwargs,
                queue="dead_letter",
                routing_key="dead_letter",
            )
        super().on_failure(exc, task_id, args, kwargs, einfo)


# ──────────────────────────────────────────────────────────────────────────
# Varredura diária de expiração
# ──────────────────────────────────────────────────────────────────────────
@shared_task(
    bind=True,
    base=BaseTaskWithDLQ,
    queue=QUEUE_MAINTENANCE,
    autoretry_for=(Exception,),
    retry_backoff=True,
    max_retries=3,
)
def expire_subscriptions_task(self, now: str | None = None) -> dict:
    """
    Marca como `expired` titulares e dependentes com validade vencida.
    `now` (ISO-8601) existe para reprocessamentos manuais; sem fuso vale UTC.
    """
    ref = to_utc(datetime.fromisoformat(now)) if now else None
    result = core_root.container.command_bus().dispatch(ExpireSubscriptionsCommand(now=ref))
    log.info("task.expire_subscriptions.done", members=result["members"], dependents=result["dependents"])
    return {"members": result["members"], "dependents": result["dependents"]}
