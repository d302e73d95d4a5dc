from prometheus_client import Counter

from affiliate_billing.core.domain.events.events import (
    CommissionAccruedEvent,
    CommissionPaidEvent,
    ReferralStageRecordedEvent,
)
from convenio_core.core.domain.events.events import (
    DependentSubscriptionActivatedEvent,
    SubscriptionActivatedEvent,
    SubscriptionsExpiredEvent,
)

SUBSCRIPTION_ACTIVATIONS = Counter(
    "convenio_subscription_activations_total",
    "Ativacoes de assinatura",
    ["target", "source"],
)

SUBSCRIPTION_EXPIRATIONS = Counter(
    "convenio_subscription_expirations_total",
    "Assinaturas expiradas pela varredura",
    ["target"],
)

REFERRAL_EVENTS = Counter(
    "convenio_referral_events_total",
    "Eventos do funil de indicacao",
    ["stage"],
)

COMMISSIONS_ACCRUED = Counter(
    "convenio_commissions_accrued_total",
    "Comissoes lancadas",
)

COMMISSIONS_PAID = Counter(
    "convenio_commissions_paid_total",
    "Comissoes pagas",
    ["paid_method"],
)


def _on_activated(event: SubscriptionActivatedEvent) -> None:
    SUBSCRIPTION_ACTIVATIONS.labels(target="titular", source=event.source).inc()

def _on_dependent_activated(event: DependentSubscriptionActivatedEvent) -> None:
    SUBSCRIPTION_ACTIVATIONS.labels(target="dependente", source=event.source).inc()

def _on_expired(event: SubscriptionsExpiredEvent) -> None:
    SUBSCRIPTION_EXPIRATIONS.labels(target="titular").inc(event.members)
    SUBSCRIPTION_EXPIRATIONS.labels(target="dependente").inc(event.dependents)

def _on_referral(event: ReferralStageRecordedEvent) -> None:
    REFERRAL_EVENTS.labels(stage=event.stage).inc()

def _on_accrued(event: CommissionAccruedEvent) -> None:
    COMMISSIONS_ACCRUED.inc()

def _on_paid(event: CommissionPaidEvent) -> None:
    COMMISSIONS_PAID.labels(paid_method=event.paid_method).inc()


def register_metrics_subscribers(dispatcher) -> None:
    dispatcher.subscribe(SubscriptionActivatedEvent, _on_activated)
    dispatcher.subscribe(DependentSubscriptionActivatedEvent, _on_dependent_activated)
    dispatcher.subscribe(SubscriptionsExpiredEvent, _on_expired)
    dispatcher.subscribe(ReferralStageRecordedEvent, _on_referral)
    dispatcher.subscribe(CommissionAccruedEvent, _on_accrued)
    dispatcher.subscribe(CommissionPaidEvent, _on_paid)
