"""
Orquestrador transacional de ativação.

Assina os eventos do motor de assinaturas e amarra, na mesma unidade de
trabalho do comando que os produziu, os efeitos do programa de afiliados:

    pagamento/ativação manual → SubscriptionActivatedEvent
        └─ primeira ativação? → conversão (rastreador) → comissão (livro)

    cadastro de titular → MemberRegisteredEvent
        └─ visitor_identifier? → promoção do clique a cadastro

Qualquer falha aqui sobe pelo dispatcher e desfaz o comando inteiro.
"""
from __future__ import annotations

import structlog

from affiliate_billing.core.application.services.attribution_tracker import AttributionTracker
from affiliate_billing.core.application.services.commission_ledger import CommissionLedger
from convenio_core.core.application.commands.subscription_commands import (
    ActivateByPaymentCommand,
    ActivateDependentByPaymentCommand,
)
from convenio_core.core.application.dtos.subscription_dto import PaymentConfirmedDTO
from convenio_core.core.domain.events.events import MemberRegisteredEvent, SubscriptionActivatedEvent
from convenio_core.core.domain.services.event_dispatcher import EventDispatcher

logger = structlog.get_logger(__name__)


class ActivationOrchestrator:
    def __init__(self, command_bus, tracker: AttributionTracker, ledger: CommissionLedger):
        self.command_bus = command_bus
        self.tracker = tracker
        self.ledger = ledger

    def subscribe(self, dispatcher: EventDispatcher) -> None:
        dispatcher.subscribe(SubscriptionActivatedEvent, self.on_subscription_activated)
        dispatcher.subscribe(MemberRegisteredEvent, self.on_member_registered)

    # ——— entrada do gateway ———
    def confirm_payment(self, payload: PaymentConfirmedDTO):
        if payload.target == "titular":
            command = ActivateByPaymentCommand(
                member_id=str(payload.user_id),
                payment_reference=payload.payment_reference,
                amount_paid=payload.amount_paid,
                coupon_code=payload.coupon_code,
            )
        else:
            command = ActivateDependentByPaymentCommand(
                dependent_id=str(payload.dependent_id),
                payment_reference=payload.payment_reference,
                amount_paid=payload.amount_paid,
                coupon_code=payload.coupon_code,
                member_id=str(payload.user_id),
            )
        logger.info(
            "payment.confirmed",
            user_id=str(payload.user_id),
            target=payload.target,
            payment_reference=payload.payment_reference,
        )
        return self.command_bus.dispatch(command)

    # ——— assinantes ———
    def on_subscription_activated(self, event: SubscriptionActivatedEvent) -> None:
        if not event.first_activation:
            return
        attribution = self.tracker.record_conversion(event.member_id)
        if attribution is None:
            logger.debug("orchestrator.no_attribution", member_id=str(event.member_id))
            return
        self.ledger.accrue_for(event.member_id)

    def on_member_registered(self, event: MemberRegisteredEvent) -> None:
        if not event.visitor_identifier:
            return
        self.tracker.promote_to_registration(event.visitor_identifier, event.user_id)
