"""
Motor de assinaturas.

⚑ Todas as escritas travam a linha do titular/dependente (select_for_update)
⚑ A confirmação de pagamento é idempotente pela `payment_reference`
⚑ Cada ativação emite um evento consumido pelo orquestrador de afiliados
"""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

import structlog

from convenio_core.core.application.commands.subscription_commands import (
    ActivateByPaymentCommand,
    ActivateDependentByPaymentCommand,
    ActivateDependentCommand,
    ActivateSubscriptionCommand,
    ExpireSubscriptionsCommand,
)
from convenio_core.core.application.cqrs import CommandHandler, HandlerOutcome, QueryHandler
from convenio_core.core.application.queries.subscription_queries import (
    GetDependentSubscriptionQuery,
    GetSubscriptionQuery,
)
from convenio_core.core.application.services.coupon_service import CouponService
from convenio_core.core.application.services.revenue_split_service import round_money
from convenio_core.core.domain.entities.subscription_entity import (
    SubscriptionEntity,
    SubscriptionPaymentEntity,
)
from convenio_core.core.domain.events.events import (
    DependentSubscriptionActivatedEvent,
    SubscriptionActivatedEvent,
    SubscriptionsExpiredEvent,
)
from convenio_core.core.domain.exceptions import (
    ConflictError,
    NotFoundError,
    PaymentMismatchError,
    ValidationError,
)
from convenio_core.core.domain.repositories.subscription_repository import SubscriptionRepository
from convenio_core.core.domain.services.clock import add_one_year

logger = structlog.get_logger(__name__)


def _require_future(expires_at: datetime, now: datetime) -> None:
    if expires_at.tzinfo is None:
        raise ValidationError("A data de validade precisa de fuso horário.")
    if expires_at <= now:
        raise ValidationError("A data de validade deve ser futura.", error="EXPIRY_IN_PAST")


# ╭──────────────────────────────────────────────╮
# │ 1. Ativação manual (admin)                   │
# ╰──────────────────────────────────────────────╯
class ActivateSubscriptionHandler(CommandHandler[ActivateSubscriptionCommand]):
    def __init__(self, repo: SubscriptionRepository, clock):
        self.repo = repo
        self.clock = clock

    def handle(self, command: ActivateSubscriptionCommand) -> HandlerOutcome[SubscriptionEntity]:
        _require_future(command.expires_at, self.clock.now())

        sub = self.repo.get_member(command.member_id, for_update=True)
        if sub is None:
            raise NotFoundError("Titular não encontrado.")
        if sub.is_same_activation(command.expires_at):
            logger.info("subscription.activate_noop", member_id=command.member_id)
            return HandlerOutcome(result=sub)

        first = sub.activate(command.expires_at)
        saved = self.repo.save_member(sub)
        logger.info(
            "subscription.activated",
            member_id=command.member_id,
            source="admin",
            first_activation=first,
            expires_at=command.expires_at.isoformat(),
        )
        return HandlerOutcome(
            result=saved,
            events=[SubscriptionActivatedEvent(
                member_id=sub.subject_id,
                expires_at=command.expires_at,
                first_activation=first,
                source="admin",
            )],
        )


class ActivateDependentHandler(CommandHandler[ActivateDependentCommand]):
    def __init__(self, repo: SubscriptionRepository, clock):
        self.repo = repo
        self.clock = clock

    def handle(self, command: ActivateDependentCommand) -> HandlerOutcome[SubscriptionEntity]:
        _require_future(command.expires_at, self.clock.now())

        sub = self.repo.get_dependent(command.dependent_id, for_update=True)
        if sub is None:
            raise NotFoundError("Dependente não encontrado.")
        if sub.is_same_activation(command.expires_at):
            return HandlerOutcome(result=sub)

        sub.activate(command.expires_at)
        saved = self.repo.save_dependent(sub)
        logger.info("subscription.dependent_activated", dependent_id=command.dependent_id, source="admin")
        return HandlerOutcome(
            result=saved,
            events=[DependentSubscriptionActivatedEvent(
                dependent_id=sub.subject_id,
                member_id=sub.member_id,
                expires_at=command.expires_at,
                source="admin",
            )],
        )


# ╭──────────────────────────────────────────────╮
# │ 2. Confirmação de pagamento                  │
# ╰──────────────────────────────────────────────╯
class _PaymentActivation:
    """Fluxo comum a titular e dependente: replay, preço esperado, registro."""

    target: str

    def __init__(self, repo: SubscriptionRepository, coupon_service: CouponService, clock):
        self.repo = repo
        self.coupons = coupon_service
        self.clock = clock

    def _replay(self, reference: str, *, member_id, dependent_id, amount: Decimal, coupon_code) -> bool:
        previous = self.repo.find_payment(reference)
        if previous is None:
            return False
        if previous.matches(
            member_id=member_id,
            dependent_id=dependent_id,
            amount_paid=amount,
            coupon_code=coupon_code,
            target=self.target,
        ):
            logger.info("subscription.payment_replay", payment_reference=reference)
            return True
        raise ConflictError(
            "Referência de pagamento já utilizada com outros dados.",
            error="PAYMENT_REFERENCE_REUSED",
        )

    def _check_amount(self, amount: Decimal, coupon_code: str | None, now: datetime) -> None:
        expected = self.coupons.expected_price(self.target, coupon_code, now)
        if amount != expected:
            logger.warning(
                "subscription.payment_mismatch",
                target=self.target,
                expected=str(expected),
                received=str(amount),
                coupon_code=coupon_code,
            )
            raise PaymentMismatchError(
                f"Valor pago ({amount}) difere do esperado ({expected}).",
                error="PAYMENT_MISMATCH",
            )

    def _record(self, reference: str, *, member_id, dependent_id, amount, coupon_code, expires_at, now):
        self.repo.record_payment(SubscriptionPaymentEntity(
            id=uuid.uuid4(),
            payment_reference=reference,
            target=self.target,
            member_id=member_id,
            dependent_id=dependent_id,
            amount_paid=amount,
            coupon_code=coupon_code,
            expires_at=expires_at,
            processed_at=now,
        ))


class ActivateByPaymentHandler(_PaymentActivation, CommandHandler[ActivateByPaymentCommand]):
    target = "titular"

    def handle(self, command: ActivateByPaymentCommand) -> HandlerOutcome[SubscriptionEntity]:
        now = self.clock.now()
        amount = round_money(Decimal(command.amount_paid))

        sub = self.repo.get_member(command.member_id, for_update=True)
        if sub is None:
            raise NotFoundError("Titular não encontrado.")

        if self._replay(
            command.payment_reference,
            member_id=sub.subject_id,
            dependent_id=None,
            amount=amount,
            coupon_code=command.coupon_code,
        ):
            return HandlerOutcome(result=sub)

        self._check_amount(amount, command.coupon_code, now)

        expires_at = add_one_year(now)
        first = sub.activate(expires_at)
        saved = self.repo.save_member(sub)
        self._record(
            command.payment_reference,
            member_id=sub.subject_id,
            dependent_id=None,
            amount=amount,
            coupon_code=command.coupon_code,
            expires_at=expires_at,
            now=now,
        )
        logger.info(
            "subscription.activated",
            member_id=str(sub.subject_id),
            source="payment",
            first_activation=first,
            payment_reference=command.payment_reference,
            amount=str(amount),
        )
        return HandlerOutcome(
            result=saved,
            events=[SubscriptionActivatedEvent(
                member_id=sub.subject_id,
                expires_at=expires_at,
                first_activation=first,
                source="payment",
                payment_reference=command.payment_reference,
            )],
        )


class ActivateDependentByPaymentHandler(_PaymentActivation, CommandHandler[ActivateDependentByPaymentCommand]):
    target = "dependente"

    def handle(self, command: ActivateDependentByPaymentCommand) -> HandlerOutcome[SubscriptionEntity]:
        now = self.clock.now()
        amount = round_money(Decimal(command.amount_paid))

        sub = self.repo.get_dependent(command.dependent_id, for_update=True)
        if sub is None:
            raise NotFoundError("Dependente não encontrado.")
        if command.member_id and str(sub.member_id) != str(command.member_id):
            raise ValidationError("Dependente não pertence a este titular.", error="DEPENDENT_OWNER_MISMATCH")

        if self._replay(
            command.payment_reference,
            member_id=sub.member_id,
            dependent_id=sub.subject_id,
            amount=amount,
            coupon_code=command.coupon_code,
        ):
            return HandlerOutcome(result=sub)

        self._check_amount(amount, command.coupon_code, now)

        expires_at = add_one_year(now)
        sub.activate(expires_at)
        saved = self.repo.save_dependent(sub)
        self._record(
            command.payment_reference,
            member_id=sub.member_id,
            dependent_id=sub.subject_id,
            amount=amount,
            coupon_code=command.coupon_code,
            expires_at=expires_at,
            now=now,
        )
        logger.info(
            "subscription.dependent_activated",
            dependent_id=str(sub.subject_id),
            source="payment",
            payment_reference=command.payment_reference,
        )
        return HandlerOutcome(
            result=saved,
            events=[DependentSubscriptionActivatedEvent(
                dependent_id=sub.subject_id,
                member_id=sub.member_id,
                expires_at=expires_at,
                source="payment",
            )],
        )


# ╭──────────────────────────────────────────────╮
# │ 3. Varredura de expiração                    │
# ╰──────────────────────────────────────────────╯
class ExpireSubscriptionsHandler(CommandHandler[ExpireSubscriptionsCommand]):
    def __init__(self, repo: SubscriptionRepository, clock):
        self.repo = repo
        self.clock = clock

    def handle(self, command: ExpireSubscriptionsCommand) -> HandlerOutcome[dict]:
        now = command.now or self.clock.now()
        members, dependents = self.repo.expire_due(now)
        logger.info("subscription.expire_sweep", members=members, dependents=dependents, now=now.isoformat())
        result = {"members": members, "dependents": dependents, "swept_at": now}
        return HandlerOutcome(
            result=result,
            events=[SubscriptionsExpiredEvent(members=members, dependents=dependents, swept_at=now)],
        )


# ╭──────────────────────────────────────────────╮
# │ 4. Leitura                                   │
# ╰──────────────────────────────────────────────╯
class GetSubscriptionHandler(QueryHandler[GetSubscriptionQuery, SubscriptionEntity]):
    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    def handle(self, query: GetSubscriptionQuery) -> SubscriptionEntity:
        sub = self.repo.get_member(query.member_id)
        if sub is None:
            raise NotFoundError("Titular não encontrado.")
        return sub


class GetDependentSubscriptionHandler(QueryHandler[GetDependentSubscriptionQuery, SubscriptionEntity]):
    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    def handle(self, query: GetDependentSubscriptionQuery) -> SubscriptionEntity:
        sub = self.repo.get_dependent(query.dependent_id)
        if sub is None:
            raise NotFoundError("Dependente não encontrado.")
        return sub
