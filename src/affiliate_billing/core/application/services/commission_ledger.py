from __future__ import annotations

import uuid

import structlog

from affiliate_billing.core.domain.entities.commission_entity import CommissionEntity
from affiliate_billing.core.domain.events.events import CommissionAccruedEvent, CommissionPaidEvent
from affiliate_billing.core.domain.repositories.affiliate_repository import AffiliateRepository
from affiliate_billing.core.domain.repositories.commission_repository import CommissionRepository
from affiliate_billing.core.domain.repositories.referral_repository import ReferralRepository
from convenio_core.core.domain.exceptions import NotFoundError
from convenio_core.core.domain.services.event_dispatcher import EventDispatcher

logger = structlog.get_logger(__name__)


class CommissionLedger:
    """Livro de comissões: pendente → paga, uma por (afiliado, usuário indicado)."""

    def __init__(
        self,
        repo: CommissionRepository,
        affiliate_repo: AffiliateRepository,
        referral_repo: ReferralRepository,
        dispatcher: EventDispatcher,
        clock,
    ):
        self.repo = repo
        self.affiliates = affiliate_repo
        self.referrals = referral_repo
        self.dispatcher = dispatcher
        self.clock = clock

    def accrue_for(self, user_id) -> CommissionEntity | None:
        attribution = self.referrals.find_attribution(user_id)
        if attribution is None:
            return None
        affiliate = self.affiliates.find_by_id(attribution.affiliate_id)
        if affiliate is None:
            raise NotFoundError("Afiliado da atribuição não encontrado.")

        commission, created = self.repo.add_pending(
            CommissionEntity(
                id=uuid.uuid4(),
                affiliate_id=affiliate.id,
                source_user_id=user_id,
                amount=affiliate.commission_amount,
                created_at=self.clock.now(),
            )
        )
        if not created:
            logger.info("commission.already_accrued", commission_id=str(commission.id), user_id=str(user_id))
            return commission

        logger.info(
            "commission.accrued",
            commission_id=str(commission.id),
            affiliate_id=str(affiliate.id),
            user_id=str(user_id),
            amount=str(commission.amount),
        )
        self.dispatcher.dispatch(
            CommissionAccruedEvent(
                commission_id=commission.id,
                affiliate_id=commission.affiliate_id,
                source_user_id=commission.source_user_id,
                amount=commission.amount,
            )
        )
        return commission

    def mark_paid(
        self,
        commission_id: str,
        *,
        paid_by,
        paid_method: str,
        receipt_reference: str | None = None,
        external_payment_reference: str | None = None,
        affiliate_id: str | None = None,
    ) -> CommissionEntity:
        commission = self.repo.find_by_id(commission_id, for_update=True)
        if commission is None or (affiliate_id is not None and str(commission.affiliate_id) != str(affiliate_id)):
            raise NotFoundError("Comissão não encontrada.")

        commission.pay(
            paid_by=paid_by,
            paid_method=paid_method,
            now=self.clock.now(),
            receipt_reference=receipt_reference,
            external_payment_reference=external_payment_reference,
        )
        saved = self.repo.save_payment(commission)
        logger.info(
            "commission.paid",
            commission_id=str(saved.id),
            affiliate_id=str(saved.affiliate_id),
            paid_method=saved.paid_method,
        )
        self.dispatcher.dispatch(
            CommissionPaidEvent(
                commission_id=saved.id,
                affiliate_id=saved.affiliate_id,
                amount=saved.amount,
                paid_method=saved.paid_method,
            )
        )
        return saved
