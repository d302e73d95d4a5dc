"""
Rastreamento de indicações.

⚑ Código desconhecido ou afiliado inativo nunca quebra o fluxo do visitante
⚑ Cliques repetidos no mesmo dia UTC (afiliado + visitante) são agregados
⚑ Empate entre afiliados: vale o clique mais antigo do visitante
⚑ A atribuição por usuário é gravada uma única vez
"""
from __future__ import annotations

import uuid
from datetime import datetime, time, timedelta, timezone

import structlog

from affiliate_billing.core.domain.entities.referral_entity import ReferralEventEntity, ReferredUserEntity
from affiliate_billing.core.domain.events.events import ReferralStageRecordedEvent
from affiliate_billing.core.domain.repositories.affiliate_repository import AffiliateRepository
from affiliate_billing.core.domain.repositories.referral_repository import ReferralRepository
from convenio_core.core.domain.services.event_dispatcher import EventDispatcher

logger = structlog.get_logger(__name__)


def _utc_day(moment: datetime) -> tuple[datetime, datetime]:
    start = datetime.combine(moment.astimezone(timezone.utc).date(), time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class AttributionTracker:
    def __init__(
        self,
        affiliate_repo: AffiliateRepository,
        referral_repo: ReferralRepository,
        dispatcher: EventDispatcher,
        clock,
    ):
        self.affiliates = affiliate_repo
        self.referrals = referral_repo
        self.dispatcher = dispatcher
        self.clock = clock

    # ——— clique ———
    def record_click(self, referral_code: str, visitor_identifier: str, metadata: dict | None = None) -> ReferralEventEntity | None:
        affiliate = self.affiliates.find_by_reference(referral_code)
        if affiliate is None or not affiliate.is_active:
            logger.info("referral.click_ignored", referral_code=referral_code, reason="unknown_or_inactive")
            return None

        now = self.clock.now()
        since, until = _utc_day(now)
        existing = self.referrals.find_click(affiliate.id, visitor_identifier, since, until)
        if existing is not None:
            merged = self.referrals.merge_click_metadata(existing.id, metadata or {})
            logger.debug("referral.click_coalesced", affiliate_id=str(affiliate.id), event_id=str(existing.id))
            return merged

        click = self.referrals.add_click(
            ReferralEventEntity(
                id=uuid.uuid4(),
                affiliate_id=affiliate.id,
                visitor_identifier=visitor_identifier,
                stage="click",
                created_at=now,
                metadata={**(metadata or {}), "hits": 1},
            )
        )
        logger.info("referral.click_recorded", affiliate_id=str(affiliate.id), event_id=str(click.id))
        self.dispatcher.dispatch(
            ReferralStageRecordedEvent(
                affiliate_id=affiliate.id, stage="click", visitor_identifier=visitor_identifier,
            )
        )
        return click

    # ——— cadastro ———
    def promote_to_registration(self, visitor_identifier: str, user_id) -> ReferredUserEntity | None:
        if self.referrals.find_attribution(user_id) is not None:
            return None

        click = self.referrals.earliest_click(visitor_identifier)
        if click is None:
            return None

        now = self.clock.now()
        registration, created = self.referrals.add_milestone(
            ReferralEventEntity(
                id=uuid.uuid4(),
                affiliate_id=click.affiliate_id,
                visitor_identifier=visitor_identifier,
                stage="registration",
                created_at=now,
                linked_user_id=user_id,
            )
        )
        if not created and registration.linked_user_id != user_id:
            logger.warning(
                "referral.visitor_already_registered",
                visitor_identifier=visitor_identifier,
                user_id=str(user_id),
            )
            return None

        attribution, attributed = self.referrals.attribute(
            ReferredUserEntity(
                id=uuid.uuid4(),
                user_id=user_id,
                affiliate_id=click.affiliate_id,
                attributed_at=now,
                registration_event_id=registration.id,
            )
        )
        if attributed:
            logger.info("referral.registration_recorded", affiliate_id=str(click.affiliate_id), user_id=str(user_id))
            self.dispatcher.dispatch(
                ReferralStageRecordedEvent(
                    affiliate_id=click.affiliate_id,
                    stage="registration",
                    visitor_identifier=visitor_identifier,
                    user_id=user_id,
                )
            )
        return attribution

    # ——— conversão ———
    def record_conversion(self, user_id) -> ReferredUserEntity | None:
        """Devolve a atribuição do usuário (ou None quando não foi indicado)."""
        attribution = self.referrals.find_attribution(user_id)
        if attribution is None:
            return None

        registration = self.referrals.find_event(attribution.registration_event_id)
        registration_visitor = registration.visitor_identifier if registration else str(user_id)
        _, created = self.referrals.add_milestone(
            ReferralEventEntity(
                id=uuid.uuid4(),
                affiliate_id=attribution.affiliate_id,
                visitor_identifier=registration_visitor,
                stage="conversion",
                created_at=self.clock.now(),
                linked_user_id=user_id,
            )
        )
        if created:
            logger.info("referral.conversion_recorded", affiliate_id=str(attribution.affiliate_id), user_id=str(user_id))
            self.dispatcher.dispatch(
                ReferralStageRecordedEvent(
                    affiliate_id=attribution.affiliate_id,
                    stage="conversion",
                    visitor_identifier=registration_visitor,
                    user_id=user_id,
                )
            )
        return attribution
