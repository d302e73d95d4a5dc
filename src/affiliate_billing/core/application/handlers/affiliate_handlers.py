"""
Handlers do programa de afiliados: cadastro, rastreamento, livro de
comissões e leituras agregadas (painel do afiliado e relatório financeiro).
"""
from __future__ import annotations

import re
import secrets
import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import structlog

from affiliate_billing.core.application.commands.affiliate_commands import (
    ConfirmPaymentCommand,
    CreateAffiliateCommand,
    MarkCommissionPaidCommand,
    RecordReferralClickCommand,
    UpdateAffiliateCommand,
)
from affiliate_billing.core.application.queries.affiliate_queries import (
    AffiliateDashboardQuery,
    AffiliateFinancialReportQuery,
    GetAffiliateQuery,
    ListAffiliateCommissionsQuery,
    ListAffiliatesQuery,
    ListCommissionsByPeriodQuery,
    ListReferredUsersQuery,
)
from affiliate_billing.core.application.services.activation_orchestrator import ActivationOrchestrator
from affiliate_billing.core.application.services.attribution_tracker import AttributionTracker
from affiliate_billing.core.application.services.commission_ledger import CommissionLedger
from affiliate_billing.core.domain.entities.affiliate_entity import AffiliateEntity
from affiliate_billing.core.domain.entities.commission_entity import CommissionEntity
from affiliate_billing.core.domain.repositories.affiliate_repository import AffiliateRepository
from affiliate_billing.core.domain.repositories.commission_repository import CommissionRepository
from affiliate_billing.core.domain.repositories.referral_repository import ReferralRepository
from convenio_core.core.application.cqrs import CommandHandler, PagedResult, QueryHandler
from convenio_core.core.domain.exceptions import ConflictError, NotFoundError, ValidationError
from convenio_core.core.domain.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")
_EMPTY_TOTALS = {"pending_total": ZERO, "paid_total": ZERO, "count": 0}


def _require_window(start: datetime, end: datetime) -> None:
    if end <= start:
        raise ValidationError("end_date deve ser posterior a start_date.", error="INVALID_PERIOD")


# ╭──────────────────────────────────────────────╮
# │ 1. Cadastro de afiliados                     │
# ╰──────────────────────────────────────────────╯
class CreateAffiliateHandler(CommandHandler[CreateAffiliateCommand]):
    def __init__(self, repo: AffiliateRepository, user_repo: UserRepository, default_commission: Decimal):
        self.repo = repo
        self.user_repo = user_repo
        self.default_commission = default_commission

    def _generate_code(self, name: str) -> str:
        prefix = re.sub(r"[^A-Z0-9]", "", (name or "").upper())[:6] or "AFF"
        while True:
            code = f"{prefix}{secrets.token_hex(3).upper()}"
            if not self.repo.code_exists(code):
                return code

    def handle(self, command: CreateAffiliateCommand) -> AffiliateEntity:
        p = command.payload
        user = self.user_repo.find_by_id(str(p.user_id))
        if user is None:
            raise NotFoundError("Usuário não encontrado.", error="USER_NOT_FOUND")
        if self.repo.find_by_user(str(p.user_id)) is not None:
            raise ConflictError("Usuário já é afiliado.", error="AFFILIATE_EXISTS")

        if p.referral_code:
            if self.repo.code_exists(p.referral_code):
                raise ConflictError("Código de indicação em uso.", error="REFERRAL_CODE_EXISTS")
            code = p.referral_code
        else:
            code = self._generate_code(user.name)

        affiliate = self.repo.create(
            AffiliateEntity(
                id=uuid.uuid4(),
                user_id=user.id,
                referral_code=code,
                commission_amount=p.commission_amount if p.commission_amount is not None else self.default_commission,
                pix_key=p.pix_key,
            )
        )
        self.user_repo.add_role(str(user.id), "affiliate")
        logger.info("affiliate.created", affiliate_id=str(affiliate.id), referral_code=code)
        return affiliate


class UpdateAffiliateHandler(CommandHandler[UpdateAffiliateCommand]):
    def __init__(self, repo: AffiliateRepository):
        self.repo = repo

    def handle(self, command: UpdateAffiliateCommand) -> AffiliateEntity:
        current = self.repo.find_by_id(command.id)
        if current is None:
            raise NotFoundError("Afiliado não encontrado.")

        changes = command.payload.model_dump(exclude_unset=True)
        amount = changes.pop("commission_amount", None)
        if changes.get("status") is None:
            changes.pop("status", None)

        updated = self.repo.update(replace(current, **changes)) if changes else current
        if amount is not None and amount != current.commission_amount:
            # só o padrão futuro muda; comissões já lançadas mantêm o valor
            self.repo.update_commission_amount(str(current.id), amount)
            updated = self.repo.find_by_id(str(current.id))
            logger.info(
                "affiliate.commission_amount_changed",
                affiliate_id=str(current.id),
                old=str(current.commission_amount),
                new=str(amount),
            )
        return updated


class GetAffiliateHandler(QueryHandler[GetAffiliateQuery, AffiliateEntity]):
    def __init__(self, repo: AffiliateRepository):
        self.repo = repo

    def handle(self, query: GetAffiliateQuery) -> AffiliateEntity:
        affiliate = self.repo.find_by_id(query.id)
        if affiliate is None:
            raise NotFoundError("Afiliado não encontrado.")
        return affiliate


class ListAffiliatesHandler(QueryHandler[ListAffiliatesQuery, PagedResult[dict]]):
    def __init__(self, repo: AffiliateRepository, referral_repo: ReferralRepository, commission_repo: CommissionRepository):
        self.repo = repo
        self.referrals = referral_repo
        self.commissions = commission_repo

    def handle(self, query: ListAffiliatesQuery) -> PagedResult[dict]:
        page = self.repo.list(query.filtros, query.page, query.page_size)
        clients = self.referrals.referred_counts()
        totals = self.commissions.totals_by_affiliate()
        items = [
            {
                "affiliate": a,
                "clients_count": clients.get(a.id, 0),
                **totals.get(a.id, _EMPTY_TOTALS),
            }
            for a in page.items
        ]
        return PagedResult(items=items, total=page.total, page=page.page, page_size=page.page_size)


# ╭──────────────────────────────────────────────╮
# │ 2. Rastreamento                              │
# ╰──────────────────────────────────────────────╯
class RecordReferralClickHandler(CommandHandler[RecordReferralClickCommand]):
    def __init__(self, tracker: AttributionTracker):
        self.tracker = tracker

    def handle(self, command: RecordReferralClickCommand):
        p = command.payload
        return self.tracker.record_click(p.referral_code, p.visitor_identifier, p.metadata)


class ListReferredUsersHandler(QueryHandler[ListReferredUsersQuery, list[dict]]):
    def __init__(self, repo: AffiliateRepository, referral_repo: ReferralRepository):
        self.repo = repo
        self.referrals = referral_repo

    def handle(self, query: ListReferredUsersQuery) -> list[dict]:
        if self.repo.find_by_id(query.affiliate_id) is None:
            raise NotFoundError("Afiliado não encontrado.")
        return self.referrals.referred_users(query.affiliate_id)


# ╭──────────────────────────────────────────────╮
# │ 3. Pagamentos e comissões                    │
# ╰──────────────────────────────────────────────╯
class ConfirmPaymentHandler(CommandHandler[ConfirmPaymentCommand]):
    def __init__(self, orchestrator: ActivationOrchestrator):
        self.orchestrator = orchestrator

    def handle(self, command: ConfirmPaymentCommand):
        return self.orchestrator.confirm_payment(command.payload)


class MarkCommissionPaidHandler(CommandHandler[MarkCommissionPaidCommand]):
    def __init__(self, ledger: CommissionLedger):
        self.ledger = ledger

    def handle(self, command: MarkCommissionPaidCommand) -> CommissionEntity:
        p = command.payload
        return self.ledger.mark_paid(
            command.commission_id,
            affiliate_id=command.affiliate_id,
            paid_by=command.paid_by,
            paid_method=p.paid_method,
            receipt_reference=p.receipt,
            external_payment_reference=p.external_payment_reference,
        )


class ListAffiliateCommissionsHandler(QueryHandler[ListAffiliateCommissionsQuery, PagedResult[CommissionEntity]]):
    def __init__(self, repo: CommissionRepository):
        self.repo = repo

    def handle(self, query: ListAffiliateCommissionsQuery) -> PagedResult[CommissionEntity]:
        filtros = dict(query.filtros or {})
        affiliate_id = filtros.pop("affiliate_id")
        return self.repo.list_by_affiliate(affiliate_id, filtros, query.page, query.page_size)


class ListCommissionsByPeriodHandler(QueryHandler[ListCommissionsByPeriodQuery, list[CommissionEntity]]):
    def __init__(self, repo: CommissionRepository):
        self.repo = repo

    def handle(self, query: ListCommissionsByPeriodQuery) -> list[CommissionEntity]:
        _require_window(query.start, query.end)
        if query.status not in (None, "pending", "paid"):
            raise ValidationError("status deve ser pending ou paid.", error="INVALID_STATUS")
        return self.repo.list_by_period(query.start, query.end, query.status)


# ╭──────────────────────────────────────────────╮
# │ 4. Painel e relatório financeiro             │
# ╰──────────────────────────────────────────────╯
class AffiliateDashboardHandler(QueryHandler[AffiliateDashboardQuery, dict]):
    def __init__(self, repo: AffiliateRepository, referral_repo: ReferralRepository, commission_repo: CommissionRepository):
        self.repo = repo
        self.referrals = referral_repo
        self.commissions = commission_repo

    def handle(self, query: AffiliateDashboardQuery) -> dict:
        affiliate = self.repo.find_by_user(query.user_id)
        if affiliate is None:
            raise NotFoundError("Perfil de afiliado não encontrado.")

        commissions = self.commissions.list_by_affiliate(str(affiliate.id), {}, query.page, query.page_size)
        totals = self.commissions.totals_by_affiliate().get(affiliate.id, _EMPTY_TOTALS)
        return {
            "affiliate": affiliate,
            "stats": self.referrals.stage_counts(affiliate.id, query.start, query.end),
            "referred_users": self.referrals.referred_users(affiliate.id),
            "commissions": commissions,
            "totals": totals,
        }


class AffiliateFinancialReportHandler(QueryHandler[AffiliateFinancialReportQuery, dict]):
    """
    Relatório do período: pagas contam pelo `paid_at`, pendentes pelo
    `created_at`.
    """

    def __init__(self, repo: AffiliateRepository, commission_repo: CommissionRepository, referral_repo: ReferralRepository):
        self.repo = repo
        self.commissions = commission_repo
        self.referrals = referral_repo

    def handle(self, query: AffiliateFinancialReportQuery) -> dict:
        _require_window(query.start, query.end)
        totals = self.commissions.totals_by_affiliate(query.start, query.end)
        clients = self.referrals.referred_counts()

        per_affiliate = []
        for affiliate_id, agg in totals.items():
            affiliate = self.repo.find_by_id(affiliate_id)
            per_affiliate.append({
                "affiliate_id": affiliate_id,
                "name": affiliate.user_name if affiliate else None,
                "referral_code": affiliate.referral_code if affiliate else None,
                "clients_count": clients.get(affiliate_id, 0),
                **agg,
            })
        per_affiliate.sort(key=lambda r: (r["pending_total"] + r["paid_total"]), reverse=True)

        counts = self.repo.status_counts()
        return {
            "period": {"start": query.start, "end": query.end},
            "affiliates": per_affiliate,
            "monthly": self.commissions.monthly_totals(query.start, query.end),
            "stats": {
                "total_affiliates": counts["total"],
                "active_affiliates": counts["active"],
                "total_pending": sum((r["pending_total"] for r in per_affiliate), ZERO),
                "total_paid": sum((r["paid_total"] for r in per_affiliate), ZERO),
            },
        }
