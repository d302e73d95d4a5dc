import uuid
from dataclasses import dataclass

from affiliate_billing.core.application.dtos.affiliate_dto import (
    CreateAffiliateDTO,
    MarkCommissionPaidDTO,
    ReferralClickDTO,
    UpdateAffiliateDTO,
)
from convenio_core.core.application.cqrs import CommandDTO
from convenio_core.core.application.dtos.subscription_dto import PaymentConfirmedDTO


@dataclass(frozen=True)
class CreateAffiliateCommand(CommandDTO):
    payload: CreateAffiliateDTO

@dataclass(frozen=True)
class UpdateAffiliateCommand(CommandDTO):
    id: str
    payload: UpdateAffiliateDTO

@dataclass(frozen=True)
class RecordReferralClickCommand(CommandDTO):
    payload: ReferralClickDTO

@dataclass(frozen=True)
class MarkCommissionPaidCommand(CommandDTO):
    affiliate_id: str
    commission_id: str
    paid_by: uuid.UUID
    payload: MarkCommissionPaidDTO

@dataclass(frozen=True)
class ConfirmPaymentCommand(CommandDTO):
    """Confirmação do gateway: ativa a assinatura e dispara os efeitos de indicação."""
    payload: PaymentConfirmedDTO
