from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from convenio_core.core.application.cqrs import CommandDTO


@dataclass(frozen=True)
class ActivateSubscriptionCommand(CommandDTO):
    """Ativação manual (admin) com validade explícita."""
    member_id: str
    expires_at: datetime

@dataclass(frozen=True)
class ActivateDependentCommand(CommandDTO):
    dependent_id: str
    expires_at: datetime

@dataclass(frozen=True)
class ActivateByPaymentCommand(CommandDTO):
    """Confirmação de pagamento do titular vinda do gateway."""
    member_id: str
    payment_reference: str
    amount_paid: Decimal
    coupon_code: str | None = None

@dataclass(frozen=True)
class ActivateDependentByPaymentCommand(CommandDTO):
    dependent_id: str
    payment_reference: str
    amount_paid: Decimal
    coupon_code: str | None = None
    member_id: str | None = None  # quando informado, precisa ser o dono do dependente

@dataclass(frozen=True)
class ExpireSubscriptionsCommand(CommandDTO):
    now: datetime | None = None
