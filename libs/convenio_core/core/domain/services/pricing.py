from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from convenio_core.core.domain.exceptions import ValidationError


@dataclass(frozen=True)
class SubscriptionPricing:
    """Preços-base da assinatura por público (configuráveis no deploy)."""
    titular: Decimal
    dependente: Decimal

    def base_for(self, target: str) -> Decimal:
        if target == "titular":
            return self.titular
        if target == "dependente":
            return self.dependente
        raise ValidationError(f"Tipo de assinatura inválido: {target!r}.")
