from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from convenio_core.core.domain.entities.subscription_entity import (
    SubscriptionEntity,
    SubscriptionPaymentEntity,
)


class SubscriptionRepository(ABC):
    """Porta do motor de assinaturas (titulares e dependentes)."""

    @abstractmethod
    def get_member(self, member_id: str, *, for_update: bool = False) -> SubscriptionEntity | None:
        """Estado da assinatura do titular; `for_update` trava a linha até o fim da transação."""
        ...

    @abstractmethod
    def save_member(self, entity: SubscriptionEntity) -> SubscriptionEntity:
        ...

    @abstractmethod
    def get_dependent(self, dependent_id: str, *, for_update: bool = False) -> SubscriptionEntity | None:
        ...

    @abstractmethod
    def save_dependent(self, entity: SubscriptionEntity) -> SubscriptionEntity:
        ...

    @abstractmethod
    def find_payment(self, payment_reference: str) -> SubscriptionPaymentEntity | None:
        """Retorna a confirmação já processada para a referência externa."""
        ...

    @abstractmethod
    def record_payment(self, payment: SubscriptionPaymentEntity) -> SubscriptionPaymentEntity:
        """Grava a confirmação; referência duplicada levanta ConflictError."""
        ...

    @abstractmethod
    def expire_due(self, now: datetime) -> tuple[int, int]:
        """
        Atualização condicional `active → expired` para validade < now.
        Devolve (titulares, dependentes) afetados.
        """
        ...
