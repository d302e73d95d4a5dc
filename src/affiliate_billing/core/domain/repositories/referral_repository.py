from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from affiliate_billing.core.domain.entities.referral_entity import ReferralEventEntity, ReferredUserEntity


class ReferralRepository(ABC):
    """Funil de indicação: eventos por estágio + atribuição por usuário."""

    @abstractmethod
    def find_click(self, affiliate_id, visitor_identifier: str, since: datetime, until: datetime) -> ReferralEventEntity | None:
        """Clique do visitante para o afiliado dentro de [since, until)."""
        ...

    @abstractmethod
    def earliest_click(self, visitor_identifier: str) -> ReferralEventEntity | None:
        ...

    @abstractmethod
    def find_event(self, event_id) -> ReferralEventEntity | None:
        ...

    @abstractmethod
    def add_click(self, entity: ReferralEventEntity) -> ReferralEventEntity:
        ...

    @abstractmethod
    def merge_click_metadata(self, event_id, metadata: dict) -> ReferralEventEntity:
        ...

    @abstractmethod
    def add_milestone(self, entity: ReferralEventEntity) -> tuple[ReferralEventEntity, bool]:
        """
        Insere cadastro/conversão. Se a chave única já existir, devolve o
        registro existente e `False`.
        """
        ...

    @abstractmethod
    def find_attribution(self, user_id) -> ReferredUserEntity | None:
        ...

    @abstractmethod
    def attribute(self, entity: ReferredUserEntity) -> tuple[ReferredUserEntity, bool]:
        """Escrita única por usuário; repetição devolve a atribuição já gravada."""
        ...

    @abstractmethod
    def stage_counts(self, affiliate_id, start: datetime | None = None, end: datetime | None = None) -> dict[str, int]:
        """{"clicks", "registrations", "conversions"} na janela [start, end)."""
        ...

    @abstractmethod
    def referred_users(self, affiliate_id) -> list[dict]:
        """Usuários atribuídos ao afiliado com o status de assinatura atual."""
        ...

    @abstractmethod
    def referred_counts(self) -> dict:
        """affiliate_id → quantidade de clientes atribuídos."""
        ...
