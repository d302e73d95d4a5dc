from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from affiliate_billing.core.domain.entities.affiliate_entity import AffiliateEntity
from convenio_core.core.application.cqrs import PagedResult


class AffiliateRepository(ABC):
    @abstractmethod
    def find_by_id(self, affiliate_id: str) -> AffiliateEntity | None:
        ...

    @abstractmethod
    def find_by_user(self, user_id: str) -> AffiliateEntity | None:
        ...

    @abstractmethod
    def find_by_reference(self, reference: str) -> AffiliateEntity | None:
        """
        Resolve o token público do link: `referral_code` (sem diferenciar
        maiúsculas) ou, como forma legada, o próprio id do afiliado.
        """
        ...

    @abstractmethod
    def code_exists(self, code: str) -> bool:
        ...

    @abstractmethod
    def create(self, entity: AffiliateEntity) -> AffiliateEntity:
        """Código ou usuário duplicado levanta ConflictError."""
        ...

    @abstractmethod
    def update(self, entity: AffiliateEntity) -> AffiliateEntity:
        ...

    @abstractmethod
    def update_commission_amount(self, affiliate_id: str, amount: Decimal) -> None:
        """Altera só o valor padrão para conversões futuras."""
        ...

    @abstractmethod
    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[AffiliateEntity]:
        ...

    @abstractmethod
    def status_counts(self) -> dict[str, int]:
        """{"total": n, "active": n}."""
        ...
