from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from affiliate_billing.core.domain.entities.commission_entity import CommissionEntity
from convenio_core.core.application.cqrs import PagedResult


class CommissionRepository(ABC):
    @abstractmethod
    def find_by_id(self, commission_id: str, *, for_update: bool = False) -> CommissionEntity | None:
        ...

    @abstractmethod
    def add_pending(self, entity: CommissionEntity) -> tuple[CommissionEntity, bool]:
        """
        Insere comissão pendente. Violação de (afiliado, usuário de origem)
        devolve a linha existente e `False`.
        """
        ...

    @abstractmethod
    def save_payment(self, entity: CommissionEntity) -> CommissionEntity:
        ...

    @abstractmethod
    def list_by_affiliate(self, affiliate_id: str, filtros: dict, page: int, page_size: int) -> PagedResult[CommissionEntity]:
        ...

    @abstractmethod
    def list_by_period(self, start: datetime, end: datetime, status: str | None = None) -> list[CommissionEntity]:
        """Pagas por `paid_at`, pendentes por `created_at`, em [start, end)."""
        ...

    @abstractmethod
    def totals_by_affiliate(self, start: datetime | None = None, end: datetime | None = None) -> dict:
        """affiliate_id → {"pending_total", "paid_total", "count"}."""
        ...

    @abstractmethod
    def monthly_totals(self, start: datetime, end: datetime) -> list[dict]:
        ...
