from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.entities.professional_entity import ProfessionalEntity


class ProfessionalRepository(ABC):
    @abstractmethod
    def find_by_id(self, professional_id: str) -> ProfessionalEntity | None:
        """Somente usuários com papel `professional` e perfil cadastrado."""
        ...

    @abstractmethod
    def create_profile(
        self, user_id: str, *, category: str | None, percentage: Decimal, registration_number: str | None
    ) -> ProfessionalEntity:
        ...

    @abstractmethod
    def update_profile(self, professional_id: str, changes: dict) -> ProfessionalEntity:
        ...

    @abstractmethod
    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[ProfessionalEntity]:
        ...
