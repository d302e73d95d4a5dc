from __future__ import annotations

from abc import ABC, abstractmethod

from convenio_core.core.domain.entities.scheduling_access_entity import SchedulingAccessEntity


class SchedulingAccessRepository(ABC):
    @abstractmethod
    def find(self, professional_id: str, *, for_update: bool = False) -> SchedulingAccessEntity | None:
        ...

    @abstractmethod
    def save(self, entity: SchedulingAccessEntity) -> SchedulingAccessEntity:
        """Upsert pelo profissional (relação 1-1)."""
        ...

    @abstractmethod
    def list_professionals(self) -> list[tuple[dict, SchedulingAccessEntity | None]]:
        """Todos os profissionais com o respectivo registro de acesso (ou None)."""
        ...
