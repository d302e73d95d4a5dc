from __future__ import annotations

from abc import ABC, abstractmethod

from convenio_core.core.domain.entities.dependent_entity import DependentEntity


class DependentRepository(ABC):
    @abstractmethod
    def find_by_id(self, dependent_id: str) -> DependentEntity | None:
        ...

    @abstractmethod
    def list_by_member(self, member_id: str) -> list[DependentEntity]:
        ...

    @abstractmethod
    def count_by_member(self, member_id: str, *, lock: bool = False) -> int:
        """Conta dependentes; `lock` serializa inserções concorrentes do mesmo titular."""
        ...

    @abstractmethod
    def save(self, entity: DependentEntity) -> DependentEntity:
        """Cria ou atualiza; CPF duplicado levanta ConflictError."""
        ...

    @abstractmethod
    def delete(self, dependent_id: str) -> None:
        ...
