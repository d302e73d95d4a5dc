from __future__ import annotations

from abc import ABC, abstractmethod

from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.entities.user_entity import UserEntity


class UserRepository(ABC):
    @abstractmethod
    def find_by_id(self, user_id: str) -> UserEntity | None:
        """Retorna o usuário por ID (com papéis)."""
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> UserEntity | None:
        """Retorna o usuário com o e-mail informado (case-insensitive), ou None."""
        ...

    @abstractmethod
    def exists(self, *, email: str | None = None, cpf: str | None = None) -> bool:
        """Indica se já existe usuário com o e-mail ou CPF."""
        ...

    @abstractmethod
    def create(self, entity: UserEntity) -> UserEntity:
        """Insere o usuário e os papéis de `entity.roles`."""
        ...

    @abstractmethod
    def update(self, entity: UserEntity) -> UserEntity:
        """Atualiza dados cadastrais (não mexe em papéis nem em assinatura)."""
        ...

    @abstractmethod
    def add_role(self, user_id: str, role: str) -> UserEntity:
        """Concede papel (idempotente)."""
        ...

    @abstractmethod
    def remove_role(self, user_id: str, role: str) -> UserEntity:
        """Remove papel (idempotente)."""
        ...

    @abstractmethod
    def count_with_role(self, role: str) -> int:
        ...

    @abstractmethod
    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[UserEntity]:
        """Lista paginada; aceita `role` além de lookups do ORM."""
        ...
