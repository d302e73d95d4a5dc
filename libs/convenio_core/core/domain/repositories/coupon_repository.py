from __future__ import annotations

from abc import ABC, abstractmethod

from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.entities.coupon_entity import CouponEntity


class CouponRepository(ABC):
    @abstractmethod
    def find_by_id(self, coupon_id: str) -> CouponEntity | None:
        ...

    @abstractmethod
    def find_by_code(self, code: str) -> CouponEntity | None:
        """Busca pelo código sem diferenciar maiúsculas/minúsculas."""
        ...

    @abstractmethod
    def save(self, entity: CouponEntity) -> CouponEntity:
        """Cria ou atualiza; código duplicado levanta ConflictError."""
        ...

    @abstractmethod
    def delete(self, coupon_id: str) -> None:
        """Exclusão física."""
        ...

    @abstractmethod
    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[CouponEntity]:
        ...
