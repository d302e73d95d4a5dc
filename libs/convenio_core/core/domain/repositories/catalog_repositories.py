from __future__ import annotations

from abc import ABC, abstractmethod

from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.entities.catalog_entities import (
    AttendanceLocationEntity,
    PrivatePatientEntity,
    ServiceEntity,
)


class ServiceRepository(ABC):
    @abstractmethod
    def find_by_id(self, service_id: str) -> ServiceEntity | None:
        ...

    @abstractmethod
    def save(self, entity: ServiceEntity) -> ServiceEntity:
        ...

    @abstractmethod
    def delete(self, service_id: str) -> None:
        """Serviços usados em consultas não podem ser excluídos (ConflictError)."""
        ...

    @abstractmethod
    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[ServiceEntity]:
        ...


class AttendanceLocationRepository(ABC):
    @abstractmethod
    def find_by_id(self, location_id: str) -> AttendanceLocationEntity | None:
        ...

    @abstractmethod
    def save(self, entity: AttendanceLocationEntity) -> AttendanceLocationEntity:
        """Se `is_default`, desmarca os demais locais do mesmo profissional na mesma transação."""
        ...

    @abstractmethod
    def delete(self, location_id: str) -> None:
        ...

    @abstractmethod
    def list_by_professional(self, professional_id: str) -> list[AttendanceLocationEntity]:
        ...


class PrivatePatientRepository(ABC):
    @abstractmethod
    def find_by_id(self, patient_id: str) -> PrivatePatientEntity | None:
        ...

    @abstractmethod
    def save(self, entity: PrivatePatientEntity) -> PrivatePatientEntity:
        """CPF duplicado para o mesmo profissional levanta ConflictError."""
        ...

    @abstractmethod
    def delete(self, patient_id: str) -> None:
        """Pacientes com consultas não podem ser excluídos (ConflictError)."""
        ...

    @abstractmethod
    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[PrivatePatientEntity]:
        ...
