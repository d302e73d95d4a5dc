from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.application.dtos.report_dto import ReportRowDTO
from convenio_core.core.domain.entities.consultation_entity import ConsultationEntity, PatientRef


class ConsultationRepository(ABC):
    @abstractmethod
    def find_by_id(self, consultation_id: str) -> ConsultationEntity | None:
        ...

    @abstractmethod
    def patient_exists(self, patient: PatientRef, professional_id: str) -> bool:
        """Titular/dependente existem; paciente particular existe e pertence ao profissional."""
        ...

    @abstractmethod
    def create(self, entity: ConsultationEntity) -> ConsultationEntity:
        ...

    @abstractmethod
    def update(self, entity: ConsultationEntity) -> ConsultationEntity:
        """Persiste os campos mutáveis; o tipo de paciente nunca é alterado aqui."""
        ...

    @abstractmethod
    def delete(self, consultation_id: str) -> None:
        ...

    @abstractmethod
    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[ConsultationEntity]:
        """Aceita `start`/`end` (intervalo [start, end) sobre `date`) e `professional_id`."""
        ...

    @abstractmethod
    def report_rows(
        self,
        start: datetime,
        end: datetime,
        *,
        statuses: tuple[str, ...],
        professional_id: str | None = None,
    ) -> list[ReportRowDTO]:
        """Linhas para relatórios, com o percentual atual do profissional."""
        ...

    @abstractmethod
    def list_cancelled(
        self, start: datetime, end: datetime, professional_id: str | None = None
    ) -> list[ConsultationEntity]:
        """Consultas canceladas com data em [start, end), mais recentes primeiro."""
        ...
