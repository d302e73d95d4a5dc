from __future__ import annotations

from convenio_core.core.application.cqrs import QueryHandler
from convenio_core.core.application.dtos.report_dto import (
    ProfessionalRevenueReportDTO,
    RevenueReportDTO,
)
from convenio_core.core.application.queries.report_queries import (
    CancelledConsultationsQuery,
    ProfessionalRevenueQuery,
    RevenueReportQuery,
)
from convenio_core.core.application.services.revenue_split_service import RevenueSplitService
from convenio_core.core.domain.entities.consultation_entity import REPORTABLE_STATUSES, ConsultationEntity
from convenio_core.core.domain.exceptions import NotFoundError
from convenio_core.core.domain.repositories.consultation_repository import ConsultationRepository
from convenio_core.core.domain.repositories.professional_repository import ProfessionalRepository


class RevenueReportHandler(QueryHandler[RevenueReportQuery, RevenueReportDTO]):
    def __init__(self, repo: ConsultationRepository, split_service: RevenueSplitService):
        self.repo = repo
        self.split = split_service

    def handle(self, query: RevenueReportQuery) -> RevenueReportDTO:
        rows = self.repo.report_rows(query.start, query.end, statuses=REPORTABLE_STATUSES)
        return self.split.build_report(rows, query.start, query.end)


class ProfessionalRevenueHandler(QueryHandler[ProfessionalRevenueQuery, ProfessionalRevenueReportDTO]):
    def __init__(
        self,
        repo: ConsultationRepository,
        professional_repo: ProfessionalRepository,
        split_service: RevenueSplitService,
    ):
        self.repo = repo
        self.professional_repo = professional_repo
        self.split = split_service

    def handle(self, query: ProfessionalRevenueQuery) -> ProfessionalRevenueReportDTO:
        prof = self.professional_repo.find_by_id(query.professional_id)
        if prof is None:
            raise NotFoundError("Profissional não encontrado.")
        rows = self.repo.report_rows(
            query.start, query.end, statuses=REPORTABLE_STATUSES, professional_id=query.professional_id
        )
        return self.split.build_professional_report(prof.id, prof.percentage, rows, query.start, query.end)


class CancelledConsultationsHandler(QueryHandler[CancelledConsultationsQuery, list]):
    def __init__(self, repo: ConsultationRepository):
        self.repo = repo

    def handle(self, query: CancelledConsultationsQuery) -> list[ConsultationEntity]:
        return self.repo.list_cancelled(query.start, query.end, query.professional_id)
