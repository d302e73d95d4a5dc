"""
Repasse de consultas.

Convênio: o profissional recebe `round(valor × percentual / 100, 2)` e a
clínica fica com o complemento. Particular: 100% para o profissional.
O arredondamento (meio-para-longe-do-zero) é feito por consulta, antes de
qualquer soma, para que os totais exibidos fechem com as linhas.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from convenio_core.core.application.dtos.report_dto import (
    ProfessionalRevenueDTO,
    ProfessionalRevenueReportDTO,
    ProfessionalRevenueSummaryDTO,
    ReportRowDTO,
    RevenueReportDTO,
    ServiceRevenueDTO,
    SplitRowDTO,
)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def split_value(value: Decimal, percentage: Decimal, *, is_convenio: bool) -> tuple[Decimal, Decimal]:
    """Devolve (professional_payment, clinic_revenue) de uma consulta."""
    value = round_money(Decimal(value))
    if not is_convenio:
        return value, ZERO
    payment = round_money(value * Decimal(percentage) / HUNDRED)
    return payment, value - payment


def split_row(row: ReportRowDTO) -> SplitRowDTO:
    payment, clinic = split_value(row.value, row.percentage, is_convenio=row.patient_kind != "private")
    return SplitRowDTO(row=row, professional_payment=payment, clinic_revenue=clinic)


class RevenueSplitService:
    """Agrega linhas de consulta em relatórios; não acessa o banco."""

    def build_report(self, rows: Iterable[ReportRowDTO], start: datetime, end: datetime) -> RevenueReportDTO:
        splits = [split_row(r) for r in rows]

        by_prof: dict = defaultdict(list)
        by_service: dict = defaultdict(list)
        for s in splits:
            by_prof[s.row.professional_id].append(s)
            by_service[s.row.service_id].append(s)

        professionals = [self._professional_bucket(items) for items in by_prof.values()]
        professionals.sort(key=lambda p: (-p.revenue, p.professional_name))

        services = [
            ServiceRevenueDTO(
                service_id=items[0].row.service_id,
                service_name=items[0].row.service_name,
                consultations_count=len(items),
                revenue=sum((i.row.value for i in items), ZERO),
            )
            for items in by_service.values()
        ]
        services.sort(key=lambda s: (-s.revenue, s.service_name))

        return RevenueReportDTO(
            start=start,
            end=end,
            consultations_count=len(splits),
            total_revenue=sum((s.row.value for s in splits), ZERO),
            total_professional_payment=sum((s.professional_payment for s in splits), ZERO),
            total_clinic_revenue=sum((s.clinic_revenue for s in splits), ZERO),
            revenue_by_professional=professionals,
            revenue_by_service=services,
        )

    def build_professional_report(
        self,
        professional_id,
        percentage: Decimal,
        rows: Iterable[ReportRowDTO],
        start: datetime,
        end: datetime,
    ) -> ProfessionalRevenueReportDTO:
        splits = [split_row(r) for r in rows]
        convenio = [s for s in splits if s.patient_type == "convenio"]
        private = [s for s in splits if s.patient_type == "private"]
        summary = ProfessionalRevenueSummaryDTO(
            total_consultations=len(splits),
            convenio_consultations=len(convenio),
            private_consultations=len(private),
            total_revenue=sum((s.row.value for s in splits), ZERO),
            convenio_revenue=sum((s.row.value for s in convenio), ZERO),
            private_revenue=sum((s.row.value for s in private), ZERO),
            professional_payment=sum((s.professional_payment for s in splits), ZERO),
            clinic_revenue=sum((s.clinic_revenue for s in splits), ZERO),
        )
        return ProfessionalRevenueReportDTO(
            professional_id=professional_id,
            percentage=percentage,
            start=start,
            end=end,
            summary=summary,
            consultations=splits,
        )

    @staticmethod
    def _professional_bucket(items: list[SplitRowDTO]) -> ProfessionalRevenueDTO:
        head = items[0].row
        return ProfessionalRevenueDTO(
            professional_id=head.professional_id,
            professional_name=head.professional_name,
            percentage=head.percentage,
            consultations_count=len(items),
            convenio_count=sum(1 for i in items if i.patient_type == "convenio"),
            private_count=sum(1 for i in items if i.patient_type == "private"),
            revenue=sum((i.row.value for i in items), ZERO),
            professional_payment=sum((i.professional_payment for i in items), ZERO),
            clinic_revenue=sum((i.clinic_revenue for i in items), ZERO),
        )
