from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class ReportRowDTO:
    """Uma consulta já com o percentual vigente do profissional."""
    consultation_id: uuid.UUID
    professional_id: uuid.UUID
    professional_name: str
    percentage: Decimal
    service_id: uuid.UUID
    service_name: str
    patient_kind: str
    patient_name: str | None
    value: Decimal
    date: datetime
    status: str


@dataclass(frozen=True)
class SplitRowDTO:
    row: ReportRowDTO
    professional_payment: Decimal
    clinic_revenue: Decimal

    @property
    def patient_type(self) -> str:
        return "private" if self.row.patient_kind == "private" else "convenio"


@dataclass(frozen=True)
class ProfessionalRevenueDTO:
    professional_id: uuid.UUID
    professional_name: str
    percentage: Decimal
    consultations_count: int
    convenio_count: int
    private_count: int
    revenue: Decimal
    professional_payment: Decimal
    clinic_revenue: Decimal


@dataclass(frozen=True)
class ServiceRevenueDTO:
    service_id: uuid.UUID
    service_name: str
    consultations_count: int
    revenue: Decimal


@dataclass(frozen=True)
class RevenueReportDTO:
    start: datetime
    end: datetime
    consultations_count: int
    total_revenue: Decimal
    total_professional_payment: Decimal
    total_clinic_revenue: Decimal
    revenue_by_professional: list[ProfessionalRevenueDTO] = field(default_factory=list)
    revenue_by_service: list[ServiceRevenueDTO] = field(default_factory=list)


@dataclass(frozen=True)
class ProfessionalRevenueSummaryDTO:
    total_consultations: int
    convenio_consultations: int
    private_consultations: int
    total_revenue: Decimal
    convenio_revenue: Decimal
    private_revenue: Decimal
    professional_payment: Decimal
    clinic_revenue: Decimal


@dataclass(frozen=True)
class ProfessionalRevenueReportDTO:
    professional_id: uuid.UUID
    percentage: Decimal
    start: datetime
    end: datetime
    summary: ProfessionalRevenueSummaryDTO
    consultations: list[SplitRowDTO] = field(default_factory=list)
