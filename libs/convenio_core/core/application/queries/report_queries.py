from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RevenueReportQuery:
    start: datetime
    end: datetime

@dataclass(frozen=True)
class ProfessionalRevenueQuery:
    professional_id: str
    start: datetime
    end: datetime

@dataclass(frozen=True)
class CancelledConsultationsQuery:
    start: datetime
    end: datetime
    professional_id: str | None = None
