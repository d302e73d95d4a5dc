from dataclasses import dataclass
from datetime import datetime

from convenio_core.core.application.cqrs import PaginatedQueryDTO


@dataclass(frozen=True)
class GetAffiliateQuery:
    id: str

class ListAffiliatesQuery(PaginatedQueryDTO[dict]):
    """Listagem administrativa com clientes e totais por afiliado."""
    pass

class ListAffiliateCommissionsQuery(PaginatedQueryDTO[dict]):
    """`filtros` exige `affiliate_id`; aceita `status`."""
    pass

@dataclass(frozen=True)
class ListReferredUsersQuery:
    affiliate_id: str

@dataclass(frozen=True)
class AffiliateDashboardQuery:
    user_id: str
    start: datetime | None = None
    end: datetime | None = None
    page: int = 1
    page_size: int = 50

@dataclass(frozen=True)
class ListCommissionsByPeriodQuery:
    start: datetime
    end: datetime
    status: str | None = None

@dataclass(frozen=True)
class AffiliateFinancialReportQuery:
    start: datetime
    end: datetime
