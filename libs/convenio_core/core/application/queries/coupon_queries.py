from dataclasses import dataclass

from convenio_core.core.application.cqrs import PaginatedQueryDTO


@dataclass(frozen=True)
class GetCouponQuery:
    id: str

class ListCouponsQuery(PaginatedQueryDTO[dict]):
    pass

@dataclass(frozen=True)
class ResolveCouponQuery:
    code: str
    target: str
