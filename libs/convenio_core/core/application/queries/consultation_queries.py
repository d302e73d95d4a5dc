from dataclasses import dataclass

from convenio_core.core.application.cqrs import PaginatedQueryDTO


@dataclass(frozen=True)
class GetConsultationQuery:
    id: str

class ListConsultationsQuery(PaginatedQueryDTO[dict]):
    pass
