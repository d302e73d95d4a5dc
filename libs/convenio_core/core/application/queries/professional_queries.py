from dataclasses import dataclass

from convenio_core.core.application.cqrs import PaginatedQueryDTO


@dataclass(frozen=True)
class GetProfessionalQuery:
    id: str

class ListProfessionalsQuery(PaginatedQueryDTO[dict]):
    pass
