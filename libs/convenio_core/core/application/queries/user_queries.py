from dataclasses import dataclass

from convenio_core.core.application.cqrs import PaginatedQueryDTO


@dataclass(frozen=True)
class GetUserQuery:
    id: str

class ListUsersQuery(PaginatedQueryDTO[dict]):
    pass
