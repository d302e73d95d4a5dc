from dataclasses import dataclass

from convenio_core.core.application.cqrs import PaginatedQueryDTO


@dataclass(frozen=True)
class GetServiceQuery:
    id: str

class ListServicesQuery(PaginatedQueryDTO[dict]):
    pass

@dataclass(frozen=True)
class GetAttendanceLocationQuery:
    id: str

@dataclass(frozen=True)
class ListAttendanceLocationsQuery:
    professional_id: str

@dataclass(frozen=True)
class GetPrivatePatientQuery:
    id: str

class ListPrivatePatientsQuery(PaginatedQueryDTO[dict]):
    pass
