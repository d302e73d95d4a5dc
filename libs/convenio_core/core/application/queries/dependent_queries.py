from dataclasses import dataclass


@dataclass(frozen=True)
class GetDependentQuery:
    id: str

@dataclass(frozen=True)
class ListDependentsQuery:
    member_id: str
