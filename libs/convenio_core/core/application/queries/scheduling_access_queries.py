from dataclasses import dataclass


@dataclass(frozen=True)
class GetSchedulingAccessQuery:
    professional_id: str

@dataclass(frozen=True)
class ListSchedulingAccessQuery:
    pass
