from dataclasses import dataclass


@dataclass(frozen=True)
class GetSubscriptionQuery:
    member_id: str

@dataclass(frozen=True)
class GetDependentSubscriptionQuery:
    dependent_id: str
