from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

from convenio_core.core.domain.entities._base import EntityMixin

ROLES = frozenset({"member", "professional", "admin", "affiliate"})


@dataclass(slots=True)
class UserEntity(EntityMixin):
    id: uuid.UUID
    name: str
    cpf: str
    email: str
    phone: str | None = None
    password_hash: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    roles: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        invalid = set(self.roles) - ROLES
        if invalid:
            raise ValueError(f"Papéis inválidos: {sorted(invalid)}")

    @classmethod
    def from_model(cls, model: Any) -> UserEntity:
        data = {f.name: getattr(model, f.name) for f in fields(cls) if f.name != "roles"}
        data["roles"] = tuple(sorted(r.role for r in model.roles.all()))
        return cls(**data)

    def has_role(self, *roles: str) -> bool:
        return bool(set(roles) & set(self.roles))

    @property
    def is_authenticated(self) -> bool:
        return self.is_active
