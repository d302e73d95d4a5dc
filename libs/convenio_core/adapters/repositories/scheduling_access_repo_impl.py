from __future__ import annotations

from convenio_core.adapters.repositories._helpers import get_or_none
from convenio_core.core.domain.entities.scheduling_access_entity import SchedulingAccessEntity
from convenio_core.core.domain.repositories.scheduling_access_repository import SchedulingAccessRepository
from plugins.django_interface.models import SchedulingAccess as SchedulingAccessModel
from plugins.django_interface.models import User as UserModel


class SchedulingAccessRepoImpl(SchedulingAccessRepository):
    def find(self, professional_id: str, *, for_update: bool = False) -> SchedulingAccessEntity | None:
        qs = SchedulingAccessModel.objects.select_for_update() if for_update else SchedulingAccessModel.objects
        m = get_or_none(qs, professional_id=professional_id)
        return SchedulingAccessEntity.from_model(m) if m else None

    def save(self, entity: SchedulingAccessEntity) -> SchedulingAccessEntity:
        data = entity.to_dict()
        professional_id = data.pop("professional_id")
        m, _ = SchedulingAccessModel.objects.update_or_create(professional_id=professional_id, defaults=data)
        return SchedulingAccessEntity.from_model(m)

    def list_professionals(self) -> list[tuple[dict, SchedulingAccessEntity | None]]:
        users = (
            UserModel.objects.filter(roles__role="professional")
            .select_related("scheduling_access", "professional_profile")
            .order_by("name")
        )
        rows: list[tuple[dict, SchedulingAccessEntity | None]] = []
        for u in users:
            access = getattr(u, "scheduling_access", None)
            profile = getattr(u, "professional_profile", None)
            info = {
                "id": u.id,
                "name": u.name,
                "email": u.email,
                "category": profile.category if profile else None,
            }
            rows.append((info, SchedulingAccessEntity.from_model(access) if access else None))
        return rows
