from __future__ import annotations

from django.db import IntegrityError, transaction

from convenio_core.adapters.repositories._helpers import get_or_none
from convenio_core.core.domain.entities.dependent_entity import DependentEntity
from convenio_core.core.domain.exceptions import ConflictError
from convenio_core.core.domain.repositories.dependent_repository import DependentRepository
from plugins.django_interface.models import Dependent as DependentModel
from plugins.django_interface.models import User as UserModel

EDITABLE = ("name", "cpf", "birth_date")


class DependentRepoImpl(DependentRepository):
    def find_by_id(self, dependent_id: str) -> DependentEntity | None:
        m = get_or_none(DependentModel.objects, id=dependent_id)
        return DependentEntity.from_model(m) if m else None

    def list_by_member(self, member_id: str) -> list[DependentEntity]:
        qs = DependentModel.objects.filter(member_id=member_id).order_by("name")
        return [DependentEntity.from_model(m) for m in qs]

    def count_by_member(self, member_id: str, *, lock: bool = False) -> int:
        if lock:
            # trava o titular para serializar inserções concorrentes
            list(UserModel.objects.select_for_update().filter(id=member_id).values_list("id", flat=True))
        return DependentModel.objects.filter(member_id=member_id).count()

    def save(self, entity: DependentEntity) -> DependentEntity:
        try:
            with transaction.atomic():
                m, _ = DependentModel.objects.update_or_create(
                    id=entity.id,
                    defaults=dict(
                        member_id=entity.member_id,
                        **{k: getattr(entity, k) for k in EDITABLE},
                    ),
                )
        except IntegrityError as exc:
            raise ConflictError("Já existe dependente com este CPF.", error="DEPENDENT_CPF_EXISTS") from exc
        return DependentEntity.from_model(m)

    def delete(self, dependent_id: str) -> None:
        DependentModel.objects.filter(id=dependent_id).delete()
