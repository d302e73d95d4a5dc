from __future__ import annotations

from django.db import IntegrityError, transaction
from django.db.models import Q

from convenio_core.adapters.repositories._helpers import get_or_none, paginate
from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.entities.user_entity import ROLES, UserEntity
from convenio_core.core.domain.exceptions import ConflictError, NotFoundError, ValidationError
from convenio_core.core.domain.repositories.user_repository import UserRepository
from plugins.django_interface.models import User as UserModel
from plugins.django_interface.models import UserRole as UserRoleModel

PROFILE_FIELDS = ("name", "email", "phone", "password_hash", "is_active")


class UserRepoImpl(UserRepository):
    def _qs(self):
        return UserModel.objects.prefetch_related("roles")

    def find_by_id(self, user_id: str) -> UserEntity | None:
        m = get_or_none(self._qs(), id=user_id)
        return UserEntity.from_model(m) if m else None

    def find_by_email(self, email: str) -> UserEntity | None:
        m = get_or_none(self._qs(), email__iexact=email)
        return UserEntity.from_model(m) if m else None

    def exists(self, *, email: str | None = None, cpf: str | None = None) -> bool:
        cond = Q(pk__in=[])
        if email:
            cond |= Q(email__iexact=email)
        if cpf:
            cond |= Q(cpf=cpf)
        return UserModel.objects.filter(cond).exists()

    @transaction.atomic
    def create(self, entity: UserEntity) -> UserEntity:
        try:
            with transaction.atomic():
                m = UserModel.objects.create(
                    id=entity.id,
                    name=entity.name,
                    cpf=entity.cpf,
                    email=entity.email.lower(),
                    phone=entity.phone,
                    password_hash=entity.password_hash or "",
                    is_active=entity.is_active,
                )
        except IntegrityError as exc:
            raise ConflictError("Já existe usuário com este e-mail ou CPF.", error="USER_EXISTS") from exc
        UserRoleModel.objects.bulk_create([UserRoleModel(user=m, role=r) for r in entity.roles])
        return self.find_by_id(m.id)

    def update(self, entity: UserEntity) -> UserEntity:
        m = get_or_none(UserModel.objects, id=entity.id)
        if m is None:
            raise NotFoundError("Usuário não encontrado.")
        for name in PROFILE_FIELDS:
            setattr(m, name, getattr(entity, name))
        try:
            with transaction.atomic():
                m.save(update_fields=[*PROFILE_FIELDS, "updated_at"])
        except IntegrityError as exc:
            raise ConflictError("Já existe usuário com este e-mail.", error="USER_EXISTS") from exc
        return self.find_by_id(m.id)

    def add_role(self, user_id: str, role: str) -> UserEntity:
        if role not in ROLES:
            raise ValidationError(f"Papel inválido: {role}.")
        if get_or_none(UserModel.objects, id=user_id) is None:
            raise NotFoundError("Usuário não encontrado.")
        UserRoleModel.objects.get_or_create(user_id=user_id, role=role)
        return self.find_by_id(user_id)

    def remove_role(self, user_id: str, role: str) -> UserEntity:
        if get_or_none(UserModel.objects, id=user_id) is None:
            raise NotFoundError("Usuário não encontrado.")
        UserRoleModel.objects.filter(user_id=user_id, role=role).delete()
        return self.find_by_id(user_id)

    def count_with_role(self, role: str) -> int:
        return UserRoleModel.objects.filter(role=role, user__is_active=True).count()

    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[UserEntity]:
        filtros = dict(filtros or {})
        qs = self._qs()
        role = filtros.pop("role", None)
        search = filtros.pop("search", None)
        if role:
            qs = qs.filter(roles__role=role)
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search) | Q(cpf__icontains=search))
        if filtros:
            qs = qs.filter(**filtros)
        return paginate(qs.distinct().order_by("name"), page, page_size, UserEntity.from_model)
