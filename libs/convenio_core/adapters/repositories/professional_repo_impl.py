from __future__ import annotations

from decimal import Decimal

from django.db.models import Q

from convenio_core.adapters.repositories._helpers import get_or_none, paginate
from convenio_core.core.application.cqrs import PagedResult
from convenio_core.core.domain.entities.professional_entity import ProfessionalEntity
from convenio_core.core.domain.exceptions import NotFoundError
from convenio_core.core.domain.repositories.professional_repository import ProfessionalRepository
from plugins.django_interface.models import Professional as ProfessionalModel

PROFILE_FIELDS = ("category", "percentage", "registration_number")


class ProfessionalRepoImpl(ProfessionalRepository):
    def _qs(self):
        return ProfessionalModel.objects.select_related("user").filter(user__roles__role="professional")

    def find_by_id(self, professional_id: str) -> ProfessionalEntity | None:
        m = get_or_none(self._qs(), user_id=professional_id)
        return ProfessionalEntity.from_model(m) if m else None

    def create_profile(
        self, user_id: str, *, category: str | None, percentage: Decimal, registration_number: str | None
    ) -> ProfessionalEntity:
        m, _ = ProfessionalModel.objects.update_or_create(
            user_id=user_id,
            defaults=dict(category=category, percentage=percentage, registration_number=registration_number),
        )
        return ProfessionalEntity.from_model(ProfessionalModel.objects.select_related("user").get(pk=m.pk))

    def update_profile(self, professional_id: str, changes: dict) -> ProfessionalEntity:
        m = get_or_none(self._qs(), user_id=professional_id)
        if m is None:
            raise NotFoundError("Profissional não encontrado.")
        fields = [k for k in PROFILE_FIELDS if k in changes]
        for k in fields:
            setattr(m, k, changes[k])
        if fields:
            m.save(update_fields=[*fields, "updated_at"])
        return ProfessionalEntity.from_model(m)

    def list(self, filtros: dict, page: int, page_size: int) -> PagedResult[ProfessionalEntity]:
        filtros = dict(filtros or {})
        qs = self._qs()
        search = filtros.pop("search", None)
        category = filtros.pop("category", None)
        if search:
            qs = qs.filter(Q(user__name__icontains=search) | Q(user__email__icontains=search))
        if category:
            qs = qs.filter(category__iexact=category)
        return paginate(qs.order_by("user__name"), page, page_size, ProfessionalEntity.from_model)
