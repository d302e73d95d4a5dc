from __future__ import annotations

from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from convenio_core.adapters.repositories._helpers import get_or_none
from convenio_core.core.domain.entities.subscription_entity import (
    SubscriptionEntity,
    SubscriptionPaymentEntity,
)
from convenio_core.core.domain.exceptions import ConflictError
from convenio_core.core.domain.repositories.subscription_repository import SubscriptionRepository
from plugins.django_interface.models import Dependent as DependentModel
from plugins.django_interface.models import SubscriptionPayment as SubscriptionPaymentModel
from plugins.django_interface.models import SubscriptionStatus
from plugins.django_interface.models import User as UserModel


class SubscriptionRepoImpl(SubscriptionRepository):
    """Implementação Django do motor de assinaturas."""

    # ────────────────────────────────── #
    # Titulares
    # ────────────────────────────────── #
    def get_member(self, member_id: str, *, for_update: bool = False) -> SubscriptionEntity | None:
        qs = UserModel.objects.filter(roles__role="member")
        if for_update:
            qs = qs.select_for_update()
        m = get_or_none(qs, id=member_id)
        return SubscriptionEntity.from_member_model(m) if m else None

    def save_member(self, entity: SubscriptionEntity) -> SubscriptionEntity:
        UserModel.objects.filter(id=entity.subject_id).update(
            subscription_status=entity.status,
            subscription_expiry=entity.expires_at,
            has_been_active=entity.has_been_active,
            updated_at=timezone.now(),
        )
        return self.get_member(entity.subject_id)

    # ────────────────────────────────── #
    # Dependentes
    # ────────────────────────────────── #
    def get_dependent(self, dependent_id: str, *, for_update: bool = False) -> SubscriptionEntity | None:
        qs = DependentModel.objects.select_for_update() if for_update else DependentModel.objects
        m = get_or_none(qs, id=dependent_id)
        return SubscriptionEntity.from_dependent_model(m) if m else None

    def save_dependent(self, entity: SubscriptionEntity) -> SubscriptionEntity:
        DependentModel.objects.filter(id=entity.subject_id).update(
            subscription_status=entity.status,
            subscription_expiry=entity.expires_at,
            updated_at=timezone.now(),
        )
        return self.get_dependent(entity.subject_id)

    # ────────────────────────────────── #
    # Pagamentos processados
    # ────────────────────────────────── #
    def find_payment(self, payment_reference: str) -> SubscriptionPaymentEntity | None:
        m = get_or_none(SubscriptionPaymentModel.objects, payment_reference=payment_reference)
        return SubscriptionPaymentEntity.from_model(m) if m else None

    def record_payment(self, payment: SubscriptionPaymentEntity) -> SubscriptionPaymentEntity:
        try:
            with transaction.atomic():
                m = SubscriptionPaymentModel.objects.create(**payment.to_dict())
        except IntegrityError as exc:
            raise ConflictError(
                "Pagamento já processado por outra requisição.", error="PAYMENT_REFERENCE_TAKEN"
            ) from exc
        return SubscriptionPaymentEntity.from_model(m)

    # ────────────────────────────────── #
    # Varredura de expiração
    # ────────────────────────────────── #
    def expire_due(self, now: datetime) -> tuple[int, int]:
        members = UserModel.objects.filter(
            subscription_status=SubscriptionStatus.ACTIVE,
            subscription_expiry__lt=now,
        ).update(subscription_status=SubscriptionStatus.EXPIRED, updated_at=now)
        dependents = DependentModel.objects.filter(
            subscription_status=SubscriptionStatus.ACTIVE,
            subscription_expiry__lt=now,
        ).update(subscription_status=SubscriptionStatus.EXPIRED, updated_at=now)
        return members, dependents
