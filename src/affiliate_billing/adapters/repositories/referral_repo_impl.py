from __future__ import annotations

from datetime import datetime

from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from affiliate_billing.core.domain.entities.referral_entity import ReferralEventEntity, ReferredUserEntity
from affiliate_billing.core.domain.repositories.referral_repository import ReferralRepository
from plugins.django_interface.models import ReferralEvent as ReferralEventModel
from plugins.django_interface.models import ReferredUser as ReferredUserModel

Stage = ReferralEventModel.Stage


class ReferralRepoImpl(ReferralRepository):
    # ——— eventos ———
    def find_click(self, affiliate_id, visitor_identifier: str, since: datetime, until: datetime) -> ReferralEventEntity | None:
        m = (
            ReferralEventModel.objects
            .filter(
                affiliate_id=affiliate_id,
                visitor_identifier=visitor_identifier,
                stage=Stage.CLICK,
                created_at__gte=since,
                created_at__lt=until,
            )
            .order_by("created_at")
            .first()
        )
        return ReferralEventEntity.from_model(m) if m else None

    def earliest_click(self, visitor_identifier: str) -> ReferralEventEntity | None:
        m = (
            ReferralEventModel.objects
            .filter(visitor_identifier=visitor_identifier, stage=Stage.CLICK)
            .order_by("created_at", "id")
            .first()
        )
        return ReferralEventEntity.from_model(m) if m else None

    def find_event(self, event_id) -> ReferralEventEntity | None:
        if event_id is None:
            return None
        m = ReferralEventModel.objects.filter(id=event_id).first()
        return ReferralEventEntity.from_model(m) if m else None

    def add_click(self, entity: ReferralEventEntity) -> ReferralEventEntity:
        m = ReferralEventModel.objects.create(**entity.to_dict())
        return ReferralEventEntity.from_model(m)

    def merge_click_metadata(self, event_id, metadata: dict) -> ReferralEventEntity:
        m = ReferralEventModel.objects.select_for_update().get(id=event_id)
        merged = {**(m.metadata or {}), **(metadata or {})}
        merged["hits"] = int((m.metadata or {}).get("hits", 1)) + 1
        m.metadata = merged
        m.save(update_fields=["metadata"])
        return ReferralEventEntity.from_model(m)

    def add_milestone(self, entity: ReferralEventEntity) -> tuple[ReferralEventEntity, bool]:
        try:
            with transaction.atomic():
                m = ReferralEventModel.objects.create(**entity.to_dict())
            return ReferralEventEntity.from_model(m), True
        except IntegrityError:
            qs = ReferralEventModel.objects.filter(stage=entity.stage)
            if entity.stage == Stage.CONVERSION:
                qs = qs.filter(linked_user_id=entity.linked_user_id)
            else:
                qs = qs.filter(visitor_identifier=entity.visitor_identifier)
            existing = qs.first()
            if existing is None:
                raise
            return ReferralEventEntity.from_model(existing), False

    # ——— atribuição ———
    def find_attribution(self, user_id) -> ReferredUserEntity | None:
        m = ReferredUserModel.objects.filter(user_id=user_id).first()
        return ReferredUserEntity.from_model(m) if m else None

    def attribute(self, entity: ReferredUserEntity) -> tuple[ReferredUserEntity, bool]:
        try:
            with transaction.atomic():
                m = ReferredUserModel.objects.create(**entity.to_dict())
            return ReferredUserEntity.from_model(m), True
        except IntegrityError:
            existing = ReferredUserModel.objects.filter(user_id=entity.user_id).first()
            if existing is None:
                raise
            return ReferredUserEntity.from_model(existing), False

    # ——— leituras ———
    def stage_counts(self, affiliate_id, start: datetime | None = None, end: datetime | None = None) -> dict[str, int]:
        qs = ReferralEventModel.objects.filter(affiliate_id=affiliate_id)
        if start is not None:
            qs = qs.filter(created_at__gte=start)
        if end is not None:
            qs = qs.filter(created_at__lt=end)
        return qs.aggregate(
            clicks=Count("id", filter=Q(stage=Stage.CLICK)),
            registrations=Count("id", filter=Q(stage=Stage.REGISTRATION)),
            conversions=Count("id", filter=Q(stage=Stage.CONVERSION)),
        )

    def referred_users(self, affiliate_id) -> list[dict]:
        rows = (
            ReferredUserModel.objects
            .filter(affiliate_id=affiliate_id)
            .select_related("user")
            .order_by("-attributed_at")
        )
        converted = set(
            ReferralEventModel.objects
            .filter(affiliate_id=affiliate_id, stage=Stage.CONVERSION)
            .values_list("linked_user_id", flat=True)
        )
        return [
            {
                "user_id": r.user_id,
                "name": r.user.name,
                "email": r.user.email,
                "subscription_status": r.user.subscription_status,
                "subscription_expiry": r.user.subscription_expiry,
                "attributed_at": r.attributed_at,
                "converted": r.user_id in converted,
            }
            for r in rows
        ]

    def referred_counts(self) -> dict:
        return {
            row["affiliate_id"]: row["n"]
            for row in ReferredUserModel.objects.values("affiliate_id").annotate(n=Count("id"))
        }
