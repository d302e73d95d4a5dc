"""
Domínio → ORM do convênio.

⚑ Chaves únicas que sustentam a idempotência (pagamento, atribuição, comissão)
⚑ CHECKs para os estados de assinatura, comissão e paciente da consulta
⚑ Valores monetários sempre em DecimalField com duas casas
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import CheckConstraint, Index, Q, UniqueConstraint
from django.db.models.functions import Lower

MONEY = dict(max_digits=12, decimal_places=2)


class SubscriptionStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    ACTIVE = "active", "Ativa"
    EXPIRED = "expired", "Expirada"


class SubscriptionTarget(models.TextChoices):
    TITULAR = "titular", "Titular"
    DEPENDENTE = "dependente", "Dependente"


def subscription_state_check(name: str) -> CheckConstraint:
    """Validade ausente em `pending`, presente em `active`, preservada em `expired`."""
    return CheckConstraint(
        condition=(
            Q(subscription_status=SubscriptionStatus.PENDING, subscription_expiry__isnull=True)
            | Q(subscription_status=SubscriptionStatus.ACTIVE, subscription_expiry__isnull=False)
            | Q(subscription_status=SubscriptionStatus.EXPIRED)
        ),
        name=name,
    )


# ╭──────────────────────────────────────────────╮
# │ 1. Identidade / Papéis                      │
# ╰──────────────────────────────────────────────╯
class User(models.Model):
    """Usuário do sistema; quando tem papel `member`, é o titular da assinatura."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150)
    cpf = models.CharField(max_length=14, unique=True)
    email = models.EmailField(unique=True, max_length=128)
    phone = models.CharField(max_length=20, blank=True, null=True)
    password_hash = models.CharField(max_length=128)
    is_active = models.BooleanField(default=True, db_index=True)

    subscription_status = models.CharField(
        max_length=10,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.PENDING,
        db_index=True,
    )
    subscription_expiry = models.DateTimeField(blank=True, null=True)
    has_been_active = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users"
        constraints = [subscription_state_check("ck_user_subscription_state")]
        indexes = [
            Index(Lower("email"), name="user_email_lower_idx"),
            Index(fields=["subscription_status", "subscription_expiry"], name="user_subscription_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


class UserRole(models.Model):
    class Role(models.TextChoices):
        MEMBER = "member", "Titular"
        PROFESSIONAL = "professional", "Profissional"
        ADMIN = "admin", "Admin"
        AFFILIATE = "affiliate", "Afiliado"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="roles")
    role = models.CharField(max_length=20, choices=Role.choices, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "user_roles"
        constraints = [UniqueConstraint(fields=["user", "role"], name="uq_user_role")]

    def __str__(self) -> str:
        return f"{self.user_id}:{self.role}"


# ╭──────────────────────────────────────────────╮
# │ 2. Dependentes                              │
# ╰──────────────────────────────────────────────╯
class Dependent(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    member = models.ForeignKey(User, on_delete=models.PROTECT, related_name="dependents")
    name = models.CharField(max_length=150)
    cpf = models.CharField(max_length=14, unique=True)
    birth_date = models.DateField(blank=True, null=True)
    subscription_status = models.CharField(
        max_length=10,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.PENDING,
        db_index=True,
    )
    subscription_expiry = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "dependents"
        constraints = [subscription_state_check("ck_dependent_subscription_state")]

    def __str__(self) -> str:
        return self.name


# ╭──────────────────────────────────────────────╮
# │ 3. Profissionais & Catálogo                 │
# ╰──────────────────────────────────────────────╯
class Professional(models.Model):
    """Perfil 1-1 do usuário com papel `professional`."""

    user = models.OneToOneField(
        User, on_delete=models.PROTECT, primary_key=True, related_name="professional_profile"
    )
    category = models.CharField(max_length=100, blank=True, null=True)
    percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("50.00"))
    registration_number = models.CharField(max_length=30, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "professionals"
        constraints = [
            CheckConstraint(
                condition=Q(percentage__gte=0) & Q(percentage__lte=100),
                name="ck_professional_percentage_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user.name} ({self.percentage}%)"


class Service(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, null=True)
    base_price = models.DecimalField(**MONEY)
    category = models.CharField(max_length=100, blank=True, null=True)
    is_base_service = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "services"
        ordering = ["name"]
        constraints = [
            CheckConstraint(condition=Q(base_price__gte=0), name="ck_service_base_price_positive"),
        ]

    def __str__(self) -> str:
        return self.name


class AttendanceLocation(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    professional = models.ForeignKey(User, on_delete=models.CASCADE, related_name="attendance_locations")
    name = models.CharField(max_length=150)
    address = models.CharField(max_length=255)
    address_number = models.CharField(max_length=20, blank=True, null=True)
    address_complement = models.CharField(max_length=100, blank=True, null=True)
    neighborhood = models.CharField(max_length=100, blank=True, null=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    state = models.CharField(max_length=2, blank=True, null=True)
    zip_code = models.CharField(max_length=10, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "attendance_locations"
        constraints = [
            UniqueConstraint(
                fields=["professional"],
                condition=Q(is_default=True),
                name="uq_location_default_per_professional",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class PrivatePatient(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    professional = models.ForeignKey(User, on_delete=models.PROTECT, related_name="private_patients")
    name = models.CharField(max_length=150)
    cpf = models.CharField(max_length=14, blank=True, null=True)
    email = models.EmailField(max_length=128, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    birth_date = models.DateField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "private_patients"
        constraints = [
            UniqueConstraint(
                fields=["professional", "cpf"],
                condition=Q(cpf__isnull=False),
                name="uq_private_patient_cpf_per_professional",
            ),
        ]

    def __str__(self) -> str:
        return self.name


# ╭──────────────────────────────────────────────╮
# │ 4. Consultas                                │
# ╰──────────────────────────────────────────────╯
class Consultation(models.Model):
    class PatientKind(models.TextChoices):
        MEMBER = "member", "Titular"
        DEPENDENT = "dependent", "Dependente"
        PRIVATE = "private", "Particular"

    class Status(models.TextChoices):
        SCHEDULED = "scheduled", "Agendada"
        CONFIRMED = "confirmed", "Confirmada"
        COMPLETED = "completed", "Realizada"
        CANCELLED = "cancelled", "Cancelada"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    professional = models.ForeignKey(User, on_delete=models.PROTECT, related_name="consultations")
    patient_kind = models.CharField(max_length=10, choices=PatientKind.choices)
    member = models.ForeignKey(
        User, on_delete=models.PROTECT, blank=True, null=True, related_name="member_consultations"
    )
    dependent = models.ForeignKey(
        Dependent, on_delete=models.PROTECT, blank=True, null=True, related_name="consultations"
    )
    private_patient = models.ForeignKey(
        PrivatePatient, on_delete=models.PROTECT, blank=True, null=True, related_name="consultations"
    )
    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name="consultations")
    location = models.ForeignKey(
        AttendanceLocation, on_delete=models.SET_NULL, blank=True, null=True, related_name="consultations"
    )
    value = models.DecimalField(**MONEY)
    date = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.SCHEDULED, db_index=True)
    notes = models.TextField(blank=True, null=True)

    cancelled_at = models.DateTimeField(blank=True, null=True)
    cancelled_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, blank=True, null=True, related_name="+"
    )
    cancellation_reason = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "consultations"
        ordering = ["-date"]
        constraints = [
            CheckConstraint(
                condition=(
                    Q(patient_kind="member", member__isnull=False,
                      dependent__isnull=True, private_patient__isnull=True)
                    | Q(patient_kind="dependent", member__isnull=True,
                        dependent__isnull=False, private_patient__isnull=True)
                    | Q(patient_kind="private", member__isnull=True,
                        dependent__isnull=True, private_patient__isnull=False)
                ),
                name="ck_consultation_single_patient",
            ),
            CheckConstraint(condition=Q(value__gte=0), name="ck_consultation_value_positive"),
        ]
        indexes = [
            Index(fields=["professional", "date"], name="consultation_prof_date_idx"),
            Index(fields=["status", "date"], name="consultation_status_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.patient_kind} {self.date:%Y-%m-%d} {self.value}"


# ╭──────────────────────────────────────────────╮
# │ 5. Cupons & Pagamentos de Assinatura        │
# ╰──────────────────────────────────────────────╯
class Coupon(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=50)
    target = models.CharField(max_length=10, choices=SubscriptionTarget.choices)
    final_price = models.DecimalField(**MONEY)
    discount_value = models.DecimalField(**MONEY)
    valid_from = models.DateTimeField(blank=True, null=True)
    valid_until = models.DateTimeField(blank=True, null=True)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, blank=True, null=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "coupons"
        ordering = ["-created_at"]
        constraints = [
            UniqueConstraint(Lower("code"), name="uq_coupon_code_lower"),
            CheckConstraint(condition=Q(final_price__gte=0), name="ck_coupon_final_price_positive"),
            CheckConstraint(condition=Q(discount_value__gte=0), name="ck_coupon_discount_positive"),
            CheckConstraint(
                condition=Q(valid_from__isnull=True) | Q(valid_until__isnull=True)
                | Q(valid_until__gte=models.F("valid_from")),
                name="ck_coupon_window_order",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} ({self.target})"


class SubscriptionPayment(models.Model):
    """Confirmações de pagamento já processadas; a referência externa é a chave de idempotência."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    payment_reference = models.CharField(max_length=120, unique=True)
    target = models.CharField(max_length=10, choices=SubscriptionTarget.choices)
    member = models.ForeignKey(User, on_delete=models.PROTECT, related_name="subscription_payments")
    dependent = models.ForeignKey(
        Dependent, on_delete=models.PROTECT, blank=True, null=True, related_name="subscription_payments"
    )
    amount_paid = models.DecimalField(**MONEY)
    coupon_code = models.CharField(max_length=50, blank=True, null=True)
    expires_at = models.DateTimeField()
    processed_at = models.DateTimeField()

    class Meta:
        db_table = "subscription_payments"
        indexes = [Index(fields=["member", "processed_at"], name="sub_payment_member_idx")]

    def __str__(self) -> str:
        return self.payment_reference


# ╭──────────────────────────────────────────────╮
# │ 6. Acesso à Agenda                          │
# ╰──────────────────────────────────────────────╯
class SchedulingAccess(models.Model):
    professional = models.OneToOneField(
        User, on_delete=models.CASCADE, primary_key=True, related_name="scheduling_access"
    )
    has_access = models.BooleanField(default=False)
    expires_at = models.DateTimeField(blank=True, null=True)
    granted_by = models.ForeignKey(User, on_delete=models.SET_NULL, blank=True, null=True, related_name="+")
    granted_at = models.DateTimeField(blank=True, null=True)
    reason = models.TextField(blank=True, null=True)
    revoked_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "scheduling_access"
        constraints = [
            CheckConstraint(
                condition=Q(has_access=False) | Q(expires_at__isnull=False),
                name="ck_scheduling_access_expiry",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.professional_id} access={self.has_access}"


# ╭──────────────────────────────────────────────╮
# │ 7. Afiliados & Rastreamento                 │
# ╰──────────────────────────────────────────────╯
class Affiliate(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "active", "Ativo"
        INACTIVE = "inactive", "Inativo"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.PROTECT, related_name="affiliate")
    referral_code = models.CharField(max_length=50)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE, db_index=True)
    commission_amount = models.DecimalField(**MONEY, default=Decimal("10.00"))
    pix_key = models.CharField(max_length=140, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "affiliates"
        constraints = [
            UniqueConstraint(Lower("referral_code"), name="uq_affiliate_referral_code_lower"),
            CheckConstraint(condition=Q(commission_amount__gte=0), name="ck_affiliate_commission_positive"),
        ]

    def __str__(self) -> str:
        return self.referral_code


class ReferralEvent(models.Model):
    class Stage(models.TextChoices):
        CLICK = "click", "Clique"
        REGISTRATION = "registration", "Cadastro"
        CONVERSION = "conversion", "Conversão"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    affiliate = models.ForeignKey(Affiliate, on_delete=models.PROTECT, related_name="referral_events")
    visitor_identifier = models.CharField(max_length=128, db_index=True)
    stage = models.CharField(max_length=12, choices=Stage.choices)
    linked_user = models.ForeignKey(
        User, on_delete=models.PROTECT, blank=True, null=True, related_name="referral_events"
    )
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(db_index=True)

    class Meta:
        db_table = "referral_events"
        constraints = [
            UniqueConstraint(
                fields=["visitor_identifier"],
                condition=Q(stage="registration"),
                name="uq_referral_registration_per_visitor",
            ),
            UniqueConstraint(
                fields=["linked_user"],
                condition=Q(stage="conversion"),
                name="uq_referral_conversion_per_user",
            ),
        ]
        indexes = [
            Index(fields=["affiliate", "stage", "created_at"], name="referral_aff_stage_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.stage}:{self.visitor_identifier}"


class ReferredUser(models.Model):
    """Atribuição por usuário: escrita uma única vez."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.PROTECT, related_name="referral_attribution")
    affiliate = models.ForeignKey(Affiliate, on_delete=models.PROTECT, related_name="referred_users")
    registration_event = models.ForeignKey(
        ReferralEvent, on_delete=models.SET_NULL, blank=True, null=True, related_name="+"
    )
    attributed_at = models.DateTimeField()

    class Meta:
        db_table = "referred_users"

    def __str__(self) -> str:
        return f"{self.user_id} → {self.affiliate_id}"


# ╭──────────────────────────────────────────────╮
# │ 8. Comissões                                │
# ╰──────────────────────────────────────────────╯
class Commission(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pendente"
        PAID = "paid", "Paga"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    affiliate = models.ForeignKey(Affiliate, on_delete=models.PROTECT, related_name="commissions")
    source_user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="generated_commissions")
    amount = models.DecimalField(**MONEY)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True)
    created_at = models.DateTimeField(db_index=True)
    paid_at = models.DateTimeField(blank=True, null=True)
    paid_by = models.ForeignKey(User, on_delete=models.PROTECT, blank=True, null=True, related_name="+")
    paid_method = models.CharField(max_length=50, blank=True, null=True)
    receipt_reference = models.CharField(max_length=500, blank=True, null=True)
    external_payment_reference = models.CharField(max_length=120, blank=True, null=True)

    class Meta:
        db_table = "commissions"
        ordering = ["-created_at"]
        constraints = [
            UniqueConstraint(fields=["affiliate", "source_user"], name="uq_commission_affiliate_source"),
            UniqueConstraint(fields=["source_user"], name="uq_commission_per_member"),
            CheckConstraint(condition=Q(amount__gte=0), name="ck_commission_amount_positive"),
            CheckConstraint(
                condition=(
                    Q(status="paid", paid_at__isnull=False, paid_method__isnull=False)
                    | Q(status="pending", paid_at__isnull=True, paid_by__isnull=True,
                        paid_method__isnull=True, receipt_reference__isnull=True)
                ),
                name="ck_commission_paid_fields",
            ),
        ]
        indexes = [
            Index(fields=["status", "paid_at"], name="commission_status_paid_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.affiliate_id}/{self.source_user_id} {self.amount} {self.status}"
