"""
Admin site registry
-------------------
Registra todos os modelos de forma dinâmica. Comissões pagas ficam
somente leitura (o sinal `freeze_paid_commission` barra a edição).
"""

import structlog
from django.contrib import admin as django_admin

from . import models

logger = structlog.get_logger(__name__)

# ╭──────────────────────────────────────────────╮
# │ Configuração de cada ModelAdmin             │
# ╰──────────────────────────────────────────────╯
MODEL_ADMIN_REGISTRY: dict[type[models.models.Model], dict] = {
    # 1. Identidade
    models.User: dict(
        list_display=("email", "name", "subscription_status", "subscription_expiry", "is_active"),
        search_fields=("email", "name", "cpf"),
        list_filter=("subscription_status", "is_active"),
        exclude=("password_hash",),
    ),
    models.UserRole: dict(
        list_display=("user", "role", "created_at"),
        list_filter=("role",),
    ),
    models.Dependent: dict(
        list_display=("name", "cpf", "member", "subscription_status", "subscription_expiry"),
        list_filter=("subscription_status",),
        search_fields=("name", "cpf"),
    ),
    # 2. Assinaturas & cupons
    models.Coupon: dict(
        list_display=("code", "target", "final_price", "discount_value", "is_active", "valid_until"),
        list_filter=("target", "is_active"),
        search_fields=("code",),
    ),
    models.SubscriptionPayment: dict(
        list_display=("payment_reference", "target", "member", "amount_paid", "coupon_code", "processed_at"),
        list_filter=("target",),
        search_fields=("payment_reference",),
    ),
    # 3. Profissionais & catálogo
    models.Professional: dict(
        list_display=("user", "category", "percentage"),
        search_fields=("user__name", "user__email"),
    ),
    models.SchedulingAccess: dict(
        list_display=("professional", "has_access", "expires_at", "revoked_at"),
        list_filter=("has_access",),
    ),
    models.Service: dict(
        list_display=("name", "base_price", "category", "is_base_service"),
        search_fields=("name",),
    ),
    models.AttendanceLocation: dict(
        list_display=("name", "professional", "city", "is_default"),
        list_filter=("is_default",),
    ),
    models.PrivatePatient: dict(
        list_display=("name", "cpf", "professional"),
        search_fields=("name", "cpf"),
    ),
    models.Consultation: dict(
        list_display=("date", "professional", "patient_kind", "service", "value", "status"),
        list_filter=("status", "patient_kind"),
    ),
    # 4. Afiliados
    models.Affiliate: dict(
        list_display=("referral_code", "user", "status", "commission_amount"),
        list_filter=("status",),
        search_fields=("referral_code", "user__email"),
    ),
    models.ReferralEvent: dict(
        list_display=("affiliate", "stage", "visitor_identifier", "linked_user", "created_at"),
        list_filter=("stage",),
        search_fields=("visitor_identifier",),
    ),
    models.ReferredUser: dict(
        list_display=("user", "affiliate", "attributed_at"),
    ),
    models.Commission: dict(
        list_display=("affiliate", "source_user", "amount", "status", "created_at", "paid_at"),
        list_filter=("status",),
        readonly_fields=("affiliate", "source_user", "amount", "created_at"),
    ),
}

# ╭──────────────────────────────────────────────╮
# │ Registro dinâmico                           │
# ╰──────────────────────────────────────────────╯
for model, opts in MODEL_ADMIN_REGISTRY.items():
    admin_class = type(f"{model.__name__}Admin", (django_admin.ModelAdmin,), opts)
    django_admin.site.register(model, admin_class)
    logger.debug("Registered model in admin", model=model.__name__)
