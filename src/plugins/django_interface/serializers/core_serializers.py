# =========================================================
# Serializers de saída compatíveis com as *entities* do core
# (dataclasses), não com os modelos Django.
# =========================================================
from rest_framework import serializers


# ───────────────────────────────────────────────
# Usuários & papéis
# ───────────────────────────────────────────────
class UserSerializer(serializers.Serializer):
    id         = serializers.UUIDField()
    name       = serializers.CharField()
    cpf        = serializers.CharField()
    email      = serializers.EmailField()
    phone      = serializers.CharField(allow_null=True)
    is_active  = serializers.BooleanField()
    roles      = serializers.ListField(child=serializers.CharField())
    created_at = serializers.DateTimeField(allow_null=True)


class SubscriptionSerializer(serializers.Serializer):
    subject_id      = serializers.UUIDField()
    status          = serializers.CharField()
    expires_at      = serializers.DateTimeField(allow_null=True)
    has_been_active = serializers.BooleanField()
    member_id       = serializers.UUIDField(allow_null=True)


class DependentSerializer(serializers.Serializer):
    id                  = serializers.UUIDField()
    member_id           = serializers.UUIDField()
    name                = serializers.CharField()
    cpf                 = serializers.CharField()
    birth_date          = serializers.DateField(allow_null=True)
    subscription_status = serializers.CharField()
    subscription_expiry = serializers.DateTimeField(allow_null=True)
    created_at          = serializers.DateTimeField(allow_null=True)


# ───────────────────────────────────────────────
# Cupons
# ───────────────────────────────────────────────
class CouponSerializer(serializers.Serializer):
    id             = serializers.UUIDField()
    code           = serializers.CharField()
    target         = serializers.CharField()
    final_price    = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    valid_from     = serializers.DateTimeField(allow_null=True)
    valid_until    = serializers.DateTimeField(allow_null=True)
    description    = serializers.CharField(allow_blank=True)
    is_active      = serializers.BooleanField()
    created_at     = serializers.DateTimeField(allow_null=True)


class CouponQuoteSerializer(serializers.Serializer):
    code           = serializers.CharField()
    target         = serializers.CharField()
    final_price    = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2)


# ───────────────────────────────────────────────
# Profissionais, catálogo e agenda
# ───────────────────────────────────────────────
class ProfessionalSerializer(serializers.Serializer):
    id                  = serializers.UUIDField()
    name                = serializers.CharField()
    email               = serializers.EmailField()
    phone               = serializers.CharField(allow_null=True)
    category            = serializers.CharField(allow_null=True)
    percentage          = serializers.DecimalField(max_digits=5, decimal_places=2)
    registration_number = serializers.CharField(allow_null=True)
    is_active           = serializers.BooleanField()


class ServiceSerializer(serializers.Serializer):
    id              = serializers.UUIDField()
    name            = serializers.CharField()
    description     = serializers.CharField(allow_null=True, allow_blank=True)
    base_price      = serializers.DecimalField(max_digits=12, decimal_places=2)
    category        = serializers.CharField(allow_null=True)
    is_base_service = serializers.BooleanField()


class AttendanceLocationSerializer(serializers.Serializer):
    id                 = serializers.UUIDField()
    professional_id    = serializers.UUIDField()
    name               = serializers.CharField()
    address            = serializers.CharField()
    address_number     = serializers.CharField(allow_null=True)
    address_complement = serializers.CharField(allow_null=True)
    neighborhood       = serializers.CharField(allow_null=True)
    city               = serializers.CharField(allow_null=True)
    state              = serializers.CharField(allow_null=True)
    zip_code           = serializers.CharField(allow_null=True)
    phone              = serializers.CharField(allow_null=True)
    is_default         = serializers.BooleanField()


class PrivatePatientSerializer(serializers.Serializer):
    id              = serializers.UUIDField()
    professional_id = serializers.UUIDField()
    name            = serializers.CharField()
    cpf             = serializers.CharField(allow_null=True)
    email           = serializers.CharField(allow_null=True)
    phone           = serializers.CharField(allow_null=True)
    birth_date      = serializers.DateField(allow_null=True)
    notes           = serializers.CharField(allow_null=True)


class SchedulingAccessSerializer(serializers.Serializer):
    professional_id = serializers.UUIDField()
    state           = serializers.CharField()
    has_access      = serializers.BooleanField()
    expires_at      = serializers.DateTimeField(allow_null=True)
    days_remaining  = serializers.IntegerField(allow_null=True)
    granted_by_id   = serializers.UUIDField(allow_null=True)
    granted_at      = serializers.DateTimeField(allow_null=True)
    reason          = serializers.CharField(allow_null=True)
    revoked_at      = serializers.DateTimeField(allow_null=True)


# ───────────────────────────────────────────────
# Consultas & relatórios
# ───────────────────────────────────────────────
class ConsultationSerializer(serializers.Serializer):
    id                  = serializers.UUIDField()
    professional_id     = serializers.UUIDField()
    professional_name   = serializers.CharField(allow_null=True)
    patient_kind        = serializers.CharField(source="patient.kind")
    patient_id          = serializers.UUIDField(source="patient.id")
    patient_name        = serializers.CharField(allow_null=True)
    service_id          = serializers.UUIDField()
    service_name        = serializers.CharField(allow_null=True)
    location_id         = serializers.UUIDField(allow_null=True)
    value               = serializers.DecimalField(max_digits=12, decimal_places=2)
    date                = serializers.DateTimeField()
    status              = serializers.CharField()
    notes               = serializers.CharField(allow_null=True)
    cancelled_at        = serializers.DateTimeField(allow_null=True)
    cancelled_by_id     = serializers.UUIDField(allow_null=True)
    cancelled_by_name   = serializers.CharField(allow_null=True)
    cancellation_reason = serializers.CharField(allow_null=True)


class ProfessionalRevenueRowSerializer(serializers.Serializer):
    professional_id      = serializers.UUIDField()
    professional_name    = serializers.CharField()
    percentage           = serializers.DecimalField(max_digits=5, decimal_places=2)
    consultations_count  = serializers.IntegerField()
    convenio_count       = serializers.IntegerField()
    private_count        = serializers.IntegerField()
    revenue              = serializers.DecimalField(max_digits=14, decimal_places=2)
    professional_payment = serializers.DecimalField(max_digits=14, decimal_places=2)
    clinic_revenue       = serializers.DecimalField(max_digits=14, decimal_places=2)


class ServiceRevenueRowSerializer(serializers.Serializer):
    service_id          = serializers.UUIDField()
    service_name        = serializers.CharField()
    consultations_count = serializers.IntegerField()
    revenue             = serializers.DecimalField(max_digits=14, decimal_places=2)


class RevenueReportSerializer(serializers.Serializer):
    start                      = serializers.DateTimeField()
    end                        = serializers.DateTimeField()
    consultations_count        = serializers.IntegerField()
    total_revenue              = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_professional_payment = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_clinic_revenue       = serializers.DecimalField(max_digits=14, decimal_places=2)
    revenue_by_professional    = ProfessionalRevenueRowSerializer(many=True)
    revenue_by_service         = ServiceRevenueRowSerializer(many=True)


class SplitRowSerializer(serializers.Serializer):
    consultation_id      = serializers.UUIDField(source="row.consultation_id")
    date                 = serializers.DateTimeField(source="row.date")
    service_name         = serializers.CharField(source="row.service_name")
    patient_name         = serializers.CharField(source="row.patient_name", allow_null=True)
    patient_type         = serializers.CharField()
    value                = serializers.DecimalField(source="row.value", max_digits=12, decimal_places=2)
    professional_payment = serializers.DecimalField(max_digits=12, decimal_places=2)
    clinic_revenue       = serializers.DecimalField(max_digits=12, decimal_places=2)


class ProfessionalRevenueSummarySerializer(serializers.Serializer):
    total_consultations    = serializers.IntegerField()
    convenio_consultations = serializers.IntegerField()
    private_consultations  = serializers.IntegerField()
    total_revenue          = serializers.DecimalField(max_digits=14, decimal_places=2)
    convenio_revenue       = serializers.DecimalField(max_digits=14, decimal_places=2)
    private_revenue        = serializers.DecimalField(max_digits=14, decimal_places=2)
    professional_payment   = serializers.DecimalField(max_digits=14, decimal_places=2)
    clinic_revenue         = serializers.DecimalField(max_digits=14, decimal_places=2)


class ProfessionalRevenueReportSerializer(serializers.Serializer):
    professional_id = serializers.UUIDField()
    percentage      = serializers.DecimalField(max_digits=5, decimal_places=2)
    start           = serializers.DateTimeField()
    end             = serializers.DateTimeField()
    summary         = ProfessionalRevenueSummarySerializer()
    consultations   = SplitRowSerializer(many=True)
