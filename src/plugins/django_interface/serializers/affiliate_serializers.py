from rest_framework import serializers


class AffiliateSerializer(serializers.Serializer):
    id                = serializers.UUIDField()
    user_id           = serializers.UUIDField()
    user_name         = serializers.CharField(allow_null=True)
    user_email        = serializers.CharField(allow_null=True)
    referral_code     = serializers.CharField()
    status            = serializers.CharField()
    commission_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    pix_key           = serializers.CharField(allow_null=True)
    created_at        = serializers.DateTimeField(allow_null=True)


class AffiliateListItemSerializer(serializers.Serializer):
    affiliate     = AffiliateSerializer()
    clients_count = serializers.IntegerField()
    pending_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_total    = serializers.DecimalField(max_digits=14, decimal_places=2)
    count         = serializers.IntegerField()


class CommissionSerializer(serializers.Serializer):
    id                         = serializers.UUIDField()
    affiliate_id               = serializers.UUIDField()
    source_user_id             = serializers.UUIDField()
    source_user_name           = serializers.CharField(allow_null=True)
    amount                     = serializers.DecimalField(max_digits=12, decimal_places=2)
    status                     = serializers.CharField()
    created_at                 = serializers.DateTimeField()
    paid_at                    = serializers.DateTimeField(allow_null=True)
    paid_by_id                 = serializers.UUIDField(allow_null=True)
    paid_method                = serializers.CharField(allow_null=True)
    receipt_reference          = serializers.CharField(allow_null=True)
    external_payment_reference = serializers.CharField(allow_null=True)


class ReferredUserSerializer(serializers.Serializer):
    user_id             = serializers.UUIDField()
    name                = serializers.CharField()
    email               = serializers.CharField()
    subscription_status = serializers.CharField()
    subscription_expiry = serializers.DateTimeField(allow_null=True)
    attributed_at       = serializers.DateTimeField()
    converted           = serializers.BooleanField()


class TotalsSerializer(serializers.Serializer):
    pending_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_total    = serializers.DecimalField(max_digits=14, decimal_places=2)
    count         = serializers.IntegerField()


class StageCountsSerializer(serializers.Serializer):
    clicks        = serializers.IntegerField()
    registrations = serializers.IntegerField()
    conversions   = serializers.IntegerField()


class AffiliateDashboardSerializer(serializers.Serializer):
    affiliate      = AffiliateSerializer()
    stats          = StageCountsSerializer()
    referred_users = ReferredUserSerializer(many=True)
    totals         = TotalsSerializer()


class AffiliateReportRowSerializer(TotalsSerializer):
    affiliate_id  = serializers.UUIDField()
    name          = serializers.CharField(allow_null=True)
    referral_code = serializers.CharField(allow_null=True)
    clients_count = serializers.IntegerField()


class MonthlyTotalsSerializer(TotalsSerializer):
    month = serializers.CharField()


class FinancialStatsSerializer(serializers.Serializer):
    total_affiliates  = serializers.IntegerField()
    active_affiliates = serializers.IntegerField()
    total_pending     = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_paid        = serializers.DecimalField(max_digits=14, decimal_places=2)


class AffiliateFinancialReportSerializer(serializers.Serializer):
    period     = serializers.DictField(child=serializers.DateTimeField())
    affiliates = AffiliateReportRowSerializer(many=True)
    monthly    = MonthlyTotalsSerializer(many=True)
    stats      = FinancialStatsSerializer()
