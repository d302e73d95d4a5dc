from django.conf import settings
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

from .routers import build_router
from .views.affiliate_views import (
    AffiliateDashboardView,
    AffiliateFinancialReportView,
    CommissionListView,
    ReferralClickView,
)
from .views.auth_views import HealthCheckView, MeView, RegisterView
from .views.report_views import CancelledConsultationsView, ProfessionalRevenueView, RevenueReportView

swagger_permissions = [permissions.IsAdminUser] if not settings.DEBUG else [permissions.AllowAny]

schema_view = get_schema_view(
    openapi.Info(
        title="Convênio Gestão",
        default_version="v1",
        description="Assinaturas, cupons, afiliados e consultas (CQRS + Bus)",
        contact=openapi.Contact(email="suporte@convenio.local"),
    ),
    public=settings.DEBUG,
    permission_classes=swagger_permissions,
)

router = build_router()

urlpatterns = [
    path("auth/register", RegisterView.as_view(), name="register"),
    path("me", MeView.as_view(), name="me"),
    path("healthz", HealthCheckView.as_view(), name="healthz"),

    path("referrals/click", ReferralClickView.as_view(), name="referral-click"),
    path("affiliate/dashboard", AffiliateDashboardView.as_view(), name="affiliate-dashboard"),
    path("commissions", CommissionListView.as_view(), name="commissions-by-period"),

    path("reports/revenue", RevenueReportView.as_view(), name="report-revenue"),
    path("reports/professional-revenue", ProfessionalRevenueView.as_view(), name="report-professional-revenue"),
    path("reports/cancelled-consultations", CancelledConsultationsView.as_view(), name="report-cancelled"),
    path("reports/affiliates", AffiliateFinancialReportView.as_view(), name="report-affiliates"),

    path("swagger/",     schema_view.with_ui("swagger", cache_timeout=0), name="swagger-ui"),
    path("swagger.json", schema_view.without_ui(cache_timeout=0),         name="swagger-json"),
    path("redoc/",       schema_view.with_ui("redoc",   cache_timeout=0), name="redoc-ui"),

    # rotas CRUD
    path("", include(router.urls)),
]
