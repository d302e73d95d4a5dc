from rest_framework.routers import DefaultRouter

from .views.affiliate_views import AffiliateViewSet
from .views.auth_views import UserViewSet
from .views.core_views import (
    AttendanceLocationViewSet,
    ConsultationViewSet,
    CouponViewSet,
    DependentViewSet,
    PrivatePatientViewSet,
    ProfessionalViewSet,
    SchedulingAccessViewSet,
    ServiceViewSet,
    SubscriptionViewSet,
)

# lista de (rota, ViewSet)
RESOURCES = [
    ("users",               UserViewSet),
    ("subscriptions",       SubscriptionViewSet),
    ("dependents",          DependentViewSet),
    ("coupons",             CouponViewSet),
    ("professionals",       ProfessionalViewSet),
    ("scheduling-access",   SchedulingAccessViewSet),
    ("services",            ServiceViewSet),
    ("attendance-locations", AttendanceLocationViewSet),
    ("private-patients",    PrivatePatientViewSet),
    ("consultations",       ConsultationViewSet),
    ("affiliates",          AffiliateViewSet),
]

def build_router() -> DefaultRouter:
    router = DefaultRouter(trailing_slash=False)
    for prefix, viewset in RESOURCES:
        router.register(prefix, viewset, basename=prefix.replace('-', '_'))
    return router
