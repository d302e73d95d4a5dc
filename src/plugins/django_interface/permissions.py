import hmac

from django.conf import settings
from rest_framework.permissions import SAFE_METHODS, BasePermission

from convenio_core.core.domain.exceptions import ForbiddenError


def _roles(request) -> frozenset:
    return getattr(request.user, "roles", frozenset())


class HasAnyRole(BasePermission):
    """Base: libera se o usuário tiver pelo menos um dos papéis em `roles`."""
    roles: tuple[str, ...] = ()

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and _roles(request) & set(self.roles))


class IsAdmin(HasAnyRole):
    roles = ("admin",)


class IsProfessional(HasAnyRole):
    roles = ("professional",)


class IsAffiliate(HasAnyRole):
    roles = ("affiliate",)


class IsMember(HasAnyRole):
    roles = ("member",)


class IsProfessionalOrAdmin(HasAnyRole):
    roles = ("professional", "admin")


class IsAdminOrReadOnly(BasePermission):
    """Leitura para qualquer autenticado; escrita só admin."""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        return request.method in SAFE_METHODS or "admin" in _roles(request)


class IsPaymentSystem(BasePermission):
    """
    Webhook do gateway: `X-Webhook-Secret` igual a PAYMENT_WEBHOOK_SECRET,
    ou um admin autenticado.
    """

    def has_permission(self, request, view):
        secret = request.headers.get("X-Webhook-Secret")
        expected = settings.PAYMENT_WEBHOOK_SECRET
        if secret and expected and hmac.compare_digest(secret.encode(), expected.encode()):
            return True
        return bool(request.user and request.user.is_authenticated and "admin" in _roles(request))


class HasSchedulingAccess(BasePermission):
    """
    Escritas de profissional exigem acesso à agenda vigente.
    Admin não passa por essa verificação.
    """

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS or "admin" in _roles(request):
            return True
        from convenio_core.adapters.config.composition_root import container as core_container
        from convenio_core.core.application.queries.scheduling_access_queries import GetSchedulingAccessQuery

        view_ = core_container.query_bus().dispatch(GetSchedulingAccessQuery(professional_id=str(request.user.id)))
        if not view_["has_access"]:
            raise ForbiddenError(
                "Acesso à agenda inativo ou expirado.", error="NO_SCHEDULING_ACCESS"
            )
        return True
