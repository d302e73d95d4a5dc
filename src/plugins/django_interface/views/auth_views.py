from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from convenio_core.adapters.config.composition_root import container as core_container
from convenio_core.adapters.observability.decorators import track_http
from convenio_core.core.application.commands.user_commands import (
    GrantRoleCommand,
    RegisterMemberCommand,
    RevokeRoleCommand,
)
from convenio_core.core.application.dtos.user_dto import RegisterMemberDTO, RoleDTO
from convenio_core.core.application.queries.subscription_queries import GetSubscriptionQuery
from convenio_core.core.application.queries.user_queries import GetUserQuery, ListUsersQuery
from plugins.django_interface.permissions import IsAdmin

from ..serializers.core_serializers import SubscriptionSerializer, UserSerializer
from .core_views import PaginationFilterMixin

command_bus = core_container.command_bus()
query_bus = core_container.query_bus()


class RegisterView(APIView):
    """
    Cadastro público de titular. Quando o front envia `visitor_identifier`,
    o clique de indicação daquele visitante vira cadastro na mesma transação.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @track_http("RegisterView_post")
    def post(self, request):
        dto = RegisterMemberDTO.model_validate(request.data)
        user = command_bus.dispatch(RegisterMemberCommand(payload=dto))
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class MeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @track_http("MeView_get")
    def get(self, request):
        user = query_bus.dispatch(GetUserQuery(id=str(request.user.id)))
        data = {"user": UserSerializer(user).data, "subscription": None}
        if user.has_role("member"):
            sub = query_bus.dispatch(GetSubscriptionQuery(member_id=str(user.id)))
            data["subscription"] = SubscriptionSerializer(sub).data
        return Response(data)


class UserViewSet(PaginationFilterMixin, viewsets.ViewSet):
    """Administração de usuários e papéis."""
    permission_classes = [IsAdmin]

    @track_http("UserViewSet_list")
    def list(self, request):
        filtros = self._filters(request, ("search", "role", "is_active"))
        page, page_size = self._pagination(request)
        res = query_bus.dispatch(ListUsersQuery(filtros=filtros, page=page, page_size=page_size))
        return Response(self._paged(res, UserSerializer))

    @track_http("UserViewSet_retrieve")
    def retrieve(self, request, pk=None):
        user = query_bus.dispatch(GetUserQuery(id=str(pk)))
        return Response(UserSerializer(user).data)

    @track_http("UserViewSet_grant_role")
    @action(detail=True, methods=["post"], url_path="roles")
    def grant_role(self, request, pk=None):
        dto = RoleDTO.model_validate(request.data)
        user = command_bus.dispatch(GrantRoleCommand(user_id=str(pk), role=dto.role))
        return Response(UserSerializer(user).data)

    @track_http("UserViewSet_revoke_role")
    @action(detail=True, methods=["delete"], url_path=r"roles/(?P<role>[a-z]+)")
    def revoke_role(self, request, pk=None, role=None):
        dto = RoleDTO.model_validate({"role": role})
        user = command_bus.dispatch(
            RevokeRoleCommand(user_id=str(pk), role=dto.role, requested_by=str(request.user.id))
        )
        return Response(UserSerializer(user).data)


class HealthCheckView(APIView):
    """
    Rota GET /api/healthz responde 200 enquanto a API estiver de pé.
    """
    permission_classes = []
    authentication_classes = []

    def get(self, request):
        return Response({"status": "ok"}, status=status.HTTP_200_OK)
