# ╭────────────────────────────────────────────────────────────────────────────╮
# │  Afiliados, rastreamento de indicações e comissões                         │
# ╰────────────────────────────────────────────────────────────────────────────╯
from __future__ import annotations

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from affiliate_billing.adapters.config.composition_root import container as affiliate_container
from affiliate_billing.core.application.commands.affiliate_commands import (
    CreateAffiliateCommand,
    MarkCommissionPaidCommand,
    RecordReferralClickCommand,
    UpdateAffiliateCommand,
)
from affiliate_billing.core.application.dtos.affiliate_dto import (
    CreateAffiliateDTO,
    MarkCommissionPaidDTO,
    ReferralClickDTO,
    UpdateAffiliateDTO,
)
from affiliate_billing.core.application.queries.affiliate_queries import (
    AffiliateDashboardQuery,
    AffiliateFinancialReportQuery,
    GetAffiliateQuery,
    ListAffiliateCommissionsQuery,
    ListAffiliatesQuery,
    ListCommissionsByPeriodQuery,
    ListReferredUsersQuery,
)
from convenio_core.adapters.observability.decorators import track_http
from convenio_core.core.application.cqrs import CommandBusImpl, QueryBusImpl
from convenio_core.core.domain.exceptions import ValidationError
from plugins.django_interface.permissions import IsAdmin, IsAffiliate

from ..serializers.affiliate_serializers import (
    AffiliateDashboardSerializer,
    AffiliateFinancialReportSerializer,
    AffiliateListItemSerializer,
    AffiliateSerializer,
    CommissionSerializer,
    ReferredUserSerializer,
)
from .core_views import PaginationFilterMixin, ensure_self_or_admin, period_from, request_payload

command_bus: CommandBusImpl = affiliate_container.command_bus()
query_bus: QueryBusImpl = affiliate_container.query_bus()


class AffiliateViewSet(PaginationFilterMixin, viewsets.ViewSet):
    """
    Cadastro de afiliados (admin) e leituras do próprio afiliado:
    comissões e usuários indicados.
    """

    def get_permissions(self):
        if self.action in ("retrieve", "commissions", "referred_users"):
            return [permissions.IsAuthenticated()]
        return [IsAdmin()]

    def _owned(self, request, pk):
        affiliate = query_bus.dispatch(GetAffiliateQuery(id=str(pk)))
        ensure_self_or_admin(request, affiliate.user_id)
        return affiliate

    @track_http("AffiliateViewSet_list")
    def list(self, request):
        filtros = self._filters(request, ("search", "status"))
        page, page_size = self._pagination(request)
        res = query_bus.dispatch(ListAffiliatesQuery(filtros=filtros, page=page, page_size=page_size))
        return Response(self._paged(res, AffiliateListItemSerializer))

    @track_http("AffiliateViewSet_retrieve")
    def retrieve(self, request, pk=None):
        return Response(AffiliateSerializer(self._owned(request, pk)).data)

    @track_http("AffiliateViewSet_create")
    def create(self, request):
        affiliate = command_bus.dispatch(
            CreateAffiliateCommand(payload=CreateAffiliateDTO.model_validate(request.data))
        )
        return Response(AffiliateSerializer(affiliate).data, status=status.HTTP_201_CREATED)

    @track_http("AffiliateViewSet_update")
    def update(self, request, pk=None):
        affiliate = command_bus.dispatch(
            UpdateAffiliateCommand(id=str(pk), payload=UpdateAffiliateDTO.model_validate(request.data))
        )
        return Response(AffiliateSerializer(affiliate).data)

    partial_update = update

    @track_http("AffiliateViewSet_commissions")
    @action(detail=True, methods=["get"])
    def commissions(self, request, pk=None):
        self._owned(request, pk)
        filtros = {"affiliate_id": str(pk), **self._filters(request, ("status",))}
        page, page_size = self._pagination(request)
        res = query_bus.dispatch(ListAffiliateCommissionsQuery(filtros=filtros, page=page, page_size=page_size))
        return Response(self._paged(res, CommissionSerializer))

    @track_http("AffiliateViewSet_referred_users")
    @action(detail=True, methods=["get"], url_path="referred-users")
    def referred_users(self, request, pk=None):
        self._owned(request, pk)
        rows = query_bus.dispatch(ListReferredUsersQuery(affiliate_id=str(pk)))
        return Response(ReferredUserSerializer(rows, many=True).data)

    @track_http("AffiliateViewSet_pay_commission")
    @action(
        detail=True,
        methods=["put"],
        url_path=r"commissions/(?P<commission_id>[^/.]+)/pay",
        parser_classes=[MultiPartParser, FormParser, JSONParser],
    )
    def pay_commission(self, request, pk=None, commission_id=None):
        dto = MarkCommissionPaidDTO.model_validate(request_payload(request))
        commission = command_bus.dispatch(
            MarkCommissionPaidCommand(
                affiliate_id=str(pk),
                commission_id=str(commission_id),
                paid_by=request.user.id,
                payload=dto,
            )
        )
        return Response(CommissionSerializer(commission).data)


class AffiliateDashboardView(PaginationFilterMixin, APIView):
    """Visão do próprio afiliado; `commissions` vem paginado (page / page_size)."""
    permission_classes = [IsAffiliate]

    @track_http("AffiliateDashboardView_get")
    def get(self, request):
        start = end = None
        if request.query_params.get("start_date") or request.query_params.get("end_date"):
            period = period_from(request)
            start, end = period.start_date, period.end_date
        page, page_size = self._pagination(request)
        data = query_bus.dispatch(
            AffiliateDashboardQuery(user_id=str(request.user.id), start=start, end=end, page=page, page_size=page_size)
        )
        body = AffiliateDashboardSerializer(data).data
        body["commissions"] = self._paged(data["commissions"], CommissionSerializer)
        return Response(body)


class CommissionListView(APIView):
    """Comissões do período: pagas pelo `paid_at`, pendentes pelo `created_at`."""
    permission_classes = [IsAdmin]

    @track_http("CommissionListView_get")
    def get(self, request):
        period = period_from(request)
        rows = query_bus.dispatch(
            ListCommissionsByPeriodQuery(start=period.start_date, end=period.end_date, status=period.status)
        )
        return Response({"count": len(rows), "results": CommissionSerializer(rows, many=True).data})


class AffiliateFinancialReportView(APIView):
    permission_classes = [IsAdmin]

    @track_http("AffiliateFinancialReportView_get")
    def get(self, request):
        period = period_from(request)
        report = query_bus.dispatch(AffiliateFinancialReportQuery(start=period.start_date, end=period.end_date))
        return Response(AffiliateFinancialReportSerializer(report).data)


class ReferralClickView(APIView):
    """
    Rota pública chamada pela landing page. Código desconhecido ou
    afiliado inativo não é erro: devolve `tracked = false`.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @track_http("ReferralClickView_post")
    def post(self, request):
        if not isinstance(request.data, dict):
            raise ValidationError("Corpo JSON inválido.", error="INVALID_BODY")
        dto = ReferralClickDTO.model_validate(request_payload(request))
        ua = request.headers.get("User-Agent")
        if ua and "user_agent" not in dto.metadata:
            dto = dto.model_copy(update={"metadata": {**dto.metadata, "user_agent": ua[:255]}})
        event = command_bus.dispatch(RecordReferralClickCommand(payload=dto))
        return Response({"tracked": event is not None}, status=status.HTTP_200_OK)
