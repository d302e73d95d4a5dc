"""
Relatórios financeiros de consultas.

Todas as janelas são [start_date, end_date) em UTC.
"""
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from convenio_core.adapters.observability.decorators import track_http
from convenio_core.core.application.queries.report_queries import (
    CancelledConsultationsQuery,
    ProfessionalRevenueQuery,
    RevenueReportQuery,
)
from convenio_core.core.domain.exceptions import ValidationError
from plugins.django_interface.permissions import IsAdmin, IsProfessionalOrAdmin

from ..serializers.core_serializers import (
    ConsultationSerializer,
    ProfessionalRevenueReportSerializer,
    RevenueReportSerializer,
)
from .core_views import core_query_bus, is_admin, period_from


class RevenueReportView(APIView):
    permission_classes = [IsAdmin]

    @track_http("RevenueReportView_get")
    def get(self, request):
        period = period_from(request)
        report = core_query_bus.dispatch(RevenueReportQuery(start=period.start_date, end=period.end_date))
        return Response(RevenueReportSerializer(report).data)


class ProfessionalRevenueView(APIView):
    """Repasse do próprio profissional; admin informa `professional_id`."""
    permission_classes = [IsProfessionalOrAdmin]

    @track_http("ProfessionalRevenueView_get")
    def get(self, request):
        period = period_from(request)
        if is_admin(request) and period.professional_id:
            professional_id = str(period.professional_id)
        elif request.user.has_role("professional"):
            professional_id = str(request.user.id)
        else:
            raise ValidationError("professional_id é obrigatório.", error="OWNER_REQUIRED")
        report = core_query_bus.dispatch(
            ProfessionalRevenueQuery(professional_id=professional_id, start=period.start_date, end=period.end_date)
        )
        return Response(ProfessionalRevenueReportSerializer(report).data)


class CancelledConsultationsView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsProfessionalOrAdmin]

    @track_http("CancelledConsultationsView_get")
    def get(self, request):
        period = period_from(request)
        if is_admin(request):
            professional_id = str(period.professional_id) if period.professional_id else None
        else:
            professional_id = str(request.user.id)
        rows = core_query_bus.dispatch(
            CancelledConsultationsQuery(start=period.start_date, end=period.end_date, professional_id=professional_id)
        )
        return Response({"count": len(rows), "results": ConsultationSerializer(rows, many=True).data})
