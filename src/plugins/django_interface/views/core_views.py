# ╭────────────────────────────────────────────────────────────────────────────╮
# │  ViewSets REST – Domínio Core (convênio)                                   │
# │                                                                            │
# │  • Filtro seguro   → remove “page” / “page_size” antes de passar ao repo   │
# │  • Paginação DRY   → mix-in centralizado                                   │
# │  • Posse           → profissional/titular só enxerga o que é seu           │
# │  • Métrica trace   → decorator `track_http`                                │
# ╰────────────────────────────────────────────────────────────────────────────╯
from __future__ import annotations

import math
from typing import Any

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from affiliate_billing.adapters.config.composition_root import container as affiliate_container
from affiliate_billing.core.application.commands.affiliate_commands import ConfirmPaymentCommand
from convenio_core.adapters.config.composition_root import container as core_container
from convenio_core.adapters.observability.decorators import track_http
from convenio_core.core.application.cqrs import CommandBusImpl, PagedResult, QueryBusImpl
from convenio_core.core.application.dtos.period_dto import PeriodDTO
from convenio_core.core.domain.exceptions import ForbiddenError, ValidationError
from plugins.django_interface.permissions import (
    HasSchedulingAccess,
    IsAdmin,
    IsAdminOrReadOnly,
    IsMember,
    IsPaymentSystem,
    IsProfessionalOrAdmin,
)

from ..serializers.core_serializers import (
    AttendanceLocationSerializer,
    ConsultationSerializer,
    CouponQuoteSerializer,
    CouponSerializer,
    DependentSerializer,
    PrivatePatientSerializer,
    ProfessionalSerializer,
    SchedulingAccessSerializer,
    ServiceSerializer,
    SubscriptionSerializer,
)

core_command_bus: CommandBusImpl = core_container.command_bus()
core_query_bus: QueryBusImpl = core_container.query_bus()
affiliate_command_bus: CommandBusImpl = affiliate_container.command_bus()

DEFAULT_PAGE_SIZE = 50

# ╭──────────────────────────────────────────────────────────────────────────╮
# │ Helper mix-in – paginação + filtros + posse                              │
# ╰──────────────────────────────────────────────────────────────────────────╯
class PaginationFilterMixin:
    """Remove page/page_size do QueryDict e devolve filtros limpos."""

    @staticmethod
    def _pagination(request) -> tuple[int, int]:
        try:
            page = int(request.query_params.get("page", 1))
            size = int(request.query_params.get("page_size", DEFAULT_PAGE_SIZE))
        except ValueError as exc:
            raise ValidationError("page e page_size devem ser inteiros.") from exc
        return max(page, 1), min(max(size, 1), 500)

    @staticmethod
    def _filters(request, allowed: tuple[str, ...]) -> dict[str, Any]:
        params = request.query_params
        return {k: params.get(k) for k in allowed if params.get(k) not in (None, "")}

    @staticmethod
    def _paged(res: PagedResult, serializer_cls) -> dict:
        return {
            "results": serializer_cls(res.items, many=True).data,
            "total_items": res.total,
            "page": res.page,
            "page_size": res.page_size,
            "total_pages": math.ceil(res.total / res.page_size) if res.page_size else 1,
            "items_on_page": len(res.items),
        }


def request_payload(request) -> dict:
    """Corpo JSON ou multipart como dict simples."""
    data = request.data
    return data.dict() if hasattr(data, "dict") else dict(data)


def period_from(request) -> PeriodDTO:
    return PeriodDTO.model_validate(request.query_params.dict())


def is_admin(request) -> bool:
    return getattr(request.user, "is_admin", False)


def ensure_self_or_admin(request, owner_id) -> None:
    if is_admin(request) or str(owner_id) == str(request.user.id):
        return
    raise ForbiddenError("Você só pode acessar os seus próprios registros.", error="NOT_OWNER")


def owner_for_write(request, payload: dict, field: str = "professional_id") -> str:
    """Admin informa o dono no corpo; os demais escrevem sempre em nome próprio."""
    if is_admin(request):
        owner = payload.pop(field, None)
        if not owner:
            raise ValidationError(f"{field} é obrigatório.", error="OWNER_REQUIRED")
        return str(owner)
    payload.pop(field, None)
    return str(request.user.id)


# ╭──────────────────────────────────────────────╮
# │ 1. Assinaturas                               │
# ╰──────────────────────────────────────────────╯
from convenio_core.core.application.commands.subscription_commands import (  # noqa: E402
    ActivateDependentCommand,
    ActivateSubscriptionCommand,
)
from convenio_core.core.application.dtos.subscription_dto import (  # noqa: E402
    ActivateDependentDTO,
    ActivateSubscriptionDTO,
    PaymentConfirmedDTO,
)
from convenio_core.core.application.queries.dependent_queries import GetDependentQuery  # noqa: E402
from convenio_core.core.application.queries.subscription_queries import (  # noqa: E402
    GetDependentSubscriptionQuery,
    GetSubscriptionQuery,
)


class SubscriptionViewSet(viewsets.ViewSet):
    def get_permissions(self):
        if self.action in ("activate", "activate_dependent"):
            return [IsAdmin()]
        if self.action == "payment_confirmed":
            return [IsPaymentSystem()]
        return [permissions.IsAuthenticated()]

    @track_http("SubscriptionViewSet_retrieve")
    def retrieve(self, request, pk=None):
        ensure_self_or_admin(request, pk)
        sub = core_query_bus.dispatch(GetSubscriptionQuery(member_id=str(pk)))
        return Response(SubscriptionSerializer(sub).data)

    @track_http("SubscriptionViewSet_dependent")
    @action(detail=False, methods=["get"], url_path=r"dependents/(?P<dependent_id>[^/.]+)")
    def dependent(self, request, dependent_id=None):
        dep = core_query_bus.dispatch(GetDependentQuery(id=str(dependent_id)))
        ensure_self_or_admin(request, dep.member_id)
        sub = core_query_bus.dispatch(GetDependentSubscriptionQuery(dependent_id=str(dependent_id)))
        return Response(SubscriptionSerializer(sub).data)

    @track_http("SubscriptionViewSet_activate")
    @action(detail=False, methods=["post"], url_path="activate")
    def activate(self, request):
        dto = ActivateSubscriptionDTO.model_validate(request.data)
        sub = core_command_bus.dispatch(
            ActivateSubscriptionCommand(member_id=str(dto.member_id), expires_at=dto.expires_at)
        )
        return Response(SubscriptionSerializer(sub).data)

    @track_http("SubscriptionViewSet_activate_dependent")
    @action(detail=False, methods=["post"], url_path="dependents/activate")
    def activate_dependent(self, request):
        dto = ActivateDependentDTO.model_validate(request.data)
        sub = core_command_bus.dispatch(
            ActivateDependentCommand(dependent_id=str(dto.dependent_id), expires_at=dto.expires_at)
        )
        return Response(SubscriptionSerializer(sub).data)

    @track_http("SubscriptionViewSet_payment_confirmed")
    @action(detail=False, methods=["post"], url_path="payment-confirmed")
    def payment_confirmed(self, request):
        dto = PaymentConfirmedDTO.model_validate(request.data)
        sub = affiliate_command_bus.dispatch(ConfirmPaymentCommand(payload=dto))
        return Response(SubscriptionSerializer(sub).data)


# ╭──────────────────────────────────────────────╮
# │ 2. Dependentes                               │
# ╰──────────────────────────────────────────────╯
from convenio_core.core.application.commands.dependent_commands import (  # noqa: E402
    CreateDependentCommand,
    DeleteDependentCommand,
    UpdateDependentCommand,
)
from convenio_core.core.application.dtos.dependent_dto import (  # noqa: E402
    CreateDependentDTO,
    UpdateDependentDTO,
)
from convenio_core.core.application.queries.dependent_queries import ListDependentsQuery  # noqa: E402


class DependentViewSet(viewsets.ViewSet):
    def get_permissions(self):
        return [(IsMember | IsAdmin)()]

    def _owned(self, request, pk):
        dep = core_query_bus.dispatch(GetDependentQuery(id=str(pk)))
        ensure_self_or_admin(request, dep.member_id)
        return dep

    @track_http("DependentViewSet_list")
    def list(self, request):
        member_id = request.query_params.get("member_id") if is_admin(request) else str(request.user.id)
        if not member_id:
            raise ValidationError("member_id é obrigatório.", error="OWNER_REQUIRED")
        deps = core_query_bus.dispatch(ListDependentsQuery(member_id=str(member_id)))
        return Response(DependentSerializer(deps, many=True).data)

    @track_http("DependentViewSet_retrieve")
    def retrieve(self, request, pk=None):
        return Response(DependentSerializer(self._owned(request, pk)).data)

    @track_http("DependentViewSet_create")
    def create(self, request):
        payload = request_payload(request)
        payload["member_id"] = owner_for_write(request, dict(payload), field="member_id")
        dep = core_command_bus.dispatch(
            CreateDependentCommand(payload=CreateDependentDTO.model_validate(payload))
        )
        return Response(DependentSerializer(dep).data, status=status.HTTP_201_CREATED)

    @track_http("DependentViewSet_update")
    def update(self, request, pk=None):
        self._owned(request, pk)
        dep = core_command_bus.dispatch(
            UpdateDependentCommand(id=str(pk), payload=UpdateDependentDTO.model_validate(request.data))
        )
        return Response(DependentSerializer(dep).data)

    partial_update = update

    @track_http("DependentViewSet_destroy")
    def destroy(self, request, pk=None):
        self._owned(request, pk)
        core_command_bus.dispatch(DeleteDependentCommand(id=str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)


# ╭──────────────────────────────────────────────╮
# │ 3. Cupons                                    │
# ╰──────────────────────────────────────────────╯
from convenio_core.core.application.commands.coupon_commands import (  # noqa: E402
    CreateCouponCommand,
    DeleteCouponCommand,
    ToggleCouponCommand,
    UpdateCouponCommand,
)
from convenio_core.core.application.dtos.coupon_dto import (  # noqa: E402
    CreateCouponDTO,
    ResolveCouponDTO,
    UpdateCouponDTO,
)
from convenio_core.core.application.queries.coupon_queries import (  # noqa: E402
    GetCouponQuery,
    ListCouponsQuery,
    ResolveCouponQuery,
)


class CouponViewSet(PaginationFilterMixin, viewsets.ViewSet):
    def get_permissions(self):
        if self.action == "resolve":
            return [permissions.IsAuthenticated()]
        return [IsAdmin()]

    @track_http("CouponViewSet_list")
    def list(self, request):
        filtros = self._filters(request, ("search", "target", "is_active"))
        page, page_size = self._pagination(request)
        res = core_query_bus.dispatch(ListCouponsQuery(filtros=filtros, page=page, page_size=page_size))
        return Response(self._paged(res, CouponSerializer))

    @track_http("CouponViewSet_retrieve")
    def retrieve(self, request, pk=None):
        coupon = core_query_bus.dispatch(GetCouponQuery(id=str(pk)))
        return Response(CouponSerializer(coupon).data)

    @track_http("CouponViewSet_create")
    def create(self, request):
        coupon = core_command_bus.dispatch(
            CreateCouponCommand(
                payload=CreateCouponDTO.model_validate(request.data),
                created_by=str(request.user.id),
            )
        )
        return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)

    @track_http("CouponViewSet_update")
    def update(self, request, pk=None):
        coupon = core_command_bus.dispatch(
            UpdateCouponCommand(id=str(pk), payload=UpdateCouponDTO.model_validate(request.data))
        )
        return Response(CouponSerializer(coupon).data)

    partial_update = update

    @track_http("CouponViewSet_destroy")
    def destroy(self, request, pk=None):
        core_command_bus.dispatch(DeleteCouponCommand(id=str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @track_http("CouponViewSet_toggle")
    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        coupon = core_command_bus.dispatch(ToggleCouponCommand(id=str(pk)))
        return Response(CouponSerializer(coupon).data)

    @track_http("CouponViewSet_resolve")
    @action(detail=False, methods=["post"])
    def resolve(self, request):
        dto = ResolveCouponDTO.model_validate(request.data)
        quote = core_query_bus.dispatch(ResolveCouponQuery(code=dto.code, target=dto.target))
        return Response(CouponQuoteSerializer(quote).data)


# ╭──────────────────────────────────────────────╮
# │ 4. Profissionais & acesso à agenda           │
# ╰──────────────────────────────────────────────╯
from convenio_core.core.application.commands.scheduling_access_commands import (  # noqa: E402
    ExtendSchedulingAccessCommand,
    GrantSchedulingAccessCommand,
    RevokeSchedulingAccessCommand,
)
from convenio_core.core.application.commands.user_commands import (  # noqa: E402
    CreateProfessionalCommand,
    UpdateProfessionalCommand,
)
from convenio_core.core.application.dtos.scheduling_access_dto import (  # noqa: E402
    ExtendSchedulingAccessDTO,
    GrantSchedulingAccessDTO,
    RevokeSchedulingAccessDTO,
)
from convenio_core.core.application.dtos.user_dto import (  # noqa: E402
    CreateProfessionalDTO,
    UpdateProfessionalDTO,
)
from convenio_core.core.application.queries.professional_queries import (  # noqa: E402
    GetProfessionalQuery,
    ListProfessionalsQuery,
)
from convenio_core.core.application.queries.scheduling_access_queries import (  # noqa: E402
    GetSchedulingAccessQuery,
    ListSchedulingAccessQuery,
)


class ProfessionalViewSet(PaginationFilterMixin, viewsets.ViewSet):
    def get_permissions(self):
        if self.action in ("create", "update", "partial_update"):
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    @track_http("ProfessionalViewSet_list")
    def list(self, request):
        filtros = self._filters(request, ("search", "category"))
        page, page_size = self._pagination(request)
        res = core_query_bus.dispatch(ListProfessionalsQuery(filtros=filtros, page=page, page_size=page_size))
        return Response(self._paged(res, ProfessionalSerializer))

    @track_http("ProfessionalViewSet_retrieve")
    def retrieve(self, request, pk=None):
        prof = core_query_bus.dispatch(GetProfessionalQuery(id=str(pk)))
        return Response(ProfessionalSerializer(prof).data)

    @track_http("ProfessionalViewSet_create")
    def create(self, request):
        prof = core_command_bus.dispatch(
            CreateProfessionalCommand(payload=CreateProfessionalDTO.model_validate(request.data))
        )
        return Response(ProfessionalSerializer(prof).data, status=status.HTTP_201_CREATED)

    @track_http("ProfessionalViewSet_update")
    def update(self, request, pk=None):
        prof = core_command_bus.dispatch(
            UpdateProfessionalCommand(id=str(pk), payload=UpdateProfessionalDTO.model_validate(request.data))
        )
        return Response(ProfessionalSerializer(prof).data)

    partial_update = update

    @track_http("ProfessionalViewSet_scheduling_access")
    @action(detail=True, methods=["get"], url_path="scheduling-access")
    def scheduling_access(self, request, pk=None):
        ensure_self_or_admin(request, pk)
        view = core_query_bus.dispatch(GetSchedulingAccessQuery(professional_id=str(pk)))
        return Response(SchedulingAccessSerializer(view).data)


class SchedulingAccessViewSet(viewsets.ViewSet):
    permission_classes = [IsAdmin]

    @staticmethod
    def _current(professional_id) -> dict:
        view = core_query_bus.dispatch(GetSchedulingAccessQuery(professional_id=str(professional_id)))
        return SchedulingAccessSerializer(view).data

    @track_http("SchedulingAccessViewSet_list")
    def list(self, request):
        rows = core_query_bus.dispatch(ListSchedulingAccessQuery())
        return Response([
            {**{k: row[k] for k in ("id", "name", "email", "category")},
             "access": SchedulingAccessSerializer(row["access"]).data}
            for row in rows
        ])

    @track_http("SchedulingAccessViewSet_grant")
    @action(detail=False, methods=["post"])
    def grant(self, request):
        dto = GrantSchedulingAccessDTO.model_validate(request.data)
        core_command_bus.dispatch(
            GrantSchedulingAccessCommand(
                professional_id=str(dto.professional_id),
                expires_at=dto.expires_at,
                granted_by=str(request.user.id),
                reason=dto.reason,
            )
        )
        return Response(self._current(dto.professional_id))

    @track_http("SchedulingAccessViewSet_extend")
    @action(detail=False, methods=["post"])
    def extend(self, request):
        dto = ExtendSchedulingAccessDTO.model_validate(request.data)
        core_command_bus.dispatch(
            ExtendSchedulingAccessCommand(
                professional_id=str(dto.professional_id), expires_at=dto.expires_at, reason=dto.reason,
            )
        )
        return Response(self._current(dto.professional_id))

    @track_http("SchedulingAccessViewSet_revoke")
    @action(detail=False, methods=["post"])
    def revoke(self, request):
        dto = RevokeSchedulingAccessDTO.model_validate(request.data)
        core_command_bus.dispatch(
            RevokeSchedulingAccessCommand(professional_id=str(dto.professional_id), reason=dto.reason)
        )
        return Response(self._current(dto.professional_id))


# ╭──────────────────────────────────────────────╮
# │ 5. Catálogo: serviços, locais, particulares  │
# ╰──────────────────────────────────────────────╯
from convenio_core.core.application.commands.catalog_commands import (  # noqa: E402
    CreateAttendanceLocationCommand,
    CreatePrivatePatientCommand,
    CreateServiceCommand,
    DeleteAttendanceLocationCommand,
    DeletePrivatePatientCommand,
    DeleteServiceCommand,
    UpdateAttendanceLocationCommand,
    UpdatePrivatePatientCommand,
    UpdateServiceCommand,
)
from convenio_core.core.application.dtos.catalog_dto import (  # noqa: E402
    AttendanceLocationDTO,
    PrivatePatientDTO,
    ServiceDTO,
    UpdateAttendanceLocationDTO,
    UpdatePrivatePatientDTO,
    UpdateServiceDTO,
)
from convenio_core.core.application.queries.catalog_queries import (  # noqa: E402
    GetAttendanceLocationQuery,
    GetPrivatePatientQuery,
    GetServiceQuery,
    ListAttendanceLocationsQuery,
    ListPrivatePatientsQuery,
    ListServicesQuery,
)


class ServiceViewSet(PaginationFilterMixin, viewsets.ViewSet):
    permission_classes = [IsAdminOrReadOnly]

    @track_http("ServiceViewSet_list")
    def list(self, request):
        filtros = self._filters(request, ("search", "category", "is_base_service"))
        page, page_size = self._pagination(request)
        res = core_query_bus.dispatch(ListServicesQuery(filtros=filtros, page=page, page_size=page_size))
        return Response(self._paged(res, ServiceSerializer))

    @track_http("ServiceViewSet_retrieve")
    def retrieve(self, request, pk=None):
        return Response(ServiceSerializer(core_query_bus.dispatch(GetServiceQuery(id=str(pk)))).data)

    @track_http("ServiceViewSet_create")
    def create(self, request):
        svc = core_command_bus.dispatch(CreateServiceCommand(payload=ServiceDTO.model_validate(request.data)))
        return Response(ServiceSerializer(svc).data, status=status.HTTP_201_CREATED)

    @track_http("ServiceViewSet_update")
    def update(self, request, pk=None):
        svc = core_command_bus.dispatch(
            UpdateServiceCommand(id=str(pk), payload=UpdateServiceDTO.model_validate(request.data))
        )
        return Response(ServiceSerializer(svc).data)

    partial_update = update

    @track_http("ServiceViewSet_destroy")
    def destroy(self, request, pk=None):
        core_command_bus.dispatch(DeleteServiceCommand(id=str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)


class AttendanceLocationViewSet(viewsets.ViewSet):
    permission_classes = [IsProfessionalOrAdmin]

    def _owned(self, request, pk):
        loc = core_query_bus.dispatch(GetAttendanceLocationQuery(id=str(pk)))
        ensure_self_or_admin(request, loc.professional_id)
        return loc

    @track_http("AttendanceLocationViewSet_list")
    def list(self, request):
        professional_id = request.query_params.get("professional_id") if is_admin(request) else str(request.user.id)
        if not professional_id:
            raise ValidationError("professional_id é obrigatório.", error="OWNER_REQUIRED")
        locs = core_query_bus.dispatch(ListAttendanceLocationsQuery(professional_id=str(professional_id)))
        return Response(AttendanceLocationSerializer(locs, many=True).data)

    @track_http("AttendanceLocationViewSet_retrieve")
    def retrieve(self, request, pk=None):
        return Response(AttendanceLocationSerializer(self._owned(request, pk)).data)

    @track_http("AttendanceLocationViewSet_create")
    def create(self, request):
        payload = request_payload(request)
        owner = owner_for_write(request, payload)
        loc = core_command_bus.dispatch(
            CreateAttendanceLocationCommand(
                professional_id=owner, payload=AttendanceLocationDTO.model_validate(payload),
            )
        )
        return Response(AttendanceLocationSerializer(loc).data, status=status.HTTP_201_CREATED)

    @track_http("AttendanceLocationViewSet_update")
    def update(self, request, pk=None):
        self._owned(request, pk)
        loc = core_command_bus.dispatch(
            UpdateAttendanceLocationCommand(id=str(pk), payload=UpdateAttendanceLocationDTO.model_validate(request.data))
        )
        return Response(AttendanceLocationSerializer(loc).data)

    partial_update = update

    @track_http("AttendanceLocationViewSet_destroy")
    def destroy(self, request, pk=None):
        self._owned(request, pk)
        core_command_bus.dispatch(DeleteAttendanceLocationCommand(id=str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)


class PrivatePatientViewSet(PaginationFilterMixin, viewsets.ViewSet):
    permission_classes = [IsProfessionalOrAdmin]

    def _owned(self, request, pk):
        patient = core_query_bus.dispatch(GetPrivatePatientQuery(id=str(pk)))
        ensure_self_or_admin(request, patient.professional_id)
        return patient

    @track_http("PrivatePatientViewSet_list")
    def list(self, request):
        filtros = self._filters(request, ("search", "professional_id"))
        if not is_admin(request):
            filtros["professional_id"] = str(request.user.id)
        page, page_size = self._pagination(request)
        res = core_query_bus.dispatch(ListPrivatePatientsQuery(filtros=filtros, page=page, page_size=page_size))
        return Response(self._paged(res, PrivatePatientSerializer))

    @track_http("PrivatePatientViewSet_retrieve")
    def retrieve(self, request, pk=None):
        return Response(PrivatePatientSerializer(self._owned(request, pk)).data)

    @track_http("PrivatePatientViewSet_create")
    def create(self, request):
        payload = request_payload(request)
        owner = owner_for_write(request, payload)
        patient = core_command_bus.dispatch(
            CreatePrivatePatientCommand(professional_id=owner, payload=PrivatePatientDTO.model_validate(payload))
        )
        return Response(PrivatePatientSerializer(patient).data, status=status.HTTP_201_CREATED)

    @track_http("PrivatePatientViewSet_update")
    def update(self, request, pk=None):
        self._owned(request, pk)
        patient = core_command_bus.dispatch(
            UpdatePrivatePatientCommand(id=str(pk), payload=UpdatePrivatePatientDTO.model_validate(request.data))
        )
        return Response(PrivatePatientSerializer(patient).data)

    partial_update = update

    @track_http("PrivatePatientViewSet_destroy")
    def destroy(self, request, pk=None):
        self._owned(request, pk)
        core_command_bus.dispatch(DeletePrivatePatientCommand(id=str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)


# ╭──────────────────────────────────────────────╮
# │ 6. Consultas                                 │
# ╰──────────────────────────────────────────────╯
from convenio_core.core.application.commands.consultation_commands import (  # noqa: E402
    CancelConsultationCommand,
    DeleteConsultationCommand,
    RecordConsultationCommand,
    RecordRecurringConsultationsCommand,
    UpdateConsultationCommand,
)
from convenio_core.core.application.dtos.consultation_dto import (  # noqa: E402
    CancelConsultationDTO,
    RecordConsultationDTO,
    RecordRecurringConsultationsDTO,
    UpdateConsultationDTO,
)
from convenio_core.core.application.queries.consultation_queries import (  # noqa: E402
    GetConsultationQuery,
    ListConsultationsQuery,
)


class ConsultationViewSet(PaginationFilterMixin, viewsets.ViewSet):
    permission_classes = [IsProfessionalOrAdmin, HasSchedulingAccess]

    def _owned(self, request, pk):
        c = core_query_bus.dispatch(GetConsultationQuery(id=str(pk)))
        ensure_self_or_admin(request, c.professional_id)
        return c

    @track_http("ConsultationViewSet_list")
    def list(self, request):
        filtros = self._filters(request, ("search", "status", "patient_kind", "professional_id"))
        if request.query_params.get("start_date") or request.query_params.get("end_date"):
            period = period_from(request)
            filtros["start"], filtros["end"] = period.start_date, period.end_date
        if not is_admin(request):
            filtros["professional_id"] = str(request.user.id)
        page, page_size = self._pagination(request)
        res = core_query_bus.dispatch(ListConsultationsQuery(filtros=filtros, page=page, page_size=page_size))
        return Response(self._paged(res, ConsultationSerializer))

    @track_http("ConsultationViewSet_retrieve")
    def retrieve(self, request, pk=None):
        return Response(ConsultationSerializer(self._owned(request, pk)).data)

    @track_http("ConsultationViewSet_create")
    def create(self, request):
        payload = request_payload(request)
        owner = owner_for_write(request, payload)
        c = core_command_bus.dispatch(
            RecordConsultationCommand(professional_id=owner, payload=RecordConsultationDTO.model_validate(payload))
        )
        return Response(ConsultationSerializer(c).data, status=status.HTTP_201_CREATED)

    @track_http("ConsultationViewSet_recurring")
    @action(detail=False, methods=["post"])
    def recurring(self, request):
        payload = request_payload(request)
        owner = owner_for_write(request, payload)
        created = core_command_bus.dispatch(
            RecordRecurringConsultationsCommand(
                professional_id=owner, payload=RecordRecurringConsultationsDTO.model_validate(payload)
            )
        )
        return Response(
            {"created_count": len(created), "results": ConsultationSerializer(created, many=True).data},
            status=status.HTTP_201_CREATED,
        )

    @track_http("ConsultationViewSet_update")
    def update(self, request, pk=None):
        self._owned(request, pk)
        payload = request_payload(request)
        if not is_admin(request):
            payload.pop("professional_id", None)
        c = core_command_bus.dispatch(
            UpdateConsultationCommand(id=str(pk), payload=UpdateConsultationDTO.model_validate(payload))
        )
        return Response(ConsultationSerializer(c).data)

    partial_update = update

    @track_http("ConsultationViewSet_destroy")
    def destroy(self, request, pk=None):
        self._owned(request, pk)
        core_command_bus.dispatch(DeleteConsultationCommand(id=str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @track_http("ConsultationViewSet_cancel")
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        self._owned(request, pk)
        dto = CancelConsultationDTO.model_validate(request.data)
        c = core_command_bus.dispatch(
            CancelConsultationCommand(id=str(pk), cancelled_by=str(request.user.id), reason=dto.reason)
        )
        return Response(ConsultationSerializer(c).data)
