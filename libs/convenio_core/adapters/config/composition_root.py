from dependency_injector import containers, providers

container = None

def setup_di_container_from_settings(settings):  # noqa: PLR0915
    """Inicializa o DI container após o Django já estar com settings carregados."""
    global container  # noqa: PLW0603
    if container is not None:
        import structlog
        structlog.get_logger().debug("DI container já inicializado.")
        return container

    # ------- IMPORTS QUE USAM DJANGO MODELS -------
    from decimal import Decimal

    import structlog

    from convenio_core.adapters.repositories.catalog_repo_impl import (
        AttendanceLocationRepoImpl,
        PrivatePatientRepoImpl,
        ServiceRepoImpl,
    )
    from convenio_core.adapters.repositories.consultation_repo_impl import ConsultationRepoImpl
    from convenio_core.adapters.repositories.coupon_repo_impl import CouponRepoImpl
    from convenio_core.adapters.repositories.dependent_repo_impl import DependentRepoImpl
    from convenio_core.adapters.repositories.professional_repo_impl import ProfessionalRepoImpl
    from convenio_core.adapters.repositories.scheduling_access_repo_impl import SchedulingAccessRepoImpl
    from convenio_core.adapters.repositories.subscription_repo_impl import SubscriptionRepoImpl
    from convenio_core.adapters.repositories.user_repo_impl import UserRepoImpl
    from convenio_core.adapters.security.hash_service import HashService

    # Commands
    from convenio_core.core.application.commands.catalog_commands import (
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
    from convenio_core.core.application.commands.consultation_commands import (
        CancelConsultationCommand,
        DeleteConsultationCommand,
        RecordConsultationCommand,
        RecordRecurringConsultationsCommand,
        UpdateConsultationCommand,
    )
    from convenio_core.core.application.commands.coupon_commands import (
        CreateCouponCommand,
        DeleteCouponCommand,
        ToggleCouponCommand,
        UpdateCouponCommand,
    )
    from convenio_core.core.application.commands.dependent_commands import (
        CreateDependentCommand,
        DeleteDependentCommand,
        UpdateDependentCommand,
    )
    from convenio_core.core.application.commands.scheduling_access_commands import (
        ExtendSchedulingAccessCommand,
        GrantSchedulingAccessCommand,
        RevokeSchedulingAccessCommand,
    )
    from convenio_core.core.application.commands.subscription_commands import (
        ActivateByPaymentCommand,
        ActivateDependentByPaymentCommand,
        ActivateDependentCommand,
        ActivateSubscriptionCommand,
        ExpireSubscriptionsCommand,
    )
    from convenio_core.core.application.commands.user_commands import (
        CreateProfessionalCommand,
        GrantRoleCommand,
        RegisterMemberCommand,
        RevokeRoleCommand,
        UpdateProfessionalCommand,
    )

    # CQRS buses
    from convenio_core.core.application.cqrs import CommandBusImpl, QueryBusImpl

    # Handlers
    from convenio_core.core.application.handlers.catalog_handlers import (
        CreateAttendanceLocationHandler,
        CreatePrivatePatientHandler,
        CreateServiceHandler,
        DeleteAttendanceLocationHandler,
        DeletePrivatePatientHandler,
        DeleteServiceHandler,
        GetAttendanceLocationHandler,
        GetPrivatePatientHandler,
        GetServiceHandler,
        ListAttendanceLocationsHandler,
        ListPrivatePatientsHandler,
        ListServicesHandler,
        UpdateAttendanceLocationHandler,
        UpdatePrivatePatientHandler,
        UpdateServiceHandler,
    )
    from convenio_core.core.application.handlers.consultation_handlers import (
        CancelConsultationHandler,
        DeleteConsultationHandler,
        GetConsultationHandler,
        ListConsultationsHandler,
        RecordConsultationHandler,
        RecordRecurringConsultationsHandler,
        UpdateConsultationHandler,
    )
    from convenio_core.core.application.handlers.coupon_handlers import (
        CreateCouponHandler,
        DeleteCouponHandler,
        GetCouponHandler,
        ListCouponsHandler,
        ResolveCouponHandler,
        ToggleCouponHandler,
        UpdateCouponHandler,
    )
    from convenio_core.core.application.handlers.dependent_handlers import (
        CreateDependentHandler,
        DeleteDependentHandler,
        GetDependentHandler,
        ListDependentsHandler,
        UpdateDependentHandler,
    )
    from convenio_core.core.application.handlers.professional_handlers import (
        CreateProfessionalHandler,
        GetProfessionalHandler,
        ListProfessionalsHandler,
        UpdateProfessionalHandler,
    )
    from convenio_core.core.application.handlers.report_handlers import (
        CancelledConsultationsHandler,
        ProfessionalRevenueHandler,
        RevenueReportHandler,
    )
    from convenio_core.core.application.handlers.scheduling_access_handlers import (
        ExtendSchedulingAccessHandler,
        GetSchedulingAccessHandler,
        GrantSchedulingAccessHandler,
        ListSchedulingAccessHandler,
        RevokeSchedulingAccessHandler,
    )
    from convenio_core.core.application.handlers.subscription_handlers import (
        ActivateByPaymentHandler,
        ActivateDependentByPaymentHandler,
        ActivateDependentHandler,
        ActivateSubscriptionHandler,
        ExpireSubscriptionsHandler,
        GetDependentSubscriptionHandler,
        GetSubscriptionHandler,
    )
    from convenio_core.core.application.handlers.user_handlers import (
        GetUserHandler,
        GrantRoleHandler,
        ListUsersHandler,
        RegisterMemberHandler,
        RevokeRoleHandler,
    )

    # Queries
    from convenio_core.core.application.queries.catalog_queries import (
        GetAttendanceLocationQuery,
        GetPrivatePatientQuery,
        GetServiceQuery,
        ListAttendanceLocationsQuery,
        ListPrivatePatientsQuery,
        ListServicesQuery,
    )
    from convenio_core.core.application.queries.consultation_queries import (
        GetConsultationQuery,
        ListConsultationsQuery,
    )
    from convenio_core.core.application.queries.coupon_queries import (
        GetCouponQuery,
        ListCouponsQuery,
        ResolveCouponQuery,
    )
    from convenio_core.core.application.queries.dependent_queries import GetDependentQuery, ListDependentsQuery
    from convenio_core.core.application.queries.professional_queries import (
        GetProfessionalQuery,
        ListProfessionalsQuery,
    )
    from convenio_core.core.application.queries.report_queries import (
        CancelledConsultationsQuery,
        ProfessionalRevenueQuery,
        RevenueReportQuery,
    )
    from convenio_core.core.application.queries.scheduling_access_queries import (
        GetSchedulingAccessQuery,
        ListSchedulingAccessQuery,
    )
    from convenio_core.core.application.queries.subscription_queries import (
        GetDependentSubscriptionQuery,
        GetSubscriptionQuery,
    )
    from convenio_core.core.application.queries.user_queries import GetUserQuery, ListUsersQuery

    # Serviços
    from convenio_core.core.application.services.coupon_service import CouponService
    from convenio_core.core.application.services.revenue_split_service import RevenueSplitService
    from convenio_core.core.domain.services.clock import SystemClock
    from convenio_core.core.domain.services.event_dispatcher import EventDispatcher
    from convenio_core.core.domain.services.pricing import SubscriptionPricing

    # ─────────────────────────────────────────────────────────
    # Construção do container DI
    # ─────────────────────────────────────────────────────────
    class Container(containers.DeclarativeContainer):
        config = providers.Configuration()

        # Infra
        logger           = providers.Singleton(structlog.get_logger)
        event_dispatcher = providers.Singleton(EventDispatcher)
        clock            = providers.Singleton(SystemClock)
        pricing          = providers.Singleton(
            SubscriptionPricing,
            titular=config.prices.titular,
            dependente=config.prices.dependente,
        )

        # CQRS
        command_bus = providers.Singleton(CommandBusImpl, dispatcher=event_dispatcher)
        query_bus   = providers.Singleton(QueryBusImpl)

        # Repositórios
        user_repo              = providers.Singleton(UserRepoImpl)
        subscription_repo      = providers.Singleton(SubscriptionRepoImpl)
        dependent_repo         = providers.Singleton(DependentRepoImpl)
        coupon_repo            = providers.Singleton(CouponRepoImpl)
        scheduling_access_repo = providers.Singleton(SchedulingAccessRepoImpl)
        professional_repo      = providers.Singleton(ProfessionalRepoImpl)
        service_repo           = providers.Singleton(ServiceRepoImpl)
        location_repo          = providers.Singleton(AttendanceLocationRepoImpl)
        private_patient_repo   = providers.Singleton(PrivatePatientRepoImpl)
        consultation_repo      = providers.Singleton(ConsultationRepoImpl)

        # Serviços
        hash_service    = providers.Singleton(HashService)
        coupon_service  = providers.Singleton(CouponService, repo=coupon_repo, pricing=pricing)
        split_service   = providers.Singleton(RevenueSplitService)

        # Usuários & papéis
        register_member_handler = providers.Factory(RegisterMemberHandler, repo=user_repo, hash_service=hash_service)
        grant_role_handler      = providers.Factory(GrantRoleHandler,      repo=user_repo)
        revoke_role_handler     = providers.Factory(RevokeRoleHandler,     repo=user_repo)
        get_user_handler        = providers.Factory(GetUserHandler,        repo=user_repo)
        list_users_handler      = providers.Factory(ListUsersHandler,      repo=user_repo)

        # Assinaturas
        activate_subscription_handler = providers.Factory(ActivateSubscriptionHandler, repo=subscription_repo, clock=clock)
        activate_dependent_handler    = providers.Factory(ActivateDependentHandler,    repo=subscription_repo, clock=clock)
        activate_by_payment_handler   = providers.Factory(
            ActivateByPaymentHandler, repo=subscription_repo, coupon_service=coupon_service, clock=clock,
        )
        activate_dependent_by_payment_handler = providers.Factory(
            ActivateDependentByPaymentHandler, repo=subscription_repo, coupon_service=coupon_service, clock=clock,
        )
        expire_subscriptions_handler  = providers.Factory(ExpireSubscriptionsHandler, repo=subscription_repo, clock=clock)
        get_subscription_handler      = providers.Factory(GetSubscriptionHandler,          repo=subscription_repo)
        get_dependent_subscription_handler = providers.Factory(GetDependentSubscriptionHandler, repo=subscription_repo)

        # Dependentes
        create_dependent_handler = providers.Factory(
            CreateDependentHandler,
            repo=dependent_repo,
            user_repo=user_repo,
            max_dependents=config.max_dependents,
        )
        update_dependent_handler = providers.Factory(UpdateDependentHandler, repo=dependent_repo)
        delete_dependent_handler = providers.Factory(DeleteDependentHandler, repo=dependent_repo)
        get_dependent_handler    = providers.Factory(GetDependentHandler,    repo=dependent_repo)
        list_dependents_handler  = providers.Factory(ListDependentsHandler,  repo=dependent_repo)

        # Cupons
        create_coupon_handler  = providers.Factory(CreateCouponHandler, repo=coupon_repo, coupon_service=coupon_service)
        update_coupon_handler  = providers.Factory(UpdateCouponHandler, repo=coupon_repo, coupon_service=coupon_service)
        toggle_coupon_handler  = providers.Factory(ToggleCouponHandler, repo=coupon_repo)
        delete_coupon_handler  = providers.Factory(DeleteCouponHandler, repo=coupon_repo)
        get_coupon_handler     = providers.Factory(GetCouponHandler,    repo=coupon_repo)
        list_coupons_handler   = providers.Factory(ListCouponsHandler,  repo=coupon_repo)
        resolve_coupon_handler = providers.Factory(ResolveCouponHandler, coupon_service=coupon_service, clock=clock)

        # Acesso à agenda
        grant_access_handler  = providers.Factory(
            GrantSchedulingAccessHandler, repo=scheduling_access_repo, user_repo=user_repo, clock=clock,
        )
        extend_access_handler = providers.Factory(ExtendSchedulingAccessHandler, repo=scheduling_access_repo, clock=clock)
        revoke_access_handler = providers.Factory(RevokeSchedulingAccessHandler, repo=scheduling_access_repo, clock=clock)
        get_access_handler    = providers.Factory(GetSchedulingAccessHandler,    repo=scheduling_access_repo, clock=clock)
        list_access_handler   = providers.Factory(ListSchedulingAccessHandler,   repo=scheduling_access_repo, clock=clock)

        # Profissionais & catálogo
        create_professional_handler = providers.Factory(
            CreateProfessionalHandler, repo=professional_repo, user_repo=user_repo, hash_service=hash_service,
        )
        update_professional_handler = providers.Factory(UpdateProfessionalHandler, repo=professional_repo, user_repo=user_repo)
        get_professional_handler    = providers.Factory(GetProfessionalHandler,    repo=professional_repo)
        list_professionals_handler  = providers.Factory(ListProfessionalsHandler,  repo=professional_repo)

        create_service_handler = providers.Factory(CreateServiceHandler, repo=service_repo)
        update_service_handler = providers.Factory(UpdateServiceHandler, repo=service_repo)
        delete_service_handler = providers.Factory(DeleteServiceHandler, repo=service_repo)
        get_service_handler    = providers.Factory(GetServiceHandler,    repo=service_repo)
        list_services_handler  = providers.Factory(ListServicesHandler,  repo=service_repo)

        create_location_handler = providers.Factory(CreateAttendanceLocationHandler, repo=location_repo, user_repo=user_repo)
        update_location_handler = providers.Factory(UpdateAttendanceLocationHandler, repo=location_repo)
        delete_location_handler = providers.Factory(DeleteAttendanceLocationHandler, repo=location_repo)
        get_location_handler    = providers.Factory(GetAttendanceLocationHandler,    repo=location_repo)
        list_locations_handler  = providers.Factory(ListAttendanceLocationsHandler,  repo=location_repo)

        create_private_patient_handler = providers.Factory(
            CreatePrivatePatientHandler, repo=private_patient_repo, user_repo=user_repo,
        )
        update_private_patient_handler = providers.Factory(UpdatePrivatePatientHandler, repo=private_patient_repo)
        delete_private_patient_handler = providers.Factory(DeletePrivatePatientHandler, repo=private_patient_repo)
        get_private_patient_handler    = providers.Factory(GetPrivatePatientHandler,    repo=private_patient_repo)
        list_private_patients_handler  = providers.Factory(ListPrivatePatientsHandler,  repo=private_patient_repo)

        # Consultas & relatórios
        record_consultation_handler = providers.Factory(
            RecordConsultationHandler,
            repo=consultation_repo,
            professional_repo=professional_repo,
            service_repo=service_repo,
            location_repo=location_repo,
        )
        record_recurring_consultations_handler = providers.Factory(
            RecordRecurringConsultationsHandler,
            repo=consultation_repo,
            professional_repo=professional_repo,
            service_repo=service_repo,
            location_repo=location_repo,
        )
        update_consultation_handler = providers.Factory(
            UpdateConsultationHandler,
            repo=consultation_repo,
            professional_repo=professional_repo,
            service_repo=service_repo,
            location_repo=location_repo,
        )
        delete_consultation_handler = providers.Factory(DeleteConsultationHandler, repo=consultation_repo)
        cancel_consultation_handler = providers.Factory(CancelConsultationHandler, repo=consultation_repo, clock=clock)
        get_consultation_handler    = providers.Factory(GetConsultationHandler,    repo=consultation_repo)
        list_consultations_handler  = providers.Factory(ListConsultationsHandler,  repo=consultation_repo)

        revenue_report_handler = providers.Factory(
            RevenueReportHandler, repo=consultation_repo, split_service=split_service,
        )
        professional_revenue_handler = providers.Factory(
            ProfessionalRevenueHandler,
            repo=consultation_repo,
            professional_repo=professional_repo,
            split_service=split_service,
        )
        cancelled_report_handler = providers.Factory(CancelledConsultationsHandler, repo=consultation_repo)

        def init(self):  # noqa: PLR0915
            # Bus de comandos
            cmd_bus = self.command_bus()

            cmd_bus.register(RegisterMemberCommand, self.register_member_handler())
            cmd_bus.register(GrantRoleCommand,      self.grant_role_handler())
            cmd_bus.register(RevokeRoleCommand,     self.revoke_role_handler())

            cmd_bus.register(ActivateSubscriptionCommand,       self.activate_subscription_handler())
            cmd_bus.register(ActivateDependentCommand,          self.activate_dependent_handler())
            cmd_bus.register(ActivateByPaymentCommand,          self.activate_by_payment_handler())
            cmd_bus.register(ActivateDependentByPaymentCommand, self.activate_dependent_by_payment_handler())
            cmd_bus.register(ExpireSubscriptionsCommand,        self.expire_subscriptions_handler())

            cmd_bus.register(CreateDependentCommand, self.create_dependent_handler())
            cmd_bus.register(UpdateDependentCommand, self.update_dependent_handler())
            cmd_bus.register(DeleteDependentCommand, self.delete_dependent_handler())

            cmd_bus.register(CreateCouponCommand, self.create_coupon_handler())
            cmd_bus.register(UpdateCouponCommand, self.update_coupon_handler())
            cmd_bus.register(ToggleCouponCommand, self.toggle_coupon_handler())
            cmd_bus.register(DeleteCouponCommand, self.delete_coupon_handler())

            cmd_bus.register(GrantSchedulingAccessCommand,  self.grant_access_handler())
            cmd_bus.register(ExtendSchedulingAccessCommand, self.extend_access_handler())
            cmd_bus.register(RevokeSchedulingAccessCommand, self.revoke_access_handler())

            cmd_bus.register(CreateProfessionalCommand, self.create_professional_handler())
            cmd_bus.register(UpdateProfessionalCommand, self.update_professional_handler())

            cmd_bus.register(CreateServiceCommand, self.create_service_handler())
            cmd_bus.register(UpdateServiceCommand, self.update_service_handler())
            cmd_bus.register(DeleteServiceCommand, self.delete_service_handler())

            cmd_bus.register(CreateAttendanceLocationCommand, self.create_location_handler())
            cmd_bus.register(UpdateAttendanceLocationCommand, self.update_location_handler())
            cmd_bus.register(DeleteAttendanceLocationCommand, self.delete_location_handler())

            cmd_bus.register(CreatePrivatePatientCommand, self.create_private_patient_handler())
            cmd_bus.register(UpdatePrivatePatientCommand, self.update_private_patient_handler())
            cmd_bus.register(DeletePrivatePatientCommand, self.delete_private_patient_handler())

            cmd_bus.register(RecordConsultationCommand, self.record_consultation_handler())
            cmd_bus.register(RecordRecurringConsultationsCommand, self.record_recurring_consultations_handler())
            cmd_bus.register(UpdateConsultationCommand, self.update_consultation_handler())
            cmd_bus.register(DeleteConsultationCommand, self.delete_consultation_handler())
            cmd_bus.register(CancelConsultationCommand, self.cancel_consultation_handler())

            # Bus de queries
            qry_bus = self.query_bus()

            qry_bus.register(GetUserQuery,   self.get_user_handler())
            qry_bus.register(ListUsersQuery, self.list_users_handler())

            qry_bus.register(GetSubscriptionQuery,          self.get_subscription_handler())
            qry_bus.register(GetDependentSubscriptionQuery, self.get_dependent_subscription_handler())

            qry_bus.register(GetDependentQuery,   self.get_dependent_handler())
            qry_bus.register(ListDependentsQuery, self.list_dependents_handler())

            qry_bus.register(GetCouponQuery,     self.get_coupon_handler())
            qry_bus.register(ListCouponsQuery,   self.list_coupons_handler())
            qry_bus.register(ResolveCouponQuery, self.resolve_coupon_handler())

            qry_bus.register(GetSchedulingAccessQuery,  self.get_access_handler())
            qry_bus.register(ListSchedulingAccessQuery, self.list_access_handler())

            qry_bus.register(GetProfessionalQuery,   self.get_professional_handler())
            qry_bus.register(ListProfessionalsQuery, self.list_professionals_handler())

            qry_bus.register(GetServiceQuery,   self.get_service_handler())
            qry_bus.register(ListServicesQuery, self.list_services_handler())

            qry_bus.register(GetAttendanceLocationQuery,   self.get_location_handler())
            qry_bus.register(ListAttendanceLocationsQuery, self.list_locations_handler())

            qry_bus.register(GetPrivatePatientQuery,   self.get_private_patient_handler())
            qry_bus.register(ListPrivatePatientsQuery, self.list_private_patients_handler())

            qry_bus.register(GetConsultationQuery,   self.get_consultation_handler())
            qry_bus.register(ListConsultationsQuery, self.list_consultations_handler())

            qry_bus.register(RevenueReportQuery,          self.revenue_report_handler())
            qry_bus.register(ProfessionalRevenueQuery,    self.professional_revenue_handler())
            qry_bus.register(CancelledConsultationsQuery, self.cancelled_report_handler())

    # ------- INSTANCIAÇÃO E CONFIG -------
    container = Container()
    container.config.prices.titular.from_value(Decimal(str(settings.SUBSCRIPTION_PRICE_TITULAR)))
    container.config.prices.dependente.from_value(Decimal(str(settings.SUBSCRIPTION_PRICE_DEPENDENTE)))
    container.config.max_dependents.from_value(int(settings.MAX_DEPENDENTS_PER_MEMBER))
    Container.init(container)
    return container
