"""
Composition-root do *affiliate_billing*.

• Reaproveita o dispatcher de eventos do core: o orquestrador e as métricas
  assinam os eventos do motor de assinaturas.
• Devolve um singleton `container` com os handlers registrados.
"""
from dependency_injector import containers, providers

container = None  # type: ignore


# ────────────────────────────────────────────────────────────────────
def setup_di_container_from_settings(settings):                      # noqa: PLR0915
    global container                                                 # noqa: PLW0603
    if container is not None:
        import structlog

        structlog.get_logger(__name__).debug(
            "AffiliateBilling DI container já instanciado."
        )
        return container

    from decimal import Decimal

    import structlog

    from convenio_core.adapters.config.composition_root import (
        setup_di_container_from_settings as _setup_core_di,
    )

    core_container = _setup_core_di(settings)
    # instâncias já registradas no core; providers.Object evita cópias no container
    core_dispatcher = core_container.event_dispatcher()

    from affiliate_billing.adapters.observability.metrics import register_metrics_subscribers
    from affiliate_billing.adapters.repositories.affiliate_repo_impl import AffiliateRepoImpl
    from affiliate_billing.adapters.repositories.commission_repo_impl import CommissionRepoImpl
    from affiliate_billing.adapters.repositories.referral_repo_impl import ReferralRepoImpl
    from affiliate_billing.core.application.commands.affiliate_commands import (
        ConfirmPaymentCommand,
        CreateAffiliateCommand,
        MarkCommissionPaidCommand,
        RecordReferralClickCommand,
        UpdateAffiliateCommand,
    )
    from affiliate_billing.core.application.handlers.affiliate_handlers import (
        AffiliateDashboardHandler,
        AffiliateFinancialReportHandler,
        ConfirmPaymentHandler,
        CreateAffiliateHandler,
        GetAffiliateHandler,
        ListAffiliateCommissionsHandler,
        ListAffiliatesHandler,
        ListCommissionsByPeriodHandler,
        ListReferredUsersHandler,
        MarkCommissionPaidHandler,
        RecordReferralClickHandler,
        UpdateAffiliateHandler,
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
    from affiliate_billing.core.application.services.activation_orchestrator import ActivationOrchestrator
    from affiliate_billing.core.application.services.attribution_tracker import AttributionTracker
    from affiliate_billing.core.application.services.commission_ledger import CommissionLedger
    from convenio_core.core.application.cqrs import CommandBusImpl, QueryBusImpl

    # ─── CONTAINER ─────────────────────────────────────────────────
    class Container(containers.DeclarativeContainer):
        config = providers.Configuration()

        # --- cross-cutting ----------------------------------------
        logger      = providers.Singleton(structlog.get_logger, __name__)
        dispatcher  = providers.Object(core_dispatcher)
        clock       = providers.Object(core_container.clock())
        command_bus = providers.Singleton(CommandBusImpl, dispatcher=dispatcher)
        query_bus   = providers.Singleton(QueryBusImpl)

        # --- repositórios -----------------------------------------
        affiliate_repo  = providers.Singleton(AffiliateRepoImpl)
        referral_repo   = providers.Singleton(ReferralRepoImpl)
        commission_repo = providers.Singleton(CommissionRepoImpl)

        # --- serviços ---------------------------------------------
        tracker = providers.Singleton(
            AttributionTracker,
            affiliate_repo=affiliate_repo,
            referral_repo=referral_repo,
            dispatcher=dispatcher,
            clock=clock,
        )
        ledger = providers.Singleton(
            CommissionLedger,
            repo=commission_repo,
            affiliate_repo=affiliate_repo,
            referral_repo=referral_repo,
            dispatcher=dispatcher,
            clock=clock,
        )
        orchestrator = providers.Singleton(
            ActivationOrchestrator,
            command_bus=providers.Object(core_container.command_bus()),
            tracker=tracker,
            ledger=ledger,
        )

        # --- handlers ---------------------------------------------
        create_affiliate_handler = providers.Factory(
            CreateAffiliateHandler,
            repo=affiliate_repo,
            user_repo=providers.Object(core_container.user_repo()),
            default_commission=config.default_commission,
        )
        update_affiliate_handler = providers.Factory(UpdateAffiliateHandler, repo=affiliate_repo)
        get_affiliate_handler    = providers.Factory(GetAffiliateHandler,    repo=affiliate_repo)
        list_affiliates_handler  = providers.Factory(
            ListAffiliatesHandler,
            repo=affiliate_repo,
            referral_repo=referral_repo,
            commission_repo=commission_repo,
        )
        record_click_handler    = providers.Factory(RecordReferralClickHandler, tracker=tracker)
        referred_users_handler  = providers.Factory(
            ListReferredUsersHandler, repo=affiliate_repo, referral_repo=referral_repo,
        )
        confirm_payment_handler = providers.Factory(ConfirmPaymentHandler, orchestrator=orchestrator)
        mark_paid_handler       = providers.Factory(MarkCommissionPaidHandler, ledger=ledger)
        list_affiliate_commissions_handler = providers.Factory(ListAffiliateCommissionsHandler, repo=commission_repo)
        list_commissions_by_period_handler = providers.Factory(ListCommissionsByPeriodHandler,  repo=commission_repo)
        dashboard_handler = providers.Factory(
            AffiliateDashboardHandler,
            repo=affiliate_repo,
            referral_repo=referral_repo,
            commission_repo=commission_repo,
        )
        financial_report_handler = providers.Factory(
            AffiliateFinancialReportHandler,
            repo=affiliate_repo,
            commission_repo=commission_repo,
            referral_repo=referral_repo,
        )

        # ----------------------------------------------------------
        def init(self) -> None:
            """Registra handlers e assinantes – executa 1×."""
            bus = self.command_bus()
            bus.register(CreateAffiliateCommand,     self.create_affiliate_handler())
            bus.register(UpdateAffiliateCommand,     self.update_affiliate_handler())
            bus.register(RecordReferralClickCommand, self.record_click_handler())
            bus.register(ConfirmPaymentCommand,      self.confirm_payment_handler())
            bus.register(MarkCommissionPaidCommand,  self.mark_paid_handler())

            qry = self.query_bus()
            qry.register(GetAffiliateQuery,             self.get_affiliate_handler())
            qry.register(ListAffiliatesQuery,           self.list_affiliates_handler())
            qry.register(ListReferredUsersQuery,        self.referred_users_handler())
            qry.register(ListAffiliateCommissionsQuery, self.list_affiliate_commissions_handler())
            qry.register(ListCommissionsByPeriodQuery,  self.list_commissions_by_period_handler())
            qry.register(AffiliateDashboardQuery,       self.dashboard_handler())
            qry.register(AffiliateFinancialReportQuery, self.financial_report_handler())

            dispatcher = self.dispatcher()
            self.orchestrator().subscribe(dispatcher)
            register_metrics_subscribers(dispatcher)

    # ─── INSTANTIAÇÃO + CONFIG ─────────────────────────────────────
    container = Container()
    container.config.default_commission.from_value(Decimal(str(settings.AFFILIATE_DEFAULT_COMMISSION)))

    Container.init(container)                                             # type: ignore[attr-defined]
    return container
