from django.apps import AppConfig


class BillingConfig(AppConfig):
    name = "convenio_api"
    verbose_name = "Convênio API"

    def ready(self):
        from django.conf import settings

        # ─── DI containers ──────────────────────────────────────────
        from affiliate_billing.adapters.config.composition_root import (
            setup_di_container_from_settings as build_affiliate_container,
        )
        from convenio_core.adapters.config.composition_root import (
            setup_di_container_from_settings as build_core_container,
        )

        # o container de afiliados assina os eventos do core; a ordem importa
        build_core_container(settings)
        build_affiliate_container(settings)
