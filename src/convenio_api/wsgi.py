import os

from django.core.wsgi import get_wsgi_application

from config.structlog_config import configure_logging

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
configure_logging(level=os.getenv("LOG_LEVEL", "INFO"))

# os containers DI são montados em BillingConfig.ready()
application = get_wsgi_application()
