import os

from django.core.asgi import get_asgi_application

from config.structlog_config import configure_logging

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
configure_logging(level=os.getenv("LOG_LEVEL", "INFO"))

application = get_asgi_application()
