import os

from celery import Celery

# Define o módulo de configurações do Django para o Celery.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('convenio_api')

# Todas as chaves CELERY_* do settings.py (ex.: CELERY_BROKER_URL).
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()
