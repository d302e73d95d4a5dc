"""
Configuração de testes: SQLite em memória, Celery eager e cache local.
As variáveis obrigatórias recebem valores fixos antes de carregar o settings base.
"""
import os

for key, value in {
    "SECRET_KEY": "test-secret-key",
    "JWT_SECRET": "test-jwt-secret",
    "DB_NAME": "convenio_test",
    "DB_USER": "convenio",
    "DB_PASS": "convenio",
    "DB_HOST": "localhost",
    "PAYMENT_WEBHOOK_SECRET": "test-webhook-secret",
}.items():
    os.environ.setdefault(key, value)

from config.settings import *  # noqa: E402,F403

DEBUG = False
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = None

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}
