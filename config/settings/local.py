# ruff: noqa: F405
from .base import *  # noqa: F403

# GENERAL
# ------------------------------------------------------------------------------
DEBUG = True
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "local-development-secret-key-change-me")
ALLOWED_HOSTS = ["localhost", "0.0.0.0", "127.0.0.1"]  # noqa: S104

# EMAIL
# ------------------------------------------------------------------------------
EMAIL_BACKEND = os.getenv("DJANGO_EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")

# LOGGING
# ------------------------------------------------------------------------------
LOGGING["loggers"]["velvet_routes"]["level"] = "DEBUG"
