"""
With these settings, tests run faster.
"""

# ruff: noqa: F405
from .base import *  # noqa: F403

# GENERAL
# ------------------------------------------------------------------------------
DEBUG = False
SECRET_KEY = "test-secret-key-not-for-production"
TEST_RUNNER = "django.test.runner.DiscoverRunner"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# PASSWORDS
# ------------------------------------------------------------------------------
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# EMAIL
# ------------------------------------------------------------------------------
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# CHANNELS
# ------------------------------------------------------------------------------
CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}

# STRIPE
# ------------------------------------------------------------------------------
STRIPE_SECRET_KEY = "sk_test_velvet_routes"
STRIPE_WEBHOOK_SECRET = "whsec_velvet_routes"
STRIPE_CURRENCY = "usd"
STRIPE_MAX_NETWORK_RETRIES = 0

# REPOSITORIES
# ------------------------------------------------------------------------------
INVENTORY_REPOSITORY = "velvet_routes.applications.inventory.repositories.DjangoInventoryRepository"
BOOKING_REPOSITORY = "velvet_routes.applications.bookings.repositories.DjangoBookingRepository"

# NOTIFICATIONS
# ------------------------------------------------------------------------------
NOTIFICATIONS = {
    **NOTIFICATIONS,
    "CHANNELS": ["EMAIL", "SMS", "PUSH", "WHATSAPP"],
    "BACKENDS": {
        "EMAIL": f"{NOTIFICATION_BACKENDS_PATH}.EmailBackend",
        "SMS": f"{NOTIFICATION_BACKENDS_PATH}.LocmemBackend",
        "WHATSAPP": f"{NOTIFICATION_BACKENDS_PATH}.LocmemBackend",
        "PUSH": f"{NOTIFICATION_BACKENDS_PATH}.ChannelLayerPushBackend",
    },
}

LOGGING["loggers"]["velvet_routes"]["level"] = "WARNING"
