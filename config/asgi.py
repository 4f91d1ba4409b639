# ruff: noqa
"""
ASGI config for velvet-routes project.

It exposes the ASGI callable as a module-level variable named ``application``.
HTTP goes to Django, websockets to the notification consumer.

For more information on this file, see
https://docs.djangoproject.com/en/dev/howto/deployment/asgi/

"""

import logging
import os

from channels.routing import ProtocolTypeRouter, URLRouter
from django.core.asgi import get_asgi_application

# If DJANGO_SETTINGS_MODULE is unset, default to the local settings
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.local")

logger = logging.getLogger(__name__)
logger.info(f"Using settings module: {os.environ['DJANGO_SETTINGS_MODULE']}")

# This application object is used by any ASGI server configured to use this file.
django_application = get_asgi_application()

# Import websocket application here, so apps from django_application are loaded first
from velvet_routes.applications.notifications.middleware import JWTMiddleware
from velvet_routes.applications.notifications.routing import websocket_urlpatterns

application = ProtocolTypeRouter(
    {
        "http": django_application,
        "websocket": JWTMiddleware(URLRouter(websocket_urlpatterns)),
    }
)
