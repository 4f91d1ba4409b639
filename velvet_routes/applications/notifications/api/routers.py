from django.conf import settings
from django.urls import re_path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from velvet_routes.applications.notifications.api.views import (
    NotificationViewSet,
    SubscribeView,
    TestNotificationView,
    VapidPublicKeyView,
)

if settings.DEBUG:
    router = DefaultRouter()
else:
    router = SimpleRouter()

router.register("notifications", NotificationViewSet, basename="notifications")

app_name = "notifications"
urlpatterns = [
    re_path(r"^notifications/subscribe/?$", SubscribeView.as_view(), name="subscribe"),
    re_path(r"^notifications/test/?$", TestNotificationView.as_view(), name="test"),
    re_path(r"^notifications/vapid-public-key/?$", VapidPublicKeyView.as_view(), name="vapid-public-key"),
    *router.urls,
]
