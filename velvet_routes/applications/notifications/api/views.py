import logging

from django.conf import settings
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from velvet_routes.applications.notifications.api.schemas import (
    notification_viewset_schema,
    subscribe_schema,
    test_notification_schema,
    vapid_key_schema,
)
from velvet_routes.applications.notifications.api.serializers import (
    NotificationSerializer,
    PushSubscriptionSerializer,
    SubscribeSerializer,
    TestNotificationSerializer,
)
from velvet_routes.applications.notifications.dispatcher import NotificationDispatcher
from velvet_routes.applications.notifications.models import Notification, PushSubscription

logger = logging.getLogger(__name__)


class SubscribeView(APIView):
    permission_classes = [IsAuthenticated]

    @subscribe_schema
    def post(self, request):
        serializer = SubscribeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subscription = serializer.validated_data["subscription"]
        keys = subscription.get("keys", {})

        push_subscription, created = PushSubscription.objects.update_or_create(
            endpoint=subscription["endpoint"],
            defaults={
                "user": request.user,
                "p256dh": keys.get("p256dh", ""),
                "auth": keys.get("auth", ""),
                "user_agent": request.headers.get("user-agent", "")[:255],
            },
        )
        logger.info(f"Push subscription {push_subscription.pk} {'created' if created else 'updated'}")
        return Response(
            PushSubscriptionSerializer(push_subscription).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class TestNotificationView(APIView):
    permission_classes = [IsAuthenticated]

    @test_notification_schema
    def post(self, request):
        serializer = TestNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        results = NotificationDispatcher().send_test(
            request.user,
            title=data.get("title", "Test notification"),
            message=data.get("message"),
            phone=data.get("phoneNumber") or None,
        )
        return Response({"notifications": [result.as_dict() for result in results]}, status=status.HTTP_200_OK)


class VapidPublicKeyView(APIView):
    permission_classes = [AllowAny]

    @vapid_key_schema
    def get(self, request):
        return Response({"publicKey": settings.NOTIFICATIONS.get("VAPID_PUBLIC_KEY", "")}, status=status.HTTP_200_OK)


@notification_viewset_schema
class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user).order_by("-created_at", "-id")
