from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view, inline_serializer
from rest_framework import serializers

from velvet_routes.applications.notifications.api.serializers import (
    NotificationResultSerializer,
    NotificationSerializer,
    PushSubscriptionSerializer,
    SubscribeSerializer,
    TestNotificationSerializer,
)
from velvet_routes.helpers.custom_exceptions import CustomError

subscribe_schema = extend_schema(
    summary="Subscribe to push notifications",
    description="Stores the browser push subscription of the authenticated user. Re-subscribing updates the keys.",
    request=SubscribeSerializer,
    responses={201: PushSubscriptionSerializer, 200: PushSubscriptionSerializer, **CustomError.DEFAULT_ERROR_SCHEMA()},
    tags=["Notifications"],
)

test_notification_schema = extend_schema(
    summary="Send a test notification",
    description="Sends a test message over every channel the user can receive.",
    request=TestNotificationSerializer,
    responses={
        200: inline_serializer(
            name="TestNotificationResponse",
            fields={"notifications": NotificationResultSerializer(many=True)},
        )
    },
    tags=["Notifications"],
)

vapid_key_schema = extend_schema(
    summary="VAPID public key",
    responses={200: inline_serializer(name="VapidKeyResponse", fields={"publicKey": serializers.CharField()})},
    tags=["Notifications"],
)

notification_viewset_schema = extend_schema_view(
    list=extend_schema(
        summary="List notifications",
        description="Notifications sent to the authenticated user, newest first.",
        responses={200: NotificationSerializer(many=True)},
        tags=["Notifications"],
    ),
    retrieve=extend_schema(
        summary="Retrieve a notification",
        responses={200: NotificationSerializer, 404: OpenApiResponse(description="Not found")},
        tags=["Notifications"],
    ),
)
