from rest_framework import serializers

from velvet_routes.applications.notifications.models import Notification, PushSubscription


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = (
            "id",
            "booking",
            "channel",
            "recipient",
            "message",
            "payload",
            "status",
            "error",
            "delivered_at",
            "created_at",
        )
        read_only_fields = fields


class NotificationResultSerializer(serializers.Serializer):
    id = serializers.IntegerField(allow_null=True)
    channel = serializers.CharField()
    status = serializers.CharField()
    recipient = serializers.CharField()
    error = serializers.CharField(allow_null=True)


class SubscriptionKeysSerializer(serializers.Serializer):
    p256dh = serializers.CharField(required=False, allow_blank=True)
    auth = serializers.CharField(required=False, allow_blank=True)


class BrowserSubscriptionSerializer(serializers.Serializer):
    """The ``PushSubscription`` JSON produced by the browser's push manager."""

    endpoint = serializers.URLField(max_length=500)
    expirationTime = serializers.IntegerField(required=False, allow_null=True)  # noqa: N815
    keys = SubscriptionKeysSerializer(required=False)


class SubscribeSerializer(serializers.Serializer):
    subscription = BrowserSubscriptionSerializer()


class PushSubscriptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PushSubscription
        fields = ("id", "endpoint", "user_agent", "created_at")
        read_only_fields = fields


class TestNotificationSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=120, required=False)
    message = serializers.CharField(max_length=500, required=False)
    phoneNumber = serializers.CharField(max_length=20, required=False, allow_blank=True)  # noqa: N815
