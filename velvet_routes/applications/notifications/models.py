from django.conf import settings
from django.db import models
import auto_prefetch

from velvet_routes.helpers.enums import NotificationChannel, NotificationStatus
from velvet_routes.helpers.models import TimeBasedModel


class Notification(TimeBasedModel):
    """
    One delivery attempt over one channel. Rows are created PENDING before
    the attempt and end up DELIVERED or FAILED.
    """

    user = auto_prefetch.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    booking = auto_prefetch.ForeignKey(
        "bookings.Booking", on_delete=models.CASCADE, related_name="notifications", null=True, blank=True
    )
    channel = models.CharField(max_length=10, choices=NotificationChannel.choices)
    recipient = models.CharField(max_length=255)
    message = models.TextField()
    payload = models.JSONField(default=dict, blank=True)
    status = models.CharField(
        max_length=10, choices=NotificationStatus.choices, default=NotificationStatus.PENDING, db_index=True
    )
    error = models.TextField(blank=True)
    provider_message_id = models.CharField(max_length=255, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.channel} to {self.recipient} ({self.status})"


class PushSubscription(TimeBasedModel):
    """A browser service-worker subscription for web push."""

    user = auto_prefetch.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="push_subscriptions"
    )
    endpoint = models.URLField(max_length=500, unique=True)
    p256dh = models.CharField(max_length=255, blank=True)
    auth = models.CharField(max_length=255, blank=True)
    user_agent = models.CharField(max_length=255, blank=True)

    def __str__(self):
        return f"Push subscription of {self.user}"

    def as_subscription_info(self) -> dict:
        """The subscription in the shape browsers hand out and web push libraries expect."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}
