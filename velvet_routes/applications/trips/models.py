from django.conf import settings
from django.db import models
import auto_prefetch

from velvet_routes.helpers.models import TimeBasedModel


class Trip(TimeBasedModel):
    """A user's own itinerary. Not tied to bookings."""

    user = auto_prefetch.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="trips")
    title = models.CharField(max_length=255)
    destination = models.CharField(max_length=255)
    start_date = models.DateField()
    end_date = models.DateField()
    description = models.TextField(blank=True)
    activities = models.JSONField(default=list, blank=True)
    location = models.JSONField(null=True, blank=True)

    class Meta(TimeBasedModel.Meta):
        ordering = ["start_date", "id"]

    def __str__(self):
        return f"{self.title} ({self.destination})"
