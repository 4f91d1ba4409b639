from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
import auto_prefetch

from velvet_routes.helpers.models import TimeBasedModel


class Review(TimeBasedModel):
    user = auto_prefetch.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="reviews")
    inventory_item = auto_prefetch.ForeignKey(
        "inventory.InventoryItem", on_delete=models.CASCADE, related_name="reviews"
    )
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=255, blank=True)
    body = models.TextField(blank=True)

    class Meta(TimeBasedModel.Meta):
        constraints = [
            models.CheckConstraint(condition=models.Q(rating__gte=1, rating__lte=5), name="review_rating_range"),
        ]

    def __str__(self):
        return f"{self.rating}/5 by {self.user} on {self.inventory_item_id}"
