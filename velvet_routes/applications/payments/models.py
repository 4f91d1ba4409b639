from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
import auto_prefetch

from velvet_routes.helpers.enums import PaymentProvider, PaymentStatus
from velvet_routes.helpers.models import TimeBasedModel


class Payment(TimeBasedModel):
    """
    The payment recorded against a booking. ``external_id`` is the Stripe
    payment intent id and can back a single booking only.
    """

    booking = auto_prefetch.OneToOneField("bookings.Booking", on_delete=models.CASCADE, related_name="payment")
    user = auto_prefetch.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payments")
    provider = models.CharField(max_length=20, choices=PaymentProvider.choices, default=PaymentProvider.STRIPE)
    external_id = models.CharField(max_length=255, unique=True)
    amount_cents = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    metadata = models.JSONField(default=dict, blank=True)

    def __str__(self):
        return f"{self.external_id} ({self.status})"

    @property
    def is_succeeded(self) -> bool:
        return self.status == PaymentStatus.SUCCEEDED
