from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
import auto_prefetch

from velvet_routes.helpers.enums import BookingStatus, TravelMode
from velvet_routes.helpers.models import TimeBasedModel
from velvet_routes.helpers.utils import generate_booking_reference, generate_invoice_number


class Booking(TimeBasedModel):
    """
    A reservation of one or more inventory items. ``total_amount_cents`` is
    always the sum of its items' line totals.
    """

    user = auto_prefetch.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bookings")
    reference = models.CharField(max_length=20, unique=True, default=generate_booking_reference, editable=False)
    total_amount_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(
        max_length=10, choices=BookingStatus.choices, default=BookingStatus.PENDING, db_index=True
    )
    customer_name = models.CharField(max_length=255, blank=True)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=20, blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)

    def __str__(self):
        return f"{self.reference} ({self.status})"

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    @property
    def travel_modes(self) -> list[str]:
        return sorted({item.travel_mode for item in self.items.all()})

    def add_history(self, status: str, notes: str = "", changed_by=None) -> "BookingHistory":
        return BookingHistory.objects.create(booking=self, status=status, notes=notes, changed_by=changed_by)


class BookingItem(auto_prefetch.Model):
    booking = auto_prefetch.ForeignKey(Booking, on_delete=models.CASCADE, related_name="items")
    inventory_item = auto_prefetch.ForeignKey(
        "inventory.InventoryItem", on_delete=models.PROTECT, related_name="booking_items"
    )
    provider_item_id = models.CharField(max_length=255)
    travel_mode = models.CharField(max_length=10, choices=TravelMode.choices)
    title = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price_cents = models.PositiveIntegerField()
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    seat_info = models.JSONField(default=dict, blank=True)
    meta = models.JSONField(default=dict, blank=True)

    class Meta(auto_prefetch.Model.Meta):
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="booking_item_quantity_positive"),
        ]

    def __str__(self):
        return f"{self.title or self.provider_item_id} x{self.quantity}"

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


class Invoice(auto_prefetch.Model):
    booking = auto_prefetch.OneToOneField(Booking, on_delete=models.CASCADE, related_name="invoice")
    number = models.CharField(max_length=20, unique=True, default=generate_invoice_number, editable=False)
    pdf_url = models.CharField(max_length=500, blank=True)
    total_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default="USD")
    issued_at = models.DateTimeField(default=timezone.now)

    class Meta(auto_prefetch.Model.Meta):
        ordering = ["-issued_at"]

    def __str__(self):
        return self.number


class BookingHistory(auto_prefetch.Model):
    """
    Audit trail of booking status changes
    """

    booking = auto_prefetch.ForeignKey(Booking, on_delete=models.CASCADE, related_name="history_entries")
    status = models.CharField(max_length=10, choices=BookingStatus.choices)
    changed_at = models.DateTimeField(auto_now_add=True)
    notes = models.TextField(blank=True)
    changed_by = auto_prefetch.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True
    )

    class Meta(auto_prefetch.Model.Meta):
        ordering = ["-changed_at", "-id"]
        verbose_name_plural = "booking history"

    def __str__(self):
        return f"{self.booking.reference}: {self.status}"
