from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
import auto_prefetch

from velvet_routes.helpers.enums import TravelMode
from velvet_routes.helpers.models import TimeBasedModel


def default_supported_modes():
    return []


class Provider(TimeBasedModel):
    """
    A supplier of inventory (Booking.com, Sky Scrapper, FlixBus, ...).
    """

    name = models.CharField(max_length=100, unique=True)
    display_name = models.CharField(max_length=255)
    base_url = models.URLField(blank=True)
    is_active = models.BooleanField(default=True)
    supported_modes = models.JSONField(default=default_supported_modes, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta(TimeBasedModel.Meta):
        ordering = ["name"]

    def __str__(self):
        return self.display_name


class InventoryItem(TimeBasedModel):
    """
    A bookable offer. Mode specific attributes live on the matching detail
    row (``hotel``, ``flight``, ``car``, ``train`` or ``bus``).
    """

    provider: Provider = auto_prefetch.ForeignKey(Provider, on_delete=models.PROTECT, related_name="items")
    provider_item_id = models.CharField(max_length=255)
    travel_mode = models.CharField(max_length=10, choices=TravelMode.choices, db_index=True)
    price_cents = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    currency = models.CharField(max_length=3, default="USD")
    searchable_location = models.CharField(max_length=255, db_index=True)
    is_available = models.BooleanField(default=True)
    raw_data = models.JSONField(default=dict, blank=True)

    class Meta(TimeBasedModel.Meta):
        ordering = ["price_cents", "id"]
        constraints = [
            models.UniqueConstraint(fields=["provider", "provider_item_id"], name="unique_provider_item"),
            models.CheckConstraint(condition=models.Q(price_cents__gt=0), name="inventory_price_positive"),
        ]
        indexes = [models.Index(fields=["travel_mode", "is_available"], name="inventory_mode_avail_idx")]

    def __str__(self):
        return f"{self.get_travel_mode_display()}: {self.title}"

    @property
    def details(self):
        """The mode specific detail row, or None if it was never created."""
        return getattr(self, self.travel_mode.lower(), None)

    @property
    def title(self) -> str:
        details = self.details
        return details.title if details else self.provider_item_id

    @property
    def location(self) -> str:
        """Where the traveller ends up: a destination for transport, the place itself otherwise."""
        details = self.details
        return getattr(details, "destination", None) or getattr(details, "location", None) or self.searchable_location


class TravelDetail(auto_prefetch.Model):
    travel_mode: str = ""

    item: InventoryItem = auto_prefetch.OneToOneField(
        InventoryItem, on_delete=models.CASCADE, related_name="%(class)s"
    )

    class Meta(auto_prefetch.Model.Meta):
        abstract = True

    def clean(self):
        if self.item_id and self.item.travel_mode != self.travel_mode:
            raise ValidationError(
                {"item": f"{type(self).__name__} details require a {self.travel_mode} item, got {self.item.travel_mode}."}
            )

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)


class Hotel(TravelDetail):
    travel_mode = TravelMode.HOTEL

    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255)
    address = models.TextField(blank=True)
    rating = models.DecimalField(
        max_digits=2, decimal_places=1, null=True, blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    stars = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MaxValueValidator(5)])
    amenities = models.JSONField(default=dict, blank=True)
    check_in_time = models.CharField(max_length=5, blank=True)
    check_out_time = models.CharField(max_length=5, blank=True)
    image_url = models.URLField(blank=True)

    def __str__(self):
        return self.name

    @property
    def title(self):
        return self.name


class Flight(TravelDetail):
    travel_mode = TravelMode.FLIGHT

    airline = models.CharField(max_length=100)
    flight_number = models.CharField(max_length=20)
    origin = models.CharField(max_length=100)
    origin_code = models.CharField(max_length=3, blank=True)
    destination = models.CharField(max_length=100)
    destination_code = models.CharField(max_length=3, blank=True)
    depart_at = models.DateTimeField()
    arrive_at = models.DateTimeField()
    duration = models.PositiveIntegerField(help_text="Minutes")
    stops = models.PositiveSmallIntegerField(default=0)
    aircraft_type = models.CharField(max_length=100, blank=True)
    cabin_class = models.CharField(max_length=50, blank=True)

    def __str__(self):
        return f"{self.flight_number} {self.origin_code or self.origin}-{self.destination_code or self.destination}"

    @property
    def title(self):
        return f"{self.airline} {self.flight_number} {self.origin} to {self.destination}"


class Car(TravelDetail):
    travel_mode = TravelMode.CAR

    name = models.CharField(max_length=255)
    category = models.CharField(max_length=50)
    supplier = models.CharField(max_length=100)
    location = models.CharField(max_length=255)
    seats = models.PositiveSmallIntegerField()
    doors = models.PositiveSmallIntegerField()
    transmission = models.CharField(max_length=20)
    fuel_type = models.CharField(max_length=20)
    features = models.JSONField(default=dict, blank=True)
    image_url = models.URLField(blank=True)

    def __str__(self):
        return f"{self.name} ({self.supplier})"

    @property
    def title(self):
        return f"{self.name} ({self.category})"


class Train(TravelDetail):
    travel_mode = TravelMode.TRAIN

    operator = models.CharField(max_length=100)
    train_number = models.CharField(max_length=20)
    origin = models.CharField(max_length=100)
    destination = models.CharField(max_length=100)
    depart_at = models.DateTimeField()
    arrive_at = models.DateTimeField()
    duration = models.PositiveIntegerField(help_text="Minutes")
    train_class = models.CharField(max_length=50, blank=True)
    amenities = models.JSONField(default=dict, blank=True)

    def __str__(self):
        return self.train_number

    @property
    def title(self):
        return f"{self.operator} {self.train_number} {self.origin} to {self.destination}"


class Bus(TravelDetail):
    travel_mode = TravelMode.BUS

    operator = models.CharField(max_length=100)
    bus_number = models.CharField(max_length=20)
    origin = models.CharField(max_length=100)
    destination = models.CharField(max_length=100)
    depart_at = models.DateTimeField()
    arrive_at = models.DateTimeField()
    duration = models.PositiveIntegerField(help_text="Minutes")
    bus_type = models.CharField(max_length=50, blank=True)
    amenities = models.JSONField(default=dict, blank=True)

    class Meta(TravelDetail.Meta):
        verbose_name_plural = "buses"

    def __str__(self):
        return self.bus_number

    @property
    def title(self):
        return f"{self.operator} {self.bus_number} {self.origin} to {self.destination}"
