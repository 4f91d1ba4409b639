from rest_framework import serializers

from velvet_routes.applications.bookings.models import BookingHistory
from velvet_routes.applications.bookings.services import BookingLine, CustomerContact
from velvet_routes.applications.payments.services import to_minor_units
from velvet_routes.helpers.enums import TravelMode
from velvet_routes.helpers.utils import cents_to_major


def parse_travel_mode(value: str) -> str:
    mode = str(value).strip().upper()
    if mode not in TravelMode.values:
        raise serializers.ValidationError(f"Unknown travel type '{value}'.")
    return mode


class BookingLineSerializer(serializers.Serializer):
    inventoryItemId = serializers.IntegerField(min_value=1)  # noqa: N815
    quantity = serializers.IntegerField(min_value=1, default=1)
    startDate = serializers.DateTimeField(required=False, allow_null=True)  # noqa: N815
    endDate = serializers.DateTimeField(required=False, allow_null=True)  # noqa: N815
    seatInfo = serializers.DictField(required=False, default=dict)  # noqa: N815

    def validate(self, attrs):
        start, end = attrs.get("startDate"), attrs.get("endDate")
        if start and end and end < start:
            raise serializers.ValidationError({"endDate": "End date must not be before the start date."})
        return attrs

    def to_line(self, data) -> BookingLine:
        return BookingLine(
            inventory_item_id=data["inventoryItemId"],
            quantity=data["quantity"],
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            seat_info=data.get("seatInfo") or {},
        )


class BookingCreateSerializer(serializers.Serializer):
    """
    Either ``items`` or the single item shorthand ``inventoryItemId`` (with
    an optional ``quantity``) is required. ``amount`` is what the client
    believes it paid, in major units; it is checked, never trusted.
    """

    type = serializers.CharField(required=False)
    details = serializers.DictField(required=False, default=dict)
    items = BookingLineSerializer(many=True, required=False)
    inventoryItemId = serializers.IntegerField(min_value=1, required=False)  # noqa: N815
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    paymentIntentId = serializers.CharField(max_length=255)  # noqa: N815
    customerName = serializers.CharField(max_length=255, required=False, allow_blank=True)  # noqa: N815
    customerEmail = serializers.EmailField(required=False)  # noqa: N815
    phoneNumber = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)  # noqa: N815

    def validate_type(self, value):
        return parse_travel_mode(value)

    def validate(self, attrs):
        if attrs.get("items"):
            lines = [BookingLineSerializer().to_line(item) for item in attrs["items"]]
        elif attrs.get("inventoryItemId"):
            lines = [BookingLine(inventory_item_id=attrs["inventoryItemId"], quantity=attrs["quantity"])]
        else:
            raise serializers.ValidationError({"items": "Provide items or inventoryItemId."})
        attrs["lines"] = lines

        if attrs.get("amount") is not None:
            try:
                attrs["amount_cents"] = to_minor_units(attrs["amount"])
            except ValueError as e:
                raise serializers.ValidationError({"amount": str(e)})
        return attrs

    def contact_for(self, user) -> CustomerContact:
        data = self.validated_data
        return CustomerContact(
            name=data.get("customerName") or user.name,
            email=data.get("customerEmail") or user.email,
            phone=data.get("phoneNumber") or None,
        )


class BookingItemSerializer(serializers.Serializer):
    inventoryItemId = serializers.IntegerField(source="inventory_item_id", read_only=True)  # noqa: N815
    providerItemId = serializers.CharField(source="provider_item_id", read_only=True)  # noqa: N815
    type = serializers.CharField(source="travel_mode", read_only=True)
    title = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    unitPriceCents = serializers.IntegerField(source="unit_price_cents", read_only=True)  # noqa: N815
    lineTotalCents = serializers.IntegerField(source="line_total_cents", read_only=True)  # noqa: N815
    startDate = serializers.DateTimeField(source="start_date", read_only=True)  # noqa: N815
    endDate = serializers.DateTimeField(source="end_date", read_only=True)  # noqa: N815
    seatInfo = serializers.DictField(source="seat_info", read_only=True)  # noqa: N815
    meta = serializers.DictField(read_only=True)


class PaymentSummarySerializer(serializers.Serializer):
    intentId = serializers.CharField(source="external_id", read_only=True)  # noqa: N815
    provider = serializers.CharField(read_only=True)
    amountCents = serializers.IntegerField(source="amount_cents", read_only=True)  # noqa: N815
    currency = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)


class InvoiceSerializer(serializers.Serializer):
    number = serializers.CharField(read_only=True)
    totalCents = serializers.IntegerField(source="total_cents", read_only=True)  # noqa: N815
    currency = serializers.CharField(read_only=True)
    pdfUrl = serializers.CharField(source="pdf_url", read_only=True)  # noqa: N815
    issuedAt = serializers.DateTimeField(source="issued_at", read_only=True)  # noqa: N815


class BookingSerializer(serializers.Serializer):
    """Works for persisted bookings and in-memory booking records alike."""

    id = serializers.IntegerField(read_only=True)
    reference = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    totalAmountCents = serializers.IntegerField(source="total_amount_cents", read_only=True)  # noqa: N815
    totalAmount = serializers.SerializerMethodField()  # noqa: N815
    currency = serializers.CharField(read_only=True)
    customerName = serializers.CharField(source="customer_name", read_only=True)  # noqa: N815
    customerEmail = serializers.EmailField(source="customer_email", read_only=True)  # noqa: N815
    customerPhone = serializers.CharField(source="customer_phone", read_only=True, allow_null=True)  # noqa: N815
    metadata = serializers.DictField(read_only=True)
    items = BookingItemSerializer(many=True, read_only=True)
    payment = PaymentSummarySerializer(read_only=True, allow_null=True)
    invoice = InvoiceSerializer(read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)  # noqa: N815

    def get_totalAmount(self, obj) -> str:  # noqa: N802
        return str(cents_to_major(obj.total_amount_cents))


class BookingHistorySerializer(serializers.ModelSerializer):
    changed_by = serializers.SerializerMethodField()

    class Meta:
        model = BookingHistory
        fields = ["id", "status", "changed_at", "notes", "changed_by"]

    def get_changed_by(self, obj) -> str | None:
        if obj.changed_by:
            return obj.changed_by.email
        return None


class BookingDetailSerializer(BookingSerializer):
    history = BookingHistorySerializer(source="history_entries", many=True, read_only=True)


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)
