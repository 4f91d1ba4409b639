from django.conf import settings
from rest_framework import serializers


class PaymentLineSerializer(serializers.Serializer):
    inventoryItemId = serializers.IntegerField(min_value=1)  # noqa: N815
    quantity = serializers.IntegerField(min_value=1, default=1)


class CreatePaymentIntentSerializer(serializers.Serializer):
    """
    ``items`` are priced from inventory. ``amountCents`` is only used when no
    items are sent.
    """

    items = PaymentLineSerializer(many=True, required=False)
    amountCents = serializers.IntegerField(min_value=1, required=False)  # noqa: N815
    currency = serializers.CharField(min_length=3, max_length=3, required=False)

    def validate_currency(self, value):
        return value.upper()

    def validate(self, attrs):
        if not attrs.get("items") and not attrs.get("amountCents"):
            raise serializers.ValidationError({"items": "Provide items or amountCents."})
        attrs.setdefault("currency", settings.STRIPE_CURRENCY.upper())
        return attrs


class PaymentIntentSerializer(serializers.Serializer):
    clientSecret = serializers.CharField()  # noqa: N815
    intentId = serializers.CharField()  # noqa: N815
    amountCents = serializers.IntegerField()  # noqa: N815
    currency = serializers.CharField()
