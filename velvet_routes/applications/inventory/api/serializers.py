from rest_framework import serializers

from velvet_routes.applications.inventory.models import Bus, Car, Flight, Hotel, InventoryItem, Provider, Train
from velvet_routes.helpers.enums import TravelMode
from velvet_routes.helpers.utils import cents_to_major


class ProviderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Provider
        fields = ["id", "name", "display_name"]


class HotelSerializer(serializers.ModelSerializer):
    class Meta:
        model = Hotel
        exclude = ["id", "item"]


class FlightSerializer(serializers.ModelSerializer):
    class Meta:
        model = Flight
        exclude = ["id", "item"]


class CarSerializer(serializers.ModelSerializer):
    class Meta:
        model = Car
        exclude = ["id", "item"]


class TrainSerializer(serializers.ModelSerializer):
    class Meta:
        model = Train
        exclude = ["id", "item"]


class BusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Bus
        exclude = ["id", "item"]


DETAIL_SERIALIZERS = {
    TravelMode.HOTEL: HotelSerializer,
    TravelMode.FLIGHT: FlightSerializer,
    TravelMode.CAR: CarSerializer,
    TravelMode.TRAIN: TrainSerializer,
    TravelMode.BUS: BusSerializer,
}


class InventoryItemSerializer(serializers.Serializer):
    """
    Works for ORM items and in-memory records alike. ``price`` is the major
    unit rendering of ``price_cents``.
    """

    id = serializers.IntegerField()
    travel_mode = serializers.CharField()
    provider_item_id = serializers.CharField()
    title = serializers.CharField()
    price_cents = serializers.IntegerField()
    price = serializers.SerializerMethodField()
    currency = serializers.CharField()
    searchable_location = serializers.CharField()
    location = serializers.CharField()
    is_available = serializers.BooleanField()
    provider = serializers.SerializerMethodField()
    details = serializers.SerializerMethodField()

    def get_price(self, obj) -> str:
        return str(cents_to_major(obj.price_cents))

    def get_provider(self, obj) -> dict | None:
        provider = getattr(obj, "provider", None)
        return ProviderSerializer(provider).data if provider else None

    def get_details(self, obj) -> dict:
        details = obj.details
        if isinstance(details, dict):
            return details
        if details is None:
            return {}
        return DETAIL_SERIALIZERS[obj.travel_mode](details).data


class InventoryItemDetailSerializer(InventoryItemSerializer):
    raw_data = serializers.SerializerMethodField()

    def get_raw_data(self, obj) -> dict:
        return getattr(obj, "raw_data", None) or {}
