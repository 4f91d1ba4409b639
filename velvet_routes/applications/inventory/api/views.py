from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from velvet_routes.applications.inventory.api.schemas import inventory_schema
from velvet_routes.applications.inventory.api.serializers import InventoryItemDetailSerializer, InventoryItemSerializer
from velvet_routes.applications.inventory.repositories import get_inventory_repository
from velvet_routes.helpers.custom_exceptions import NotFoundError
from velvet_routes.helpers.enums import TravelMode


class InventoryViewSet(viewsets.ViewSet):
    """
    Read-only catalog for a single travel mode. Subclasses set ``travel_mode``.
    """

    permission_classes = [permissions.AllowAny]
    travel_mode: str = ""

    @property
    def repository(self):
        return get_inventory_repository()

    def list(self, request):
        items = self.repository.list_by_mode(self.travel_mode)
        return Response(InventoryItemSerializer(items, many=True).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"])
    def search(self, request):
        items = self.repository.search(self.travel_mode, request.query_params)
        return Response(InventoryItemSerializer(items, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        item = self.repository.get(pk)
        if item is None or item.travel_mode != self.travel_mode:
            raise NotFoundError(f"No {self.travel_mode.lower()} with id {pk}.")
        return Response(InventoryItemDetailSerializer(item).data, status=status.HTTP_200_OK)


@inventory_schema("hotels")
class HotelViewSet(InventoryViewSet):
    travel_mode = TravelMode.HOTEL


@inventory_schema("flights")
class FlightViewSet(InventoryViewSet):
    travel_mode = TravelMode.FLIGHT


@inventory_schema("cars")
class CarViewSet(InventoryViewSet):
    travel_mode = TravelMode.CAR


@inventory_schema("trains")
class TrainViewSet(InventoryViewSet):
    travel_mode = TravelMode.TRAIN


@inventory_schema("buses")
class BusViewSet(InventoryViewSet):
    travel_mode = TravelMode.BUS
