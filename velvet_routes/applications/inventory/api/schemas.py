from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view

from velvet_routes.applications.inventory.api.serializers import InventoryItemDetailSerializer, InventoryItemSerializer
from velvet_routes.helpers.custom_exceptions import CustomError

SEARCH_PARAMETERS = [
    OpenApiParameter("location", OpenApiTypes.STR, description="Substring of the item location"),
    OpenApiParameter("origin", OpenApiTypes.STR, description="Departure city or airport code"),
    OpenApiParameter("destination", OpenApiTypes.STR, description="Arrival city or airport code"),
    OpenApiParameter("date", OpenApiTypes.DATE, description="Departure date (YYYY-MM-DD)"),
    OpenApiParameter("min_price", OpenApiTypes.INT, description="Minimum price in cents"),
    OpenApiParameter("max_price", OpenApiTypes.INT, description="Maximum price in cents"),
    OpenApiParameter("airline", OpenApiTypes.STR, description="Flights only"),
    OpenApiParameter("max_stops", OpenApiTypes.INT, description="Flights only"),
    OpenApiParameter("stars", OpenApiTypes.INT, description="Hotels only, minimum star rating"),
    OpenApiParameter("category", OpenApiTypes.STR, description="Cars only, e.g. Economy, SUV"),
]


def inventory_schema(label: str):
    """Schema decorator for the read-only catalog of one travel mode."""
    return extend_schema_view(
        list=extend_schema(
            summary=f"List {label}",
            description=f"Returns the available {label}, cheapest first.",
            responses={200: InventoryItemSerializer(many=True)},
            tags=["Inventory"],
        ),
        search=extend_schema(
            summary=f"Search {label}",
            description="Unknown parameters are ignored. Malformed values return 400.",
            parameters=SEARCH_PARAMETERS,
            responses={200: InventoryItemSerializer(many=True), 400: CustomError.DEFAULT_ERROR_SCHEMA()[400]},
            tags=["Inventory"],
        ),
        retrieve=extend_schema(
            summary=f"Retrieve one of the {label}",
            responses={200: InventoryItemDetailSerializer, 404: CustomError.DEFAULT_ERROR_SCHEMA()[404]},
            tags=["Inventory"],
        ),
    )
