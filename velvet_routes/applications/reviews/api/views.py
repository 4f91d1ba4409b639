from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import permissions, viewsets

from velvet_routes.applications.reviews.api.serializers import ReviewSerializer
from velvet_routes.applications.reviews.models import Review
from velvet_routes.helpers.custom_exceptions import CustomError
from velvet_routes.helpers.permissions import IsOwnerOrReadOnly


@extend_schema_view(
    list=extend_schema(
        summary="List reviews",
        parameters=[OpenApiParameter("inventory_item", OpenApiTypes.INT, description="Only reviews of this item")],
        tags=["Reviews"],
    ),
    retrieve=extend_schema(summary="Retrieve a review", tags=["Reviews"]),
    create=extend_schema(summary="Write a review", tags=["Reviews"]),
    update=extend_schema(summary="Update your review", tags=["Reviews"]),
    partial_update=extend_schema(summary="Partially update your review", tags=["Reviews"]),
    destroy=extend_schema(summary="Delete your review", tags=["Reviews"]),
)
class ReviewViewSet(viewsets.ModelViewSet):
    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsOwnerOrReadOnly]

    def get_queryset(self):
        queryset = Review.objects.select_related("user", "inventory_item")
        item_id = self.request.query_params.get("inventory_item")
        if item_id:
            if not item_id.isdigit():
                CustomError.raise_error("inventory_item must be an integer.")
            queryset = queryset.filter(inventory_item_id=int(item_id))
        return queryset.order_by("-created_at", "-id")
