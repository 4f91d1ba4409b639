from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import permissions, viewsets

from velvet_routes.applications.trips.api.serializers import TripSerializer
from velvet_routes.applications.trips.models import Trip


@extend_schema_view(
    list=extend_schema(summary="List your trips", tags=["Trips"]),
    retrieve=extend_schema(summary="Retrieve a trip", tags=["Trips"]),
    create=extend_schema(summary="Create a trip", tags=["Trips"]),
    update=extend_schema(summary="Update a trip", tags=["Trips"]),
    partial_update=extend_schema(summary="Partially update a trip", tags=["Trips"]),
    destroy=extend_schema(summary="Delete a trip", tags=["Trips"]),
)
class TripViewSet(viewsets.ModelViewSet):
    serializer_class = TripSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Trip.objects.filter(user=self.request.user)
