import logging

from django.http import HttpResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from velvet_routes.applications.bookings.api.schemas import booking_viewset_schema
from velvet_routes.applications.bookings.api.serializers import (
    BookingCreateSerializer,
    BookingDetailSerializer,
    BookingSerializer,
    CancelBookingSerializer,
)
from velvet_routes.applications.bookings.invoices import invoice_filename, render_invoice_pdf
from velvet_routes.applications.bookings.models import Booking
from velvet_routes.applications.bookings.services import BookingOrchestrator
from velvet_routes.helpers.custom_exceptions import CustomError, NotFoundError
from velvet_routes.helpers.enums import BookingStatus, NotificationChannel, NotificationStatus, TravelMode

logger = logging.getLogger(__name__)


@booking_viewset_schema
class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Bookings of the authenticated user. Admins can see and cancel every booking.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = BookingSerializer

    def get_orchestrator(self) -> BookingOrchestrator:
        return BookingOrchestrator()

    def get_queryset(self):
        queryset = Booking.objects.select_related("user", "payment", "invoice").prefetch_related("items")
        if not self.request.user.is_admin:
            queryset = queryset.filter(user=self.request.user)

        if self.action == "list":
            status_filter = self.request.query_params.get("status")
            if status_filter:
                if status_filter.upper() not in BookingStatus.values:
                    CustomError.raise_error(f"Unknown booking status '{status_filter}'.")
                queryset = queryset.filter(status=status_filter.upper())

            booking_type = self.request.query_params.get("type")
            if booking_type:
                if booking_type.upper() not in TravelMode.values:
                    CustomError.raise_error(f"Unknown travel type '{booking_type}'.")
                queryset = queryset.filter(items__travel_mode=booking_type.upper()).distinct()
        if self.action == "retrieve":
            queryset = queryset.prefetch_related("history_entries__changed_by")
        return queryset.order_by("-created_at", "-id")

    def get_serializer_class(self):
        if self.action in ("retrieve", "cancel"):
            return BookingDetailSerializer
        return BookingSerializer

    def get_object(self):
        booking = self.get_queryset().filter(pk=self.kwargs["pk"]).first()
        if booking is None:
            raise NotFoundError(f"Booking {self.kwargs['pk']} not found.")
        return booking

    def create(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        metadata = {"details": data.get("details") or {}}
        if data.get("type"):
            metadata["type"] = data["type"]

        result = self.get_orchestrator().create_booking(
            request.user,
            data["lines"],
            data["paymentIntentId"],
            serializer.contact_for(request.user),
            amount_cents=data.get("amount_cents"),
            metadata=metadata,
            travel_mode=data.get("type"),
        )

        booking = result.booking
        email_result = next(
            (item for item in result.notifications if item.channel == NotificationChannel.EMAIL), None
        )
        return Response(
            {
                "booking": BookingSerializer(booking).data,
                "email": {
                    "sent": bool(email_result and email_result.status == NotificationStatus.DELIVERED),
                    "to": booking.customer_email,
                },
                "notifications": [notification.as_dict() for notification in result.notifications],
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        serializer = CancelBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = self.get_object()
        booking = self.get_orchestrator().cancel_booking(
            booking, by=request.user, reason=serializer.validated_data.get("reason", "")
        )
        booking = self.get_queryset().prefetch_related("history_entries__changed_by").get(pk=booking.pk)
        return Response(BookingDetailSerializer(booking).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"])
    def invoice(self, request, pk=None):
        booking = self.get_object()
        if getattr(booking, "invoice", None) is None:
            raise NotFoundError("No invoice has been issued for this booking.")

        response = HttpResponse(render_invoice_pdf(booking), content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{invoice_filename(booking)}"'
        return response
