from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema, extend_schema_view, inline_serializer
from rest_framework import serializers

from velvet_routes.applications.bookings.api.serializers import (
    BookingCreateSerializer,
    BookingDetailSerializer,
    BookingSerializer,
    CancelBookingSerializer,
)
from velvet_routes.applications.notifications.api.serializers import NotificationResultSerializer
from velvet_routes.helpers.custom_exceptions import CustomError

BookingCreatedSerializer = inline_serializer(
    name="BookingCreatedResponse",
    fields={
        "booking": BookingSerializer(),
        "email": inline_serializer(
            name="BookingEmailStatus",
            fields={"sent": serializers.BooleanField(), "to": serializers.EmailField()},
        ),
        "notifications": NotificationResultSerializer(many=True),
    },
)

booking_viewset_schema = extend_schema_view(
    create=extend_schema(
        summary="Create a booking",
        description=(
            "Books the requested inventory items against a Stripe payment intent. The total is "
            "computed from inventory prices and must equal the captured amount. A succeeded "
            "intent yields a CONFIRMED booking with an invoice; a processing intent yields a "
            "PENDING booking confirmed later by the payment webhook. Notification failures are "
            "reported in `notifications` and never fail the booking."
        ),
        request=BookingCreateSerializer,
        responses={
            201: BookingCreatedSerializer,
            409: OpenApiResponse(
                description="Item unavailable, amount mismatch, payment not completed or already used."
            ),
            500: OpenApiResponse(description="The booking could not be saved. Nothing was written."),
            **CustomError.DEFAULT_ERROR_SCHEMA(),
        },
        tags=["Bookings"],
    ),
    list=extend_schema(
        summary="List bookings",
        description="Bookings of the authenticated user. Admins see every booking.",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, enum=["PENDING", "CONFIRMED", "CANCELLED"]),
            OpenApiParameter("type", OpenApiTypes.STR, enum=["hotel", "flight", "car", "train", "bus"]),
        ],
        responses={200: BookingSerializer(many=True)},
        tags=["Bookings"],
    ),
    retrieve=extend_schema(
        summary="Retrieve a booking",
        responses={200: BookingDetailSerializer, 404: CustomError.DEFAULT_ERROR_SCHEMA()[404]},
        tags=["Bookings"],
    ),
    cancel=extend_schema(
        summary="Cancel a booking",
        description="Cancels a pending or confirmed booking. No refund is issued.",
        request=CancelBookingSerializer,
        responses={200: BookingDetailSerializer, 409: OpenApiResponse(description="Already cancelled")},
        tags=["Bookings"],
    ),
    invoice=extend_schema(
        summary="Download the invoice",
        responses={
            (200, "application/pdf"): OpenApiTypes.BINARY,
            404: OpenApiResponse(description="No invoice has been issued for this booking"),
        },
        tags=["Bookings"],
    ),
)
