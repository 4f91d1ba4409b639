from drf_spectacular.utils import OpenApiResponse, extend_schema

from velvet_routes.applications.payments.api.serializers import (
    CreatePaymentIntentSerializer,
    PaymentIntentSerializer,
)
from velvet_routes.helpers.custom_exceptions import CustomError

create_intent_schema = extend_schema(
    summary="Create a payment intent",
    description=(
        "Creates a Stripe payment intent and returns its client secret for Stripe.js. When "
        "`items` are sent the amount is computed from inventory prices and `amountCents` is ignored."
    ),
    request=CreatePaymentIntentSerializer,
    responses={
        200: PaymentIntentSerializer,
        409: OpenApiResponse(description="An item is unavailable"),
        500: OpenApiResponse(description="Stripe could not create the payment"),
        **CustomError.DEFAULT_ERROR_SCHEMA(),
    },
    tags=["Payments"],
)
