import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

import stripe
from django.conf import settings

from velvet_routes.helpers.custom_exceptions import PaymentNotCompleted, UpstreamError

from .stripe_client import StripeClient, stripe_client

logger = logging.getLogger(__name__)

INTENT_SUCCEEDED = "succeeded"
# Funds are on their way or held; the booking waits for the webhook.
INTENT_IN_FLIGHT = ("processing", "requires_capture")


def to_minor_units(amount) -> int:
    """
    Convert a decimal amount in major units (``"150.00"``) to integer cents.
    This is the only place where that conversion happens.

    Raises:
        ValueError: for non numeric values, negative values or sub-cent precision.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"{amount!r} is not a valid amount") from exc
    if not value.is_finite() or value < 0:
        raise ValueError(f"{amount!r} is not a valid amount")
    cents = value * 100
    if cents != cents.to_integral_value():
        raise ValueError(f"{amount!r} has more than two decimal places")
    return int(cents)


@dataclass(frozen=True)
class CapturedPayment:
    intent_id: str
    amount_cents: int
    amount_received_cents: int
    currency: str
    status: str
    metadata: dict = field(default_factory=dict)

    @classmethod
    def from_intent(cls, intent) -> "CapturedPayment":
        metadata = getattr(intent, "metadata", None) or {}
        return cls(
            intent_id=intent.id,
            amount_cents=int(getattr(intent, "amount", 0) or 0),
            amount_received_cents=int(getattr(intent, "amount_received", 0) or 0),
            currency=(getattr(intent, "currency", "") or "").upper(),
            status=intent.status,
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
        )

    @property
    def succeeded(self) -> bool:
        return self.status == INTENT_SUCCEEDED

    @property
    def in_flight(self) -> bool:
        return self.status in INTENT_IN_FLIGHT

    @property
    def captured_cents(self) -> int:
        """What the customer has paid, or is paying for an in-flight intent."""
        return self.amount_received_cents if self.succeeded else self.amount_cents


class PaymentIntentBridge:
    """
    Thin wrapper over Stripe payment intents. Card data never reaches us:
    the client confirms the intent directly with Stripe.js.
    """

    def __init__(self, client: StripeClient | None = None):
        self._client = client or stripe_client

    def create_intent(self, amount_cents: int, currency: str | None = None, metadata: dict | None = None) -> dict:
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, int) or amount_cents <= 0:
            raise ValueError("amount_cents must be a positive integer")

        currency = (currency or settings.STRIPE_CURRENCY).lower()
        try:
            intent = self._client.get_client().PaymentIntent.create(
                amount=amount_cents,
                currency=currency,
                automatic_payment_methods={"enabled": True},
                metadata={key: str(value) for key, value in (metadata or {}).items()},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe rejected payment intent for {amount_cents} {currency}: {e}", exc_info=True)
            raise UpstreamError("Could not create the payment. Please try again.") from e

        logger.info(f"Created payment intent {intent.id} for {amount_cents} {currency}")
        return {"clientSecret": intent.client_secret, "intentId": intent.id}

    def retrieve_intent(self, intent_id: str) -> CapturedPayment:
        try:
            intent = self._client.get_client().PaymentIntent.retrieve(intent_id)
        except stripe.InvalidRequestError as e:
            logger.warning(f"Unknown payment intent {intent_id}: {e}")
            raise PaymentNotCompleted("The payment reference is not valid.") from e
        except stripe.StripeError as e:
            logger.error(f"Failed to retrieve payment intent {intent_id}: {e}", exc_info=True)
            raise UpstreamError("Could not verify the payment. Please try again.") from e
        return CapturedPayment.from_intent(intent)
