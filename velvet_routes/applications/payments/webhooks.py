import logging

import stripe
from django.conf import settings
from django.http import HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from velvet_routes.applications.bookings.services import BookingOrchestrator
from velvet_routes.helpers.custom_exceptions import StorageError

from .services import CapturedPayment

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_webhook(request):
    payload = request.body
    sig_header = request.headers.get("stripe-signature")

    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("STRIPE_WEBHOOK_SECRET is not set, rejecting webhook")
        return HttpResponse(status=400)

    try:
        event = stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError:
        logger.error("Invalid payload", exc_info=True)
        return HttpResponse(status=400)
    except stripe.SignatureVerificationError:
        logger.error("Invalid signature", exc_info=True)
        return HttpResponse(status=400)

    if event.type == "payment_intent.succeeded":
        return handle_payment_succeeded(event)
    elif event.type == "payment_intent.payment_failed":
        return handle_payment_failed(event)

    logger.debug(f"Ignoring Stripe event {event.type}")
    return HttpResponse(status=200)


def handle_payment_succeeded(event):
    captured = CapturedPayment.from_intent(event.data.object)
    try:
        BookingOrchestrator().confirm_payment(captured)
    except StorageError:
        # a non 2xx answer makes Stripe retry the event
        logger.error(f"Could not confirm payment {captured.intent_id}", exc_info=True)
        return HttpResponse(status=500)
    return HttpResponse(status=200)


def handle_payment_failed(event):
    payment_intent = event.data.object
    captured = CapturedPayment.from_intent(payment_intent)
    error = getattr(payment_intent, "last_payment_error", None)
    reason = getattr(error, "message", None) or (error.get("message") if isinstance(error, dict) else None)
    try:
        BookingOrchestrator().fail_payment(captured, reason or "Unknown error")
    except StorageError:
        logger.error(f"Could not record failed payment {captured.intent_id}", exc_info=True)
        return HttpResponse(status=500)
    return HttpResponse(status=200)
