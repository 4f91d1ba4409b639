import logging
from dataclasses import dataclass, field
from datetime import datetime

from django.db.models import Sum
from rest_framework.exceptions import ValidationError

from velvet_routes.applications.inventory.repositories import InventoryRepository, get_inventory_repository
from velvet_routes.applications.notifications.dispatcher import NotificationDispatcher
from velvet_routes.applications.payments.services import CapturedPayment, PaymentIntentBridge
from velvet_routes.helpers.custom_exceptions import (
    AmountMismatch,
    ConflictError,
    ItemUnavailable,
    PaymentNotCompleted,
)
from velvet_routes.helpers.enums import BookingStatus, PaymentStatus
from velvet_routes.helpers.utils import cents_to_major

from .models import Booking, BookingItem
from .repositories import BookingDraft, BookingRepository, LineDraft, PaymentDraft, get_booking_repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingLine:
    """One requested line: which item, how many, and when."""

    inventory_item_id: int
    quantity: int = 1
    start_date: datetime | None = None
    end_date: datetime | None = None
    seat_info: dict = field(default_factory=dict)
    meta: dict = field(default_factory=dict)


@dataclass(frozen=True)
class CustomerContact:
    name: str
    email: str
    phone: str | None = None


@dataclass(frozen=True)
class PricedOrder:
    lines: tuple[LineDraft, ...]
    total_cents: int
    currency: str


@dataclass
class BookingResult:
    booking: object
    notifications: list = field(default_factory=list)


class BookingOrchestrator:
    """
    Turns a paid request into a booking.

    Validation and payment checks happen before anything is written. The
    write itself is a single repository call that either stores the booking
    with its items, payment, invoice and history, or nothing. Notifications
    go out afterwards and never affect the outcome.
    """

    def __init__(
        self,
        inventory: InventoryRepository | None = None,
        bookings: BookingRepository | None = None,
        payments: PaymentIntentBridge | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.inventory = inventory or get_inventory_repository()
        self.bookings = bookings or get_booking_repository()
        self.payments = payments or PaymentIntentBridge()
        self.dispatcher = dispatcher or NotificationDispatcher()

    def price(self, lines: list[BookingLine], travel_mode: str | None = None) -> PricedOrder:
        """
        Resolve every line against inventory and compute the total from
        inventory prices. With ``travel_mode`` every item must be of that mode.

        Raises:
            ValidationError: no lines, a bad quantity, a wrong mode or mixed currencies.
            ItemUnavailable: an item does not exist or is not available.
        """
        if not lines:
            raise ValidationError({"items": "At least one item is required."})

        drafts = []
        currencies = set()
        for line in lines:
            if line.quantity < 1:
                raise ValidationError({"quantity": "Quantity must be at least 1."})
            item = self.inventory.get(line.inventory_item_id)
            if item is None:
                raise ItemUnavailable(f"Item {line.inventory_item_id} does not exist.")
            if not item.is_available:
                raise ItemUnavailable(f"{item.title} is no longer available.")
            if travel_mode and item.travel_mode != travel_mode:
                raise ValidationError(
                    {"type": f"Item {item.id} is a {item.travel_mode.lower()}, not a {travel_mode.lower()}."}
                )
            currencies.add(item.currency.upper())
            drafts.append(
                LineDraft(
                    inventory_item_id=item.id,
                    provider_item_id=item.provider_item_id,
                    travel_mode=item.travel_mode,
                    title=item.title,
                    quantity=line.quantity,
                    unit_price_cents=item.price_cents,
                    start_date=line.start_date,
                    end_date=line.end_date,
                    seat_info=dict(line.seat_info),
                    meta={"location": item.location, **line.meta},
                )
            )

        if len(currencies) > 1:
            raise ValidationError({"items": f"Items must share one currency, got {', '.join(sorted(currencies))}."})

        return PricedOrder(
            lines=tuple(drafts),
            total_cents=sum(draft.line_total_cents for draft in drafts),
            currency=currencies.pop(),
        )

    def verify_payment(self, payment_ref: str, order: PricedOrder) -> CapturedPayment:
        if self.bookings.payment_exists(payment_ref):
            raise ConflictError(f"Payment {payment_ref} has already been used for another booking.")

        captured = self.payments.retrieve_intent(payment_ref)
        if not (captured.succeeded or captured.in_flight):
            raise PaymentNotCompleted(f"Payment {payment_ref} is {captured.status.replace('_', ' ')}.")
        if captured.captured_cents != order.total_cents:
            raise AmountMismatch(order.total_cents, captured.captured_cents)
        if captured.currency and captured.currency != order.currency:
            raise ConflictError(f"Payment is in {captured.currency} but the booking is in {order.currency}.")
        return captured

    def create_booking(
        self,
        user,
        items: list[BookingLine],
        payment_ref: str,
        contact: CustomerContact,
        amount_cents: int | None = None,
        metadata: dict | None = None,
        travel_mode: str | None = None,
    ) -> BookingResult:
        """
        Create a booking paid with the Stripe payment intent ``payment_ref``.

        A succeeded intent yields a CONFIRMED booking with an invoice. An
        intent that is still processing yields a PENDING booking that the
        payment webhook confirms later.

        Raises:
            ItemUnavailable, AmountMismatch, PaymentNotCompleted, ConflictError:
                before anything is written.
            BookingFailed: the write failed and was rolled back.
        """
        order = self.price(items, travel_mode)
        if amount_cents is not None and amount_cents != order.total_cents:
            raise AmountMismatch(order.total_cents, amount_cents)

        captured = self.verify_payment(payment_ref, order)
        confirmed = captured.succeeded

        draft = BookingDraft(
            user=user,
            status=BookingStatus.CONFIRMED if confirmed else BookingStatus.PENDING,
            total_amount_cents=order.total_cents,
            currency=order.currency,
            customer_name=contact.name,
            customer_email=contact.email,
            customer_phone=contact.phone or None,
            lines=order.lines,
            payment=PaymentDraft(
                external_id=captured.intent_id,
                amount_cents=captured.captured_cents,
                currency=order.currency,
                status=PaymentStatus.SUCCEEDED if confirmed else PaymentStatus.PENDING,
                metadata={"stripeStatus": captured.status, **captured.metadata},
            ),
            issue_invoice=confirmed,
            metadata=dict(metadata or {}),
            history_note=f"Created with payment {captured.intent_id} ({captured.status})",
        )
        booking = self.bookings.create(draft)
        logger.info(f"Booking {booking.reference} created as {booking.status} for {order.total_cents} cents")

        notifications = self._notify(booking) if confirmed else []
        return BookingResult(booking=booking, notifications=notifications)

    def _notify(self, booking) -> list:
        # notification errors never fail a stored booking
        try:
            return self.dispatcher.notify(booking)
        except Exception as e:
            logger.error(f"Notifications for booking {booking.reference} failed: {e}", exc_info=True)
            return []

    def cancel_booking(self, booking, by=None, reason: str = ""):
        """Cancel a pending or confirmed booking. Nothing is refunded."""
        if booking.status == BookingStatus.CANCELLED:
            raise ConflictError(f"Booking {booking.reference} is already cancelled.")
        booking = self.bookings.set_status(
            booking, BookingStatus.CANCELLED, notes=reason or "Cancelled by customer", changed_by=by
        )
        logger.info(f"Booking {booking.reference} cancelled")
        return booking

    def confirm_payment(self, captured: CapturedPayment) -> BookingResult | None:
        """
        Confirm the pending booking paid by ``captured``. Only bookings whose
        total matches the received amount are confirmed. Repeated calls are
        no-ops.
        """
        booking = self.bookings.get_by_payment(captured.intent_id)
        if booking is None:
            logger.warning(f"No booking for payment intent {captured.intent_id}")
            return None
        if booking.status != BookingStatus.PENDING or not captured.succeeded:
            return BookingResult(booking=booking)
        if captured.amount_received_cents != booking.total_amount_cents:
            logger.error(
                f"Payment {captured.intent_id} received {captured.amount_received_cents} cents "
                f"but booking {booking.reference} totals {booking.total_amount_cents}; left pending"
            )
            return BookingResult(booking=booking)

        booking = self.bookings.confirm(
            booking,
            captured.amount_received_cents,
            notes=f"Payment confirmed via webhook ({captured.intent_id})",
        )
        logger.info(f"Booking {booking.reference} confirmed by webhook")
        return BookingResult(booking=booking, notifications=self._notify(booking))

    def fail_payment(self, captured: CapturedPayment, reason: str = "") -> object | None:
        booking = self.bookings.get_by_payment(captured.intent_id)
        if booking is None:
            logger.warning(f"No booking for failed payment intent {captured.intent_id}")
            return None
        if booking.status == BookingStatus.CONFIRMED:
            # a late failure event for an intent that already succeeded
            return booking
        logger.info(f"Payment {captured.intent_id} failed for booking {booking.reference}: {reason}")
        return self.bookings.fail_payment(booking, reason or "Unknown error")


def booking_stats(user) -> dict:
    """
    Travel statistics for the profile page. ``totalSpent`` is in major
    units and ignores cancelled bookings.
    """
    bookings = Booking.objects.filter(user=user)
    spent_cents = (
        bookings.exclude(status=BookingStatus.CANCELLED).aggregate(total=Sum("total_amount_cents"))["total"] or 0
    )
    locations = {
        meta.get("location")
        for meta in BookingItem.objects.filter(booking__user=user).values_list("meta", flat=True)
        if isinstance(meta, dict) and meta.get("location")
    }
    return {
        "totalBookings": bookings.count(),
        "totalSpent": cents_to_major(spent_cents),
        "countries": len(locations),
    }
