import asyncio
import logging
from dataclasses import dataclass

from asgiref.sync import async_to_sync, sync_to_async
from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone
from django.utils.module_loading import import_string

from velvet_routes.applications.bookings.invoices import booking_items, invoice_filename, render_invoice_pdf
from velvet_routes.applications.bookings.models import Booking
from velvet_routes.helpers.enums import NotificationChannel, NotificationStatus
from velvet_routes.helpers.utils import cents_to_major

from .backends import Delivery, push_group_name
from .email import BookingConfirmationEmail, NotificationTestEmail
from .models import Notification, PushSubscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationResult:
    channel: str
    status: str
    recipient: str
    error: str | None = None
    id: int | None = None

    @property
    def delivered(self) -> bool:
        return self.status == NotificationStatus.DELIVERED

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "channel": self.channel,
            "status": self.status,
            "recipient": self.recipient,
            "error": self.error,
        }


@dataclass(frozen=True)
class PreparationFailure:
    """A channel whose message could not be built. It is recorded as FAILED without being sent."""

    channel: str
    recipient: str
    body: str
    error: str


def build_push_payload(title: str, body: str, url: str = "/dashboard", **extra) -> dict:
    options = settings.NOTIFICATIONS
    return {
        "title": title,
        "body": body,
        "icon": options.get("PUSH_ICON", "/logo192.png"),
        "badge": options.get("PUSH_BADGE", "/logo192.png"),
        "image": extra.pop("image", None),
        "data": {"url": url, **extra},
        "actions": [{"action": "view", "title": "View"}],
    }


class NotificationDispatcher:
    """
    Fans a message out over every configured channel.

    Each channel is prepared on its own, then delivered by its own asyncio
    task; all tasks are joined before returning. A channel that fails to
    build or to send only marks its own Notification row FAILED. ``notify``
    and ``send_test`` never raise.
    """

    def __init__(self, channels: list[str] | None = None, backends: dict | None = None):
        configured = channels if channels is not None else settings.NOTIFICATIONS["CHANNELS"]
        self.channels = [channel.upper() for channel in configured]
        self._backends = dict(backends or {})

    def backend_for(self, channel: str):
        if channel not in self._backends:
            backend_class = import_string(settings.NOTIFICATIONS["BACKENDS"][channel])
            self._backends[channel] = backend_class(channel)
        return self._backends[channel]

    def notify(self, booking) -> list[NotificationResult]:
        """Send the confirmation of ``booking`` to its customer."""
        try:
            attempts = self._booking_deliveries(booking)
            return self._dispatch(booking.user, attempts, booking=booking)
        except Exception as e:
            logger.error(f"Could not notify for booking {getattr(booking, 'id', None)}: {e}", exc_info=True)
            return []

    def send_test(
        self, user, title: str = "Test notification", message: str | None = None, phone: str | None = None
    ) -> list[NotificationResult]:
        """Send a test message to ``user`` over every channel they can receive."""
        try:
            attempts = self._test_deliveries(user, title, message, phone)
            return self._dispatch(user, attempts)
        except Exception as e:
            logger.error(f"Could not send test notification to user {getattr(user, 'pk', None)}: {e}", exc_info=True)
            return []

    def _prepare(self, channel: str, recipient: str, body: str, build, *args, **kwargs):
        try:
            return build(*args, **kwargs)
        except Exception as e:
            logger.error(f"Could not prepare {channel} notification for {recipient}: {e}", exc_info=True)
            return PreparationFailure(channel, recipient, body, str(e) or type(e).__name__)

    def _booking_deliveries(self, booking) -> list:
        user = booking.user
        phone = booking.customer_phone or user.phone
        total = cents_to_major(booking.total_amount_cents)
        text = f"Your booking {booking.reference} is confirmed. Total: {total} {booking.currency}."

        attempts = []
        for channel in self.channels:
            if channel == NotificationChannel.EMAIL:
                attempt = self._prepare(
                    channel, booking.customer_email, text, self._confirmation_email, booking, total, text
                )
            elif channel in (NotificationChannel.SMS, NotificationChannel.WHATSAPP):
                attempt = Delivery(channel, phone, text) if phone else None
            elif channel == NotificationChannel.PUSH:
                attempt = self._prepare(
                    channel,
                    push_group_name(user.pk),
                    text,
                    self._push_delivery,
                    user,
                    "Booking confirmed",
                    text,
                    bookingId=booking.id,
                    reference=booking.reference,
                )
            else:
                logger.warning(f"Unknown notification channel {channel}")
                attempt = None
            if attempt is not None:
                attempts.append(attempt)
        return attempts

    def _test_deliveries(self, user, title: str, message: str | None, phone: str | None) -> list:
        message = message or f"This is a test notification from {settings.SITE_NAME}."
        phone = phone or user.phone

        attempts = []
        for channel in self.channels:
            if channel == NotificationChannel.EMAIL:
                attempt = self._prepare(channel, user.email, message, self._test_email, user, title, message)
            elif channel in (NotificationChannel.SMS, NotificationChannel.WHATSAPP):
                attempt = Delivery(channel, phone, message) if phone else None
            elif channel == NotificationChannel.PUSH:
                attempt = self._prepare(
                    channel, push_group_name(user.pk), message, self._push_delivery, user, title, message
                )
            else:
                attempt = None
            if attempt is not None:
                attempts.append(attempt)
        return attempts

    def _confirmation_email(self, booking, total, text) -> Delivery:
        items = [
            {"title": item.title, "quantity": item.quantity, "line_total": cents_to_major(item.line_total_cents)}
            for item in booking_items(booking)
        ]
        invoice = getattr(booking, "invoice", None)
        email = BookingConfirmationEmail(
            context={
                "user": booking.user,
                "booking": booking,
                "items": items,
                "total": total,
                "invoice": invoice,
            }
        )
        email.attach(invoice_filename(booking), render_invoice_pdf(booking), "application/pdf")
        return Delivery(
            NotificationChannel.EMAIL,
            booking.customer_email,
            text,
            subject=f"Booking confirmed: {booking.reference}",
            email=email,
        )

    def _test_email(self, user, title, message) -> Delivery:
        email = NotificationTestEmail(context={"user": user, "title": title, "message": message})
        return Delivery(NotificationChannel.EMAIL, user.email, message, subject=title, email=email)

    def _push_delivery(self, user, title, body, **extra) -> Delivery | None:
        subscriptions = tuple(
            subscription.as_subscription_info() for subscription in PushSubscription.objects.filter(user=user)
        )
        if not subscriptions:
            return None
        return Delivery(
            NotificationChannel.PUSH,
            push_group_name(user.pk),
            body,
            payload=build_push_payload(title, body, **extra),
            subscriptions=subscriptions,
        )

    def _record(self, user, booking, attempt) -> Notification | None:
        failed = isinstance(attempt, PreparationFailure)
        try:
            return Notification.objects.create(
                user=user,
                booking=booking,
                channel=attempt.channel,
                recipient=attempt.recipient,
                message=attempt.body,
                payload={} if failed else attempt.payload,
                status=NotificationStatus.FAILED if failed else NotificationStatus.PENDING,
                error=attempt.error if failed else "",
            )
        except (DatabaseError, ValueError) as e:
            logger.error(
                f"Could not record {attempt.channel} notification for {attempt.recipient}: {e}", exc_info=True
            )
            return None

    def _finish(self, row: Notification, status: str, error: str, message_id: str):
        row.status = status
        row.error = error
        row.provider_message_id = message_id
        if status == NotificationStatus.DELIVERED:
            row.delivered_at = timezone.now()
        try:
            row.save(update_fields=["status", "error", "provider_message_id", "delivered_at", "updated_at"])
        except DatabaseError as e:
            logger.error(f"Could not update notification {row.pk}: {e}", exc_info=True)

    def _dispatch(self, user, attempts: list, booking=None) -> list[NotificationResult]:
        if not attempts:
            return []
        # rows only link to persisted bookings
        booking = booking if isinstance(booking, Booking) else None
        rows = [self._record(user, booking, attempt) for attempt in attempts]

        deliveries = [attempt for attempt in attempts if isinstance(attempt, Delivery)]
        outcomes = iter(async_to_sync(self._deliver_all)(deliveries) if deliveries else [])

        results = []
        for attempt, row in zip(attempts, rows):
            if isinstance(attempt, PreparationFailure):
                status, error = NotificationStatus.FAILED, attempt.error
            else:
                outcome = next(outcomes)
                if isinstance(outcome, BaseException):
                    status, message_id = NotificationStatus.FAILED, ""
                    error = str(outcome) or type(outcome).__name__
                    logger.error(
                        f"{attempt.channel} notification to {attempt.recipient} failed: {outcome}", exc_info=outcome
                    )
                else:
                    status, error, message_id = NotificationStatus.DELIVERED, "", str(outcome or "")
                if row is not None:
                    self._finish(row, status, error, message_id)
            results.append(
                NotificationResult(
                    channel=attempt.channel,
                    status=status,
                    recipient=attempt.recipient,
                    error=error or None,
                    id=row.pk if row is not None else None,
                )
            )
        return results

    async def _deliver(self, delivery: Delivery):
        backend = self.backend_for(delivery.channel)
        return await sync_to_async(backend.send, thread_sensitive=False)(delivery)

    async def _deliver_all(self, deliveries: list[Delivery]) -> list:
        return await asyncio.gather(*(self._deliver(delivery) for delivery in deliveries), return_exceptions=True)
