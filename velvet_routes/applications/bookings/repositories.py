import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import lru_cache

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from velvet_routes.applications.payments.models import Payment
from velvet_routes.helpers.custom_exceptions import BookingFailed, ConflictError
from velvet_routes.helpers.enums import BookingStatus, PaymentProvider, PaymentStatus
from velvet_routes.helpers.utils import generate_booking_reference, generate_invoice_number

from .invoices import invoice_path
from .models import Booking, BookingItem, Invoice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineDraft:
    inventory_item_id: int
    provider_item_id: str
    travel_mode: str
    title: str
    quantity: int
    unit_price_cents: int
    start_date: datetime | None = None
    end_date: datetime | None = None
    seat_info: dict = field(default_factory=dict)
    meta: dict = field(default_factory=dict)

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


@dataclass(frozen=True)
class PaymentDraft:
    external_id: str
    amount_cents: int
    currency: str
    status: str
    provider: str = PaymentProvider.STRIPE
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class BookingDraft:
    """Everything needed to write a booking in one go."""

    user: object
    status: str
    total_amount_cents: int
    currency: str
    customer_name: str
    customer_email: str
    customer_phone: str | None
    lines: tuple[LineDraft, ...]
    payment: PaymentDraft
    issue_invoice: bool = False
    metadata: dict = field(default_factory=dict)
    history_note: str = ""


class BookingRepository(ABC):
    @abstractmethod
    def create(self, draft: BookingDraft):
        """
        Persist booking, items, payment, invoice and history all together or
        not at all. Raises ``ConflictError`` when the payment is already used
        and ``BookingFailed`` on any other storage error.
        """

    @abstractmethod
    def get(self, booking_id):
        """The booking or None."""

    @abstractmethod
    def get_by_payment(self, external_id: str):
        """The booking paid with ``external_id`` or None."""

    @abstractmethod
    def payment_exists(self, external_id: str) -> bool:
        ...

    @abstractmethod
    def confirm(self, booking, amount_received_cents: int, changed_by=None, notes: str = ""):
        """Mark the payment SUCCEEDED, the booking CONFIRMED and issue the invoice."""

    @abstractmethod
    def fail_payment(self, booking, reason: str):
        """Mark the payment FAILED and cancel the booking if still pending."""

    @abstractmethod
    def set_status(self, booking, status: str, notes: str = "", changed_by=None):
        ...


class DjangoBookingRepository(BookingRepository):
    def _payment_conflict(self, external_id: str) -> ConflictError:
        return ConflictError(f"Payment {external_id} has already been used for another booking.")

    def create(self, draft: BookingDraft) -> Booking:
        try:
            with transaction.atomic():
                booking = Booking.objects.create(
                    user=draft.user,
                    total_amount_cents=draft.total_amount_cents,
                    currency=draft.currency,
                    status=draft.status,
                    customer_name=draft.customer_name,
                    customer_email=draft.customer_email,
                    customer_phone=draft.customer_phone,
                    metadata=draft.metadata,
                )
                BookingItem.objects.bulk_create(
                    [
                        BookingItem(
                            booking=booking,
                            inventory_item_id=line.inventory_item_id,
                            provider_item_id=line.provider_item_id,
                            travel_mode=line.travel_mode,
                            title=line.title,
                            quantity=line.quantity,
                            unit_price_cents=line.unit_price_cents,
                            start_date=line.start_date,
                            end_date=line.end_date,
                            seat_info=line.seat_info,
                            meta=line.meta,
                        )
                        for line in draft.lines
                    ]
                )
                Payment.objects.create(
                    booking=booking,
                    user=draft.user,
                    provider=draft.payment.provider,
                    external_id=draft.payment.external_id,
                    amount_cents=draft.payment.amount_cents,
                    currency=draft.payment.currency,
                    status=draft.payment.status,
                    metadata=draft.payment.metadata,
                )
                if draft.issue_invoice:
                    self._issue_invoice(booking)
                booking.add_history(draft.status, notes=draft.history_note, changed_by=draft.user)
        except IntegrityError as exc:
            if self.payment_exists(draft.payment.external_id):
                raise self._payment_conflict(draft.payment.external_id) from exc
            logger.error(f"Booking write failed for user {draft.user.pk}: {exc}", exc_info=True)
            raise BookingFailed() from exc
        except DatabaseError as exc:
            logger.error(f"Booking write failed for user {draft.user.pk}: {exc}", exc_info=True)
            raise BookingFailed() from exc
        return self.get(booking.pk)

    def _issue_invoice(self, booking: Booking) -> Invoice:
        return Invoice.objects.create(
            booking=booking,
            pdf_url=invoice_path(booking.pk),
            total_cents=booking.total_amount_cents,
            currency=booking.currency,
        )

    def _queryset(self):
        return Booking.objects.select_related("user", "payment", "invoice").prefetch_related("items")

    def get(self, booking_id) -> Booking | None:
        return self._queryset().filter(pk=booking_id).first()

    def get_by_payment(self, external_id: str) -> Booking | None:
        return self._queryset().filter(payment__external_id=external_id).first()

    def payment_exists(self, external_id: str) -> bool:
        return Payment.objects.filter(external_id=external_id).exists()

    def confirm(self, booking: Booking, amount_received_cents: int, changed_by=None, notes: str = "") -> Booking:
        try:
            with transaction.atomic():
                booking = Booking.objects.select_for_update().get(pk=booking.pk)
                payment = Payment.objects.select_for_update().get(booking=booking)
                payment.status = PaymentStatus.SUCCEEDED
                payment.metadata = {**payment.metadata, "amountReceivedCents": amount_received_cents}
                payment.save(update_fields=["status", "metadata", "updated_at"])
                booking.status = BookingStatus.CONFIRMED
                booking.save(update_fields=["status", "updated_at"])
                if not Invoice.objects.filter(booking=booking).exists():
                    self._issue_invoice(booking)
                booking.add_history(BookingStatus.CONFIRMED, notes=notes, changed_by=changed_by)
        except DatabaseError as exc:
            logger.error(f"Could not confirm booking {booking.pk}: {exc}", exc_info=True)
            raise BookingFailed() from exc
        return self.get(booking.pk)

    def fail_payment(self, booking: Booking, reason: str) -> Booking:
        with transaction.atomic():
            Payment.objects.filter(booking=booking).update(status=PaymentStatus.FAILED, updated_at=timezone.now())
            if booking.status == BookingStatus.PENDING:
                Booking.objects.filter(pk=booking.pk).update(status=BookingStatus.CANCELLED, updated_at=timezone.now())
                booking.add_history(BookingStatus.CANCELLED, notes=f"Payment failed: {reason}")
        return self.get(booking.pk)

    def set_status(self, booking: Booking, status: str, notes: str = "", changed_by=None) -> Booking:
        with transaction.atomic():
            booking.status = status
            booking.save(update_fields=["status", "updated_at"])
            booking.add_history(status, notes=notes, changed_by=changed_by)
        return booking


@dataclass(frozen=True)
class InvoiceRecord:
    number: str
    total_cents: int
    currency: str
    pdf_url: str
    issued_at: datetime


@dataclass(frozen=True)
class BookingRecord:
    """In-memory stand-in for a persisted booking."""

    id: int
    user: object
    reference: str
    status: str
    total_amount_cents: int
    currency: str
    customer_name: str
    customer_email: str
    customer_phone: str | None
    metadata: dict
    items: tuple[LineDraft, ...]
    payment: PaymentDraft
    invoice: InvoiceRecord | None = None
    history: tuple[tuple[str, str], ...] = ()

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED


class InMemoryBookingRepository(BookingRepository):
    """
    Bookings kept in dicts. Every write builds the new record first and
    then swaps it in, so a failed write leaves nothing behind.
    """

    def __init__(self):
        self._bookings: dict[int, BookingRecord] = {}
        self._by_payment: dict[str, int] = {}
        self._ids = itertools.count(1)

    def _invoice(self, booking_id: int, total_cents: int, currency: str) -> InvoiceRecord:
        return InvoiceRecord(
            number=generate_invoice_number(),
            total_cents=total_cents,
            currency=currency,
            pdf_url=invoice_path(booking_id),
            issued_at=timezone.now(),
        )

    def create(self, draft: BookingDraft) -> BookingRecord:
        if draft.payment.external_id in self._by_payment:
            raise ConflictError(f"Payment {draft.payment.external_id} has already been used for another booking.")
        booking_id = next(self._ids)
        record = BookingRecord(
            id=booking_id,
            user=draft.user,
            reference=generate_booking_reference(),
            status=draft.status,
            total_amount_cents=draft.total_amount_cents,
            currency=draft.currency,
            customer_name=draft.customer_name,
            customer_email=draft.customer_email,
            customer_phone=draft.customer_phone,
            metadata=dict(draft.metadata),
            items=tuple(draft.lines),
            payment=draft.payment,
            invoice=self._invoice(booking_id, draft.total_amount_cents, draft.currency) if draft.issue_invoice else None,
            history=((draft.status, draft.history_note),),
        )
        self._bookings[record.id] = record
        self._by_payment[draft.payment.external_id] = record.id
        return record

    def get(self, booking_id) -> BookingRecord | None:
        return self._bookings.get(booking_id)

    def get_by_payment(self, external_id: str) -> BookingRecord | None:
        booking_id = self._by_payment.get(external_id)
        return self._bookings.get(booking_id) if booking_id is not None else None

    def payment_exists(self, external_id: str) -> bool:
        return external_id in self._by_payment

    def confirm(self, booking, amount_received_cents: int, changed_by=None, notes: str = "") -> BookingRecord:
        current = self._bookings[booking.id]
        updated = replace(
            current,
            status=BookingStatus.CONFIRMED,
            payment=replace(
                current.payment,
                status=PaymentStatus.SUCCEEDED,
                metadata={**current.payment.metadata, "amountReceivedCents": amount_received_cents},
            ),
            invoice=current.invoice or self._invoice(current.id, current.total_amount_cents, current.currency),
            history=(*current.history, (BookingStatus.CONFIRMED, notes)),
        )
        self._bookings[current.id] = updated
        return updated

    def fail_payment(self, booking, reason: str) -> BookingRecord:
        current = self._bookings[booking.id]
        changes = {"payment": replace(current.payment, status=PaymentStatus.FAILED)}
        if current.status == BookingStatus.PENDING:
            changes["status"] = BookingStatus.CANCELLED
            changes["history"] = (*current.history, (BookingStatus.CANCELLED, f"Payment failed: {reason}"))
        updated = replace(current, **changes)
        self._bookings[current.id] = updated
        return updated

    def set_status(self, booking, status: str, notes: str = "", changed_by=None) -> BookingRecord:
        current = self._bookings[booking.id]
        updated = replace(current, status=status, history=(*current.history, (status, notes)))
        self._bookings[current.id] = updated
        return updated

    def all(self) -> list[BookingRecord]:
        return list(self._bookings.values())


@lru_cache(maxsize=None)
def _load_repository(path: str) -> BookingRepository:
    return import_string(path)()


def get_booking_repository() -> BookingRepository:
    return _load_repository(settings.BOOKING_REPOSITORY)
