from types import SimpleNamespace

import pytest
from django.core import mail
from rest_framework.exceptions import ValidationError

from velvet_routes.applications.bookings.repositories import InMemoryBookingRepository
from velvet_routes.applications.bookings.services import BookingLine, BookingOrchestrator, CustomerContact
from velvet_routes.applications.inventory.repositories import InMemoryInventoryRepository, InventoryRecord
from velvet_routes.applications.notifications.dispatcher import NotificationDispatcher
from velvet_routes.applications.notifications.models import Notification
from velvet_routes.applications.payments.services import CapturedPayment
from velvet_routes.helpers.custom_exceptions import (
    AmountMismatch,
    ConflictError,
    ItemUnavailable,
    PaymentNotCompleted,
)


class FakeBridge:
    def __init__(self):
        self.intents = {}

    def add(self, intent_id, amount_cents, status="succeeded", currency="USD"):
        self.intents[intent_id] = CapturedPayment(
            intent_id=intent_id,
            amount_cents=amount_cents,
            amount_received_cents=amount_cents if status == "succeeded" else 0,
            currency=currency,
            status=status,
        )

    def retrieve_intent(self, intent_id):
        if intent_id not in self.intents:
            raise PaymentNotCompleted("The payment reference is not valid.")
        return self.intents[intent_id]


class RecordingDispatcher:
    def __init__(self):
        self.notified = []

    def notify(self, booking):
        self.notified.append(booking)
        return [SimpleNamespace(channel="EMAIL", status="DELIVERED")]


class BrokenDispatcher:
    def notify(self, booking):
        raise RuntimeError("mail server unreachable")


@pytest.fixture
def bridge():
    return FakeBridge()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def bookings():
    return InMemoryBookingRepository()


@pytest.fixture
def orchestrator(bridge, dispatcher, bookings):
    inventory = InMemoryInventoryRepository(
        [
            InventoryRecord(
                id=1,
                provider_item_id="hotel-1",
                travel_mode="HOTEL",
                price_cents=15000,
                searchable_location="New York, NY",
                title="Grand Plaza Hotel",
            ),
            InventoryRecord(
                id=2,
                provider_item_id="train-1",
                travel_mode="TRAIN",
                price_cents=8900,
                searchable_location="Washington DC",
                title="Amtrak NE123",
                details={"destination": "Washington DC"},
            ),
            InventoryRecord(
                id=3,
                provider_item_id="hotel-eu",
                travel_mode="HOTEL",
                price_cents=12000,
                currency="EUR",
                searchable_location="Paris",
            ),
            InventoryRecord(
                id=4,
                provider_item_id="hotel-gone",
                travel_mode="HOTEL",
                price_cents=12000,
                searchable_location="Paris",
                is_available=False,
            ),
        ]
    )
    return BookingOrchestrator(inventory=inventory, bookings=bookings, payments=bridge, dispatcher=dispatcher)


@pytest.fixture
def customer():
    return SimpleNamespace(pk=7, name="Jane Traveller", email="jane@example.com")


@pytest.fixture
def contact():
    return CustomerContact(name="Jane Traveller", email="jane@example.com", phone="+15550100")


class TestPrice:
    def test_total_comes_from_inventory(self, orchestrator):
        order = orchestrator.price([BookingLine(1, quantity=2), BookingLine(2)])

        assert order.total_cents == 2 * 15000 + 8900
        assert order.currency == "USD"
        assert [line.meta["location"] for line in order.lines] == ["New York, NY", "Washington DC"]

    def test_mixed_currencies(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.price([BookingLine(1), BookingLine(3)])

    def test_travel_mode_must_match(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.price([BookingLine(1), BookingLine(2)], travel_mode="HOTEL")

    @pytest.mark.parametrize("item_id", [4, 99])
    def test_unavailable_or_unknown(self, orchestrator, item_id):
        with pytest.raises(ItemUnavailable):
            orchestrator.price([BookingLine(item_id)])

    def test_quantity_and_empty_order(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.price([])
        with pytest.raises(ValidationError):
            orchestrator.price([BookingLine(1, quantity=0)])


class TestCreateBooking:
    def test_paid_booking_is_confirmed_and_notified(self, orchestrator, bridge, dispatcher, customer, contact):
        bridge.add("pi_1", 15000)

        result = orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)

        booking = result.booking
        assert booking.status == "CONFIRMED"
        assert booking.total_amount_cents == 15000
        assert booking.payment.status == "SUCCEEDED"
        assert booking.invoice is not None
        assert booking.customer_phone == "+15550100"
        assert dispatcher.notified == [booking]
        assert len(result.notifications) == 1

    def test_amount_mismatch_writes_nothing(self, orchestrator, bridge, bookings, dispatcher, customer, contact):
        bridge.add("pi_1", 14000)

        with pytest.raises(AmountMismatch) as exc_info:
            orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)

        assert exc_info.value.expected_cents == 15000
        assert exc_info.value.actual_cents == 14000
        assert bookings.all() == []
        assert dispatcher.notified == []

    def test_client_amount_is_checked(self, orchestrator, bridge, bookings, customer, contact):
        bridge.add("pi_1", 15000)

        with pytest.raises(AmountMismatch):
            orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact, amount_cents=1500)

        assert bookings.all() == []

    def test_currency_must_match_payment(self, orchestrator, bridge, bookings, customer, contact):
        bridge.add("pi_1", 15000, currency="EUR")

        with pytest.raises(ConflictError):
            orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)

        assert bookings.all() == []

    def test_payment_used_once(self, orchestrator, bridge, customer, contact):
        bridge.add("pi_1", 15000)
        orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)

        with pytest.raises(ConflictError):
            orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)

    def test_unpaid_intent(self, orchestrator, bridge, customer, contact):
        bridge.add("pi_1", 15000, status="requires_payment_method")

        with pytest.raises(PaymentNotCompleted):
            orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)

    def test_same_item_booked_twice(self, orchestrator, bridge, bookings, customer, contact):
        bridge.add("pi_1", 15000)
        bridge.add("pi_2", 15000)

        orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)
        orchestrator.create_booking(customer, [BookingLine(1)], "pi_2", contact)

        assert len(bookings.all()) == 2


class TestPaymentLifecycle:
    @pytest.fixture
    def pending(self, orchestrator, bridge, dispatcher, customer, contact):
        bridge.add("pi_1", 15000, status="processing")
        booking = orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact).booking
        assert booking.status == "PENDING"
        assert booking.invoice is None
        assert dispatcher.notified == []
        return booking

    def test_confirm_payment(self, orchestrator, bridge, dispatcher, pending):
        bridge.add("pi_1", 15000)

        result = orchestrator.confirm_payment(bridge.intents["pi_1"])

        assert result.booking.status == "CONFIRMED"
        assert result.booking.payment.status == "SUCCEEDED"
        assert result.booking.invoice is not None
        assert dispatcher.notified == [result.booking]

    def test_confirm_payment_is_idempotent(self, orchestrator, bridge, dispatcher, pending):
        bridge.add("pi_1", 15000)
        orchestrator.confirm_payment(bridge.intents["pi_1"])

        result = orchestrator.confirm_payment(bridge.intents["pi_1"])

        assert result.booking.status == "CONFIRMED"
        assert len(dispatcher.notified) == 1

    def test_short_payment_stays_pending(self, orchestrator, bookings, pending):
        captured = CapturedPayment("pi_1", 15000, 10000, "USD", "succeeded")

        result = orchestrator.confirm_payment(captured)

        assert result.booking.status == "PENDING"
        assert bookings.get(pending.id).status == "PENDING"

    def test_unknown_intent(self, orchestrator):
        assert orchestrator.confirm_payment(CapturedPayment("pi_nope", 1, 1, "USD", "succeeded")) is None
        assert orchestrator.fail_payment(CapturedPayment("pi_nope", 1, 0, "USD", "requires_payment_method")) is None

    def test_failed_payment_cancels_pending_booking(self, orchestrator, pending):
        booking = orchestrator.fail_payment(
            CapturedPayment("pi_1", 15000, 0, "USD", "requires_payment_method"), "Card declined"
        )

        assert booking.status == "CANCELLED"
        assert booking.payment.status == "FAILED"
        assert booking.history[-1] == ("CANCELLED", "Payment failed: Card declined")

    def test_late_failure_keeps_confirmed_booking(self, orchestrator, bridge, customer, contact):
        bridge.add("pi_2", 15000)
        confirmed = orchestrator.create_booking(customer, [BookingLine(1)], "pi_2", contact).booking

        booking = orchestrator.fail_payment(CapturedPayment("pi_2", 15000, 0, "USD", "requires_payment_method"))

        assert booking.status == "CONFIRMED"
        assert booking.payment.status == confirmed.payment.status == "SUCCEEDED"


class TestCancel:
    def test_cancel_once(self, orchestrator, bridge, customer, contact):
        bridge.add("pi_1", 15000)
        booking = orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact).booking

        cancelled = orchestrator.cancel_booking(booking, reason="Plans changed")

        assert cancelled.status == "CANCELLED"
        with pytest.raises(ConflictError):
            orchestrator.cancel_booking(cancelled)


class TestNotificationFailures:
    def test_raising_dispatcher_keeps_the_booking(self, orchestrator, bridge, bookings, customer, contact):
        orchestrator.dispatcher = BrokenDispatcher()
        bridge.add("pi_1", 15000)

        result = orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)

        assert result.booking.status == "CONFIRMED"
        assert result.notifications == []
        assert bookings.all() == [result.booking]

    def test_raising_dispatcher_on_webhook_confirmation(self, orchestrator, bridge, customer, contact):
        bridge.add("pi_1", 15000, status="processing")
        orchestrator.create_booking(customer, [BookingLine(1)], "pi_1", contact)
        orchestrator.dispatcher = BrokenDispatcher()
        bridge.add("pi_1", 15000)

        result = orchestrator.confirm_payment(bridge.intents["pi_1"])

        assert result.booking.status == "CONFIRMED"
        assert result.notifications == []

    @pytest.mark.django_db
    def test_real_dispatcher_with_in_memory_bookings(self, orchestrator, bridge, bookings, user, contact):
        orchestrator.dispatcher = NotificationDispatcher()
        bridge.add("pi_1", 15000)

        result = orchestrator.create_booking(user, [BookingLine(1)], "pi_1", contact)

        assert bookings.all() == [result.booking]
        assert {n.channel: n.status for n in result.notifications} == {
            "EMAIL": "DELIVERED",
            "SMS": "DELIVERED",
            "WHATSAPP": "DELIVERED",
        }
        rows = Notification.objects.filter(user=user)
        assert rows.count() == 3
        assert not rows.filter(booking__isnull=False).exists()
        assert mail.outbox[0].attachments[0][0] == f"{result.booking.invoice.number}.pdf"
