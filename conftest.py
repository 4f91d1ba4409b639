from datetime import timedelta
from types import SimpleNamespace
from unittest import mock

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from velvet_routes.applications.inventory.models import Bus, Flight, Hotel, InventoryItem, Provider
from velvet_routes.applications.notifications import backends
from velvet_routes.applications.users.models import User
from velvet_routes.helpers.enums import TravelMode

PASSWORD = "Sunny-Trails-42"


@pytest.fixture(autouse=True)
def _isolated_state():
    cache.clear()
    backends.outbox.clear()
    yield
    backends.outbox.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    return User.objects.create_user(
        email="jane@example.com", password=PASSWORD, name="Jane Traveller", phone="+15550100"
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(email="omar@example.com", password=PASSWORD, name="Omar Nomad")


@pytest.fixture
def staff_user(db):
    return User.objects.create_superuser(email="ops@velvetroutes.com", password=PASSWORD, name="Ops")


@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user)
    return client


@pytest.fixture
def provider(db):
    return Provider.objects.create(name="demo", display_name="Demo Travel", supported_modes=["HOTEL", "FLIGHT", "BUS"])


@pytest.fixture
def hotel(provider):
    item = InventoryItem.objects.create(
        provider=provider,
        provider_item_id="hotel-grand-plaza",
        travel_mode=TravelMode.HOTEL,
        price_cents=15000,
        searchable_location="New York, NY",
    )
    Hotel.objects.create(item=item, name="Grand Plaza Hotel", location="New York, NY", stars=5, rating="4.5")
    return item


@pytest.fixture
def flight(provider):
    depart = timezone.now() + timedelta(days=30)
    item = InventoryItem.objects.create(
        provider=provider,
        provider_item_id="flight-sw-1234",
        travel_mode=TravelMode.FLIGHT,
        price_cents=29900,
        searchable_location="Los Angeles",
    )
    Flight.objects.create(
        item=item,
        airline="SkyWings",
        flight_number="SW1234",
        origin="New York",
        origin_code="JFK",
        destination="Los Angeles",
        destination_code="LAX",
        depart_at=depart,
        arrive_at=depart + timedelta(hours=6),
        duration=360,
        stops=0,
    )
    return item


@pytest.fixture
def bus(provider):
    depart = timezone.now() + timedelta(days=10)
    item = InventoryItem.objects.create(
        provider=provider,
        provider_item_id="bus-gh-2024",
        travel_mode=TravelMode.BUS,
        price_cents=4500,
        searchable_location="Boston",
    )
    Bus.objects.create(
        item=item,
        operator="Greyhound",
        bus_number="GH2024",
        origin="New York",
        destination="Boston",
        depart_at=depart,
        arrive_at=depart + timedelta(hours=4, minutes=30),
        duration=270,
    )
    return item


def make_intent(intent_id="pi_test_123", amount=15000, status="succeeded", currency="usd", amount_received=None):
    if amount_received is None:
        amount_received = amount if status == "succeeded" else 0
    return SimpleNamespace(
        id=intent_id,
        amount=amount,
        amount_received=amount_received,
        currency=currency,
        status=status,
        metadata={},
        client_secret=f"{intent_id}_secret_abc",
    )


@pytest.fixture
def stripe_intents():
    """
    Replaces Stripe's PaymentIntent API with an in-memory registry. Tests add
    intents with ``stripe_intents.add(...)``.
    """
    registry = {}

    def retrieve(intent_id, *args, **kwargs):
        import stripe

        if intent_id not in registry:
            raise stripe.InvalidRequestError(f"No such payment_intent: '{intent_id}'", "intent")
        return registry[intent_id]

    def create(amount, currency, **kwargs):
        intent_id = f"pi_created_{len(registry) + 1}"
        intent = make_intent(intent_id, amount=amount, status="requires_payment_method", currency=currency)
        registry[intent.id] = intent
        return intent

    with (
        mock.patch("stripe.PaymentIntent.retrieve", side_effect=retrieve) as retrieve_mock,
        mock.patch("stripe.PaymentIntent.create", side_effect=create) as create_mock,
    ):
        yield SimpleNamespace(
            registry=registry,
            add=lambda *args, **kwargs: registry.setdefault(kwargs.get("intent_id", "pi_test_123"),
                                                             make_intent(*args, **kwargs)),
            retrieve=retrieve_mock,
            create=create_mock,
        )
