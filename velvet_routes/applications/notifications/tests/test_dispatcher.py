import json
from concurrent.futures import ThreadPoolExecutor

import pytest
from django.core import mail
from pywebpush import WebPushException

from velvet_routes.applications.bookings.models import Booking
from velvet_routes.applications.notifications import backends, dispatcher
from velvet_routes.applications.notifications.dispatcher import NotificationDispatcher, build_push_payload
from velvet_routes.applications.notifications.models import Notification, PushSubscription

pytestmark = pytest.mark.django_db

BACKENDS_PATH = "velvet_routes.applications.notifications.backends"


def book(client, item, intent_id="pi_test_123", **extra):
    return client.post(
        "/api/bookings/",
        {"inventoryItemId": item.id, "paymentIntentId": intent_id, **extra},
        format="json",
    )


@pytest.fixture
def failing_sms(settings):
    settings.NOTIFICATIONS = {
        **settings.NOTIFICATIONS,
        "BACKENDS": {**settings.NOTIFICATIONS["BACKENDS"], "SMS": f"{BACKENDS_PATH}.FailingBackend"},
    }


class TestBookingConfirmation:
    def test_every_channel_with_a_recipient_is_used(self, auth_client, user, hotel, stripe_intents):
        stripe_intents.add(amount=15000)

        response = book(auth_client, hotel)

        assert response.status_code == 201
        notifications = response.json()["notifications"]
        assert {n["channel"]: n["status"] for n in notifications} == {
            "EMAIL": "DELIVERED",
            "SMS": "DELIVERED",
            "WHATSAPP": "DELIVERED",
        }
        booking = Booking.objects.get()
        assert Notification.objects.filter(booking=booking).count() == 3
        assert {delivery.channel for delivery in backends.outbox} == {"SMS", "WHATSAPP"}
        assert all(delivery.recipient == user.phone for delivery in backends.outbox)
        assert booking.reference in backends.outbox[0].body

    def test_phone_from_request_wins(self, auth_client, hotel, stripe_intents):
        stripe_intents.add(amount=15000)

        book(auth_client, hotel, phoneNumber="+4915112345678")

        assert Notification.objects.get(channel="SMS").recipient == "+4915112345678"

    def test_no_phone_means_email_only(self, api_client, other_user, hotel, stripe_intents):
        stripe_intents.add(amount=15000)
        api_client.force_authenticate(other_user)

        response = book(api_client, hotel)

        assert response.status_code == 201
        assert list(Notification.objects.values_list("channel", flat=True)) == ["EMAIL"]
        assert Notification.objects.get().recipient == other_user.email
        assert backends.outbox == []
        assert len(mail.outbox) == 1

    def test_failing_channel_does_not_fail_the_booking(self, auth_client, hotel, stripe_intents, failing_sms):
        stripe_intents.add(amount=15000)

        response = book(auth_client, hotel)

        assert response.status_code == 201
        assert response.json()["booking"]["status"] == "CONFIRMED"
        assert response.json()["email"]["sent"] is True
        sms = Notification.objects.get(channel="SMS")
        assert sms.status == "FAILED"
        assert "failed" in sms.error
        assert Notification.objects.get(channel="EMAIL").status == "DELIVERED"
        assert Notification.objects.get(channel="WHATSAPP").status == "DELIVERED"
        failed = [n for n in response.json()["notifications"] if n["status"] == "FAILED"]
        assert [n["channel"] for n in failed] == ["SMS"]

    def test_push_needs_a_subscription(self, auth_client, user, hotel, stripe_intents):
        PushSubscription.objects.create(user=user, endpoint="https://push.example.com/send/abc", p256dh="k", auth="a")
        stripe_intents.add(amount=15000)

        book(auth_client, hotel)

        push = Notification.objects.get(channel="PUSH")
        assert push.status == "DELIVERED"
        assert push.recipient == f"user_{user.pk}"
        assert push.payload["title"] == "Booking confirmed"
        assert push.payload["data"]["bookingId"] == Booking.objects.get().pk

    def test_broken_invoice_only_fails_the_email(self, auth_client, hotel, stripe_intents, monkeypatch):
        def broken_pdf(booking):
            raise RuntimeError("invoice font missing")

        monkeypatch.setattr(dispatcher, "render_invoice_pdf", broken_pdf)
        stripe_intents.add(amount=15000)

        response = book(auth_client, hotel)

        assert response.status_code == 201
        assert response.json()["booking"]["status"] == "CONFIRMED"
        assert response.json()["email"]["sent"] is False
        email = Notification.objects.get(channel="EMAIL")
        assert email.status == "FAILED"
        assert email.error == "invoice font missing"
        assert email.booking == Booking.objects.get()
        assert Notification.objects.get(channel="SMS").status == "DELIVERED"
        assert Notification.objects.get(channel="WHATSAPP").status == "DELIVERED"
        assert mail.outbox == []
        statuses = {n["channel"]: n["status"] for n in response.json()["notifications"]}
        assert statuses == {"EMAIL": "FAILED", "SMS": "DELIVERED", "WHATSAPP": "DELIVERED"}


class TestDispatcher:
    def test_configured_channels_only(self, user, settings):
        settings.NOTIFICATIONS = {**settings.NOTIFICATIONS, "CHANNELS": ["sms"]}

        results = NotificationDispatcher().send_test(user, message="Hello there")

        assert [(r.channel, r.status) for r in results] == [("SMS", "DELIVERED")]
        assert backends.outbox[0].body == "Hello there"

    def test_injected_backends(self, user):
        class Recorder(backends.BaseBackend):
            sent = []

            def send(self, delivery):
                self.sent.append(delivery.recipient)
                return "msg-1"

        dispatcher = NotificationDispatcher(channels=["SMS", "WHATSAPP"], backends={"SMS": Recorder("SMS")})

        results = dispatcher.send_test(user)

        assert Recorder.sent == [user.phone]
        assert Notification.objects.get(channel="SMS").provider_message_id == "msg-1"
        assert {r.channel for r in results} == {"SMS", "WHATSAPP"}

    def test_notify_never_raises(self, user, monkeypatch):
        booking = Booking.objects.create(user=user, total_amount_cents=100, customer_email=user.email)

        def broken(*args, **kwargs):
            raise RuntimeError("template missing")

        monkeypatch.setattr(NotificationDispatcher, "_booking_deliveries", broken)

        assert NotificationDispatcher().notify(booking) == []
        assert not Notification.objects.exists()

    def test_push_payload(self, settings):
        settings.NOTIFICATIONS = {**settings.NOTIFICATIONS, "PUSH_ICON": "/icon.png"}

        payload = build_push_payload("Hi", "Body", url="/trips", bookingId=5)

        assert payload["icon"] == "/icon.png"
        assert payload["data"] == {"url": "/trips", "bookingId": 5}
        assert payload["actions"][0]["action"] == "view"


class TestGatewayBackend:
    def test_posts_to_gateway(self, settings, monkeypatch):
        settings.NOTIFICATIONS = {
            **settings.NOTIFICATIONS,
            "SMS_GATEWAY_URL": "https://gateway.example.com/messages",
            "GATEWAY_API_KEY": "secret",
        }
        calls = []

        class Response:
            def raise_for_status(self):
                pass

            def json(self):
                return {"sid": "SM123"}

        def post(url, **kwargs):
            calls.append((url, kwargs))
            return Response()

        monkeypatch.setattr(backends.requests, "post", post)
        delivery = backends.Delivery("SMS", "+15550100", "Your booking is confirmed")

        assert backends.HttpGatewayBackend("SMS").send(delivery) == "SM123"
        url, kwargs = calls[0]
        assert url == "https://gateway.example.com/messages"
        assert kwargs["json"] == {"channel": "sms", "to": "+15550100", "message": "Your booking is confirmed"}
        assert kwargs["headers"] == {"Authorization": "Bearer secret"}

    def test_missing_gateway(self, settings):
        settings.NOTIFICATIONS = {**settings.NOTIFICATIONS, "WHATSAPP_GATEWAY_URL": ""}

        with pytest.raises(backends.DeliveryError):
            backends.HttpGatewayBackend("WHATSAPP").send(backends.Delivery("WHATSAPP", "+1", "hi"))


class TestLocmemBackend:
    def test_message_ids_are_unique_across_threads(self):
        backend = backends.LocmemBackend("SMS")
        deliveries = [backends.Delivery("SMS", f"+1555010{i:02d}", "hi") for i in range(40)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            message_ids = list(pool.map(backend.send, deliveries))

        assert len(set(message_ids)) == 40
        assert len(backends.outbox) == 40


SUBSCRIPTIONS = (
    {"endpoint": "https://push.example.com/send/phone", "keys": {"p256dh": "k1", "auth": "a1"}},
    {"endpoint": "https://push.example.com/send/laptop", "keys": {"p256dh": "k2", "auth": "a2"}},
)


@pytest.fixture
def web_push(settings, monkeypatch):
    settings.NOTIFICATIONS = {
        **settings.NOTIFICATIONS,
        "VAPID_PRIVATE_KEY": "private-key",
        "VAPID_CLAIMS_SUBJECT": "mailto:ops@velvetroutes.com",
        "BACKENDS": {**settings.NOTIFICATIONS["BACKENDS"], "PUSH": f"{BACKENDS_PATH}.WebPushBackend"},
    }
    calls = []
    failing_endpoints = set()

    def webpush(subscription_info, data, vapid_private_key, vapid_claims, timeout):
        calls.append(
            {"subscription_info": subscription_info, "data": data, "key": vapid_private_key, "claims": vapid_claims}
        )
        if subscription_info["endpoint"] in failing_endpoints:
            raise WebPushException("Push failed: 410 Gone")

    monkeypatch.setattr(backends, "webpush", webpush)
    return calls, failing_endpoints


class TestWebPushBackend:
    def test_sends_to_every_subscription(self, web_push):
        calls, _ = web_push
        payload = {"title": "Booking confirmed", "body": "See you soon"}

        backends.WebPushBackend("PUSH").send(
            backends.Delivery("PUSH", "user_1", "See you soon", payload=payload, subscriptions=SUBSCRIPTIONS)
        )

        assert [call["subscription_info"] for call in calls] == list(SUBSCRIPTIONS)
        assert all(json.loads(call["data"]) == payload for call in calls)
        assert calls[0]["key"] == "private-key"
        assert calls[0]["claims"] == {"sub": "mailto:ops@velvetroutes.com"}

    def test_one_expired_subscription_is_tolerated(self, web_push):
        calls, failing = web_push
        failing.add(SUBSCRIPTIONS[0]["endpoint"])

        backends.WebPushBackend("PUSH").send(backends.Delivery("PUSH", "user_1", "hi", subscriptions=SUBSCRIPTIONS))

        assert len(calls) == 2

    def test_every_subscription_failing(self, web_push):
        _, failing = web_push
        failing.update(subscription["endpoint"] for subscription in SUBSCRIPTIONS)

        with pytest.raises(backends.DeliveryError, match="410 Gone"):
            backends.WebPushBackend("PUSH").send(
                backends.Delivery("PUSH", "user_1", "hi", subscriptions=SUBSCRIPTIONS)
            )

    def test_needs_a_private_key(self, web_push, settings):
        settings.NOTIFICATIONS = {**settings.NOTIFICATIONS, "VAPID_PRIVATE_KEY": ""}

        with pytest.raises(backends.DeliveryError):
            backends.WebPushBackend("PUSH").send(
                backends.Delivery("PUSH", "user_1", "hi", subscriptions=SUBSCRIPTIONS)
            )

    def test_booking_pushes_to_the_stored_subscription(self, web_push, auth_client, user, hotel, stripe_intents):
        calls, _ = web_push
        subscription = PushSubscription.objects.create(
            user=user, endpoint="https://push.example.com/send/abc", p256dh="key", auth="secret"
        )
        stripe_intents.add(amount=15000)

        book(auth_client, hotel)

        assert Notification.objects.get(channel="PUSH").status == "DELIVERED"
        assert [call["subscription_info"] for call in calls] == [subscription.as_subscription_info()]
        assert json.loads(calls[0]["data"])["title"] == "Booking confirmed"
