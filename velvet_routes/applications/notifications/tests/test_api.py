import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.core import mail
from rest_framework_simplejwt.tokens import AccessToken

from config.asgi import application
from velvet_routes.applications.notifications.models import Notification, PushSubscription

SUBSCRIPTION = {
    "endpoint": "https://fcm.googleapis.com/fcm/send/abc123",
    "expirationTime": None,
    "keys": {"p256dh": "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA", "auth": "tBHItJI5svbpez7KI4CCXg"},
}


@pytest.mark.django_db
class TestSubscribe:
    def test_subscribe_then_refresh(self, auth_client, user):
        created = auth_client.post(
            "/api/notifications/subscribe/", {"subscription": SUBSCRIPTION}, format="json", HTTP_USER_AGENT="Firefox"
        )
        refreshed = auth_client.post("/api/notifications/subscribe/", {"subscription": SUBSCRIPTION}, format="json")

        assert created.status_code == 201
        assert refreshed.status_code == 200
        subscription = PushSubscription.objects.get()
        assert subscription.user == user
        assert subscription.p256dh == SUBSCRIPTION["keys"]["p256dh"]

    def test_endpoint_moves_to_new_user(self, auth_client, api_client, other_user):
        auth_client.post("/api/notifications/subscribe/", {"subscription": SUBSCRIPTION}, format="json")
        api_client.force_authenticate(other_user)

        api_client.post("/api/notifications/subscribe/", {"subscription": SUBSCRIPTION}, format="json")

        assert PushSubscription.objects.get().user == other_user

    def test_invalid_subscription(self, auth_client):
        response = auth_client.post(
            "/api/notifications/subscribe/", {"subscription": {"endpoint": "not a url"}}, format="json"
        )

        assert response.status_code == 400

    def test_requires_authentication(self, api_client):
        response = api_client.post("/api/notifications/subscribe/", {"subscription": SUBSCRIPTION}, format="json")

        assert response.status_code == 401


@pytest.mark.django_db
class TestTestNotification:
    def test_sends_on_every_reachable_channel(self, auth_client, user):
        response = auth_client.post(
            "/api/notifications/test/", {"title": "Ping", "message": "Is this thing on?"}, format="json"
        )

        assert response.status_code == 200
        channels = {n["channel"]: n["status"] for n in response.json()["notifications"]}
        assert channels == {"EMAIL": "DELIVERED", "SMS": "DELIVERED", "WHATSAPP": "DELIVERED"}
        assert mail.outbox[0].to == [user.email]
        assert "Is this thing on?" in mail.outbox[0].body

    def test_phone_number_override(self, api_client, other_user):
        api_client.force_authenticate(other_user)

        response = api_client.post("/api/notifications/test/", {"phoneNumber": "+447700900123"}, format="json")

        recipients = {n["channel"]: n["recipient"] for n in response.json()["notifications"]}
        assert recipients["SMS"] == "+447700900123"
        assert recipients["EMAIL"] == other_user.email


@pytest.mark.django_db
class TestNotificationList:
    def test_lists_own_notifications(self, auth_client, user, other_user):
        Notification.objects.create(user=user, channel="EMAIL", recipient=user.email, message="Mine")
        Notification.objects.create(user=other_user, channel="EMAIL", recipient=other_user.email, message="Theirs")

        response = auth_client.get("/api/notifications/")

        assert response.status_code == 200
        assert [n["message"] for n in response.json()] == ["Mine"]

    def test_vapid_key_is_public(self, api_client, settings):
        settings.NOTIFICATIONS = {**settings.NOTIFICATIONS, "VAPID_PUBLIC_KEY": "BPublicKey"}

        response = api_client.get("/api/notifications/vapid-public-key/")

        assert response.status_code == 200
        assert response.json() == {"publicKey": "BPublicKey"}


@pytest.mark.django_db(transaction=True)
class TestNotificationSocket:
    def test_authenticated_socket_receives_push(self, user):
        token = str(AccessToken.for_user(user))

        async def scenario():
            communicator = WebsocketCommunicator(application, f"/ws/notifications/?token={token}")
            connected, _ = await communicator.connect()
            assert connected
            await get_channel_layer().group_send(
                f"user_{user.pk}", {"type": "push.notification", "payload": {"title": "Booking confirmed"}}
            )
            message = await communicator.receive_json_from()
            await communicator.disconnect()
            return message

        assert async_to_sync(scenario)() == {"type": "notification", "payload": {"title": "Booking confirmed"}}

    @pytest.mark.parametrize("query", ["", "?token=not-a-jwt"])
    def test_anonymous_socket_is_closed(self, query):
        async def scenario():
            communicator = WebsocketCommunicator(application, f"/ws/notifications/{query}")
            connected, _ = await communicator.connect()
            await communicator.disconnect()
            return connected

        assert async_to_sync(scenario)() is False
