"""
Delivery backends for notification channels.

A backend sends one ``Delivery`` and returns the provider's message id (or
None). Any exception it raises is recorded as a failed notification by the
dispatcher. Backends run on worker threads and must not touch the database.
"""

import json
import logging
import threading
from dataclasses import dataclass, field

import requests
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.mail import send_mail
from pywebpush import WebPushException, webpush

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    pass


@dataclass(frozen=True)
class Delivery:
    channel: str
    recipient: str
    body: str
    subject: str = ""
    payload: dict = field(default_factory=dict)
    # prebuilt templated email, only for the email channel
    email: object = None
    # web push subscription infos, only for the push channel
    subscriptions: tuple = ()


def push_group_name(user_id) -> str:
    return f"user_{user_id}"


class BaseBackend:
    def __init__(self, channel: str):
        self.channel = channel
        self.options = settings.NOTIFICATIONS

    def send(self, delivery: Delivery) -> str | None:
        raise NotImplementedError


class ConsoleBackend(BaseBackend):
    """Writes the message to the log instead of sending it."""

    def send(self, delivery):
        logger.info(f"[{delivery.channel}] to {delivery.recipient}: {delivery.body}")
        return None


_outbox_lock = threading.Lock()
outbox: list[Delivery] = []


class LocmemBackend(BaseBackend):
    """Keeps deliveries in the module level ``outbox``, like Django's locmem mail backend."""

    def send(self, delivery):
        with _outbox_lock:
            outbox.append(delivery)
            message_id = f"locmem-{len(outbox)}"
        return message_id


class FailingBackend(BaseBackend):
    def send(self, delivery):
        raise DeliveryError(f"{delivery.channel} delivery to {delivery.recipient} failed")


class EmailBackend(BaseBackend):
    """Sends through Django's configured ``EMAIL_BACKEND``."""

    def send(self, delivery):
        if delivery.email is not None:
            delivery.email.send(to=[delivery.recipient])
        else:
            send_mail(delivery.subject, delivery.body, settings.DEFAULT_FROM_EMAIL, [delivery.recipient])
        return None


class HttpGatewayBackend(BaseBackend):
    """
    Posts SMS and WhatsApp messages to an HTTP gateway. The gateway URL is
    read from ``NOTIFICATIONS["<CHANNEL>_GATEWAY_URL"]``.
    """

    def send(self, delivery):
        url = self.options.get(f"{self.channel}_GATEWAY_URL")
        if not url:
            raise DeliveryError(f"No gateway configured for {self.channel}")

        headers = {}
        if api_key := self.options.get("GATEWAY_API_KEY"):
            headers["Authorization"] = f"Bearer {api_key}"

        response = requests.post(
            url,
            json={"channel": self.channel.lower(), "to": delivery.recipient, "message": delivery.body},
            headers=headers,
            timeout=self.options.get("GATEWAY_TIMEOUT", 10),
        )
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError:
            return None
        return str(data.get("id") or data.get("sid") or "") or None


class ChannelLayerPushBackend(BaseBackend):
    """
    Publishes push payloads to the user's channel-layer group. Connected
    ``ws/notifications/`` sockets forward them to the browser.
    """

    def send(self, delivery):
        channel_layer = get_channel_layer()
        if channel_layer is None:
            raise DeliveryError("No channel layer configured")
        async_to_sync(channel_layer.group_send)(
            delivery.recipient,
            {"type": "push.notification", "payload": delivery.payload},
        )
        return None


class WebPushBackend(BaseBackend):
    """
    Sends the push payload to every browser subscription of the user with
    pywebpush, signed with ``NOTIFICATIONS["VAPID_PRIVATE_KEY"]``. The
    delivery fails only when no subscription accepted it.
    """

    def send(self, delivery):
        private_key = self.options.get("VAPID_PRIVATE_KEY")
        if not private_key:
            raise DeliveryError("No VAPID private key configured")
        if not delivery.subscriptions:
            raise DeliveryError(f"No push subscription for {delivery.recipient}")

        data = json.dumps(delivery.payload)
        sent, errors = 0, []
        for subscription in delivery.subscriptions:
            try:
                webpush(
                    subscription_info=subscription,
                    data=data,
                    vapid_private_key=private_key,
                    vapid_claims={"sub": self.options.get("VAPID_CLAIMS_SUBJECT", "")},
                    timeout=self.options.get("GATEWAY_TIMEOUT", 10),
                )
            except WebPushException as e:
                logger.warning(f"Web push to {subscription['endpoint']} failed: {e}")
                errors.append(str(e))
            else:
                sent += 1

        if not sent:
            raise DeliveryError(f"Web push failed for every subscription: {'; '.join(errors)}")
        return None
