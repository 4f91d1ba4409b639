import logging

import stripe
from django.conf import settings

from velvet_routes.helpers.custom_exceptions import UpstreamError

logger = logging.getLogger(__name__)


class StripeClient:
    """
    Hands out the ``stripe`` module configured with the secret key from
    settings. Keys are read on every call so settings overrides apply.
    """

    def __init__(self, api_key: str | None = None):
        self._api_key = api_key

    @property
    def api_key(self) -> str:
        return self._api_key or settings.STRIPE_SECRET_KEY

    def get_client(self):
        if not self.api_key:
            logger.error("STRIPE_SECRET_KEY is not set, cannot talk to Stripe.")
            raise UpstreamError("Payments are not configured.")
        stripe.api_key = self.api_key
        stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES
        return stripe


stripe_client = StripeClient()
