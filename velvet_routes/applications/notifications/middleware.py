import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware

logger = logging.getLogger(__name__)


class JWTMiddleware(BaseMiddleware):
    """
    Authenticates websocket connections from a ``?token=<jwt>`` query
    parameter. Unauthenticated connections get an ``AnonymousUser``.
    """

    async def __call__(self, scope, receive, send):
        # Import here to avoid apps not loaded error
        from django.contrib.auth.models import AnonymousUser

        query = parse_qs(scope.get("query_string", b"").decode())
        token = (query.get("token") or [None])[0]

        if token:
            scope["user"] = await self.get_user(token)
        else:
            scope["user"] = AnonymousUser()
            logger.debug(f"JWT authentication: No token provided for path {scope.get('path')}")

        return await super().__call__(scope, receive, send)

    @database_sync_to_async
    def get_user(self, token):
        from django.contrib.auth.models import AnonymousUser
        from rest_framework_simplejwt.authentication import JWTAuthentication
        from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError

        jwt_auth = JWTAuthentication()
        try:
            validated_token = jwt_auth.get_validated_token(token)
            return jwt_auth.get_user(validated_token)
        except (InvalidToken, TokenError, AuthenticationFailed) as e:
            logger.warning(f"JWT authentication: Invalid token - {e}")
            return AnonymousUser()
