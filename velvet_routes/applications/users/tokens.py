from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


def get_tokens_for_user(user: User) -> dict[str, str]:
    """
    Issue a refresh/access pair whose payload carries ``id``, ``email`` and
    ``role``. ``id`` is the numeric primary key. The access token lifetime
    comes from ``SIMPLE_JWT``.
    """
    refresh = RefreshToken.for_user(user)
    # newer simplejwt releases write the user id claim as a string
    refresh[api_settings.USER_ID_CLAIM] = user.pk
    refresh["email"] = user.email
    refresh["role"] = user.role
    return {
        "token": str(refresh.access_token),
        "refresh": str(refresh),
    }
