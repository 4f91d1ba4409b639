import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from django.db import IntegrityError, transaction

from velvet_routes.helpers.custom_exceptions import DuplicateEmail, InvalidCredentials

from .email import OTPVerificationEmail, PasswordChangedConfirmationEmail
from .managers import OTPManager
from .models import Profile, User
from .tokens import get_tokens_for_user

logger = logging.getLogger(__name__)


def build_session(user: User) -> dict:
    update_last_login(None, user)
    return {
        **get_tokens_for_user(user),
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.role,
        },
    }


def register(email: str, password: str, name: str, phone: str | None = None) -> dict:
    """
    Create an account and return a session for it.

    Raises:
        DuplicateEmail: if an account already uses ``email``.
    """
    email = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=email).exists():
        raise DuplicateEmail()

    try:
        with transaction.atomic():
            user = User.objects.create_user(email=email, password=password, name=name, phone=phone or None)
    except IntegrityError:
        # lost a race against a concurrent registration
        raise DuplicateEmail()

    logger.info(f"Registered user {user.id}")
    return build_session(user)


def login(email: str, password: str, request=None) -> dict:
    """
    Authenticate with email and password. Unknown emails and wrong passwords
    produce the same error.
    """
    user = authenticate(request, email=User.objects.normalize_email(email), password=password)
    if user is None:
        raise InvalidCredentials()
    return build_session(user)


def update_profile(user: User, data: dict) -> Profile:
    """
    Upsert the profile of ``user``. ``name`` and ``phone`` live on the user,
    everything else on the profile.
    """
    with transaction.atomic():
        user_fields = [field for field in ("name", "phone") if data.get(field)]
        for field in user_fields:
            setattr(user, field, data[field])
        if user_fields:
            user.save(update_fields=user_fields)

        profile = Profile.for_user(user)
        profile_fields = [field for field in ("address", "date_of_birth", "preferences") if field in data]
        for field in profile_fields:
            setattr(profile, field, data[field])
        if profile_fields:
            profile.save(update_fields=[*profile_fields, "updated_at"])
    return profile


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not user.check_password(current_password):
        raise InvalidCredentials("Current password is incorrect")
    user.set_password(new_password)
    user.save(update_fields=["password"])
    PasswordChangedConfirmationEmail(context={"user": user}).send(to=[user.email])
    logger.info(f"Password changed for user {user.id}")


def request_email_verification(user: User) -> str:
    otp = OTPManager.generate_otp(user.email)
    OTPVerificationEmail(context={"otp": otp, "user": user}).send(to=[user.email])
    return otp


def verify_email(user: User, otp: str) -> bool:
    if not OTPManager.verify_otp(user.email, otp):
        return False
    if not user.is_verified:
        user.is_verified = True
        user.save(update_fields=["is_verified"])
    return True
