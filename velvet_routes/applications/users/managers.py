from typing import TYPE_CHECKING

import pyotp
from django.contrib.auth.hashers import make_password
from django.contrib.auth.models import UserManager as DjangoUserManager
from django.core.cache import cache

from velvet_routes.helpers.enums import UserRole

if TYPE_CHECKING:
    from .models import User  # noqa: F401


class UserManager(DjangoUserManager["User"]):
    """Custom manager for the User model."""

    def _create_user(self, email: str, password: str | None, **extra_fields):
        """
        Create and save a user with the given email and password.
        """
        if not email:
            msg = "The given email must be set"
            raise ValueError(msg)
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.password = make_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields):  # type: ignore[override]
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", UserRole.USER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields):  # type: ignore[override]
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_verified", True)
        extra_fields.setdefault("role", UserRole.ADMIN)

        if extra_fields.get("is_staff") is not True:
            msg = "Superuser must have is_staff=True."
            raise ValueError(msg)
        if extra_fields.get("is_superuser") is not True:
            msg = "Superuser must have is_superuser=True."
            raise ValueError(msg)

        return self._create_user(email, password, **extra_fields)


class OTPManager:
    """
    Handles OTP generation, storage, and verification.
    """

    timeout = 300

    @staticmethod
    def cache_key(email: str) -> str:
        return f"otp:{email.lower()}"

    @classmethod
    def generate_otp(cls, email: str) -> str:
        """
        Generate a 4-digit OTP for email verification and store it in cache.
        Args:
            email (str): The email for which OTP is being generated.

        Returns:
            str: The generated OTP.
        """
        otp = pyotp.HOTP(pyotp.random_base32(), digits=4).at(0)
        cache.set(cls.cache_key(email), otp, timeout=cls.timeout)  # 5 minutes expiry
        return otp

    @classmethod
    def verify_otp(cls, email: str, otp: str) -> bool:
        """
        Verify the OTP entered by the user. A code can only be used once.
        """
        stored_otp = cache.get(cls.cache_key(email))
        if stored_otp and stored_otp == otp:
            cache.delete(cls.cache_key(email))
            return True
        return False
