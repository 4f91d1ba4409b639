from typing import ClassVar

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import BooleanField
from django.db.models import CharField
from django.db.models import EmailField
from django.utils.translation import gettext_lazy as _
import auto_prefetch

from velvet_routes.helpers.enums import TravelClassChoice, UserRole

from .managers import UserManager


def default_user_metadata():
    return {"preferences": {"notifications": True, "darkMode": False, "language": "en"}}


def default_travel_preferences():
    return {
        "travelClass": TravelClassChoice.ECONOMY.value,
        "dietaryRestrictions": [],
        "accessibility": False,
    }


class User(AbstractUser):
    """
    Default custom user model for velvet-routes.
    Accounts log in with their email address; there is no username.
    """

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Name of User"), blank=True, max_length=255)
    first_name = None  # type: ignore[assignment]
    last_name = None  # type: ignore[assignment]
    username = None  # type: ignore[assignment]
    email = EmailField(_("email address"), unique=True)
    phone = CharField(_("Phone Number"), max_length=20, blank=True, null=True)
    role = CharField(max_length=10, choices=UserRole.choices, default=UserRole.USER)
    is_verified = BooleanField(default=False)
    metadata = models.JSONField(default=default_user_metadata, blank=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects: ClassVar[UserManager] = UserManager()

    def __str__(self):
        return self.email

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN or self.is_staff


class Profile(auto_prefetch.Model):
    """
    Extended travel data for a user. Created lazily the first time it is
    read or updated, see ``Profile.for_user``.
    """

    user: "User" = auto_prefetch.OneToOneField(
        "users.User", on_delete=models.CASCADE, related_name="profile"
    )
    address = models.TextField(_("Address"), blank=True, null=True)
    date_of_birth = models.DateField(_("Date of Birth"), blank=True, null=True)
    preferences = models.JSONField(default=default_travel_preferences, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(auto_prefetch.Model.Meta):
        verbose_name = "Profile"

    def __str__(self):
        return f"Profile of {self.user}"

    @classmethod
    def for_user(cls, user: User) -> "Profile":
        profile, _created = cls.objects.get_or_create(user=user)
        return profile
