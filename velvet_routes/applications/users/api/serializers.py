from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from velvet_routes.applications.users.models import Profile, User
from velvet_routes.helpers.enums import TravelClassChoice


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8, validators=[validate_password])
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "name", "email", "phone", "role", "is_verified", "metadata", "last_login", "date_joined")
        read_only_fields = fields


class SessionSerializer(serializers.Serializer):
    token = serializers.CharField()
    refresh = serializers.CharField()
    user = serializers.DictField()


class PreferencesSerializer(serializers.Serializer):
    travelClass = serializers.ChoiceField(choices=TravelClassChoice.choices, required=False)  # noqa: N815
    dietaryRestrictions = serializers.ListField(child=serializers.CharField(), required=False)  # noqa: N815
    accessibility = serializers.BooleanField(required=False)


class ProfileSerializers:
    class BaseProfileSerializer(serializers.ModelSerializer):
        dob = serializers.DateField(source="date_of_birth", required=False, allow_null=True)
        preferences = PreferencesSerializer(required=False)

        class Meta:
            model = Profile
            fields = ("id", "address", "dob", "preferences", "updated_at")
            read_only_fields = ("id", "updated_at")

    class ProfileUpdateSerializer(serializers.Serializer):
        name = serializers.CharField(max_length=255, required=False, allow_blank=True)
        phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
        address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
        dob = serializers.DateField(source="date_of_birth", required=False, allow_null=True)
        preferences = PreferencesSerializer(required=False)

        def validate_preferences(self, value):
            # merge partial preferences onto the stored ones
            profile = self.context.get("profile")
            current = dict(profile.preferences or {}) if profile else {}
            current.update(value)
            return current


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(write_only=True)  # noqa: N815
    newPassword = serializers.CharField(write_only=True, min_length=8, validators=[validate_password])  # noqa: N815


class OTPVerificationSerializer(serializers.Serializer):
    """Serializer for verifying OTP."""
    otp = serializers.CharField(required=True, max_length=4, min_length=4)


class UserStatsSerializer(serializers.Serializer):
    totalBookings = serializers.IntegerField()  # noqa: N815
    totalSpent = serializers.DecimalField(max_digits=12, decimal_places=2, coerce_to_string=False)  # noqa: N815
    countries = serializers.IntegerField()
