from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema

from velvet_routes.applications.users.api.serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    OTPVerificationSerializer,
    ProfileSerializers,
    RegisterSerializer,
    SessionSerializer,
    UserStatsSerializer,
)
from velvet_routes.helpers.custom_exceptions import CustomError

register_schema = extend_schema(
    summary="Register",
    description="Creates an account and returns a 7-day bearer token.",
    request=RegisterSerializer,
    responses={
        201: SessionSerializer,
        400: OpenApiResponse(description="Validation error or the email is already registered."),
    },
    tags=["Auth"],
)

login_schema = extend_schema(
    summary="Login",
    description="Validates email and password and returns a bearer token.",
    request=LoginSerializer,
    responses={
        200: SessionSerializer,
        400: OpenApiResponse(
            description="Invalid credentials",
            examples=[
                OpenApiExample(
                    name="Invalid credentials",
                    value={"detail": "Invalid credentials", "code": "invalid_credentials"},
                    response_only=True,
                )
            ],
        ),
    },
    tags=["Auth"],
)

profile_retrieve_schema = extend_schema(
    summary="Get profile",
    description="Returns the authenticated user together with their travel profile.",
    responses={200: ProfileSerializers.BaseProfileSerializer, **CustomError.DEFAULT_ERROR_SCHEMA()},
    tags=["Auth"],
)

profile_update_schema = extend_schema(
    summary="Update profile",
    description=(
        "Updates `name`/`phone` on the account and `address`/`dob`/`preferences` on the "
        "profile. The profile is created if it does not exist yet."
    ),
    request=ProfileSerializers.ProfileUpdateSerializer,
    responses={200: ProfileSerializers.BaseProfileSerializer, **CustomError.DEFAULT_ERROR_SCHEMA()},
    tags=["Auth"],
)

stats_schema = extend_schema(
    summary="Travel stats",
    description="Number of bookings, total spent (major currency units) and distinct locations visited.",
    responses={200: UserStatsSerializer},
    tags=["Auth"],
)

change_password_schema = extend_schema(
    summary="Change password",
    request=ChangePasswordSerializer,
    responses={200: OpenApiResponse(description="Password changed successfully")},
    tags=["Auth"],
)

request_verification_schema = extend_schema(
    summary="Send verification code",
    description="Emails a 4-digit code valid for 5 minutes.",
    request=None,
    responses={200: OpenApiResponse(description="Verification code sent")},
    tags=["Auth"],
)

verify_email_schema = extend_schema(
    summary="Verify email",
    request=OTPVerificationSerializer,
    responses={
        200: OpenApiResponse(description="Email verified"),
        400: OpenApiResponse(description="Invalid or expired code"),
    },
    tags=["Auth"],
)
