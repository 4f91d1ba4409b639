import logging

from django.utils.module_loading import import_string
from rest_framework import generics, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.authentication import AUTH_HEADER_TYPES
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.settings import api_settings

from velvet_routes.applications.bookings.services import booking_stats
from velvet_routes.applications.users import services
from velvet_routes.applications.users.api.schemas import (
    change_password_schema,
    login_schema,
    profile_retrieve_schema,
    profile_update_schema,
    register_schema,
    request_verification_schema,
    stats_schema,
    verify_email_schema,
)
from velvet_routes.applications.users.api.serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    OTPVerificationSerializer,
    ProfileSerializers,
    RegisterSerializer,
    UserSerializer,
    UserStatsSerializer,
)
from velvet_routes.applications.users.models import Profile
from velvet_routes.helpers.custom_exceptions import CustomError

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = ()

    @register_schema
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = services.register(**serializer.validated_data)
        return Response(session, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = ()

    @login_schema
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = services.login(request=request, **serializer.validated_data)
        return Response(session, status=status.HTTP_200_OK)


class ProfileView(APIView):
    """
    The authenticated user's account and travel profile.
    """
    permission_classes = [IsAuthenticated]

    def _render(self, user, profile):
        return {
            "user": UserSerializer(user).data,
            "profile": ProfileSerializers.BaseProfileSerializer(profile).data,
        }

    @profile_retrieve_schema
    def get(self, request):
        profile = Profile.for_user(request.user)
        return Response(self._render(request.user, profile), status=status.HTTP_200_OK)

    @profile_update_schema
    def put(self, request):
        return self._update(request)

    @profile_update_schema
    def patch(self, request):
        return self._update(request)

    def _update(self, request):
        serializer = ProfileSerializers.ProfileUpdateSerializer(
            data=request.data, context={"profile": Profile.for_user(request.user)}
        )
        serializer.is_valid(raise_exception=True)
        profile = services.update_profile(request.user, serializer.validated_data)
        return Response(self._render(request.user, profile), status=status.HTTP_200_OK)


class UserStatsView(APIView):
    permission_classes = [IsAuthenticated]

    @stats_schema
    def get(self, request):
        return Response(UserStatsSerializer(booking_stats(request.user)).data, status=status.HTTP_200_OK)


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    @change_password_schema
    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.change_password(
            request.user,
            serializer.validated_data["currentPassword"],
            serializer.validated_data["newPassword"],
        )
        return Response({"message": "Password changed successfully"}, status=status.HTTP_200_OK)


class RequestEmailVerificationView(APIView):
    permission_classes = [IsAuthenticated]

    @request_verification_schema
    def post(self, request):
        if request.user.is_verified:
            return Response({"message": "Email already verified"}, status=status.HTTP_200_OK)
        services.request_email_verification(request.user)
        return Response({"message": "Verification code sent"}, status=status.HTTP_200_OK)


class VerifyEmailView(APIView):
    permission_classes = [IsAuthenticated]

    @verify_email_schema
    def post(self, request):
        serializer = OTPVerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if not services.verify_email(request.user, serializer.validated_data["otp"]):
            raise CustomError.BadRequest("Invalid or expired code")
        return Response({"message": "Email verified"}, status=status.HTTP_200_OK)


class TokenViewBase(generics.GenericAPIView):
    permission_classes = ()
    authentication_classes = ()
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    serializer_class = None
    _serializer_class = ""

    www_authenticate_realm = "api"

    def get_serializer_class(self):
        if self.serializer_class:
            return self.serializer_class
        try:
            return import_string(self._serializer_class)
        except ImportError:
            msg = f"Could not import serializer '{self._serializer_class}'"
            raise ImportError(msg)

    def get_authenticate_header(self, request):
        return f'{AUTH_HEADER_TYPES[0]} realm="{self.www_authenticate_realm}"'

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0])

        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class TokenRefreshView(TokenViewBase):
    """
    Takes a refresh type JSON web token and returns an access type JSON web
    token if the refresh token is valid.
    """

    _serializer_class = api_settings.TOKEN_REFRESH_SERIALIZER
