import pytest
from django.core import mail
from django.core.cache import cache
from rest_framework_simplejwt.tokens import AccessToken

from velvet_routes.applications.users.managers import OTPManager
from velvet_routes.applications.users.models import Profile, User

pytestmark = pytest.mark.django_db

REGISTER_URL = "/api/auth/register/"
LOGIN_URL = "/api/auth/login/"
PASSWORD = "Sunny-Trails-42"


def decode(token):
    return AccessToken(token).payload


class TestRegister:
    def test_register_returns_session(self, api_client):
        response = api_client.post(
            REGISTER_URL,
            {"name": "Ada Wanderer", "email": "Ada@Example.com", "password": PASSWORD, "phone": "+15550111"},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "Ada@example.com"
        assert body["user"]["role"] == "USER"
        assert body["token"] and body["refresh"]

        claims = decode(body["token"])
        assert claims["id"] == body["user"]["id"]
        assert claims["email"] == "Ada@example.com"
        assert claims["role"] == "USER"

        user = User.objects.get(pk=body["user"]["id"])
        assert user.check_password(PASSWORD)
        assert user.password != PASSWORD

    def test_duplicate_email_is_rejected(self, api_client, user):
        response = api_client.post(
            REGISTER_URL,
            {"name": "Copy", "email": "JANE@example.com", "password": PASSWORD},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists."
        assert User.objects.filter(email__iexact="jane@example.com").count() == 1

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "new@example.com", "password": PASSWORD},
            {"name": "No Mail", "password": PASSWORD},
            {"name": "Bad Mail", "email": "not-an-email", "password": PASSWORD},
            {"name": "Short", "email": "short@example.com", "password": "abc"},
        ],
    )
    def test_invalid_payload(self, api_client, payload):
        response = api_client.post(REGISTER_URL, payload, format="json")

        assert response.status_code == 400
        assert not User.objects.exists()


class TestLogin:
    def test_login_with_valid_credentials(self, api_client, user):
        response = api_client.post(LOGIN_URL, {"email": user.email, "password": PASSWORD}, format="json")

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {"id": user.id, "name": user.name, "email": user.email, "role": "USER"}
        assert decode(body["token"])["id"] == user.id

        user.refresh_from_db()
        assert user.last_login is not None

    @pytest.mark.parametrize(
        "email,password",
        [("jane@example.com", "wrong-password"), ("nobody@example.com", PASSWORD)],
    )
    def test_bad_credentials_share_one_error(self, api_client, user, email, password):
        response = api_client.post(LOGIN_URL, {"email": email, "password": password}, format="json")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid credentials"

    def test_token_authenticates_requests(self, api_client, user):
        token = api_client.post(LOGIN_URL, {"email": user.email, "password": PASSWORD}, format="json").json()["token"]

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        response = api_client.get("/api/auth/profile/")

        assert response.status_code == 200
        assert response.json()["user"]["email"] == user.email

    def test_refresh_issues_access_token(self, api_client, user):
        refresh = api_client.post(
            LOGIN_URL, {"email": user.email, "password": PASSWORD}, format="json"
        ).json()["refresh"]

        response = api_client.post("/api/auth/token/refresh/", {"refresh": refresh}, format="json")

        assert response.status_code == 200
        assert decode(response.json()["access"])["id"] == user.id


class TestProfile:
    def test_requires_authentication(self, api_client):
        assert api_client.get("/api/auth/profile/").status_code == 401

    def test_profile_created_on_first_read(self, auth_client, user):
        response = auth_client.get("/api/auth/profile/")

        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["preferences"]["travelClass"] == "economy"
        assert Profile.objects.filter(user=user).count() == 1

    def test_update_merges_preferences(self, auth_client, user):
        response = auth_client.put(
            "/api/auth/profile/",
            {
                "name": "Jane T.",
                "address": "12 Harbour Road",
                "dob": "1990-04-12",
                "preferences": {"travelClass": "business"},
            },
            format="json",
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["name"] == "Jane T."
        assert body["profile"]["address"] == "12 Harbour Road"
        assert body["profile"]["dob"] == "1990-04-12"
        assert body["profile"]["preferences"] == {
            "travelClass": "business",
            "dietaryRestrictions": [],
            "accessibility": False,
        }

    def test_invalid_travel_class(self, auth_client):
        response = auth_client.patch(
            "/api/auth/profile/", {"preferences": {"travelClass": "cargo"}}, format="json"
        )

        assert response.status_code == 400


class TestChangePassword:
    def test_change_password(self, auth_client, user):
        response = auth_client.post(
            "/api/auth/change-password/",
            {"currentPassword": PASSWORD, "newPassword": "Another-Trail-77"},
            format="json",
        )

        assert response.status_code == 200
        user.refresh_from_db()
        assert user.check_password("Another-Trail-77")
        assert mail.outbox[-1].to == [user.email]

    def test_wrong_current_password(self, auth_client, user):
        response = auth_client.post(
            "/api/auth/change-password/",
            {"currentPassword": "not-it", "newPassword": "Another-Trail-77"},
            format="json",
        )

        assert response.status_code == 400
        user.refresh_from_db()
        assert user.check_password(PASSWORD)


class TestEmailVerification:
    def test_request_and_verify(self, auth_client, user):
        response = auth_client.post("/api/auth/verify-email/request/")

        assert response.status_code == 200
        otp = cache.get(OTPManager.cache_key(user.email))
        assert otp and len(otp) == 4
        assert otp in mail.outbox[-1].body

        response = auth_client.post("/api/auth/verify-email/", {"otp": otp}, format="json")

        assert response.status_code == 200
        user.refresh_from_db()
        assert user.is_verified

    def test_code_is_single_use(self, user):
        otp = OTPManager.generate_otp(user.email)

        assert OTPManager.verify_otp(user.email, otp)
        assert not OTPManager.verify_otp(user.email, otp)

    def test_wrong_code(self, auth_client, user):
        OTPManager.generate_otp(user.email)
        wrong = "0000" if cache.get(OTPManager.cache_key(user.email)) != "0000" else "1111"

        response = auth_client.post("/api/auth/verify-email/", {"otp": wrong}, format="json")

        assert response.status_code == 400
        user.refresh_from_db()
        assert not user.is_verified
