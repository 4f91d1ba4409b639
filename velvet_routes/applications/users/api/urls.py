from django.urls import re_path

from velvet_routes.applications.users.api import views

app_name = "auth"

urlpatterns = [
    re_path(r"^register/?$", views.RegisterView.as_view(), name="register"),
    re_path(r"^login/?$", views.LoginView.as_view(), name="login"),
    re_path(r"^profile/?$", views.ProfileView.as_view(), name="profile"),
    re_path(r"^stats/?$", views.UserStatsView.as_view(), name="stats"),
    re_path(r"^change-password/?$", views.ChangePasswordView.as_view(), name="change-password"),
    re_path(r"^verify-email/request/?$", views.RequestEmailVerificationView.as_view(), name="verify-email-request"),
    re_path(r"^verify-email/?$", views.VerifyEmailView.as_view(), name="verify-email"),
    re_path(r"^token/refresh/?$", views.TokenRefreshView.as_view(), name="token-refresh"),
]
