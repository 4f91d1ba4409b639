from django.conf import settings
from templated_mail.mail import BaseEmailMessage


class SiteEmailMessage(BaseEmailMessage):
    def get_context_data(self):
        context = super().get_context_data()
        context["site_name"] = settings.SITE_NAME
        return context


class OTPVerificationEmail(SiteEmailMessage):
    """
    Email class for sending the one-time code that verifies an address.
    """

    template_name = "email/otp_verification.html"

    def get_context_data(self):
        context = super().get_context_data()
        context["otp"] = self.context.get("otp")
        return context


class PasswordChangedConfirmationEmail(SiteEmailMessage):
    template_name = "email/password_changed_confirmation.html"
