from django.conf import settings

from velvet_routes.applications.users.email import SiteEmailMessage


class BookingConfirmationEmail(SiteEmailMessage):
    """
    Confirmation sent to the customer once a booking is paid. The invoice
    PDF is attached by the caller.
    """

    template_name = "email/booking_confirmation.html"

    def get_context_data(self):
        context = super().get_context_data()
        context.setdefault("dashboard_url", f"{settings.FRONTEND_URL.rstrip('/')}/dashboard")
        return context


class NotificationTestEmail(SiteEmailMessage):
    template_name = "email/notification_test.html"
