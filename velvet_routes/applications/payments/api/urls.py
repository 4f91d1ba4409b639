from django.urls import re_path

from velvet_routes.applications.payments.api.views import CreatePaymentIntentView
from velvet_routes.applications.payments.webhooks import stripe_webhook

app_name = "payments"

urlpatterns = [
    re_path(r"^payments/create-intent/?$", CreatePaymentIntentView.as_view(), name="create-intent"),
    re_path(r"^payments/webhook/?$", stripe_webhook, name="webhook"),
]
