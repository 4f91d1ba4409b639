import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from velvet_routes.applications.bookings.services import BookingLine, BookingOrchestrator
from velvet_routes.applications.payments.api.schemas import create_intent_schema
from velvet_routes.applications.payments.api.serializers import CreatePaymentIntentSerializer
from velvet_routes.applications.payments.services import PaymentIntentBridge

logger = logging.getLogger(__name__)


class CreatePaymentIntentView(APIView):
    permission_classes = [IsAuthenticated]

    @create_intent_schema
    def post(self, request):
        serializer = CreatePaymentIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        metadata = {"userId": request.user.pk}
        if data.get("items"):
            lines = [
                BookingLine(inventory_item_id=line["inventoryItemId"], quantity=line["quantity"])
                for line in data["items"]
            ]
            order = BookingOrchestrator().price(lines)
            amount_cents, currency = order.total_cents, order.currency
            metadata["items"] = ",".join(str(line.inventory_item_id) for line in order.lines)
        else:
            amount_cents, currency = data["amountCents"], data["currency"]

        intent = PaymentIntentBridge().create_intent(amount_cents, currency, metadata=metadata)
        return Response({**intent, "amountCents": amount_cents, "currency": currency}, status=status.HTTP_200_OK)
