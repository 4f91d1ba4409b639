from decimal import ROUND_HALF_UP
from decimal import Decimal
from uuid import uuid4


def generate_booking_reference():
    """Generate a unique booking reference, e.g. ``VR-3F9A1C22D0``"""
    return f"VR-{uuid4().hex[:10].upper()}"


def generate_invoice_number():
    return f"INV-{uuid4().hex[:12].upper()}"


def cents_to_major(amount_cents: int) -> Decimal:
    return (Decimal(amount_cents) / Decimal(100)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
