from io import BytesIO

from django.conf import settings
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from velvet_routes.helpers.utils import cents_to_major


def invoice_path(booking_id) -> str:
    return f"/api/bookings/{booking_id}/invoice/"


def invoice_filename(booking) -> str:
    invoice = getattr(booking, "invoice", None)
    return f"{invoice.number if invoice else booking.reference}.pdf"


def _money(cents: int, currency: str) -> str:
    return f"{cents_to_major(cents)} {currency.upper()}"


def booking_items(booking):
    items = booking.items
    return items.all() if hasattr(items, "all") else items


def render_invoice_pdf(booking) -> bytes:
    """
    Render the invoice of ``booking`` as a PDF document and return its bytes.
    Works for bookings without an invoice too, in which case it is a
    booking summary.
    """
    invoice = getattr(booking, "invoice", None)

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, title=invoice_filename(booking))
    styles = getSampleStyleSheet()
    elements = []

    title_style = ParagraphStyle("InvoiceTitle", parent=styles["Heading1"], fontSize=16, spaceAfter=20)
    heading = f"Invoice {invoice.number}" if invoice else f"Booking {booking.reference}"
    elements.append(Paragraph(f"{settings.SITE_NAME} - {heading}", title_style))
    issued_at = invoice.issued_at if invoice else timezone.now()
    elements.append(Paragraph(f"Issued on: {issued_at.strftime('%Y-%m-%d %H:%M')}", styles["Normal"]))
    elements.append(Spacer(1, 20))

    details_data = [
        ["Booking reference", booking.reference],
        ["Status", booking.status],
        ["Customer", booking.customer_name or "-"],
        ["Email", booking.customer_email],
    ]
    if booking.customer_phone:
        details_data.append(["Phone", booking.customer_phone])

    details_table = Table(details_data, colWidths=[2 * inch, 4 * inch])
    details_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), colors.lightgrey),
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTNAME", (1, 0), (1, -1), "Helvetica"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 1, colors.black),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    elements.append(details_table)
    elements.append(Spacer(1, 20))

    elements.append(Paragraph("Items", styles["Heading2"]))
    elements.append(Spacer(1, 10))

    items_data = [["Item", "Type", "Qty", "Unit price", "Total"]]
    for item in booking_items(booking):
        items_data.append(
            [
                Paragraph(item.title or item.provider_item_id, styles["Normal"]),
                item.travel_mode.title(),
                str(item.quantity),
                _money(item.unit_price_cents, booking.currency),
                _money(item.line_total_cents, booking.currency),
            ]
        )
    items_data.append(["", "", "", "Total", _money(booking.total_amount_cents, booking.currency)])

    items_table = Table(items_data, colWidths=[2.6 * inch, 0.9 * inch, 0.5 * inch, 1.1 * inch, 1.1 * inch])
    items_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
                ("FONTNAME", (3, -1), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 10),
                ("GRID", (0, 0), (-1, -2), 1, colors.black),
                ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    elements.append(items_table)
    doc.build(elements)

    return buffer.getvalue()
