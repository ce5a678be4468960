from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)
from reportlab.lib.styles import getSampleStyleSheet
from io import BytesIO
from xml.sax.saxutils import escape

from app.core.config import settings
from app.services.pricing import split_strips


def _money(value) -> str:
    return f"Rs.{value:,.2f}"


def generate_order_invoice(order):
    """
    Generate the printable order form PDF.

    Quantities are printed as total strips plus the carton / loose strip
    breakdown for the variant's box size. Returns a BytesIO buffer.
    """

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=24,
        leftMargin=24,
        topMargin=24,
        bottomMargin=24,
        title=f"Order Form #{order.id}",
    )

    elements = []
    styles = getSampleStyleSheet()

    # -------------------------------
    # ORDER DETAILS
    # -------------------------------
    header_info = [
        [settings.INVOICE_COMPANY_NAME],
        [f"Order No: {order.id}"],
        [f"Order By: {order.seller.name if order.seller else 'N/A'}"],
        [f"Date: {order.created_at.strftime('%d-%b-%Y %H:%M') if order.created_at else '-'}"],
        [f"Status: {order.status.value.title()}"],
    ]

    header_table = Table(header_info, colWidths=[7.2 * inch])
    header_table.setStyle(
        TableStyle(
            [
                ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 14),
                ("FONT", (0, 1), (-1, -1), "Helvetica", 9),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
            ]
        )
    )

    elements.append(header_table)
    elements.append(Spacer(1, 0.2 * inch))

    # -------------------------------
    # ITEMS TABLE
    # -------------------------------
    items_data = [
        ["Sr", "Product", "Variant", "Qty", "CTN", "STR", "Rate", "GST %", "GST", "Amount"]
    ]

    for index, item in enumerate(order.items, start=1):
        boxes, strips = split_strips(item.quantity, item.box_quantity)
        items_data.append(
            [
                str(index),
                Paragraph(escape(item.product_name), styles["BodyText"]),
                item.variant_name,
                str(item.quantity),
                str(boxes),
                str(strips),
                _money(item.unit_price),
                f"{item.gst_percent:g}",
                _money(item.gst_amount),
                _money(item.total),
            ]
        )

    # Totals
    items_data.extend(
        [
            ["", "", "", "", "", "", "", "", "Total Amt.:", _money(order.subtotal)],
            ["", "", "", "", "", "", "", "", "Tax Amt.:", _money(order.gst_total)],
            ["", "", "", "", "", "", "", "", "Grand Total:", _money(order.grand_total)],
        ]
    )

    items_table = Table(
        items_data,
        colWidths=[
            0.35 * inch,
            1.7 * inch,
            0.9 * inch,
            0.45 * inch,
            0.45 * inch,
            0.45 * inch,
            0.75 * inch,
            0.5 * inch,
            0.8 * inch,
            0.95 * inch,
        ],
        repeatRows=1,
    )

    items_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTNAME", (-2, -1), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                ("GRID", (0, 0), (-1, -4), 0.5, colors.black),
            ]
        )
    )

    elements.append(items_table)
    elements.append(Spacer(1, 0.3 * inch))

    footer = Paragraph(
        "CTN = full boxes, STR = loose strips. This is a computer-generated document.",
        styles["Normal"],
    )
    elements.append(footer)

    doc.build(elements)
    buffer.seek(0)

    return buffer
