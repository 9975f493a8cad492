"""
PDF invoice rendering with reportlab.
"""
import logging
from decimal import Decimal
from io import BytesIO
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from service_center.config import Settings, get_settings
from service_center.exceptions import PdfGenerationError
from service_center.schemas.bill import BillResponse

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d %b %Y, %H:%M %Z"


class BillPdfRenderer:
    """Lay out a bill as a single A4 invoice."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        base = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "BillTitle", parent=base["Title"], fontName="Helvetica-Bold",
            fontSize=18, textColor=colors.darkgrey, alignment=TA_CENTER,
        )
        self.header_style = ParagraphStyle(
            "BillHeader", parent=base["Heading3"], fontName="Helvetica-Bold",
            fontSize=12, textColor=colors.darkgrey,
        )
        self.subtitle_style = ParagraphStyle(
            "BillSubtitle", parent=self.header_style, alignment=TA_CENTER, spaceAfter=20,
        )
        self.normal_style = ParagraphStyle(
            "BillNormal", parent=base["Normal"], fontName="Helvetica", fontSize=10,
        )
        self.footer_style = ParagraphStyle(
            "BillFooter", parent=self.normal_style, alignment=TA_CENTER,
        )

    def money(self, value: Decimal) -> str:
        return f"{self.settings.currency_symbol} {value:.2f}"

    def render(self, bill: BillResponse) -> bytes:
        """Return the invoice for ``bill`` as PDF bytes."""
        buffer = BytesIO()
        try:
            document = SimpleDocTemplate(
                buffer, pagesize=A4,
                title=f"Bill {bill.bill_id}", author=self.settings.company_name,
                leftMargin=15 * mm, rightMargin=15 * mm,
            )
            document.build(self._story(bill))
        except Exception as e:
            logger.error("Error generating bill PDF: %s", e, exc_info=True)
            raise PdfGenerationError("Failed to generate bill PDF") from e
        return buffer.getvalue()

    def _story(self, bill: BillResponse) -> list:
        story = [
            Paragraph(escape(self.settings.company_name.upper()), self.title_style),
            Paragraph("Service Bill", self.subtitle_style),
            Paragraph(f"Bill ID: {bill.bill_id}", self.header_style),
            Paragraph(f"Service Request ID: REQ-{bill.request_id}", self.normal_style),
            Paragraph(f"Date: {bill.generated_at.strftime(DATE_FORMAT)}", self.normal_style),
            Paragraph(f"Customer: {escape(bill.customer_name)}", self.normal_style),
            Paragraph(f"Vehicle: {escape(bill.vehicle_name)} ({escape(bill.registration_number)})", self.normal_style),
            Spacer(1, 12),
        ]

        story.append(Paragraph("Materials &amp; Parts", self.header_style))
        material_rows = [
            [item.description, f"{item.quantity}", f"{item.unit_price:.2f}", f"{item.total:.2f}"]
            for item in bill.materials
        ]
        story.append(self._line_table(
            ["Item", "Quantity", "Unit Price", "Total"],
            material_rows, "Materials Total", bill.materials_total,
        ))
        story.append(Spacer(1, 12))

        story.append(Paragraph("Labor Charges", self.header_style))
        labor_rows = [
            [item.description, f"{item.hours}", f"{item.rate_per_hour:.2f}", f"{item.total:.2f}"]
            for item in bill.labor
        ]
        story.append(self._line_table(
            ["Description", "Hours", "Rate/Hour", "Total"],
            labor_rows, "Labor Total", bill.labor_total,
        ))
        story.append(Spacer(1, 12))

        story.append(Paragraph("Bill Summary", self.header_style))
        story.append(self._summary_table(bill))
        story.append(Spacer(1, 12))

        if bill.notes:
            story.append(Paragraph("Notes:", self.header_style))
            story.append(Paragraph(escape(bill.notes), self.normal_style))

        story.append(Spacer(1, 24))
        story.append(Paragraph(
            f"Thank you for choosing {escape(self.settings.company_name)}!", self.footer_style,
        ))
        return story

    def _line_table(self, headers: List[str], rows: List[List[str]], total_label: str,
                    total: Decimal) -> Table:
        if not rows:
            rows = [["No items recorded", "", "", ""]]
        data = [headers] + rows + [[total_label, "", "", self.money(total)]]
        last = len(data) - 1
        table = Table(data, colWidths=[83 * mm, 25 * mm, 36 * mm, 36 * mm], hAlign="LEFT")
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("BACKGROUND", (0, 0), (-1, 0), colors.Color(240 / 255, 240 / 255, 240 / 255)),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("LEFTPADDING", (0, 0), (-1, -1), 5),
            ("RIGHTPADDING", (0, 0), (-1, -1), 5),
            ("TOPPADDING", (0, 0), (-1, -1), 5),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
            ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
            ("SPAN", (0, last), (2, last)),
            ("ALIGN", (0, last), (-1, last), "RIGHT"),
            ("FONTNAME", (0, last), (-1, last), "Helvetica-Bold"),
        ]))
        return table

    def _summary_table(self, bill: BillResponse) -> Table:
        data = [
            ["Subtotal:", self.money(bill.subtotal)],
            [f"GST ({self.settings.gst_rate_percent}%):", self.money(bill.gst)],
            ["Grand Total:", self.money(bill.grand_total)],
        ]
        table = Table(data, colWidths=[45 * mm, 45 * mm], hAlign="RIGHT")
        table.setStyle(TableStyle([
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("LEFTPADDING", (0, 0), (-1, -1), 5),
            ("RIGHTPADDING", (0, 0), (-1, -1), 5),
            ("TOPPADDING", (0, 0), (-1, -1), 5),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("LINEABOVE", (0, -1), (-1, -1), 0.5, colors.grey),
        ]))
        return table
