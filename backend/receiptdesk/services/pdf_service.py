"""
PDF generation for receipts and invoices.

WHAT: Renders an already-decrypted receipt or invoice view to a paginated
PDF with ReportLab.

WHY: The PDF is a pure function of the decrypted view returned by
ReceiptService.get_receipt / InvoiceService.get_invoice, so it always
matches what the public page shows, defaults included.

HOW: ReportLab platypus flowables; generated on demand, not stored.
"""

import io
import logging
from typing import Any, List, Mapping, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from receiptdesk.services.template_engine import format_amount, format_date

logger = logging.getLogger(__name__)


STATUS_COLORS = {
    "paid": "#38a169",
    "pending": "#d69e2e",
    "partial": "#3182ce",
    "sent": "#3182ce",
    "overdue": "#e53e3e",
    "cancelled": "#718096",
    "draft": "#718096",
}


def get_styles():
    """
    PDF paragraph styles.

    Custom names avoid the ones getSampleStyleSheet already defines.
    """
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='DocumentTitle',
        parent=styles['Heading1'],
        fontSize=24,
        spaceAfter=20,
        textColor=colors.HexColor('#1a365d'),
    ))

    styles.add(ParagraphStyle(
        name='SectionHeader',
        parent=styles['Heading2'],
        fontSize=14,
        spaceBefore=15,
        spaceAfter=10,
        textColor=colors.HexColor('#2d3748'),
    ))

    styles.add(ParagraphStyle(
        name='DocBody',
        parent=styles['Normal'],
        fontSize=10,
        spaceBefore=3,
        spaceAfter=3,
    ))

    styles.add(ParagraphStyle(
        name='SmallText',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.HexColor('#718096'),
    ))

    styles.add(ParagraphStyle(
        name='RightAlign',
        parent=styles['Normal'],
        fontSize=10,
        alignment=TA_RIGHT,
    ))

    return styles


def format_money(amount: Any, currency: str) -> str:
    """``1,234.56 USD``"""
    return f"{format_amount(amount)} {currency}".strip()


def _p(value: Any) -> str:
    """Escape a value for ReportLab paragraph markup."""
    return escape("" if value is None else str(value))


class PDFService:
    """Creates receipt and invoice PDFs from decrypted views."""

    def __init__(self):
        self.styles = get_styles()

    def _document(self, buffer: io.BytesIO, title: str) -> SimpleDocTemplate:
        return SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=0.75 * inch,
            leftMargin=0.75 * inch,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
            title=title,
        )

    def _build_header(self, freelancer: Mapping[str, Any], doc_type: str, doc_number: str) -> List:
        elements = [Paragraph(_p(freelancer.get("name")), self.styles['DocumentTitle'])]

        contact = "<br/>".join(
            _p(v) for v in (
                freelancer.get("address"),
                " | ".join(x for x in (freelancer.get("phone"), freelancer.get("email")) if x),
                freelancer.get("website"),
            ) if v
        )
        elements.append(Paragraph(contact, self.styles['SmallText']))
        elements.append(Spacer(1, 20))

        header_table = Table([[doc_type, doc_number]], colWidths=[3 * inch, 4 * inch])
        header_table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (0, 0), 18),
            ('TEXTCOLOR', (0, 0), (0, 0), colors.HexColor('#2563eb')),
            ('ALIGN', (0, 0), (0, 0), 'LEFT'),
            ('FONTNAME', (1, 0), (1, 0), 'Helvetica'),
            ('FONTSIZE', (1, 0), (1, 0), 12),
            ('ALIGN', (1, 0), (1, 0), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]))
        elements.append(header_table)
        elements.append(Spacer(1, 15))
        return elements

    def _build_party(self, client: Mapping[str, Any], dates: List[tuple], label: str = "Bill To") -> List:
        left = [Paragraph(f"<b>{label}:</b>", self.styles['DocBody'])]
        for key in ("name", "companyName", "email", "phone", "address"):
            if client.get(key):
                left.append(Paragraph(_p(client[key]), self.styles['DocBody']))

        right = [
            Paragraph(f"<b>{_p(name)}:</b> {_p(value)}", self.styles['RightAlign'])
            for name, value in dates
        ]

        table = Table([[left, right]], colWidths=[3.5 * inch, 3.5 * inch])
        table.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('ALIGN', (1, 0), (1, 0), 'RIGHT'),
        ]))
        return [table, Spacer(1, 20)]

    def _status_badge(self, status: str) -> Paragraph:
        color = STATUS_COLORS.get(status, "#718096")
        return Paragraph(
            f'<font color="{color}"><b>{_p(status.upper())}</b></font>',
            self.styles['RightAlign'],
        )

    def _styled_table(self, data: List[list], col_widths: List[float]) -> Table:
        table = Table(data, colWidths=col_widths)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f7fafc')),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('ALIGN', (0, 0), (0, -1), 'LEFT'),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#e2e8f0')),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f7fafc')]),
        ]))
        return table

    # ========================================================================
    # Receipt
    # ========================================================================

    def generate_receipt_pdf(self, view: Mapping[str, Any]) -> bytes:
        """
        Args:
            view: Decrypted receipt view (camelCase keys)

        Returns:
            PDF file as bytes
        """
        payment = view["paymentInfo"]
        project = view["projectDetails"]
        currency = payment.get("currency") or ""

        buffer = io.BytesIO()
        doc = self._document(buffer, f"Receipt {view['receiptId']}")
        elements = self._build_header(view["freelancerInfo"], "RECEIPT", view["receiptId"])
        elements.append(self._status_badge(str(payment.get("status") or "pending")))
        elements.extend(self._build_party(
            view["clientInfo"],
            [("Date", format_date(view.get("date")))],
            label="Received From",
        ))

        elements.append(Paragraph("Project", self.styles['SectionHeader']))
        elements.append(Paragraph(f"<b>{_p(project.get('title'))}</b>", self.styles['DocBody']))
        elements.append(Paragraph(_p(project.get("description")), self.styles['DocBody']))
        for label, key in (("Technologies", "technologies"), ("Deliverables", "deliverables")):
            values = project.get(key) or []
            if values:
                elements.append(Paragraph(
                    f"<b>{label}:</b> {_p(', '.join(str(v) for v in values))}",
                    self.styles['DocBody'],
                ))

        elements.append(Paragraph("Payment", self.styles['SectionHeader']))
        elements.append(self._styled_table(
            [
                ["Method", "Status", "Amount"],
                [
                    str(payment.get("method") or ""),
                    str(payment.get("status") or ""),
                    format_money(payment.get("amount"), currency),
                ],
            ],
            [3 * inch, 2 * inch, 2 * inch],
        ))

        doc.build(elements)
        logger.info(f"Generated receipt PDF {view['receiptId']}", extra={"receipt_id": view["receiptId"]})
        return buffer.getvalue()

    # ========================================================================
    # Invoice
    # ========================================================================

    def generate_invoice_pdf(self, view: Mapping[str, Any]) -> bytes:
        """
        Args:
            view: Decrypted invoice view (camelCase keys)

        Returns:
            PDF file as bytes
        """
        currency = view.get("currency") or ""

        buffer = io.BytesIO()
        doc = self._document(buffer, f"Invoice {view['invoiceId']}")
        elements = self._build_header(view["freelancerInfo"], "INVOICE", view["invoiceId"])
        elements.append(self._status_badge(str(view.get("status") or "draft")))
        elements.extend(self._build_party(
            view["clientInfo"],
            [
                ("Issue Date", format_date(view.get("date"))),
                ("Due Date", format_date(view.get("dueDate"))),
                ("Terms", view.get("paymentTerms") or ""),
            ],
        ))

        rows = [["Description", "Qty", "Rate", "Tax %", "Amount"]]
        for item in view.get("items") or []:
            rows.append([
                Paragraph(_p(item.get("description")), self.styles['DocBody']),
                str(item.get("quantity", "")),
                format_amount(item.get("rate")),
                f"{item.get('taxRate') or 0}",
                format_money(item.get("amount"), currency),
            ])
        elements.append(self._styled_table(
            rows,
            [3 * inch, 0.6 * inch, 1.1 * inch, 0.7 * inch, 1.6 * inch],
        ))
        elements.append(Spacer(1, 15))

        totals = Table(
            [
                ["Subtotal", format_money(view.get("subtotal"), currency)],
                ["Tax", format_money(view.get("taxTotal"), currency)],
                ["Total", format_money(view.get("total"), currency)],
            ],
            colWidths=[1.5 * inch, 1.8 * inch],
            hAlign='RIGHT',
        )
        totals.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTNAME', (0, 2), (-1, 2), 'Helvetica-Bold'),
            ('LINEABOVE', (0, 2), (-1, 2), 1, colors.HexColor('#2d3748')),
        ]))
        elements.append(totals)

        notes: Optional[str] = view.get("notes")
        if notes:
            elements.append(Paragraph("Notes", self.styles['SectionHeader']))
            elements.append(Paragraph(_p(notes), self.styles['DocBody']))

        doc.build(elements)
        logger.info(f"Generated invoice PDF {view['invoiceId']}", extra={"invoice_id": view["invoiceId"]})
        return buffer.getvalue()


_pdf_service: Optional[PDFService] = None


def get_pdf_service() -> PDFService:
    global _pdf_service
    if _pdf_service is None:
        _pdf_service = PDFService()
    return _pdf_service
