"""
Tests for the PDF Service.

WHY: PDFs are generated from decrypted views; the generator must cope with
defaults ("N/A", empty lists) and markup-like client input.
"""

from datetime import date, datetime

from receiptdesk.services.pdf_service import PDFService, format_money
from receiptdesk.services.sensitive_document import merge_invoice_payload, merge_receipt_payload
from tests.factories import invoice_payload, receipt_payload


def _receipt_view(**overrides):
    view = {
        "receiptId": "RCP1767225600000ABCDE",
        "date": datetime(2026, 1, 1, 9, 0),
        **merge_receipt_payload(receipt_payload()),
    }
    view.update(overrides)
    return view


def _invoice_view():
    payload = merge_invoice_payload(invoice_payload())
    for item, amount in zip(payload["items"], (200.0, 50.0)):
        item["amount"] = amount
    return {
        "invoiceId": "INV1767225600000ABCDE",
        "date": datetime(2026, 1, 1, 9, 0),
        "dueDate": date(2026, 1, 31),
        "status": "sent",
        "paymentTerms": "Net 30",
        "currency": "USD",
        "subtotal": 250.0,
        "taxTotal": 20.0,
        "total": 270.0,
        **payload,
    }


class TestPDFService:
    def test_receipt_pdf(self):
        pdf = PDFService().generate_receipt_pdf(_receipt_view())
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_receipt_pdf_from_defaults(self):
        view = {"receiptId": "RCP2", "date": None, **merge_receipt_payload({})}
        assert PDFService().generate_receipt_pdf(view).startswith(b"%PDF")

    def test_markup_in_client_input_is_escaped(self):
        view = _receipt_view()
        view["clientInfo"]["name"] = "<b>Sam & Co</b"
        view["projectDetails"]["description"] = "a < b"
        assert PDFService().generate_receipt_pdf(view).startswith(b"%PDF")

    def test_invoice_pdf(self):
        pdf = PDFService().generate_invoice_pdf(_invoice_view())
        assert pdf.startswith(b"%PDF")

    def test_invoice_pdf_with_notes_and_no_items(self):
        view = _invoice_view()
        view["items"] = []
        view["notes"] = "Thank you"
        assert PDFService().generate_invoice_pdf(view).startswith(b"%PDF")


def test_format_money():
    assert format_money(1234.5, "USD") == "1,234.50 USD"
