"""
Unit tests for document variables and HTML rendering.
"""

from datetime import datetime

import pytest

from receiptdesk.core.exceptions import ResourceNotFoundError
from receiptdesk.models.template import TemplateType
from receiptdesk.services.document_renderer import (
    DocumentRenderer,
    invoice_variables,
    items_table_html,
    receipt_variables,
    wrap_html,
)
from receiptdesk.services.sensitive_document import merge_receipt_payload
from receiptdesk.services.template_engine import render
from tests.factories import TemplateFactory, receipt_payload


def test_receipt_variables_are_formatted_strings():
    view = {"receiptId": "RCP1", "date": datetime(2026, 1, 5, 9), **merge_receipt_payload(receipt_payload())}

    variables = receipt_variables(view, "https://receipts.test/receipt/RCP1")

    assert variables["amount"] == "1,500.00"
    assert variables["date"] == "January 05, 2026"
    assert variables["technologies"] == "FastAPI, React"
    assert variables["receiptUrl"] == "https://receipts.test/receipt/RCP1"
    assert all(isinstance(value, str) for value in variables.values())


def test_items_table_escapes_descriptions():
    table = items_table_html(
        [{"description": "<script>x</script>", "quantity": 2, "rate": 10, "amount": 20, "taxRate": 5}], "USD"
    )
    assert "&lt;script&gt;" in table
    assert "<td>5%</td>" in table
    assert "20.00 USD" in table


def test_invoice_variables_defaults():
    variables = invoice_variables({"invoiceId": "INV1", "currency": "EUR"})
    assert variables["total"] == "0.00"
    assert variables["dueDate"] == ""
    assert "<tbody></tbody>" in variables["itemsTable"]


def test_wrap_html():
    assert "<style>h1{}</style>" in wrap_html("<h1>x</h1>", "h1{}")
    assert "<style>" not in wrap_html("<h1>x</h1>", None)


class TestEscaping:
    def test_receipt_text_is_escaped(self):
        """
        Test client-supplied markup in a receipt.

        WHY: The receipt page is public HTML. A client name must show up as
        text, never run as a script.
        """
        variables = receipt_variables({"clientInfo": {"name": "<script>alert(1)</script>"}})

        page = render("<p>{{clientName}}</p>", variables)

        assert page == "<p>&lt;script&gt;alert(1)&lt;/script&gt;</p>"

    def test_attribute_values_are_quoted(self):
        variables = receipt_variables({"qrCodeUrl": 'x" onerror="alert(1)'})
        assert variables["qrCodeUrl"] == "x&quot; onerror=&quot;alert(1)"

    def test_invoice_text_escaped_but_items_table_kept(self):
        variables = invoice_variables(
            {
                "notes": "Tom & Jerry <b>",
                "currency": "USD",
                "items": [{"description": "Design", "quantity": 1, "rate": 10, "amount": 10}],
            }
        )

        assert variables["notes"] == "Tom &amp; Jerry &lt;b&gt;"
        assert variables["itemsTable"].startswith('<table class="items">')


class TestRenderHtml:
    @pytest.mark.asyncio
    async def test_renders_default_template(self, db_session):
        await TemplateFactory.create(db_session, is_default=True, css_styles="p{color:red}")

        page = await DocumentRenderer(db_session).render_html(
            TemplateType.RECEIPT, {"receiptId": "RCP1", "clientName": "Sam"}
        )

        assert "<h1>RCP1</h1><p>Sam</p>" in page
        assert "p{color:red}" in page

    @pytest.mark.asyncio
    async def test_no_default_template(self, db_session):
        await TemplateFactory.create(db_session, is_default=False)
        with pytest.raises(ResourceNotFoundError):
            await DocumentRenderer(db_session).render_html(TemplateType.RECEIPT, {})
