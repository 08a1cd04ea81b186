"""
Integration tests for the invoice API.

WHAT: Invoice creation with derived totals, the public view, updates and
the overdue sweep endpoint.

WHY: Money fields are always recomputed server-side; these tests make sure
client-supplied amounts never leak into stored totals.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import EmailTemplateFactory, TemplateFactory, invoice_payload
from receiptdesk.models.email_template import EmailTemplateType
from receiptdesk.models.template import TemplateType
from receiptdesk.services.email import MockEmailProvider


async def _create(client: AsyncClient, headers: dict, **overrides) -> dict:
    response = await client.post("/api/invoices", headers=headers, json=invoice_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestInvoiceCreate:
    @pytest.mark.asyncio
    async def test_totals_are_computed(self, client: AsyncClient, admin_headers):
        """
        Test derived money fields.

        WHY: 2 x 100 at 10% tax plus 1 x 50 untaxed is 250 + 20 = 270.
        """
        payload = invoice_payload()
        payload["items"][0]["amount"] = 99999

        response = await client.post("/api/invoices", headers=admin_headers, json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["invoiceId"].startswith("INV")
        assert (data["subtotal"], data["taxTotal"], data["total"]) == (250.0, 20.0, 270.0)

        view = (await client.get(f"/api/invoices/{data['invoiceId']}")).json()
        assert view["items"][0]["amount"] == 200.0
        assert view["items"][0]["taxAmount"] == 20.0
        assert view["dueDate"] == "2026-01-31"
        assert view["status"] == "draft"
        assert view["currency"] == "USD"
        assert view["clientInfo"]["companyName"] == "Client Co"

    @pytest.mark.asyncio
    async def test_missing_items_and_due_date(self, client: AsyncClient, admin_headers):
        """
        Test validation of items and due date.

        WHY: Terms other than ``Net N`` need an explicit due date.
        """
        payload = invoice_payload(items=[{"description": "Design", "rate": 10}], paymentTerms="On receipt")
        del payload["clientInfo"]["email"]

        response = await client.post("/api/invoices", headers=admin_headers, json=payload)

        assert response.status_code == 400
        assert response.json()["details"]["missing_fields"] == [
            "clientInfo.email",
            "items[0].quantity",
            "dueDate",
        ]

    @pytest.mark.asyncio
    async def test_explicit_due_date(self, client: AsyncClient, admin_headers):
        data = await _create(client, admin_headers, paymentTerms="On receipt", dueDate="2026-02-15")

        view = (await client.get(f"/api/invoices/{data['invoiceId']}")).json()
        assert view["dueDate"] == "2026-02-15"
        assert view["paymentTerms"] == "On receipt"

    @pytest.mark.asyncio
    async def test_invoice_email(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        await EmailTemplateFactory.create(
            db_session,
            template_type=EmailTemplateType.INVOICE_SENT,
            subject="Invoice {{invoiceId}} due {{dueDate}}",
            html_content="<p>Total {{total}} {{currency}}</p>",
        )

        data = await _create(client, admin_headers)

        assert data["warnings"] == []
        message = MockEmailProvider.sent_emails[0]
        assert message.subject.startswith(f"Invoice {data['invoiceId']} due ")
        assert "Total 270.00 USD" in message.html_content

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, client_token_for):
        response = await client.post("/api/invoices", headers=client_token_for("CLI1"), json=invoice_payload())
        assert response.status_code == 403


class TestInvoiceUpdate:
    @pytest.mark.asyncio
    async def test_items_replace_and_recompute(self, client: AsyncClient, admin_headers):
        created = await _create(client, admin_headers)

        response = await client.put(
            f"/api/invoices/{created['invoiceId']}",
            headers=admin_headers,
            json={"items": [{"description": "Audit", "quantity": 3, "rate": 40}], "status": "sent"},
        )

        assert response.status_code == 200
        view = response.json()
        assert len(view["items"]) == 1
        assert (view["subtotal"], view["taxTotal"], view["total"]) == (120.0, 0.0, 120.0)
        assert view["status"] == "sent"
        assert view["clientInfo"]["name"] == "Sam Client"

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, admin_headers):
        created = await _create(client, admin_headers)

        response = await client.delete(f"/api/invoices/{created['invoiceId']}", headers=admin_headers)

        assert response.status_code == 200
        missing = await client.get(f"/api/invoices/{created['invoiceId']}")
        assert missing.status_code == 404
        assert missing.json()["error"] == "InvoiceNotFoundError"


class TestInvoiceListing:
    @pytest.mark.asyncio
    async def test_status_filter(self, client: AsyncClient, admin_headers):
        await _create(client, admin_headers)
        sent = await _create(client, admin_headers, status="sent")

        response = await client.get("/api/invoices?status=sent", headers=admin_headers)

        assert response.status_code == 200
        assert [item["invoiceId"] for item in response.json()["items"]] == [sent["invoiceId"]]

    @pytest.mark.asyncio
    async def test_search_by_invoice_id(self, client: AsyncClient, admin_headers):
        target = await _create(client, admin_headers)
        await _create(client, admin_headers)

        response = await client.get(f"/api/invoices?search={target['invoiceId']}", headers=admin_headers)

        assert response.json()["pagination"]["totalItems"] == 1


class TestMarkOverdue:
    @pytest.mark.asyncio
    async def test_only_sent_invoices_past_due(self, client: AsyncClient, admin_headers):
        """
        Test the overdue sweep endpoint.

        WHY: Drafts are never marked overdue; only sent invoices past
        their due date move.
        """
        sent = await _create(client, admin_headers, status="sent")
        draft = await _create(client, admin_headers)

        response = await client.post("/api/invoices/mark-overdue?today=2026-02-01", headers=admin_headers)

        assert response.json() == {"updated": 1}
        assert (await client.get(f"/api/invoices/{sent['invoiceId']}")).json()["status"] == "overdue"
        assert (await client.get(f"/api/invoices/{draft['invoiceId']}")).json()["status"] == "draft"

    @pytest.mark.asyncio
    async def test_not_yet_due(self, client: AsyncClient, admin_headers):
        await _create(client, admin_headers, status="sent")

        response = await client.post("/api/invoices/mark-overdue?today=2026-01-31", headers=admin_headers)

        assert response.json() == {"updated": 0}


class TestInvoiceRendering:
    @pytest.mark.asyncio
    async def test_pdf(self, client: AsyncClient, admin_headers):
        created = await _create(client, admin_headers)

        response = await client.get(f"/api/invoices/{created['invoiceId']}/pdf")

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_html(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        await TemplateFactory.create(
            db_session,
            template_type=TemplateType.INVOICE,
            html_template="<h1>{{invoiceId}}</h1>{{itemsTable}}<p>{{total}}</p>",
            is_default=True,
        )
        created = await _create(client, admin_headers)

        response = await client.get(f"/api/invoices/{created['invoiceId']}/html")

        assert response.status_code == 200
        assert f"<h1>{created['invoiceId']}</h1>" in response.text
        assert "<td>Design</td>" in response.text
        assert "<p>270.00</p>" in response.text
