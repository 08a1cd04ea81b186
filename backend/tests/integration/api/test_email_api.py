"""
Integration tests for email template, send and log endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.models.email_template import EmailTemplateType
from receiptdesk.services.email import MockEmailProvider
from tests.factories import EmailTemplateFactory, invoice_payload, receipt_payload


async def _receipt_id(client: AsyncClient, headers: dict) -> str:
    payload = receipt_payload()
    payload["sendEmail"] = False
    response = await client.post("/api/receipts", headers=headers, json=payload)
    return response.json()["receiptId"]


class TestEmailTemplates:
    @pytest.mark.asyncio
    async def test_create_derives_variables(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/email/templates",
            headers=admin_headers,
            json={
                "name": "Receipt email",
                "type": "receipt_sent",
                "subject": "Receipt {{receiptId}}",
                "htmlContent": "<p>Hi {{clientName}}, see {{receiptUrl}}</p>",
                "textContent": "Hi {{clientName}}",
                "isDefault": True,
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["variables"] == ["receiptId", "clientName", "receiptUrl"]
        assert data["isDefault"] is True

    @pytest.mark.asyncio
    async def test_single_default_per_type(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers
    ):
        """
        Test default switching for email templates.

        WHY: Receipt creation picks "the" default receipt_sent template.
        """
        first = await EmailTemplateFactory.create(db_session, name="First")
        second = await EmailTemplateFactory.create(db_session, name="Second", is_default=False)

        await client.post(f"/api/email/templates/{second.id}/set-default", headers=admin_headers)

        listing = await client.get("/api/email/templates?type=receipt_sent", headers=admin_headers)
        defaults = [t["name"] for t in listing.json() if t["isDefault"]]
        assert defaults == ["Second"]
        await db_session.refresh(first)
        assert first.is_default is False

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        template = await EmailTemplateFactory.create(db_session)

        updated = await client.put(
            f"/api/email/templates/{template.id}",
            headers=admin_headers,
            json={"subject": "Your receipt {{receiptId}}"},
        )
        deleted = await client.delete(f"/api/email/templates/{template.id}", headers=admin_headers)

        assert updated.json()["subject"] == "Your receipt {{receiptId}}"
        assert deleted.status_code == 200
        missing = await client.get(f"/api/email/templates/{template.id}", headers=admin_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_preview(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        template = await EmailTemplateFactory.create(db_session, text_content="Total {{amount}}")

        response = await client.post(
            f"/api/email/templates/{template.id}/preview",
            headers=admin_headers,
            json={"variables": {"receiptId": "RCP9", "clientName": "Sam"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["subject"] == "Receipt RCP9"
        assert data["html"] == "<p>Hi Sam, amount {{amount}} {{currency}}</p>"
        assert data["text"] == "Total {{amount}}"
        assert data["unresolved"] == ["amount", "currency"]


class TestSendDocumentEmail:
    @pytest.mark.asyncio
    async def test_resend_receipt(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        """
        Test sending a receipt email on demand.

        WHY: Lets the admin resend after fixing a missing template.
        """
        receipt_id = await _receipt_id(client, admin_headers)
        await EmailTemplateFactory.create(db_session)

        response = await client.post(
            "/api/email/send",
            headers=admin_headers,
            json={"receiptId": receipt_id, "to": "billing@client.test"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["sent"] is True
        assert data["warning"] is None
        assert data["messageId"].startswith("mock-")
        assert MockEmailProvider.sent_emails[0].to_email == "billing@client.test"

    @pytest.mark.asyncio
    async def test_missing_template_reported(self, client: AsyncClient, admin_headers):
        receipt_id = await _receipt_id(client, admin_headers)

        response = await client.post("/api/email/send", headers=admin_headers, json={"receiptId": receipt_id})

        assert response.status_code == 200
        assert response.json() == {"sent": False, "warning": "email_template_missing", "messageId": None}

    @pytest.mark.asyncio
    async def test_invoice_to_client_address(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers
    ):
        payload = invoice_payload()
        payload["sendEmail"] = False
        invoice_id = (await client.post("/api/invoices", headers=admin_headers, json=payload)).json()["invoiceId"]
        await EmailTemplateFactory.create(
            db_session, template_type=EmailTemplateType.INVOICE_SENT, subject="Invoice {{invoiceId}}"
        )

        response = await client.post("/api/email/send", headers=admin_headers, json={"invoiceId": invoice_id})

        assert response.json()["sent"] is True
        assert MockEmailProvider.sent_emails[0].to_email == "sam@client.test"
        assert MockEmailProvider.sent_emails[0].subject == f"Invoice {invoice_id}"

    @pytest.mark.asyncio
    async def test_exactly_one_document(self, client: AsyncClient, admin_headers):
        neither = await client.post("/api/email/send", headers=admin_headers, json={})
        both = await client.post(
            "/api/email/send", headers=admin_headers, json={"receiptId": "RCP1", "invoiceId": "INV1"}
        )

        assert neither.status_code == 400
        assert both.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_receipt(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/email/send", headers=admin_headers, json={"receiptId": "RCPX"})
        assert response.status_code == 404


class TestEmailLogs:
    @pytest.mark.asyncio
    async def test_logs_filtered_by_receipt(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers
    ):
        await EmailTemplateFactory.create(db_session)
        first = await client.post("/api/receipts", headers=admin_headers, json=receipt_payload())
        await client.post("/api/receipts", headers=admin_headers, json=receipt_payload())
        receipt_id = first.json()["receiptId"]

        everything = await client.get("/api/email/logs", headers=admin_headers)
        filtered = await client.get(f"/api/email/logs?receiptId={receipt_id}", headers=admin_headers)

        assert everything.json()["pagination"]["totalItems"] == 2
        items = filtered.json()["items"]
        assert len(items) == 1
        assert items[0]["receiptId"] == receipt_id
        assert items[0]["status"] == "sent"
        assert items[0]["templateType"] == "receipt_sent"
        assert items[0]["to"] == "sam@client.test"

    @pytest.mark.asyncio
    async def test_logs_require_admin(self, client: AsyncClient, client_token_for):
        response = await client.get("/api/email/logs", headers=client_token_for("CLI1"))
        assert response.status_code == 403
