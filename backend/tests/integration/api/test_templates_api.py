"""
Integration tests for document template endpoints.

WHAT: CRUD, default switching and the render preview.

WHY: The HTML view of every receipt and invoice uses the single default
template of its type, so default switching must never leave two.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.template import TemplateDAO
from receiptdesk.models.template import TemplateType
from tests.factories import TemplateFactory


def _template_body(**overrides) -> dict:
    body = {
        "name": "Minimal",
        "type": "receipt",
        "htmlTemplate": "<h1>{{receiptId}}</h1><p>{{clientName}} paid {{amount}}</p>",
        "cssStyles": "h1{margin:0}",
    }
    body.update(overrides)
    return body


class TestTemplateCrud:
    @pytest.mark.asyncio
    async def test_create_reports_variables(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/templates", headers=admin_headers, json=_template_body())

        assert response.status_code == 201
        data = response.json()
        assert data["variables"] == ["receiptId", "clientName", "amount"]
        assert data["isDefault"] is False
        assert data["isActive"] is True

    @pytest.mark.asyncio
    async def test_create_as_default_replaces_previous(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers
    ):
        """
        Test creating a template flagged as default.

        WHY: The previous default of the same type is cleared.
        """
        old = await TemplateFactory.create(db_session, is_default=True)

        response = await client.post(
            "/api/templates", headers=admin_headers, json=_template_body(isDefault=True)
        )

        assert response.json()["isDefault"] is True
        await db_session.refresh(old)
        assert old.is_default is False
        assert (await TemplateDAO(db_session).get_default("receipt")).id == response.json()["id"]

    @pytest.mark.asyncio
    async def test_list_by_type(self, client: AsyncClient, admin_headers):
        await client.post("/api/templates", headers=admin_headers, json=_template_body())
        await client.post(
            "/api/templates",
            headers=admin_headers,
            json=_template_body(name="Invoice", type="invoice", htmlTemplate="{{invoiceId}}"),
        )

        response = await client.get("/api/templates?type=invoice", headers=admin_headers)

        assert [t["name"] for t in response.json()] == ["Invoice"]

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, admin_headers):
        created = (await client.post("/api/templates", headers=admin_headers, json=_template_body())).json()

        response = await client.put(
            f"/api/templates/{created['id']}",
            headers=admin_headers,
            json={"htmlTemplate": "<p>{{total}}</p>"},
        )

        assert response.status_code == 200
        assert response.json()["variables"] == ["total"]
        assert response.json()["name"] == "Minimal"

    @pytest.mark.asyncio
    async def test_unknown_template(self, client: AsyncClient, admin_headers):
        assert (await client.get("/api/templates/999", headers=admin_headers)).status_code == 404
        assert (await client.put("/api/templates/999", headers=admin_headers, json={"name": "x"})).status_code == 404
        assert (await client.delete("/api/templates/999", headers=admin_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_then_get(self, client: AsyncClient, admin_headers):
        created = (await client.post("/api/templates", headers=admin_headers, json=_template_body())).json()

        assert (await client.delete(f"/api/templates/{created['id']}", headers=admin_headers)).status_code == 200
        assert (await client.get(f"/api/templates/{created['id']}", headers=admin_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_missing_name_is_400(self, client: AsyncClient, admin_headers):
        body = _template_body()
        del body["name"]

        response = await client.post("/api/templates", headers=admin_headers, json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient):
        assert (await client.get("/api/templates")).status_code == 401


class TestSetDefault:
    @pytest.mark.asyncio
    async def test_switch_default(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        first = await TemplateFactory.create(db_session, name="First", is_default=True)
        second = await TemplateFactory.create(db_session, name="Second")

        response = await client.post(f"/api/templates/{second.id}/set-default", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["isDefault"] is True
        await db_session.refresh(first)
        assert first.is_default is False

    @pytest.mark.asyncio
    async def test_other_type_untouched(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        """
        Test that default groups are per type.

        WHY: A receipt default and an invoice default coexist.
        """
        invoice_default = await TemplateFactory.create(
            db_session, template_type=TemplateType.INVOICE, is_default=True
        )
        receipt = await TemplateFactory.create(db_session)

        await client.post(f"/api/templates/{receipt.id}/set-default", headers=admin_headers)

        await db_session.refresh(invoice_default)
        assert invoice_default.is_default is True

    @pytest.mark.asyncio
    async def test_unknown_id_changes_nothing(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers
    ):
        current = await TemplateFactory.create(db_session, is_default=True)

        response = await client.post("/api/templates/999/set-default", headers=admin_headers)

        assert response.status_code == 404
        await db_session.refresh(current)
        assert current.is_default is True


class TestRenderPreview:
    @pytest.mark.asyncio
    async def test_render_with_partial_variables(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers
    ):
        """
        Test preview rendering.

        WHY: Markers without a value stay in the output and are listed so
        the editor can flag them.
        """
        template = await TemplateFactory.create(db_session, css_styles="p{}")

        response = await client.post(
            f"/api/templates/{template.id}/render",
            headers=admin_headers,
            json={"variables": {"receiptId": "RCP1"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert "<h1>RCP1</h1><p>{{clientName}}</p>" in data["html"]
        assert "<style>p{}</style>" in data["html"]
        assert data["unresolved"] == ["clientName"]
