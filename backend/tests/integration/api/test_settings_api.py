"""
Integration tests for currencies, tax settings and freelancer config.

WHY: Currencies and tax settings are read anonymously by the document
forms; only admins may change them.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.currency import TaxSettingDAO
from tests.factories import TaxSettingFactory, receipt_payload


async def _add_currency(client: AsyncClient, headers: dict, code: str, name: str, symbol: str, rate: float = 1.0):
    return await client.post(
        "/api/currencies",
        headers=headers,
        json={"code": code, "name": name, "symbol": symbol, "exchangeRate": rate},
    )


class TestCurrencies:
    @pytest.mark.asyncio
    async def test_public_list_sorted_by_code(self, client: AsyncClient, admin_headers):
        await _add_currency(client, admin_headers, "usd", "US Dollar", "$")
        await _add_currency(client, admin_headers, "EUR", "Euro", "€", 0.92)

        response = await client.get("/api/currencies")

        assert response.status_code == 200
        assert [c["code"] for c in response.json()] == ["EUR", "USD"]
        assert response.json()[0]["exchangeRate"] == 0.92

    @pytest.mark.asyncio
    async def test_duplicate_code_conflicts(self, client: AsyncClient, admin_headers):
        await _add_currency(client, admin_headers, "USD", "US Dollar", "$")

        response = await _add_currency(client, admin_headers, "usd", "Dollar", "$")

        assert response.status_code == 409
        assert response.json()["error"] == "ResourceAlreadyExistsError"

    @pytest.mark.asyncio
    async def test_deleted_code_is_reactivated(self, client: AsyncClient, admin_headers):
        """
        Test re-adding a deactivated currency.

        WHY: The code column is unique, so the old row is reused.
        """
        first = (await _add_currency(client, admin_headers, "GBP", "Pound", "£")).json()
        await client.delete("/api/currencies/gbp", headers=admin_headers)
        assert (await client.get("/api/currencies")).json() == []

        response = await _add_currency(client, admin_headers, "GBP", "Pound Sterling", "£", 1.27)

        assert response.status_code == 201
        assert response.json()["id"] == first["id"]
        assert response.json()["name"] == "Pound Sterling"

    @pytest.mark.asyncio
    async def test_update_rates_skips_unknown(self, client: AsyncClient, admin_headers):
        await _add_currency(client, admin_headers, "EUR", "Euro", "€")

        response = await client.put(
            "/api/currencies/rates", headers=admin_headers, json={"rates": {"eur": 0.9, "XYZ": 2.0}}
        )

        assert response.json() == {"updated": 1}
        assert (await client.get("/api/currencies")).json()[0]["exchangeRate"] == 0.9

    @pytest.mark.asyncio
    async def test_negative_rate_rejected(self, client: AsyncClient, admin_headers):
        response = await client.put("/api/currencies/rates", headers=admin_headers, json={"rates": {"EUR": -1}})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_unknown(self, client: AsyncClient, admin_headers):
        assert (await client.delete("/api/currencies/ABC", headers=admin_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_create_requires_admin(self, client: AsyncClient):
        response = await client.post("/api/currencies", json={"code": "USD", "name": "US Dollar", "symbol": "$"})
        assert response.status_code == 401


class TestTaxSettings:
    @pytest.mark.asyncio
    async def test_create_and_public_list(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/tax-settings",
            headers=admin_headers,
            json={"name": "GST", "region": "AU", "taxType": "GST", "rate": 10, "isDefault": True},
        )

        assert response.status_code == 201
        assert response.json()["applicableTo"] == "both"
        listing = await client.get("/api/tax-settings?region=AU")
        assert [t["name"] for t in listing.json()] == ["GST"]

    @pytest.mark.asyncio
    async def test_one_default_per_region(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers
    ):
        """
        Test default switching within a region.

        WHY: Regions are independent default groups.
        """
        au_old = await TaxSettingFactory.create(db_session, name="GST old", is_default=True)
        nz = await TaxSettingFactory.create(db_session, name="NZ GST", region="NZ", rate=15, is_default=True)
        au_new = await TaxSettingFactory.create(db_session, name="GST new")

        response = await client.post(f"/api/tax-settings/{au_new.id}/set-default", headers=admin_headers)

        assert response.status_code == 200
        await db_session.refresh(au_old)
        await db_session.refresh(nz)
        assert au_old.is_default is False
        assert nz.is_default is True

        default = await client.get("/api/tax-settings/default?region=AU")
        assert default.json()["name"] == "GST new"

    @pytest.mark.asyncio
    async def test_no_default_is_404(self, client: AsyncClient, db_session: AsyncSession):
        await TaxSettingFactory.create(db_session, is_default=False)

        response = await client.get("/api/tax-settings/default?region=AU")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_moves_default(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        current = await TaxSettingFactory.create(db_session, is_default=True)
        other = await TaxSettingFactory.create(db_session, name="Reduced", rate=5)

        response = await client.put(
            f"/api/tax-settings/{other.id}", headers=admin_headers, json={"rate": 7.5, "isDefault": True}
        )

        assert response.json()["rate"] == 7.5
        assert response.json()["isDefault"] is True
        assert (await TaxSettingDAO(db_session).get_default("AU")).id == other.id
        await db_session.refresh(current)
        assert current.is_default is False

    @pytest.mark.asyncio
    async def test_rate_out_of_range(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/tax-settings",
            headers=admin_headers,
            json={"name": "Bad", "region": "AU", "taxType": "GST", "rate": 120},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, db_session: AsyncSession, admin_headers):
        setting = await TaxSettingFactory.create(db_session)

        assert (await client.delete(f"/api/tax-settings/{setting.id}", headers=admin_headers)).status_code == 200
        assert (await client.delete(f"/api/tax-settings/{setting.id}", headers=admin_headers)).status_code == 404
        assert (await client.get("/api/tax-settings")).json() == []


class TestFreelancerConfig:
    @pytest.mark.asyncio
    async def test_initialized_from_settings(self, client: AsyncClient, admin_headers):
        response = await client.get("/api/config/freelancer-info", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "name": "Alex Freelancer",
            "email": "alex@freelancer.test",
            "phone": "+1 555 0100",
            "address": "1 Main Street, Springfield",
            "website": "",
        }

    @pytest.mark.asyncio
    async def test_update_applies_to_new_receipts(self, client: AsyncClient, admin_headers):
        """
        Test that an updated identity fills the FROM side of new receipts.

        WHY: Receipts created without freelancerInfo use the stored value.
        """
        update = await client.put(
            "/api/config/freelancer-info",
            headers=admin_headers,
            json={
                "name": "Alex Studio",
                "email": "hello@studio.example.com",
                "phone": "+1 555 0111",
                "address": "2 Side Street",
                "website": "https://studio.test",
            },
        )
        assert update.status_code == 200

        payload = receipt_payload()
        del payload["freelancerInfo"]
        created = await client.post("/api/receipts", headers=admin_headers, json=payload)
        view = (await client.get(f"/api/receipts/{created.json()['receiptId']}")).json()

        assert view["freelancerInfo"]["name"] == "Alex Studio"
        assert view["freelancerInfo"]["website"] == "https://studio.test"

    @pytest.mark.asyncio
    async def test_update_requires_all_fields(self, client: AsyncClient, admin_headers):
        response = await client.put(
            "/api/config/freelancer-info",
            headers=admin_headers,
            json={"name": "Alex", "email": "alex@example.com"},
        )

        assert response.status_code == 400
        fields = [error["field"] for error in response.json()["details"]["errors"]]
        assert any(field.endswith("phone") for field in fields)
        assert any(field.endswith("address") for field in fields)

    @pytest.mark.asyncio
    async def test_reset(self, client: AsyncClient, admin_headers):
        await client.put(
            "/api/config/freelancer-info",
            headers=admin_headers,
            json={"name": "Other", "email": "other@example.com", "phone": "1", "address": "x"},
        )

        response = await client.post("/api/config/freelancer-info/reset", headers=admin_headers)

        assert response.json()["name"] == "Alex Freelancer"
        assert (await client.get("/api/config/freelancer-info", headers=admin_headers)).json()["name"] == (
            "Alex Freelancer"
        )

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, client_token_for):
        response = await client.get("/api/config/freelancer-info", headers=client_token_for("CLI1"))
        assert response.status_code == 403
