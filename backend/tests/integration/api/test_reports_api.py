"""
Integration tests for export and analytics endpoints.
"""

import csv
import io
import json

import pytest
from httpx import AsyncClient

from tests.factories import invoice_payload, receipt_payload


async def _seed_documents(client: AsyncClient, headers: dict) -> None:
    await client.post("/api/receipts", headers=headers, json=receipt_payload(date="2026-01-10T10:00:00"))
    pending = receipt_payload(date="2026-02-10T10:00:00")
    pending["paymentInfo"]["status"] = "pending"
    await client.post("/api/receipts", headers=headers, json=pending)
    await client.post("/api/invoices", headers=headers, json=invoice_payload(status="sent"))


class TestExport:
    @pytest.mark.asyncio
    async def test_receipts_csv_download(self, client: AsyncClient, admin_headers):
        """
        Test CSV export over HTTP.

        WHY: The browser saves the response as a file, so the attachment
        header and media type matter.
        """
        await _seed_documents(client, admin_headers)

        response = await client.get("/api/export?type=receipts&format=csv", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'attachment; filename="receipts_export_' in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text)))
        assert len(rows) == 3
        assert rows[1][2] == "Sam Client"

    @pytest.mark.asyncio
    async def test_date_range(self, client: AsyncClient, admin_headers):
        await _seed_documents(client, admin_headers)

        response = await client.get(
            "/api/export?type=receipts&format=quickbooks&startDate=2026-02-01T00:00:00",
            headers=admin_headers,
        )

        rows = json.loads(response.text)
        assert len(rows) == 1
        assert rows[0]["IsPaid"] is False

    @pytest.mark.asyncio
    async def test_invoices_xero(self, client: AsyncClient, admin_headers):
        await _seed_documents(client, admin_headers)

        response = await client.get("/api/export?type=invoices&format=xero", headers=admin_headers)

        rows = json.loads(response.text)
        assert rows[0]["Total"] == 270.0
        assert rows[0]["Contact"]["Name"] == "Sam Client"

    @pytest.mark.asyncio
    async def test_nothing_to_export(self, client: AsyncClient, admin_headers):
        response = await client.get("/api/export?type=invoices&format=csv", headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_format(self, client: AsyncClient, admin_headers):
        response = await client.get("/api/export?type=receipts&format=pdf", headers=admin_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient):
        assert (await client.get("/api/export?type=receipts&format=csv")).status_code == 401


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_dashboard(self, client: AsyncClient, admin_headers):
        await _seed_documents(client, admin_headers)

        response = await client.get("/api/analytics", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["totalReceipts"] == 2
        assert data["summary"]["paidReceipts"] == 1
        assert data["invoices"]["byStatus"]["sent"]["count"] == 1
        assert len(data["recentReceipts"]) == 2

    @pytest.mark.asyncio
    async def test_receipt_summary(self, client: AsyncClient, admin_headers):
        await _seed_documents(client, admin_headers)

        response = await client.get("/api/analytics/receipts", headers=admin_headers)

        assert response.json()["totalRevenue"] == 1500.0
        assert response.json()["pendingReceipts"] == 1

    @pytest.mark.asyncio
    async def test_invoice_summary(self, client: AsyncClient, admin_headers):
        await _seed_documents(client, admin_headers)

        response = await client.get("/api/analytics/invoices", headers=admin_headers)

        data = response.json()
        assert data["totalInvoices"] == 1
        assert data["outstandingByCurrency"] == {"USD": 270.0}

    @pytest.mark.asyncio
    async def test_months_bounds(self, client: AsyncClient, admin_headers):
        response = await client.get("/api/analytics?months=0", headers=admin_headers)
        assert response.status_code == 400
