"""
Unit tests for dashboard analytics.
"""

from datetime import datetime

import pytest

from receiptdesk.services.analytics_service import AnalyticsService
from receiptdesk.services.encryption_service import FieldCipher
from receiptdesk.services.invoice_service import InvoiceService
from receiptdesk.services.qr_service import QRCodeService
from receiptdesk.services.receipt_service import ReceiptService
from tests.factories import invoice_payload, receipt_payload


@pytest.fixture
def cipher():
    return FieldCipher("analytics-test-secret")


def _receipt(amount, currency, status, **overrides):
    data = receipt_payload(**overrides)
    data["paymentInfo"].update({"amount": amount, "currency": currency, "status": status})
    return data


class TestReceiptSummary:
    @pytest.mark.asyncio
    async def test_empty(self, db_session, cipher):
        summary = await AnalyticsService(db_session, cipher).receipt_summary()
        assert summary["totalReceipts"] == 0
        assert summary["totalRevenue"] == 0.0
        assert summary["primaryCurrency"] == "USD"
        assert summary["revenueByCurrency"] == []

    @pytest.mark.asyncio
    async def test_counts_and_revenue_per_currency(self, db_session, cipher):
        receipts = ReceiptService(db_session, cipher=cipher, qr_service=QRCodeService(storage_enabled=False))
        for data in (
            _receipt(100, "usd", "paid"),
            _receipt(300, "eur", "paid"),
            _receipt(50, "eur", "paid"),
            _receipt(999, "usd", "pending"),
            _receipt(10, "usd", "partial"),
        ):
            await receipts.create_receipt(data, send_email=False)

        summary = await AnalyticsService(db_session, cipher).receipt_summary()

        assert summary["totalReceipts"] == 5
        assert (summary["paidReceipts"], summary["pendingReceipts"], summary["partialReceipts"]) == (3, 1, 1)
        assert summary["primaryCurrency"] == "EUR"
        assert summary["totalRevenue"] == 350.0
        assert summary["revenueByCurrency"] == [
            {"currency": "EUR", "totalRevenue": 350.0},
            {"currency": "USD", "totalRevenue": 100.0},
        ]


class TestDashboard:
    @pytest.mark.asyncio
    async def test_dashboard_sections(self, db_session, cipher):
        receipts = ReceiptService(db_session, cipher=cipher, qr_service=QRCodeService(storage_enabled=False))
        now = datetime.utcnow().replace(microsecond=0)
        created = await receipts.create_receipt(_receipt(200, "usd", "paid", date=now.isoformat()), send_email=False)
        invoices = InvoiceService(db_session, cipher=cipher, qr_service=QRCodeService(storage_enabled=False))
        await invoices.create_invoice(invoice_payload(status="sent"), send_email=False)

        dashboard = await AnalyticsService(db_session, cipher).dashboard()

        assert dashboard["summary"]["paidReceipts"] == 1
        assert dashboard["invoices"]["byStatus"]["sent"] == {"count": 1, "total": 270.0}
        assert dashboard["invoices"]["outstandingByCurrency"] == {"USD": 270.0}
        assert dashboard["monthlyRevenue"] == [
            {"month": f"{now.year}-{now.month:02d}", "currency": "USD", "revenue": 200.0, "count": 1}
        ]
        recent = dashboard["recentReceipts"][0]
        assert recent["receiptId"] == created.receipt_id
        assert recent["clientName"] == "Sam Client"
