"""
Dashboard analytics.

WHAT: Receipt and invoice counts and revenue by status and currency, a
monthly revenue series and the most recent receipts.

WHY: Totals come from plaintext columns, so the dashboard needs no
decryption except for the client names of the few recent receipts.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.invoice import InvoiceDAO
from receiptdesk.dao.receipt import ReceiptDAO
from receiptdesk.models.invoice import InvoiceStatus
from receiptdesk.models.receipt import PaymentStatus
from receiptdesk.services.encryption_service import FieldCipher, get_field_cipher
from receiptdesk.services.sensitive_document import merge_receipt_payload

logger = logging.getLogger(__name__)


class AnalyticsService:
    def __init__(self, session: AsyncSession, cipher: Optional[FieldCipher] = None):
        self.receipt_dao = ReceiptDAO(session)
        self.invoice_dao = InvoiceDAO(session)
        self.cipher = cipher or get_field_cipher()

    async def receipt_summary(self) -> Dict[str, Any]:
        """
        Receipt counts per payment status and paid revenue per currency.

        ``primaryCurrency`` is the currency with the highest paid revenue.
        """
        totals = await self.receipt_dao.totals_by_status()

        counts = {status.value: 0 for status in PaymentStatus}
        revenue: Dict[str, float] = defaultdict(float)
        for (status, currency), (count, amount) in totals.items():
            counts[status] = counts.get(status, 0) + count
            if status == PaymentStatus.PAID.value:
                revenue[currency] += amount

        by_currency = sorted(
            ({"currency": currency, "totalRevenue": amount} for currency, amount in revenue.items()),
            key=lambda row: row["totalRevenue"],
            reverse=True,
        )
        return {
            "totalReceipts": sum(counts.values()),
            "paidReceipts": counts[PaymentStatus.PAID.value],
            "pendingReceipts": counts[PaymentStatus.PENDING.value],
            "partialReceipts": counts[PaymentStatus.PARTIAL.value],
            "totalRevenue": by_currency[0]["totalRevenue"] if by_currency else 0.0,
            "primaryCurrency": by_currency[0]["currency"] if by_currency else "USD",
            "revenueByCurrency": by_currency,
        }

    async def invoice_summary(self) -> Dict[str, Any]:
        """Invoice counts and totals per status, with outstanding amounts per currency."""
        totals = await self.invoice_dao.totals_by_status()

        by_status = {status.value: {"count": 0, "total": 0.0} for status in InvoiceStatus}
        outstanding: Dict[str, float] = defaultdict(float)
        for (status, currency), (count, total) in totals.items():
            bucket = by_status.setdefault(status, {"count": 0, "total": 0.0})
            bucket["count"] += count
            bucket["total"] += total
            if status in (InvoiceStatus.SENT.value, InvoiceStatus.OVERDUE.value):
                outstanding[currency] += total

        return {
            "totalInvoices": sum(bucket["count"] for bucket in by_status.values()),
            "byStatus": by_status,
            "outstandingByCurrency": dict(outstanding),
        }

    async def monthly_revenue(self, months: int = 12) -> List[Dict[str, Any]]:
        """Paid receipt revenue per ``YYYY-MM`` and currency, oldest first."""
        since = datetime.utcnow() - timedelta(days=months * 30)
        receipts = await self.receipt_dao.get_in_range(start=since)

        buckets: Dict[tuple, Dict[str, Any]] = {}
        for receipt in receipts:
            if receipt.payment_status != PaymentStatus.PAID.value:
                continue
            key = (f"{receipt.date.year}-{receipt.date.month:02d}", receipt.currency)
            bucket = buckets.setdefault(key, {"month": key[0], "currency": key[1], "revenue": 0.0, "count": 0})
            bucket["revenue"] += receipt.amount
            bucket["count"] += 1
        return [buckets[key] for key in sorted(buckets)]

    async def recent_receipts(self, limit: int = 5) -> List[Dict[str, Any]]:
        receipts = await self.receipt_dao.find_many(page=1, page_size=limit, descending=True)
        recent = []
        for receipt in receipts:
            data = merge_receipt_payload(self.cipher.decrypt_payload(receipt.encrypted_data))
            recent.append(
                {
                    "receiptId": receipt.receipt_id,
                    "date": receipt.date,
                    "clientName": data["clientInfo"]["name"],
                    "amount": receipt.amount,
                    "currency": receipt.currency,
                    "status": receipt.payment_status,
                }
            )
        return recent

    async def dashboard(self, months: int = 12) -> Dict[str, Any]:
        summary = await self.receipt_summary()
        return {
            "summary": summary,
            "invoices": await self.invoice_summary(),
            "monthlyRevenue": await self.monthly_revenue(months),
            "recentReceipts": await self.recent_receipts(),
        }
