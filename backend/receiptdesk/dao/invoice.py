"""
Invoice Data Access Object (DAO).

WHAT: Database operations for the Invoice model.

HOW: Extends BaseDAO with lookups by public id, date-range queries for
export, overdue detection for the scheduler sweep and analytics aggregates.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.base import BaseDAO
from receiptdesk.models.invoice import Invoice, InvoiceStatus


class InvoiceDAO(BaseDAO[Invoice]):
    """Data Access Object for Invoice model."""

    search_fields = ("invoice_id",)

    def __init__(self, session: AsyncSession):
        super().__init__(Invoice, session)

    async def get_by_invoice_id(self, invoice_id: str) -> Optional[Invoice]:
        """Active invoice by its public identifier."""
        return await self.get_by_field("invoice_id", invoice_id)

    async def get_in_range(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Invoice]:
        """Active invoices dated within [start, end], oldest first."""
        query = select(Invoice).where(Invoice.is_active.is_(True))
        if start:
            query = query.where(Invoice.date >= start)
        if end:
            query = query.where(Invoice.date <= end)
        result = await self.session.execute(query.order_by(Invoice.date.asc(), Invoice.id.asc()))
        return list(result.scalars().all())

    async def get_overdue_candidates(self, today: Optional[date] = None) -> List[Invoice]:
        """
        Sent invoices whose due date has passed.

        Args:
            today: Reference date (defaults to date.today())
        """
        today = today or date.today()
        result = await self.session.execute(
            select(Invoice).where(
                Invoice.is_active.is_(True),
                Invoice.status == InvoiceStatus.SENT.value,
                Invoice.due_date.is_not(None),
                Invoice.due_date < today,
            )
        )
        return list(result.scalars().all())

    async def get_missing_qr(self) -> List[Invoice]:
        result = await self.session.execute(
            select(Invoice)
            .where(Invoice.is_active.is_(True), Invoice.qr_code_url.is_(None))
            .order_by(Invoice.id.asc())
        )
        return list(result.scalars().all())

    async def totals_by_status(self) -> Dict[Tuple[str, str], Tuple[int, float]]:
        """
        Count and total per (status, currency).

        Returns:
            {(status, currency): (count, total)}
        """
        result = await self.session.execute(
            select(
                Invoice.status,
                Invoice.currency,
                func.count(Invoice.id),
                func.coalesce(func.sum(Invoice.total), 0),
            )
            .where(Invoice.is_active.is_(True))
            .group_by(Invoice.status, Invoice.currency)
        )
        return {(status, currency): (int(count), float(total)) for status, currency, count, total in result.all()}
