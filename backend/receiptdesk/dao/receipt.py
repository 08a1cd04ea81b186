"""
Receipt Data Access Object (DAO).

WHAT: Database operations for the Receipt model.

HOW: Extends BaseDAO with lookups by public id, date-range queries for
export, and aggregates for analytics. Search covers only plaintext columns;
names and emails live in the encrypted envelope and are not searchable.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.base import BaseDAO
from receiptdesk.models.receipt import Receipt


class ReceiptDAO(BaseDAO[Receipt]):
    """Data Access Object for Receipt model."""

    search_fields = ("receipt_id", "project_title")

    def __init__(self, session: AsyncSession):
        super().__init__(Receipt, session)

    async def get_by_receipt_id(self, receipt_id: str) -> Optional[Receipt]:
        """Active receipt by its public identifier."""
        return await self.get_by_field("receipt_id", receipt_id)

    async def get_in_range(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Receipt]:
        """Active receipts dated within [start, end], oldest first."""
        query = select(Receipt).where(Receipt.is_active.is_(True))
        if start:
            query = query.where(Receipt.date >= start)
        if end:
            query = query.where(Receipt.date <= end)
        result = await self.session.execute(query.order_by(Receipt.date.asc(), Receipt.id.asc()))
        return list(result.scalars().all())

    async def get_missing_qr(self) -> List[Receipt]:
        """Active receipts whose QR step never completed."""
        result = await self.session.execute(
            select(Receipt)
            .where(Receipt.is_active.is_(True), Receipt.qr_code_url.is_(None))
            .order_by(Receipt.id.asc())
        )
        return list(result.scalars().all())

    async def totals_by_status(self) -> Dict[Tuple[str, str], Tuple[int, float]]:
        """
        Count and amount per (payment_status, currency).

        Returns:
            {(status, currency): (count, amount)}
        """
        result = await self.session.execute(
            select(
                Receipt.payment_status,
                Receipt.currency,
                func.count(Receipt.id),
                func.coalesce(func.sum(Receipt.amount), 0),
            )
            .where(Receipt.is_active.is_(True))
            .group_by(Receipt.payment_status, Receipt.currency)
        )
        return {(status, currency): (int(count), float(amount)) for status, currency, count, amount in result.all()}
