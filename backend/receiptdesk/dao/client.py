"""
Client Data Access Object (DAO).

WHAT: Database operations for the Client model.

WHY: Clients sort by ``last_contact`` so the most recently billed clients
come first, and are matched by email when documents are created.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.base import BaseDAO
from receiptdesk.models.client import Client


class ClientDAO(BaseDAO[Client]):
    """Data Access Object for Client model."""

    search_fields = ("name", "email", "company_name")
    default_sort = "last_contact"

    def __init__(self, session: AsyncSession):
        super().__init__(Client, session)

    async def get_by_client_id(self, client_id: str) -> Optional[Client]:
        return await self.get_by_field("client_id", client_id)

    async def get_by_email(self, email: str, include_inactive: bool = False) -> Optional[Client]:
        """Client by email, compared case-insensitively."""
        return await self.get_by_field("email", email.strip().lower(), include_inactive=include_inactive)

    async def link_document(
        self,
        client: Client,
        receipt_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
        paid_amount: float = 0,
        pending_amount: float = 0,
    ) -> Client:
        """
        Append a document id to the client's history and bump last_contact.

        JSON list columns are reassigned, not mutated, so the change is tracked.
        """
        if receipt_id and receipt_id not in (client.receipts or []):
            client.receipts = [*(client.receipts or []), receipt_id]
        if invoice_id and invoice_id not in (client.invoices or []):
            client.invoices = [*(client.invoices or []), invoice_id]
        client.total_paid = (client.total_paid or 0) + paid_amount
        client.total_pending = (client.total_pending or 0) + pending_amount
        client.last_contact = datetime.utcnow()
        return await self.save(client)
