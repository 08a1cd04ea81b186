"""
Client management.

WHAT: CRUD over clients plus best-effort linking of new documents.

WHY: Linking is a secondary step of receipt/invoice creation; a client that
does not exist yet is simply not linked.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.exceptions import ClientNotFoundError, ResourceAlreadyExistsError
from receiptdesk.dao.base import Page
from receiptdesk.dao.client import ClientDAO
from receiptdesk.models.client import Client

logger = logging.getLogger(__name__)


class ClientService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.client_dao = ClientDAO(session)

    async def create_client(self, data: Dict[str, Any]) -> Client:
        """
        Raises:
            ResourceAlreadyExistsError: If a client with this email exists
                (active or not)
        """
        email = data["email"].strip().lower()
        if await self.client_dao.get_by_email(email, include_inactive=True):
            raise ResourceAlreadyExistsError(
                message="A client with this email already exists",
                resource_type="Client",
            )
        try:
            client = await self.client_dao.create(
                **{**data, "email": email},
                client_id=Client.generate_client_id(),
            )
        except IntegrityError:
            raise ResourceAlreadyExistsError(message="Client already exists", resource_type="Client")
        logger.info(f"Client created: {client.client_id}", extra={"client_id": client.client_id})
        return client

    async def get_client(self, client_id: str) -> Client:
        client = await self.client_dao.get_by_client_id(client_id)
        if client is None:
            raise ClientNotFoundError(client_id=client_id)
        return client

    async def list_clients(self, page: int, page_size: int, search: Optional[str] = None) -> Page[Client]:
        return await self.client_dao.paginate(page=page, page_size=page_size, search=search)

    async def update_client(self, client_id: str, patch: Dict[str, Any]) -> Client:
        client = await self.get_client(client_id)
        if patch.get("email"):
            patch["email"] = patch["email"].strip().lower()
            other = await self.client_dao.get_by_email(patch["email"], include_inactive=True)
            if other is not None and other.id != client.id:
                raise ResourceAlreadyExistsError(
                    message="A client with this email already exists",
                    resource_type="Client",
                )
        updated = await self.client_dao.update_by_filter({"id": client.id}, patch)
        return updated

    async def delete_client(self, client_id: str) -> None:
        client = await self.get_client(client_id)
        await self.client_dao.soft_delete(client.id)
        logger.info(f"Client deactivated: {client_id}", extra={"client_id": client_id})

    async def link_document(
        self,
        email: Optional[str],
        receipt_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
        paid_amount: float = 0,
        pending_amount: float = 0,
    ) -> bool:
        """
        Attach a document to the client with this email, if one exists.

        Returns:
            True if a client was linked
        """
        if not email:
            return False
        client = await self.client_dao.get_by_email(email)
        if client is None:
            return False
        await self.client_dao.link_document(
            client,
            receipt_id=receipt_id,
            invoice_id=invoice_id,
            paid_amount=paid_amount,
            pending_amount=pending_amount,
        )
        logger.info(
            f"Linked {receipt_id or invoice_id} to client {client.client_id}",
            extra={"client_id": client.client_id},
        )
        return True
