"""
Client API endpoints.

WHAT: Client CRUD for the admin, plus read access for a client to its own
record.

WHY: Receipts and invoices link to clients by email, so the client record
accumulates document ids and paid/pending totals.

HOW: A client token carries ``client_id``; it may read only the record
with that id. All other operations require an admin token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import get_current_claims, require_admin
from receiptdesk.core.exceptions import AuthorizationError
from receiptdesk.db.session import get_db
from receiptdesk.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from receiptdesk.schemas.common import MessageResponse, PaginatedResponse, Pagination
from receiptdesk.services.client_service import ClientService


router = APIRouter(prefix="/clients", tags=["clients"])


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create client",
)
async def create_client(
    data: ClientCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ClientResponse:
    """
    Raises:
        ResourceAlreadyExistsError (409): Email already registered
    """
    client = await ClientService(db).create_client(data.model_dump())
    return ClientResponse.model_validate(client)


@router.get(
    "",
    response_model=PaginatedResponse[ClientResponse],
    summary="List clients",
)
async def list_clients(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    search: Optional[str] = Query(default=None, description="Name, email or company"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[ClientResponse]:
    result = await ClientService(db).list_clients(page=page, page_size=page_size, search=search)
    return PaginatedResponse[ClientResponse](
        items=[ClientResponse.model_validate(client) for client in result.items],
        pagination=Pagination.build(result.page, result.page_size, result.total, result.pages),
    )


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Get client",
)
async def get_client(
    client_id: str,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> ClientResponse:
    """
    Admins read any client; a client token reads only its own record.

    Raises:
        AuthorizationError (403): Client token for another client
        ClientNotFoundError (404): Unknown or deleted client
    """
    if not claims.is_admin and claims.client_id != client_id:
        raise AuthorizationError(message="Not allowed to view this client")
    return ClientResponse.model_validate(await ClientService(db).get_client(client_id))


@router.put(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Update client",
)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ClientResponse:
    client = await ClientService(db).update_client(client_id, data.model_dump(exclude_none=True))
    return ClientResponse.model_validate(client)


@router.delete(
    "/{client_id}",
    response_model=MessageResponse,
    summary="Delete client",
)
async def delete_client(
    client_id: str,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await ClientService(db).delete_client(client_id)
    return MessageResponse(message="Client deleted successfully")
