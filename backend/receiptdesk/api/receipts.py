"""
Receipt API endpoints.

WHAT: Receipt creation, the public receipt view (QR target), admin listing,
updates, soft delete, and PDF/HTML rendering.

WHY: The public view is the page a client opens from the QR code or the
notification email, so it needs no token. Everything else is admin-only.

HOW: Routes stay thin; ReceiptService runs the workflow and returns
decrypted camelCase views.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.db.session import get_db
from receiptdesk.models.receipt import PaymentStatus
from receiptdesk.models.template import TemplateType
from receiptdesk.schemas.common import MessageResponse, PaginatedResponse, Pagination
from receiptdesk.schemas.receipt import (
    ReceiptCreate,
    ReceiptCreatedResponse,
    ReceiptUpdate,
    ReceiptView,
)
from receiptdesk.services.document_renderer import DocumentRenderer, receipt_variables
from receiptdesk.services.pdf_service import get_pdf_service
from receiptdesk.services.qr_service import public_document_url
from receiptdesk.services.receipt_service import ReceiptService


router = APIRouter(prefix="/receipts", tags=["receipts"])


@router.post(
    "",
    response_model=ReceiptCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create receipt",
)
async def create_receipt(
    data: ReceiptCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ReceiptCreatedResponse:
    """
    Create a receipt.

    The response lists in ``warnings`` any secondary step (QR code,
    notification email, client link) that did not complete. Those never
    fail the request.

    Raises:
        ValidationError (400): Required fields missing, listed in
            ``details.missing_fields``
    """
    payload = data.model_dump(by_alias=True, exclude_none=True, exclude={"send_email"})
    receipt = await ReceiptService(db).create_receipt(payload, send_email=data.send_email)
    return ReceiptCreatedResponse.model_validate(receipt)


@router.get(
    "",
    response_model=PaginatedResponse[ReceiptView],
    summary="List receipts",
)
async def list_receipts(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    payment_status: Optional[PaymentStatus] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None, description="Receipt id or project title"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[ReceiptView]:
    views, result = await ReceiptService(db).list_receipts(
        page=page,
        page_size=page_size,
        status=payment_status.value if payment_status else None,
        search=search,
    )
    return PaginatedResponse[ReceiptView](
        items=[ReceiptView.model_validate(view) for view in views],
        pagination=Pagination.build(result.page, result.page_size, result.total, result.pages),
    )


@router.get(
    "/{receipt_id}",
    response_model=ReceiptView,
    summary="Get receipt (public)",
)
async def get_receipt(
    receipt_id: str,
    db: AsyncSession = Depends(get_db),
) -> ReceiptView:
    """
    Public receipt view.

    Raises:
        ReceiptNotFoundError (404): Unknown or soft-deleted receipt
        DecryptionError (500): Envelope cannot be decrypted
    """
    return ReceiptView.model_validate(await ReceiptService(db).get_receipt(receipt_id))


@router.put(
    "/{receipt_id}",
    response_model=ReceiptView,
    summary="Update receipt",
)
async def update_receipt(
    receipt_id: str,
    data: ReceiptUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ReceiptView:
    patch = data.model_dump(by_alias=True, exclude_none=True)
    return ReceiptView.model_validate(await ReceiptService(db).update_receipt(receipt_id, patch))


@router.delete(
    "/{receipt_id}",
    response_model=MessageResponse,
    summary="Delete receipt",
)
async def delete_receipt(
    receipt_id: str,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await ReceiptService(db).delete_receipt(receipt_id)
    return MessageResponse(message="Receipt deleted successfully")


@router.get(
    "/{receipt_id}/pdf",
    summary="Download receipt PDF (public)",
    response_class=Response,
)
async def download_receipt_pdf(
    receipt_id: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    view = await ReceiptService(db).get_receipt(receipt_id)
    pdf_bytes = get_pdf_service().generate_receipt_pdf(view)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="receipt-{receipt_id}.pdf"'},
    )


@router.get(
    "/{receipt_id}/html",
    response_class=HTMLResponse,
    summary="Render receipt with the default template (public)",
)
async def render_receipt_html(
    receipt_id: str,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    """
    Raises:
        ResourceNotFoundError (404): Unknown receipt or no default receipt template
    """
    view = await ReceiptService(db).get_receipt(receipt_id)
    variables = receipt_variables(view, public_document_url("receipt", receipt_id))
    return HTMLResponse(await DocumentRenderer(db).render_html(TemplateType.RECEIPT, variables))
