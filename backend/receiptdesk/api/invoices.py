"""
Invoice API endpoints.

WHAT: Invoice creation with derived totals, the public invoice view, admin
listing, updates, soft delete, PDF/HTML rendering and the overdue sweep.

HOW: Same layout as the receipt routes. Totals in requests are ignored;
InvoiceService recomputes them from the line items.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.db.session import get_db
from receiptdesk.models.invoice import InvoiceStatus
from receiptdesk.models.template import TemplateType
from receiptdesk.schemas.common import MessageResponse, PaginatedResponse, Pagination
from receiptdesk.schemas.invoice import (
    InvoiceCreate,
    InvoiceCreatedResponse,
    InvoiceUpdate,
    InvoiceView,
)
from receiptdesk.services.document_renderer import DocumentRenderer, invoice_variables
from receiptdesk.services.invoice_service import InvoiceService
from receiptdesk.services.pdf_service import get_pdf_service
from receiptdesk.services.qr_service import public_document_url


router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=InvoiceCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create invoice",
)
async def create_invoice(
    data: InvoiceCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> InvoiceCreatedResponse:
    """
    Create an invoice.

    Raises:
        ValidationError (400): Missing client/freelancer fields, no line
            items, incomplete items, or no due date
    """
    payload = data.model_dump(by_alias=True, exclude_none=True, exclude={"send_email"})
    invoice = await InvoiceService(db).create_invoice(payload, send_email=data.send_email)
    return InvoiceCreatedResponse.model_validate(invoice)


@router.get(
    "",
    response_model=PaginatedResponse[InvoiceView],
    summary="List invoices",
)
async def list_invoices(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    invoice_status: Optional[InvoiceStatus] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None, description="Invoice id"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[InvoiceView]:
    views, result = await InvoiceService(db).list_invoices(
        page=page,
        page_size=page_size,
        status=invoice_status.value if invoice_status else None,
        search=search,
    )
    return PaginatedResponse[InvoiceView](
        items=[InvoiceView.model_validate(view) for view in views],
        pagination=Pagination.build(result.page, result.page_size, result.total, result.pages),
    )


@router.post(
    "/mark-overdue",
    summary="Mark overdue invoices now",
)
async def mark_overdue_invoices(
    today: Optional[date] = Query(default=None, description="Reference date (defaults to today)"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Run the overdue sweep immediately instead of waiting for the scheduler."""
    count = await InvoiceService(db).mark_overdue(today)
    return {"updated": count}


@router.get(
    "/{invoice_id}",
    response_model=InvoiceView,
    summary="Get invoice (public)",
)
async def get_invoice(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
) -> InvoiceView:
    return InvoiceView.model_validate(await InvoiceService(db).get_invoice(invoice_id))


@router.put(
    "/{invoice_id}",
    response_model=InvoiceView,
    summary="Update invoice",
)
async def update_invoice(
    invoice_id: str,
    data: InvoiceUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> InvoiceView:
    """
    Update an invoice. A new ``items`` list replaces the stored one and
    recomputes all totals.
    """
    patch = data.model_dump(by_alias=True, exclude_none=True)
    return InvoiceView.model_validate(await InvoiceService(db).update_invoice(invoice_id, patch))


@router.delete(
    "/{invoice_id}",
    response_model=MessageResponse,
    summary="Delete invoice",
)
async def delete_invoice(
    invoice_id: str,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await InvoiceService(db).delete_invoice(invoice_id)
    return MessageResponse(message="Invoice deleted successfully")


@router.get(
    "/{invoice_id}/pdf",
    summary="Download invoice PDF (public)",
    response_class=Response,
)
async def download_invoice_pdf(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    view = await InvoiceService(db).get_invoice(invoice_id)
    pdf_bytes = get_pdf_service().generate_invoice_pdf(view)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{invoice_id}.pdf"'},
    )


@router.get(
    "/{invoice_id}/html",
    response_class=HTMLResponse,
    summary="Render invoice with the default template (public)",
)
async def render_invoice_html(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    view = await InvoiceService(db).get_invoice(invoice_id)
    variables = invoice_variables(view, public_document_url("invoice", invoice_id))
    return HTMLResponse(await DocumentRenderer(db).render_html(TemplateType.INVOICE, variables))
