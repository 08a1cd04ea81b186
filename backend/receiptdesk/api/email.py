"""
Email API endpoints.

WHAT: Email template CRUD with one default per type, template preview,
on-demand sending of receipt/invoice notifications and the delivery log.

WHY: Creation sends notifications automatically; these routes let the
admin fix templates and resend when a delivery failed.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.core.exceptions import ResourceNotFoundError, ValidationError
from receiptdesk.dao.template import EmailLogDAO, EmailTemplateDAO
from receiptdesk.db.session import get_db
from receiptdesk.models.email_template import EmailTemplate, EmailTemplateType
from receiptdesk.schemas.common import MessageResponse, PaginatedResponse, Pagination
from receiptdesk.schemas.template import (
    EmailLogResponse,
    EmailTemplateCreate,
    EmailTemplatePreview,
    EmailTemplateResponse,
    EmailTemplateUpdate,
    RenderRequest,
    SendDocumentEmailRequest,
    SendDocumentEmailResponse,
)
from receiptdesk.services.document_renderer import invoice_variables, receipt_variables
from receiptdesk.services.invoice_service import InvoiceService
from receiptdesk.services.notification_service import NotificationService
from receiptdesk.services.qr_service import public_document_url
from receiptdesk.services.receipt_service import ReceiptService
from receiptdesk.services.template_engine import extract_variables, find_unresolved, render


router = APIRouter(prefix="/email", tags=["email"])


async def _get_template_or_404(dao: EmailTemplateDAO, template_id: int) -> EmailTemplate:
    template = await dao.get_by_id(template_id)
    if template is None:
        raise ResourceNotFoundError(
            message=f"Email template {template_id} not found",
            resource_type="EmailTemplate",
            resource_id=template_id,
        )
    return template


# ============================================================================
# Email templates
# ============================================================================


@router.get("/templates", response_model=List[EmailTemplateResponse], summary="List email templates")
async def list_email_templates(
    template_type: Optional[EmailTemplateType] = Query(default=None, alias="type"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[EmailTemplateResponse]:
    templates = await EmailTemplateDAO(db).find_many(
        filters={"type": template_type.value if template_type else None},
    )
    return [EmailTemplateResponse.model_validate(t) for t in templates]


@router.post(
    "/templates",
    response_model=EmailTemplateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create email template",
)
async def create_email_template(
    data: EmailTemplateCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> EmailTemplateResponse:
    values = data.model_dump(mode="json")
    # Derive the variable list from the content when not given
    if values.get("variables") is None:
        values["variables"] = extract_variables(
            " ".join(filter(None, (values["subject"], values["html_content"], values.get("text_content"))))
        )
    template = await EmailTemplateDAO(db).create_with_default(**values)
    return EmailTemplateResponse.model_validate(template)


@router.get("/templates/{template_id}", response_model=EmailTemplateResponse, summary="Get email template")
async def get_email_template(
    template_id: int,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> EmailTemplateResponse:
    return EmailTemplateResponse.model_validate(await _get_template_or_404(EmailTemplateDAO(db), template_id))


@router.put("/templates/{template_id}", response_model=EmailTemplateResponse, summary="Update email template")
async def update_email_template(
    template_id: int,
    data: EmailTemplateUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> EmailTemplateResponse:
    dao = EmailTemplateDAO(db)
    template = await dao.update_with_default(template_id, data.model_dump(mode="json", exclude_none=True))
    if template is None:
        await _get_template_or_404(dao, template_id)
    return EmailTemplateResponse.model_validate(template)


@router.post(
    "/templates/{template_id}/set-default",
    response_model=EmailTemplateResponse,
    summary="Make email template the default of its type",
)
async def set_default_email_template(
    template_id: int,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> EmailTemplateResponse:
    return EmailTemplateResponse.model_validate(await EmailTemplateDAO(db).set_as_default(template_id))


@router.delete("/templates/{template_id}", response_model=MessageResponse, summary="Delete email template")
async def delete_email_template(
    template_id: int,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    dao = EmailTemplateDAO(db)
    if not await dao.soft_delete(template_id):
        await _get_template_or_404(dao, template_id)
    return MessageResponse(message="Email template deleted successfully")


@router.post(
    "/templates/{template_id}/preview",
    response_model=EmailTemplatePreview,
    summary="Preview email template",
)
async def preview_email_template(
    template_id: int,
    data: RenderRequest,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> EmailTemplatePreview:
    template = await _get_template_or_404(EmailTemplateDAO(db), template_id)
    combined = " ".join(filter(None, (template.subject, template.html_content, template.text_content)))
    return EmailTemplatePreview(
        subject=render(template.subject, data.variables),
        html=render(template.html_content, data.variables),
        text=render(template.text_content, data.variables) if template.text_content else None,
        unresolved=find_unresolved(combined, data.variables),
    )


# ============================================================================
# Sending and log
# ============================================================================


@router.post("/send", response_model=SendDocumentEmailResponse, summary="Send document email")
async def send_document_email(
    data: SendDocumentEmailRequest,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> SendDocumentEmailResponse:
    """
    Send the default ``receipt_sent`` or ``invoice_sent`` email for an
    existing document, to ``to`` or the client's address.

    Delivery problems are reported in the response, not as errors.

    Raises:
        ValidationError (400): Neither or both of receiptId/invoiceId given
        ResourceNotFoundError (404): Unknown document
    """
    if bool(data.receipt_id) == bool(data.invoice_id):
        raise ValidationError(message="Provide exactly one of receiptId or invoiceId")

    if data.receipt_id:
        view = await ReceiptService(db).get_receipt(data.receipt_id)
        template_type = EmailTemplateType.RECEIPT_SENT
        variables = receipt_variables(view, public_document_url("receipt", data.receipt_id))
    else:
        view = await InvoiceService(db).get_invoice(data.invoice_id)
        template_type = EmailTemplateType.INVOICE_SENT
        variables = invoice_variables(view, public_document_url("invoice", data.invoice_id))

    outcome = await NotificationService(db).send_templated(
        template_type,
        data.to or view["clientInfo"]["email"],
        variables,
        receipt_id=data.receipt_id,
        invoice_id=data.invoice_id,
    )
    return SendDocumentEmailResponse(sent=outcome.sent, warning=outcome.warning, message_id=outcome.message_id)


@router.get("/logs", response_model=PaginatedResponse[EmailLogResponse], summary="Email delivery log")
async def list_email_logs(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    receipt_id: Optional[str] = Query(default=None, alias="receiptId"),
    invoice_id: Optional[str] = Query(default=None, alias="invoiceId"),
    email_status: Optional[str] = Query(default=None, alias="status"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[EmailLogResponse]:
    result = await EmailLogDAO(db).paginate(
        page=page,
        page_size=page_size,
        filters={"receipt_id": receipt_id, "invoice_id": invoice_id, "status": email_status},
    )
    return PaginatedResponse[EmailLogResponse](
        items=[EmailLogResponse.model_validate(log) for log in result.items],
        pagination=Pagination.build(result.page, result.page_size, result.total, result.pages),
    )
