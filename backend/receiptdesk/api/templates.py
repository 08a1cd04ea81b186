"""
Document template API endpoints.

WHAT: CRUD for receipt/invoice HTML templates, default selection and a
render preview.

WHY: Exactly one active default per template type drives the HTML views.
Setting a default clears the previous one in the same transaction.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.core.exceptions import ResourceNotFoundError
from receiptdesk.dao.template import TemplateDAO
from receiptdesk.db.session import get_db
from receiptdesk.models.template import Template, TemplateType
from receiptdesk.schemas.common import MessageResponse
from receiptdesk.schemas.template import (
    RenderRequest,
    RenderResponse,
    TemplateCreate,
    TemplateResponse,
    TemplateUpdate,
)
from receiptdesk.services.document_renderer import wrap_html
from receiptdesk.services.template_engine import extract_variables, find_unresolved, render


router = APIRouter(prefix="/templates", tags=["templates"])


def _to_response(template: Template) -> TemplateResponse:
    response = TemplateResponse.model_validate(template)
    response.variables = extract_variables(template.html_template)
    return response


async def _get_or_404(dao: TemplateDAO, template_id: int) -> Template:
    template = await dao.get_by_id(template_id)
    if template is None:
        raise ResourceNotFoundError(
            message=f"Template {template_id} not found",
            resource_type="Template",
            resource_id=template_id,
        )
    return template


@router.get("", response_model=List[TemplateResponse], summary="List templates")
async def list_templates(
    template_type: Optional[TemplateType] = Query(default=None, alias="type"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[TemplateResponse]:
    templates = await TemplateDAO(db).find_many(
        filters={"type": template_type.value if template_type else None},
    )
    return [_to_response(t) for t in templates]


@router.post(
    "",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create template",
)
async def create_template(
    data: TemplateCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TemplateResponse:
    """A template created with ``isDefault`` replaces the current default of its type."""
    template = await TemplateDAO(db).create_with_default(**data.model_dump(mode="json"))
    return _to_response(template)


@router.get("/{template_id}", response_model=TemplateResponse, summary="Get template")
async def get_template(
    template_id: int,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TemplateResponse:
    return _to_response(await _get_or_404(TemplateDAO(db), template_id))


@router.put("/{template_id}", response_model=TemplateResponse, summary="Update template")
async def update_template(
    template_id: int,
    data: TemplateUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TemplateResponse:
    dao = TemplateDAO(db)
    template = await dao.update_with_default(template_id, data.model_dump(mode="json", exclude_none=True))
    if template is None:
        await _get_or_404(dao, template_id)
    return _to_response(template)


@router.post(
    "/{template_id}/set-default",
    response_model=TemplateResponse,
    summary="Make template the default of its type",
)
async def set_default_template(
    template_id: int,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TemplateResponse:
    """
    Raises:
        ResourceNotFoundError (404): Unknown or inactive template; no other
            template is modified
    """
    return _to_response(await TemplateDAO(db).set_as_default(template_id))


@router.delete("/{template_id}", response_model=MessageResponse, summary="Delete template")
async def delete_template(
    template_id: int,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    if not await TemplateDAO(db).soft_delete(template_id):
        raise ResourceNotFoundError(
            message=f"Template {template_id} not found",
            resource_type="Template",
            resource_id=template_id,
        )
    return MessageResponse(message="Template deleted successfully")


@router.post("/{template_id}/render", response_model=RenderResponse, summary="Render template preview")
async def render_template(
    template_id: int,
    data: RenderRequest,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> RenderResponse:
    """Substitute the supplied variables; markers without a value are reported."""
    template = await _get_or_404(TemplateDAO(db), template_id)
    return RenderResponse(
        html=wrap_html(render(template.html_template, data.variables), template.css_styles),
        unresolved=find_unresolved(template.html_template, data.variables),
    )
