"""
Template and email template schemas.

WHY: ``is_default`` on create/update triggers default-singleton enforcement
in the DAO; the API never writes it directly.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from receiptdesk.models.email_template import EmailTemplateType
from receiptdesk.models.template import TemplateType
from receiptdesk.schemas.common import CamelModel


# ============================================================================
# Document templates
# ============================================================================


class TemplateField(CamelModel):
    name: str
    label: str
    type: str = "text"
    required: bool = False


class TemplateCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: TemplateType
    html_template: str = Field(..., min_length=1)
    css_styles: Optional[str] = None
    fields: List[TemplateField] = Field(default_factory=list)
    is_default: bool = False


class TemplateUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[TemplateType] = None
    html_template: Optional[str] = Field(default=None, min_length=1)
    css_styles: Optional[str] = None
    fields: Optional[List[TemplateField]] = None
    is_default: Optional[bool] = None


class TemplateResponse(CamelModel):
    id: int
    name: str
    type: TemplateType
    html_template: str
    css_styles: Optional[str] = None
    fields: List[Dict[str, Any]] = Field(default_factory=list)
    variables: List[str] = Field(default_factory=list)
    is_default: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class RenderRequest(CamelModel):
    variables: Dict[str, str] = Field(default_factory=dict)


class RenderResponse(CamelModel):
    html: str
    unresolved: List[str] = Field(default_factory=list)


# ============================================================================
# Email templates
# ============================================================================


class EmailTemplateCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: EmailTemplateType
    subject: str = Field(..., min_length=1, max_length=500)
    html_content: str = Field(..., min_length=1)
    text_content: Optional[str] = None
    variables: Optional[List[str]] = None
    is_default: bool = False


class EmailTemplateUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[EmailTemplateType] = None
    subject: Optional[str] = Field(default=None, min_length=1, max_length=500)
    html_content: Optional[str] = Field(default=None, min_length=1)
    text_content: Optional[str] = None
    variables: Optional[List[str]] = None
    is_default: Optional[bool] = None


class EmailTemplateResponse(CamelModel):
    id: int
    name: str
    type: EmailTemplateType
    subject: str
    html_content: str
    text_content: Optional[str] = None
    variables: List[str] = Field(default_factory=list)
    is_default: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class EmailTemplatePreview(CamelModel):
    subject: str
    html: str
    text: Optional[str] = None
    unresolved: List[str] = Field(default_factory=list)


class SendDocumentEmailRequest(CamelModel):
    """Send (or resend) the notification for an existing document."""

    receipt_id: Optional[str] = None
    invoice_id: Optional[str] = None
    to: Optional[str] = None


class SendDocumentEmailResponse(CamelModel):
    sent: bool
    warning: Optional[str] = None
    message_id: Optional[str] = None


class EmailLogResponse(CamelModel):
    id: int
    to: str
    subject: str
    template_type: str
    status: str
    error: Optional[str] = None
    message_id: Optional[str] = None
    receipt_id: Optional[str] = None
    invoice_id: Optional[str] = None
    sent_at: Optional[datetime] = None
    created_at: datetime
