"""
Receipt schemas for API request/response validation.

WHAT: Pydantic schemas for receipt submission and the decrypted receipt view.

WHY: Request sections are all optional at the schema level. Required-field
checks happen in ReceiptService so that one ValidationError can list every
missing field by its dotted path (``clientInfo.email``), and so that an
omitted ``freelancerInfo`` can be filled from configuration first.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from receiptdesk.models.receipt import PaymentStatus
from receiptdesk.schemas.common import CamelModel


# ============================================================================
# Sub-documents (stored inside the encrypted envelope)
# ============================================================================


class ContactInfo(CamelModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class FreelancerInfo(ContactInfo):
    website: Optional[str] = None


class ProjectDetails(CamelModel):
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    description: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    deliverables: List[str] = Field(default_factory=list)
    website_url: Optional[str] = None
    project_images: Optional[List[str]] = None


class ReceiptPaymentInfo(CamelModel):
    model_config = ConfigDict(extra="allow")

    amount: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    method: Optional[str] = None
    status: Optional[PaymentStatus] = None
    due_date: Optional[str] = None


# ============================================================================
# Request Schemas
# ============================================================================


class ReceiptCreate(CamelModel):
    """
    Schema for creating a receipt.

    ``send_email`` defaults to true: the client receives the default
    ``receipt_sent`` email if one is configured.
    """

    client_info: Optional[ContactInfo] = None
    freelancer_info: Optional[FreelancerInfo] = None
    project_details: Optional[ProjectDetails] = None
    payment_info: Optional[ReceiptPaymentInfo] = None
    date: Optional[datetime] = None
    send_email: bool = True


class ReceiptUpdate(CamelModel):
    """Partial update; provided sections are merged over the stored ones."""

    client_info: Optional[ContactInfo] = None
    freelancer_info: Optional[FreelancerInfo] = None
    project_details: Optional[ProjectDetails] = None
    payment_info: Optional[ReceiptPaymentInfo] = None
    date: Optional[datetime] = None


# ============================================================================
# Response Schemas
# ============================================================================


class ReceiptCreatedResponse(CamelModel):
    """Minimal public-safe summary returned by creation."""

    id: int
    receipt_id: str
    qr_code_url: Optional[str] = None
    date: datetime
    warnings: List[str] = Field(default_factory=list)


class ReceiptView(CamelModel):
    """Decrypted receipt merged with defaults; every leaf is present."""

    id: int
    receipt_id: str
    date: datetime
    client_info: Dict[str, Any]
    freelancer_info: Dict[str, Any]
    project_details: Dict[str, Any]
    payment_info: Dict[str, Any]
    qr_code_url: Optional[str] = None
    pdf_url: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
