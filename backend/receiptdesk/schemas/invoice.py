"""
Invoice schemas for API request/response validation.

WHY: ``amount``, ``taxAmount``, ``subtotal``, ``taxTotal`` and ``total`` are
derived. Inputs may carry them but InvoiceService recomputes them and never
trusts client values.
"""

from datetime import date as DateType, datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from receiptdesk.models.invoice import InvoiceStatus
from receiptdesk.schemas.common import CamelModel
from receiptdesk.schemas.receipt import ContactInfo, FreelancerInfo


class InvoiceClientInfo(ContactInfo):
    company_name: Optional[str] = None
    tax_id: Optional[str] = None


class InvoiceItem(CamelModel):
    model_config = ConfigDict(extra="allow")

    description: Optional[str] = None
    quantity: Optional[float] = Field(default=None, ge=0)
    rate: Optional[float] = Field(default=None, ge=0)
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)
    # Ignored on input; recomputed
    amount: Optional[float] = None
    tax_amount: Optional[float] = None


class InvoicePaymentInfo(CamelModel):
    model_config = ConfigDict(extra="allow")

    method: Optional[str] = None
    transaction_id: Optional[str] = None
    paid_date: Optional[str] = None


# ============================================================================
# Request Schemas
# ============================================================================


class InvoiceCreate(CamelModel):
    """
    Schema for creating an invoice.

    ``due_date`` may be omitted when ``payment_terms`` reads ``Net <days>``.
    """

    client_info: Optional[InvoiceClientInfo] = None
    freelancer_info: Optional[FreelancerInfo] = None
    items: Optional[List[InvoiceItem]] = None
    payment_info: Optional[InvoicePaymentInfo] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None
    due_date: Optional[DateType] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_terms: Optional[str] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    send_email: bool = True


class InvoiceUpdate(CamelModel):
    client_info: Optional[InvoiceClientInfo] = None
    freelancer_info: Optional[FreelancerInfo] = None
    items: Optional[List[InvoiceItem]] = None
    payment_info: Optional[InvoicePaymentInfo] = None
    notes: Optional[str] = None
    due_date: Optional[DateType] = None
    status: Optional[InvoiceStatus] = None
    payment_terms: Optional[str] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


# ============================================================================
# Response Schemas
# ============================================================================


class InvoiceCreatedResponse(CamelModel):
    id: int
    invoice_id: str
    qr_code_url: Optional[str] = None
    date: datetime
    subtotal: float
    tax_total: float
    total: float
    warnings: List[str] = Field(default_factory=list)


class InvoiceView(CamelModel):
    """Decrypted invoice merged with defaults."""

    id: int
    invoice_id: str
    date: datetime
    due_date: Optional[DateType] = None
    status: InvoiceStatus
    payment_terms: str
    currency: str
    client_info: Dict[str, Any]
    freelancer_info: Dict[str, Any]
    items: List[Dict[str, Any]]
    payment_info: Dict[str, Any]
    notes: str = ""
    subtotal: float
    tax_total: float
    total: float
    qr_code_url: Optional[str] = None
    pdf_url: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
