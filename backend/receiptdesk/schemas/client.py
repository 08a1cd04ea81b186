"""Client schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from receiptdesk.schemas.common import CamelModel


class ClientCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    address: str = Field(..., min_length=1)
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    preferred_currency: str = Field(default="USD", min_length=3, max_length=3)
    payment_terms: str = "Net 30"
    notes: Optional[str] = None


class ClientUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    preferred_currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    payment_terms: Optional[str] = None
    notes: Optional[str] = None


class ClientResponse(CamelModel):
    id: int
    client_id: str
    name: str
    email: str
    phone: str
    address: str
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    preferred_currency: str
    payment_terms: str
    receipts: List[str] = Field(default_factory=list)
    invoices: List[str] = Field(default_factory=list)
    total_paid: float
    total_pending: float
    last_contact: datetime
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
