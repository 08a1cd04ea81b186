"""
Invoice model for billing.

WHAT: An invoice with line items, derived totals and a payment workflow status.

WHY: Line items and both parties' contact details are sensitive and live in
the encrypted envelope. Totals are plaintext because listing, analytics and
export need them; they are always recomputed from the items on the server.

HOW: ``encrypted_data`` holds ``{clientInfo, freelancerInfo, items,
paymentInfo, notes}``. ``subtotal``/``tax_total``/``total`` are written only
by ``receiptdesk.services.invoice_service.compute_totals``.
"""

from datetime import date as DateType, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, Date, DateTime, Float, JSON, String, Text
from sqlalchemy.orm import Mapped

from receiptdesk.models.base import (
    Base,
    PrimaryKeyMixin,
    SoftDeleteMixin,
    TimestampMixin,
    generate_document_id,
)


class InvoiceStatus(str, Enum):
    """
    Invoice workflow status.

    - DRAFT: created, not yet sent
    - SENT: delivered to the client
    - PAID: payment received
    - OVERDUE: past due date without payment (set by the scheduler sweep)
    - CANCELLED: voided
    """

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


DEFAULT_PAYMENT_TERMS = "Net 30"


class Invoice(PrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Invoice record."""

    __tablename__ = "invoices"

    invoice_id: Mapped[str] = Column(
        String(40),
        unique=True,
        nullable=False,
        index=True,
        comment="Public invoice identifier (INV + timestamp + suffix)",
    )
    date: Mapped[datetime] = Column(DateTime, nullable=False, default=datetime.utcnow, comment="Issue date")
    due_date: Mapped[Optional[DateType]] = Column(Date, nullable=True, index=True, comment="Payment due date")

    status: Mapped[str] = Column(
        String(20),
        nullable=False,
        default=InvoiceStatus.DRAFT.value,
        index=True,
        comment="draft, sent, paid, overdue or cancelled",
    )
    payment_terms: Mapped[str] = Column(
        String(100), nullable=False, default=DEFAULT_PAYMENT_TERMS, comment="Payment terms text"
    )
    currency: Mapped[str] = Column(String(3), nullable=False, default="USD", comment="ISO currency code")

    subtotal: Mapped[float] = Column(Float, nullable=False, default=0, comment="Sum of item amounts")
    tax_total: Mapped[float] = Column(Float, nullable=False, default=0, comment="Sum of item tax amounts")
    total: Mapped[float] = Column(Float, nullable=False, default=0, comment="subtotal + tax_total")

    encrypted_data: Mapped[str] = Column(
        Text,
        nullable=False,
        comment="Encrypted envelope of client, freelancer, items, payment info and notes",
    )

    qr_code_url: Mapped[Optional[str]] = Column(Text, nullable=True, comment="QR image URL or data URL")
    pdf_url: Mapped[Optional[str]] = Column(Text, nullable=True, comment="Stored PDF URL")
    warnings: Mapped[list] = Column(
        JSON,
        nullable=False,
        default=list,
        comment="Secondary workflow steps that did not complete",
    )

    @classmethod
    def generate_invoice_id(cls) -> str:
        return generate_document_id("INV")

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, invoice_id={self.invoice_id}, status={self.status})>"
