"""
Receipt model.

WHAT: A payment receipt issued by the freelancer to a client.

WHY: Receipts are the primary document of the system. Names, addresses and
emails of both parties, plus payment and project detail, live only in the
encrypted envelope. Plaintext columns hold what listing, filtering and
export need: identifiers, status, amount, currency, method and title.

HOW: ``encrypted_data`` holds a FieldCipher envelope of
``{clientInfo, freelancerInfo, paymentInfo, projectDetails}``.
``qr_code_url`` is filled by a second write after the record exists.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, Float, JSON, String, Text
from sqlalchemy.orm import Mapped

from receiptdesk.models.base import (
    Base,
    PrimaryKeyMixin,
    SoftDeleteMixin,
    TimestampMixin,
    generate_document_id,
)


class PaymentStatus(str, Enum):
    """Payment state recorded on a receipt."""

    PAID = "paid"
    PENDING = "pending"
    PARTIAL = "partial"


class Receipt(PrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """
    Receipt record.

    Attributes:
        receipt_id: Public identifier (RCP...), used in QR links
        date: Receipt date
        amount / currency / payment_method / payment_status: plaintext copies
            of non-sensitive payment fields for filtering and export
        project_title: plaintext title for search
        encrypted_data: envelope of the sensitive sub-document
        qr_code_url: QR image URL or data URL (None until generated)
        pdf_url: stored PDF location, if any
        warnings: secondary workflow steps that did not complete
    """

    __tablename__ = "receipts"

    receipt_id: Mapped[str] = Column(
        String(40),
        unique=True,
        nullable=False,
        index=True,
        comment="Public receipt identifier (RCP + timestamp + suffix)",
    )
    date: Mapped[datetime] = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        comment="Receipt date",
    )

    amount: Mapped[float] = Column(Float, nullable=False, default=0, comment="Payment amount")
    currency: Mapped[str] = Column(String(3), nullable=False, default="USD", comment="ISO currency code")
    payment_method: Mapped[Optional[str]] = Column(String(50), nullable=True, comment="Payment method")
    payment_status: Mapped[str] = Column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value,
        index=True,
        comment="paid, pending or partial",
    )
    project_title: Mapped[Optional[str]] = Column(
        String(255), nullable=True, comment="Project title (searchable)"
    )

    encrypted_data: Mapped[str] = Column(
        Text,
        nullable=False,
        comment="Encrypted envelope of client, freelancer, payment and project info",
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
    def generate_receipt_id(cls) -> str:
        return generate_document_id("RCP")

    def __repr__(self) -> str:
        return f"<Receipt(id={self.id}, receipt_id={self.receipt_id}, status={self.payment_status})>"
