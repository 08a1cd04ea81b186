"""
Client model.

WHAT: A customer of the freelancer, with contact details and the ids of the
receipts and invoices issued to them.

WHY: Clients are looked up by email when a receipt or invoice is created so
the document can be linked and ``last_contact`` bumped.
"""

from datetime import datetime
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


class Client(PrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Client record."""

    __tablename__ = "clients"

    client_id: Mapped[str] = Column(
        String(40), unique=True, nullable=False, index=True, comment="Public client identifier"
    )
    name: Mapped[str] = Column(String(255), nullable=False, comment="Client name")
    email: Mapped[str] = Column(String(255), unique=True, nullable=False, index=True, comment="Client email")
    phone: Mapped[str] = Column(String(50), nullable=False, comment="Phone number")
    address: Mapped[str] = Column(Text, nullable=False, comment="Postal address")
    company_name: Mapped[Optional[str]] = Column(String(255), nullable=True, comment="Company name")
    tax_id: Mapped[Optional[str]] = Column(String(100), nullable=True, comment="Tax identifier")
    preferred_currency: Mapped[str] = Column(String(3), nullable=False, default="USD")
    payment_terms: Mapped[str] = Column(String(100), nullable=False, default="Net 30")

    receipts: Mapped[list] = Column(JSON, nullable=False, default=list, comment="Linked receipt ids")
    invoices: Mapped[list] = Column(JSON, nullable=False, default=list, comment="Linked invoice ids")
    total_paid: Mapped[float] = Column(Float, nullable=False, default=0)
    total_pending: Mapped[float] = Column(Float, nullable=False, default=0)

    last_contact: Mapped[datetime] = Column(
        DateTime, nullable=False, default=datetime.utcnow, index=True, comment="Last document or message"
    )
    notes: Mapped[Optional[str]] = Column(Text, nullable=True)

    @classmethod
    def generate_client_id(cls) -> str:
        return generate_document_id("CLI")

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, client_id={self.client_id})>"
