"""
Email template and email log models.

WHAT: Notification layouts keyed by type, and a delivery log.

WHY: Receipt and invoice creation sends the default active template of the
matching type. Each delivery attempt, successful or not, is logged so that
a missing notification can be diagnosed and resent.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List

from sqlalchemy import Boolean, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from receiptdesk.models.base import Base


class EmailTemplateType(str, Enum):
    RECEIPT_SENT = "receipt_sent"
    INVOICE_SENT = "invoice_sent"
    PAYMENT_REMINDER = "payment_reminder"
    PAYMENT_RECEIVED = "payment_received"
    CUSTOM = "custom"


class EmailStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    PENDING = "pending"


class EmailTemplate(Base):
    """
    Email template definition.

    ``subject``, ``html_content`` and ``text_content`` may all contain
    ``{{variable}}`` markers. ``variables`` documents the names the template
    expects; it is informational and not enforced at render time.
    """

    __tablename__ = "email_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    text_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    variables: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<EmailTemplate(id={self.id}, type={self.type}, default={self.is_default})>"


class EmailLog(Base):
    """
    One delivery attempt.

    WHY: The workflow never fails on email errors; this log is where they
    become visible.
    """

    __tablename__ = "email_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    to: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    template_type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=EmailStatus.PENDING.value, index=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    message_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    receipt_id: Mapped[Optional[str]] = mapped_column(String(40), nullable=True, index=True)
    invoice_id: Mapped[Optional[str]] = mapped_column(String(40), nullable=True, index=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<EmailLog(id={self.id}, status={self.status})>"
