"""
Document template model.

WHAT: HTML layouts used to render receipts and invoices.

WHY: The freelancer can restyle documents without a deploy. Exactly one
active default exists per ``type``; see ``receiptdesk.dao.defaults``.

HOW: ``html_template`` contains ``{{variable}}`` markers rendered by
``receiptdesk.services.template_engine.render``.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List

from sqlalchemy import Boolean, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column


from receiptdesk.models.base import Base


class TemplateType(str, Enum):
    RECEIPT = "receipt"
    INVOICE = "invoice"


class Template(Base):
    """Receipt or invoice layout."""

    __tablename__ = "templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    html_template: Mapped[str] = mapped_column(Text, nullable=False)
    css_styles: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Field definitions shown by the editor: [{name, label, type, required}]
    fields: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)

    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Template(id={self.id}, type={self.type}, default={self.is_default})>"
