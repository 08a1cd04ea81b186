"""
Tax setting model.

WHY: Invoices default their per-item tax rate from the region's default
setting. At most one default exists per ``region``.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from receiptdesk.models.base import Base


class TaxType(str, Enum):
    GST = "GST"
    VAT = "VAT"
    SALES_TAX = "sales_tax"
    INCOME_TAX = "income_tax"
    OTHER = "other"


class TaxApplicability(str, Enum):
    RECEIPTS = "receipts"
    INVOICES = "invoices"
    BOTH = "both"


class TaxSetting(Base):
    __tablename__ = "tax_settings"
    __table_args__ = (
        CheckConstraint("rate >= 0 AND rate <= 100", name="ck_tax_settings_rate_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    tax_type: Mapped[str] = mapped_column(String(20), nullable=False)
    rate: Mapped[float] = mapped_column(Float, nullable=False)
    applicable_to: Mapped[str] = mapped_column(String(20), nullable=False, default=TaxApplicability.BOTH.value)

    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<TaxSetting(id={self.id}, region={self.region}, rate={self.rate})>"
