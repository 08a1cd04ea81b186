"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from receiptdesk.models.base import Base, TimestampMixin, PrimaryKeyMixin, SoftDeleteMixin
from receiptdesk.models.receipt import Receipt, PaymentStatus
from receiptdesk.models.invoice import Invoice, InvoiceStatus
from receiptdesk.models.client import Client
from receiptdesk.models.template import Template, TemplateType
from receiptdesk.models.email_template import (
    EmailTemplate,
    EmailTemplateType,
    EmailLog,
    EmailStatus,
)
from receiptdesk.models.currency import Currency
from receiptdesk.models.tax_setting import TaxSetting, TaxType, TaxApplicability
from receiptdesk.models.config_entry import ConfigEntry, FREELANCER_INFO_KEY

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "SoftDeleteMixin",
    "Receipt",
    "PaymentStatus",
    "Invoice",
    "InvoiceStatus",
    "Client",
    "Template",
    "TemplateType",
    "EmailTemplate",
    "EmailTemplateType",
    "EmailLog",
    "EmailStatus",
    "Currency",
    "TaxSetting",
    "TaxType",
    "TaxApplicability",
    "ConfigEntry",
    "FREELANCER_INFO_KEY",
]
