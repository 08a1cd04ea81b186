"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from receiptdesk.dao.base import BaseDAO, Page
from receiptdesk.dao.defaults import DefaultSingletonDAO
from receiptdesk.dao.receipt import ReceiptDAO
from receiptdesk.dao.invoice import InvoiceDAO
from receiptdesk.dao.client import ClientDAO
from receiptdesk.dao.template import TemplateDAO, EmailTemplateDAO, EmailLogDAO
from receiptdesk.dao.currency import CurrencyDAO, TaxSettingDAO
from receiptdesk.dao.config_entry import ConfigDAO

__all__ = [
    "BaseDAO",
    "Page",
    "DefaultSingletonDAO",
    "ReceiptDAO",
    "InvoiceDAO",
    "ClientDAO",
    "TemplateDAO",
    "EmailTemplateDAO",
    "EmailLogDAO",
    "CurrencyDAO",
    "TaxSettingDAO",
    "ConfigDAO",
]
