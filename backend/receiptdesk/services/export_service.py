"""
Accounting export.

WHAT: Serializes receipts or invoices dated within an optional range as
QuickBooks JSON, Xero JSON or CSV.

WHY: Freelancers hand their books to accounting software. Envelopes are
decrypted and merged with defaults first, so exported rows carry the same
values the public pages show.
"""

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.exceptions import ResourceNotFoundError
from receiptdesk.dao.invoice import InvoiceDAO
from receiptdesk.dao.receipt import ReceiptDAO
from receiptdesk.models.invoice import InvoiceStatus
from receiptdesk.models.receipt import PaymentStatus
from receiptdesk.services.encryption_service import FieldCipher, get_field_cipher
from receiptdesk.services.sensitive_document import merge_invoice_payload, merge_receipt_payload

logger = logging.getLogger(__name__)

XERO_SALES_ACCOUNT = "200"


class ExportKind(str, Enum):
    RECEIPTS = "receipts"
    INVOICES = "invoices"


class ExportFormat(str, Enum):
    QUICKBOOKS = "quickbooks"
    XERO = "xero"
    CSV = "csv"


@dataclass
class ExportFile:
    """Serialized export ready to be returned as a download."""

    content: str
    media_type: str
    filename: str
    count: int


def _iso_day(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value)[:10]


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if isinstance(value, (date, datetime)) else value


class ExportService:
    def __init__(self, session: AsyncSession, cipher: Optional[FieldCipher] = None):
        self.receipt_dao = ReceiptDAO(session)
        self.invoice_dao = InvoiceDAO(session)
        self.cipher = cipher or get_field_cipher()

    # ------------------------------------------------------------------
    # QuickBooks
    # ------------------------------------------------------------------

    def _quickbooks_receipt(self, receipt, data: Dict[str, Any]) -> Dict[str, Any]:
        payment = data["paymentInfo"]
        project = data["projectDetails"]
        return {
            "TxnID": receipt.receipt_id,
            "TimeCreated": _iso(receipt.date),
            "CustomerRef": {"ListID": receipt.receipt_id, "FullName": data["clientInfo"]["name"]},
            "ItemLineRet": [
                {
                    "ItemRef": {"ListID": "1", "FullName": project["title"]},
                    "Desc": project["description"],
                    "Quantity": 1,
                    "UnitOfMeasure": "Each",
                    "Rate": payment["amount"],
                    "Amount": payment["amount"],
                }
            ],
            "Subtotal": payment["amount"],
            "TotalAmount": payment["amount"],
            "IsPaid": payment["status"] == PaymentStatus.PAID.value,
            "Currency": payment["currency"],
        }

    def _quickbooks_invoice(self, invoice, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "TxnID": invoice.invoice_id,
            "TimeCreated": _iso(invoice.date),
            "CustomerRef": {"ListID": invoice.invoice_id, "FullName": data["clientInfo"]["name"]},
            "InvoiceLineRet": [
                {
                    "TxnLineID": f"{invoice.invoice_id}-{index}",
                    "ItemRef": {"ListID": f"item-{index}", "FullName": item["description"]},
                    "Desc": item["description"],
                    "Quantity": item["quantity"],
                    "Rate": item["rate"],
                    "Amount": item["amount"],
                }
                for index, item in enumerate(data["items"])
            ],
            "Subtotal": invoice.subtotal,
            "TaxTotal": invoice.tax_total,
            "TotalAmount": invoice.total,
            "IsPaid": invoice.status == InvoiceStatus.PAID.value,
            "Currency": invoice.currency,
            "DueDate": _iso(invoice.due_date),
        }

    # ------------------------------------------------------------------
    # Xero
    # ------------------------------------------------------------------

    def _xero_receipt(self, receipt, data: Dict[str, Any]) -> Dict[str, Any]:
        payment = data["paymentInfo"]
        project = data["projectDetails"]
        day = _iso_day(receipt.date)
        return {
            "Type": "ACCREC",
            "InvoiceID": receipt.receipt_id,
            "InvoiceNumber": receipt.receipt_id,
            "Date": day,
            "DueDate": day,
            "Status": "PAID" if payment["status"] == PaymentStatus.PAID.value else "AUTHORISED",
            "Contact": {
                "ContactID": receipt.receipt_id,
                "Name": data["clientInfo"]["name"],
                "EmailAddress": data["clientInfo"]["email"],
            },
            "LineItems": [
                {
                    "Description": f"{project['title']} - {project['description']}",
                    "Quantity": 1,
                    "UnitAmount": payment["amount"],
                    "LineAmount": payment["amount"],
                    "AccountCode": XERO_SALES_ACCOUNT,
                }
            ],
            "SubTotal": payment["amount"],
            "TotalTax": 0,
            "Total": payment["amount"],
            "CurrencyCode": payment["currency"],
        }

    def _xero_invoice(self, invoice, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "Type": "ACCREC",
            "InvoiceID": invoice.invoice_id,
            "InvoiceNumber": invoice.invoice_id,
            "Date": _iso_day(invoice.date),
            "DueDate": _iso_day(invoice.due_date),
            "Status": "PAID" if invoice.status == InvoiceStatus.PAID.value else "AUTHORISED",
            "Contact": {
                "ContactID": invoice.invoice_id,
                "Name": data["clientInfo"]["name"],
                "EmailAddress": data["clientInfo"]["email"],
            },
            "LineItems": [
                {
                    "Description": item["description"],
                    "Quantity": item["quantity"],
                    "UnitAmount": item["rate"],
                    "LineAmount": item["amount"],
                    "TaxAmount": item.get("taxAmount") or 0,
                    "AccountCode": XERO_SALES_ACCOUNT,
                }
                for item in data["items"]
            ],
            "SubTotal": invoice.subtotal,
            "TotalTax": invoice.tax_total,
            "Total": invoice.total,
            "CurrencyCode": invoice.currency,
        }

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    RECEIPT_CSV_HEADERS = [
        "Receipt ID", "Date", "Client Name", "Client Email", "Project Title",
        "Amount", "Currency", "Status", "Payment Method", "Created At",
    ]
    INVOICE_CSV_HEADERS = [
        "Invoice ID", "Date", "Due Date", "Client Name", "Client Email",
        "Subtotal", "Tax Total", "Total", "Currency", "Status", "Created At",
    ]

    def _csv_receipt(self, receipt, data: Dict[str, Any]) -> List[Any]:
        payment = data["paymentInfo"]
        return [
            receipt.receipt_id,
            _iso_day(receipt.date),
            data["clientInfo"]["name"],
            data["clientInfo"]["email"],
            data["projectDetails"]["title"],
            payment["amount"],
            payment["currency"],
            payment["status"],
            payment["method"],
            _iso_day(receipt.created_at),
        ]

    def _csv_invoice(self, invoice, data: Dict[str, Any]) -> List[Any]:
        return [
            invoice.invoice_id,
            _iso_day(invoice.date),
            _iso_day(invoice.due_date),
            data["clientInfo"]["name"],
            data["clientInfo"]["email"],
            invoice.subtotal,
            invoice.tax_total,
            invoice.total,
            invoice.currency,
            invoice.status,
            _iso_day(invoice.created_at),
        ]

    @staticmethod
    def _write_csv(headers: List[str], rows: List[List[Any]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(headers)
        writer.writerows(rows)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def export(
        self,
        kind: ExportKind,
        fmt: ExportFormat,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> ExportFile:
        """
        Build an export file.

        Args:
            kind: receipts or invoices
            fmt: quickbooks, xero or csv
            start / end: Inclusive date range on the document date

        Raises:
            ResourceNotFoundError: No active documents in the range
            DecryptionError: An envelope cannot be decrypted
        """
        kind = ExportKind(kind)
        fmt = ExportFormat(fmt)

        if kind == ExportKind.RECEIPTS:
            records = await self.receipt_dao.get_in_range(start, end)
            merge = merge_receipt_payload
        else:
            records = await self.invoice_dao.get_in_range(start, end)
            merge = merge_invoice_payload

        if not records:
            raise ResourceNotFoundError(
                message="No data found for the specified criteria",
                resource_type=kind.value,
            )

        pairs = [(record, merge(self.cipher.decrypt_payload(record.encrypted_data))) for record in records]
        receipts = kind == ExportKind.RECEIPTS
        stamp = date.today().isoformat()

        if fmt == ExportFormat.CSV:
            row = self._csv_receipt if receipts else self._csv_invoice
            headers = self.RECEIPT_CSV_HEADERS if receipts else self.INVOICE_CSV_HEADERS
            content = self._write_csv(headers, [row(record, data) for record, data in pairs])
            result = ExportFile(content, "text/csv", f"{kind.value}_export_{stamp}.csv", len(pairs))
        else:
            if fmt == ExportFormat.QUICKBOOKS:
                convert = self._quickbooks_receipt if receipts else self._quickbooks_invoice
            else:
                convert = self._xero_receipt if receipts else self._xero_invoice
            content = json.dumps([convert(record, data) for record, data in pairs], indent=2, default=str)
            result = ExportFile(
                content, "application/json", f"{kind.value}_{fmt.value}_{stamp}.json", len(pairs)
            )

        logger.info(
            f"Exported {result.count} {kind.value} as {fmt.value}",
            extra={"kind": kind.value, "format": fmt.value, "count": result.count},
        )
        return result
