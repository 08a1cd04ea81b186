"""
Invoice workflow.

WHAT: Creates, reads, updates and soft-deletes invoices.

WHY: Same best-effort workflow as receipts, plus derived money fields.
Per item ``amount = quantity * rate`` and ``taxAmount = amount * taxRate / 100``;
``subtotal``, ``taxTotal`` and ``total`` are sums over the items. They are
recomputed on every create and on every update that touches items;
client-supplied values are discarded.
"""

import copy
import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from receiptdesk.core.exceptions import InvoiceNotFoundError, ValidationError
from receiptdesk.dao.base import Page
from receiptdesk.dao.invoice import InvoiceDAO
from receiptdesk.models.email_template import EmailTemplateType
from receiptdesk.models.invoice import DEFAULT_PAYMENT_TERMS, Invoice, InvoiceStatus
from receiptdesk.services.document_renderer import invoice_variables
from receiptdesk.services.document_workflow import DocumentWorkflow
from receiptdesk.services.qr_service import public_document_url
from receiptdesk.services.receipt_service import coerce_datetime
from receiptdesk.services.sensitive_document import (
    INVOICE_REQUIRED_FIELDS,
    INVOICE_SECTIONS,
    ITEM_REQUIRED_FIELDS,
    find_missing_fields,
    merge_invoice_payload,
    pick_sections,
    require_fields,
)

logger = logging.getLogger(__name__)

_NET_TERMS = re.compile(r"^\s*net\s*(\d+)\s*$", re.IGNORECASE)


def compute_totals(items: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], float, float, float]:
    """
    Recompute line amounts and invoice totals.

    Args:
        items: Line items with quantity, rate and optional taxRate

    Returns:
        (items with amount/taxAmount set, subtotal, tax_total, total)

    Example:
        >>> _, subtotal, tax, total = compute_totals(
        ...     [{"description": "Design", "quantity": 2, "rate": 100, "taxRate": 10}]
        ... )
        >>> (subtotal, tax, total)
        (200.0, 20.0, 220.0)
    """
    computed = []
    subtotal = 0.0
    tax_total = 0.0
    for item in items:
        quantity = float(item.get("quantity") or 0)
        rate = float(item.get("rate") or 0)
        tax_rate = float(item.get("taxRate") or 0)
        amount = quantity * rate
        tax_amount = amount * tax_rate / 100
        subtotal += amount
        tax_total += tax_amount
        computed.append(
            {
                **item,
                "quantity": quantity,
                "rate": rate,
                "taxRate": tax_rate,
                "amount": amount,
                "taxAmount": tax_amount,
            }
        )
    return computed, subtotal, tax_total, subtotal + tax_total


def due_date_from_terms(issued: datetime, payment_terms: Optional[str]) -> Optional[date]:
    """``Net 30`` issued on Jan 1 is due Jan 31; other terms give None."""
    match = _NET_TERMS.match(payment_terms or "")
    if not match:
        return None
    return (issued + timedelta(days=int(match.group(1)))).date()


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or (isinstance(value, date) and not isinstance(value, datetime)):
        return value
    if isinstance(value, datetime):
        return value.date()
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(message=f"Invalid due date: {value}", missing_fields=["dueDate"])


def _missing_item_fields(items: Any) -> List[str]:
    if not isinstance(items, list) or not items:
        return ["items"]
    missing = []
    for index, item in enumerate(items):
        for name in find_missing_fields(item if isinstance(item, dict) else {}, ITEM_REQUIRED_FIELDS):
            missing.append(f"items[{index}].{name}")
    return missing


def _status_value(status: Any) -> str:
    try:
        return InvoiceStatus(getattr(status, "value", status)).value
    except ValueError:
        raise ValidationError(message=f"Invalid invoice status: {status}", invalid_fields=["status"])


class InvoiceService(DocumentWorkflow):
    """Invoice workflow and read path."""

    def __init__(self, session, **collaborators):
        super().__init__(session, **collaborators)
        self.invoice_dao = InvoiceDAO(session)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_invoice(self, data: Dict[str, Any], send_email: bool = True) -> Invoice:
        """
        Run the creation workflow.

        Raises:
            ValidationError: Missing client/freelancer fields, no items,
                incomplete items, or no due date derivable from the terms
        """
        data = copy.deepcopy(dict(data))
        await self.fill_freelancer_info(data)

        issued = coerce_datetime(data.get("date")) or datetime.utcnow()
        payment_terms = data.get("paymentTerms") or DEFAULT_PAYMENT_TERMS
        due = _coerce_date(data.get("dueDate")) or due_date_from_terms(issued, payment_terms)

        extra_missing = _missing_item_fields(data.get("items"))
        if due is None:
            extra_missing.append("dueDate")
        require_fields(data, INVOICE_REQUIRED_FIELDS, "invoice", extra_missing)

        items, subtotal, tax_total, total = compute_totals(data["items"])
        data["items"] = items
        data.setdefault("paymentInfo", {})
        payload = pick_sections(data, INVOICE_SECTIONS)

        invoice = await self.invoice_dao.create(
            invoice_id=Invoice.generate_invoice_id(),
            date=issued,
            due_date=due,
            status=_status_value(data.get("status") or InvoiceStatus.DRAFT),
            payment_terms=payment_terms,
            currency=(data.get("currency") or "USD").upper(),
            subtotal=subtotal,
            tax_total=tax_total,
            total=total,
            encrypted_data=self.cipher.encrypt_payload(payload),
            warnings=[],
        )
        logger.info(
            f"Invoice created: {invoice.invoice_id}",
            extra={"invoice_id": invoice.invoice_id, "total": total},
        )

        qr_value, warnings = await self.generate_qr("invoice", invoice.invoice_id)
        invoice.qr_code_url = qr_value
        invoice.warnings = self.add_warnings(invoice.warnings, warnings)
        invoice = await self.invoice_dao.save(invoice)

        secondary: List[str] = []
        client_email = data["clientInfo"].get("email")
        if send_email:
            view = self._build_view(invoice, merge_invoice_payload(payload))
            secondary += await self.notify(
                EmailTemplateType.INVOICE_SENT,
                client_email,
                invoice_variables(view, public_document_url("invoice", invoice.invoice_id)),
                invoice_id=invoice.invoice_id,
            )

        paid = invoice.status == InvoiceStatus.PAID.value
        secondary += await self.link_client(
            client_email,
            invoice_id=invoice.invoice_id,
            paid_amount=total if paid else 0,
            pending_amount=0 if paid else total,
        )

        if secondary:
            invoice.warnings = self.add_warnings(invoice.warnings, secondary)
            invoice = await self.invoice_dao.save(invoice)

        return invoice

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def _get_active(self, invoice_id: str) -> Invoice:
        invoice = await self.invoice_dao.get_by_invoice_id(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id=invoice_id)
        return invoice

    @staticmethod
    def _build_view(invoice: Invoice, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": invoice.id,
            "invoiceId": invoice.invoice_id,
            "date": invoice.date,
            "dueDate": invoice.due_date,
            "status": invoice.status,
            "paymentTerms": invoice.payment_terms,
            "currency": invoice.currency,
            **payload,
            "subtotal": invoice.subtotal,
            "taxTotal": invoice.tax_total,
            "total": invoice.total,
            "qrCodeUrl": invoice.qr_code_url,
            "pdfUrl": invoice.pdf_url,
            "warnings": list(invoice.warnings or []),
            "createdAt": invoice.created_at,
            "updatedAt": invoice.updated_at,
        }

    def to_view(self, invoice: Invoice) -> Dict[str, Any]:
        """
        Raises:
            DecryptionError: Corrupted envelope or key mismatch
        """
        payload = merge_invoice_payload(self.cipher.decrypt_payload(invoice.encrypted_data))
        return self._build_view(invoice, payload)

    async def get_invoice(self, invoice_id: str) -> Dict[str, Any]:
        return self.to_view(await self._get_active(invoice_id))

    async def list_invoices(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Page[Invoice]]:
        result = await self.invoice_dao.paginate(
            page=page,
            page_size=page_size,
            filters={"status": status},
            search=search,
        )
        return [self.to_view(invoice) for invoice in result.items], result

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    async def update_invoice(self, invoice_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update.

        Item lists replace the stored list and trigger a totals recompute.
        Contact and payment sections merge field by field. The envelope is
        re-encrypted whenever any sensitive section changed.
        """
        invoice = await self._get_active(invoice_id)
        current = self.cipher.decrypt_payload(invoice.encrypted_data)
        await self.complete_stored_freelancer_info(current)

        changed = []
        for section in ("clientInfo", "freelancerInfo", "paymentInfo"):
            if patch.get(section) is not None:
                current[section] = {**(current.get(section) or {}), **patch[section]}
                changed.append(section)

        if patch.get("items") is not None:
            missing = _missing_item_fields(patch["items"])
            if missing:
                raise ValidationError(
                    message=f"Missing required invoice fields: {', '.join(missing)}",
                    missing_fields=missing,
                )
            items, subtotal, tax_total, total = compute_totals(patch["items"])
            current["items"] = items
            invoice.subtotal = subtotal
            invoice.tax_total = tax_total
            invoice.total = total
            changed.append("items")

        if patch.get("notes") is not None:
            current["notes"] = patch["notes"]
            changed.append("notes")

        if changed:
            require_fields(current, INVOICE_REQUIRED_FIELDS, "invoice")
            invoice.encrypted_data = self.cipher.encrypt_payload(pick_sections(current, INVOICE_SECTIONS))

        if patch.get("status") is not None:
            invoice.status = _status_value(patch["status"])
        if patch.get("dueDate") is not None:
            invoice.due_date = _coerce_date(patch["dueDate"])
        if patch.get("paymentTerms") is not None:
            invoice.payment_terms = patch["paymentTerms"]
        if patch.get("currency") is not None:
            invoice.currency = patch["currency"].upper()

        invoice = await self.invoice_dao.save(invoice)
        logger.info(
            f"Invoice updated: {invoice_id}",
            extra={"invoice_id": invoice_id, "sections": changed},
        )
        return self.to_view(invoice)

    async def delete_invoice(self, invoice_id: str) -> None:
        invoice = await self._get_active(invoice_id)
        await self.invoice_dao.soft_delete(invoice.id)
        logger.info(f"Invoice deactivated: {invoice_id}", extra={"invoice_id": invoice_id})

    async def mark_overdue(self, today: Optional[date] = None) -> int:
        """
        Move sent invoices past their due date to ``overdue``.

        Returns:
            Number of invoices updated
        """
        invoices = await self.invoice_dao.get_overdue_candidates(today)
        for invoice in invoices:
            invoice.status = InvoiceStatus.OVERDUE.value
        await self.session.flush()
        if invoices:
            logger.info(f"Marked {len(invoices)} invoices overdue", extra={"count": len(invoices)})
        return len(invoices)
