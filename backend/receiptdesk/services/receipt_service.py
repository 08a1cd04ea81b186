"""
Receipt workflow.

WHAT: Creates, reads, updates and soft-deletes receipts.

WHY: Receipt creation is a multi-step workflow where only the first part is
transactional:

1. fill the FROM side from configuration if omitted, validate
2. generate the public receipt id
3. encrypt {clientInfo, freelancerInfo, paymentInfo, projectDetails}
4. persist
5. QR code for the public URL (best effort, with fallbacks)
6. persist the QR result (second write)
7. notification email (best effort)
8. link to the client record (best effort)

Failures in steps 5-8 are recorded in ``warnings`` and never roll back the
receipt.

HOW: Reads decrypt the envelope and merge it leaf by leaf with defaults,
so callers always get a complete object. A DecryptionError on read
propagates as an internal error.
"""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from receiptdesk.core.exceptions import ReceiptNotFoundError, ValidationError
from receiptdesk.dao.base import Page
from receiptdesk.dao.receipt import ReceiptDAO
from receiptdesk.models.email_template import EmailTemplateType
from receiptdesk.models.receipt import PaymentStatus, Receipt
from receiptdesk.services.document_renderer import receipt_variables
from receiptdesk.services.document_workflow import DocumentWorkflow
from receiptdesk.services.qr_service import public_document_url
from receiptdesk.services.sensitive_document import (
    RECEIPT_REQUIRED_FIELDS,
    RECEIPT_SECTIONS,
    merge_receipt_payload,
    pick_sections,
    require_fields,
)

logger = logging.getLogger(__name__)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes or ISO strings; None passes through."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(message=f"Invalid date: {value}", missing_fields=["date"])


def _normalize_payment(payment: Dict[str, Any]) -> Dict[str, Any]:
    """Canonical status value and upper-case currency."""
    try:
        status = PaymentStatus(getattr(payment["status"], "value", payment["status"])).value
    except ValueError:
        raise ValidationError(
            message=f"Invalid payment status: {payment['status']}",
            invalid_fields=["paymentInfo.status"],
        )
    return {
        **payment,
        "amount": float(payment["amount"]),
        "currency": str(payment["currency"]).upper(),
        "status": status,
    }


class ReceiptService(DocumentWorkflow):
    """Receipt workflow and read path."""

    def __init__(self, session, **collaborators):
        super().__init__(session, **collaborators)
        self.receipt_dao = ReceiptDAO(session)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_receipt(self, data: Dict[str, Any], send_email: bool = True) -> Receipt:
        """
        Run the creation workflow.

        Args:
            data: camelCase sections (clientInfo, freelancerInfo,
                projectDetails, paymentInfo) and optional date
            send_email: Send the default ``receipt_sent`` email to the client

        Returns:
            The persisted receipt (``warnings`` lists incomplete secondary steps)

        Raises:
            ValidationError: If required fields are missing
        """
        data = copy.deepcopy(dict(data))
        await self.fill_freelancer_info(data)
        require_fields(data, RECEIPT_REQUIRED_FIELDS, "receipt")

        data["paymentInfo"] = _normalize_payment(data["paymentInfo"])
        payment = data["paymentInfo"]
        payload = pick_sections(data, RECEIPT_SECTIONS)

        receipt = await self.receipt_dao.create(
            receipt_id=Receipt.generate_receipt_id(),
            date=coerce_datetime(data.get("date")) or datetime.utcnow(),
            amount=payment["amount"],
            currency=payment["currency"],
            payment_method=payment["method"],
            payment_status=payment["status"],
            project_title=data["projectDetails"]["title"],
            encrypted_data=self.cipher.encrypt_payload(payload),
            warnings=[],
        )
        logger.info(f"Receipt created: {receipt.receipt_id}", extra={"receipt_id": receipt.receipt_id})

        qr_value, warnings = await self.generate_qr("receipt", receipt.receipt_id)
        receipt.qr_code_url = qr_value
        receipt.warnings = self.add_warnings(receipt.warnings, warnings)
        receipt = await self.receipt_dao.save(receipt)

        secondary: List[str] = []
        client_email = data["clientInfo"].get("email")
        if send_email:
            view = self._build_view(receipt, merge_receipt_payload(payload))
            secondary += await self.notify(
                EmailTemplateType.RECEIPT_SENT,
                client_email,
                receipt_variables(view, public_document_url("receipt", receipt.receipt_id)),
                receipt_id=receipt.receipt_id,
            )

        paid = payment["status"] == PaymentStatus.PAID.value
        secondary += await self.link_client(
            client_email,
            receipt_id=receipt.receipt_id,
            paid_amount=payment["amount"] if paid else 0,
            pending_amount=0 if paid else payment["amount"],
        )

        if secondary:
            receipt.warnings = self.add_warnings(receipt.warnings, secondary)
            receipt = await self.receipt_dao.save(receipt)

        return receipt

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def _get_active(self, receipt_id: str) -> Receipt:
        receipt = await self.receipt_dao.get_by_receipt_id(receipt_id)
        if receipt is None:
            raise ReceiptNotFoundError(receipt_id=receipt_id)
        return receipt

    def decrypt_receipt(self, receipt: Receipt) -> Dict[str, Any]:
        """
        Decrypted envelope merged with defaults.

        Raises:
            DecryptionError: If the envelope cannot be decrypted or parsed
        """
        return merge_receipt_payload(self.cipher.decrypt_payload(receipt.encrypted_data))

    @staticmethod
    def _build_view(receipt: Receipt, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": receipt.id,
            "receiptId": receipt.receipt_id,
            "date": receipt.date,
            **payload,
            "qrCodeUrl": receipt.qr_code_url,
            "pdfUrl": receipt.pdf_url,
            "warnings": list(receipt.warnings or []),
            "createdAt": receipt.created_at,
            "updatedAt": receipt.updated_at,
        }

    def to_view(self, receipt: Receipt) -> Dict[str, Any]:
        return self._build_view(receipt, self.decrypt_receipt(receipt))

    async def get_receipt(self, receipt_id: str) -> Dict[str, Any]:
        """
        Complete decrypted view of an active receipt.

        Raises:
            ReceiptNotFoundError: Unknown or soft-deleted receipt
            DecryptionError: Corrupted envelope or key mismatch
        """
        return self.to_view(await self._get_active(receipt_id))

    async def list_receipts(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Page[Receipt]]:
        """Decrypted views of one page of active receipts, newest first."""
        result = await self.receipt_dao.paginate(
            page=page,
            page_size=page_size,
            filters={"payment_status": status},
            search=search,
        )
        return [self.to_view(receipt) for receipt in result.items], result

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    async def update_receipt(self, receipt_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge ``patch`` sections over the stored ones and re-encrypt.

        Raises:
            ReceiptNotFoundError: Unknown or soft-deleted receipt
            ValidationError: If the merged receipt misses required fields
        """
        receipt = await self._get_active(receipt_id)
        current = self.cipher.decrypt_payload(receipt.encrypted_data)
        await self.complete_stored_freelancer_info(current)

        changed_sections = [s for s in RECEIPT_SECTIONS if patch.get(s) is not None]
        for section in changed_sections:
            current[section] = {**(current.get(section) or {}), **patch[section]}

        if changed_sections:
            require_fields(current, RECEIPT_REQUIRED_FIELDS, "receipt")
            current["paymentInfo"] = _normalize_payment(current["paymentInfo"])
            payment = current["paymentInfo"]
            receipt.amount = payment["amount"]
            receipt.currency = payment["currency"]
            receipt.payment_method = payment["method"]
            receipt.payment_status = payment["status"]
            receipt.project_title = current["projectDetails"]["title"]
            receipt.encrypted_data = self.cipher.encrypt_payload(pick_sections(current, RECEIPT_SECTIONS))

        if patch.get("date") is not None:
            receipt.date = coerce_datetime(patch["date"])

        receipt = await self.receipt_dao.save(receipt)
        logger.info(
            f"Receipt updated: {receipt_id}",
            extra={"receipt_id": receipt_id, "sections": changed_sections},
        )
        return self.to_view(receipt)

    async def delete_receipt(self, receipt_id: str) -> None:
        """
        Soft delete. Unknown and already-inactive receipts raise NotFound.
        """
        receipt = await self._get_active(receipt_id)
        await self.receipt_dao.soft_delete(receipt.id)
        logger.info(f"Receipt deactivated: {receipt_id}", extra={"receipt_id": receipt_id})
