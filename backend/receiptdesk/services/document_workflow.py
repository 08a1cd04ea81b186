"""
Shared steps of the receipt and invoice workflows.

WHAT: The best-effort tail of document creation: QR code, notification
email and client linking, each recorded as a warning when it does not
complete.

WHY: After the record is persisted nothing may fail the creation. A record
with ``qr_code_url`` unset or without a sent email is a normal terminal
state, made visible through its ``warnings`` list instead of silent logs.
"""

import logging
from typing import List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.models.email_template import EmailTemplateType
from receiptdesk.services.client_service import ClientService
from receiptdesk.services.config_service import ConfigService
from receiptdesk.services.encryption_service import FieldCipher, get_field_cipher
from receiptdesk.services.notification_service import NotificationService
from receiptdesk.services.qr_service import QRCodeService, get_qr_service
from receiptdesk.services.sensitive_document import merge_with_defaults

logger = logging.getLogger(__name__)

CLIENT_LINK_FAILED = "client_link_failed"


class DocumentWorkflow:
    """
    Base for ReceiptService and InvoiceService.

    Collaborators are injectable so tests can replace the cipher, the QR
    encoder and the email transport independently.
    """

    def __init__(
        self,
        session: AsyncSession,
        cipher: Optional[FieldCipher] = None,
        qr_service: Optional[QRCodeService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self.session = session
        self.cipher = cipher or get_field_cipher()
        self.qr_service = qr_service or get_qr_service()
        self.notifications = notifications or NotificationService(session)
        self.config_service = ConfigService(session)
        self.client_service = ClientService(session)

    @staticmethod
    def add_warnings(current: Optional[List[str]], new: List[str]) -> List[str]:
        """Merged warning list without duplicates (new list object for JSON tracking)."""
        merged = list(current or [])
        for warning in new:
            if warning not in merged:
                merged.append(warning)
        return merged

    async def fill_freelancer_info(self, data: dict) -> None:
        """Use the stored identity when the submission omits freelancerInfo entirely."""
        if data.get("freelancerInfo") is None:
            data["freelancerInfo"] = await self.config_service.get_freelancer_info()

    async def complete_stored_freelancer_info(self, payload: dict) -> None:
        """
        Fill absent or blank freelancer fields of a decrypted envelope.

        Older envelopes may lack freelancerInfo; an update revalidates the
        whole record, so the gaps are filled from the stored identity first.
        """
        payload["freelancerInfo"] = merge_with_defaults(
            payload.get("freelancerInfo"), await self.config_service.get_freelancer_info()
        )

    async def generate_qr(self, kind: str, public_id: str) -> tuple:
        """
        Returns:
            (qr_code_url value, warnings)
        """
        result = await self.qr_service.generate(kind, public_id)
        return result.value, result.warnings

    async def notify(
        self,
        template_type: EmailTemplateType,
        to_email: Optional[str],
        variables: Mapping[str, str],
        receipt_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
    ) -> List[str]:
        """Send the default notification; returns warnings."""
        if not to_email:
            return []
        outcome = await self.notifications.send_templated(
            template_type,
            to_email,
            variables,
            receipt_id=receipt_id,
            invoice_id=invoice_id,
        )
        return [outcome.warning] if outcome.warning else []

    async def link_client(
        self,
        email: Optional[str],
        receipt_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
        paid_amount: float = 0,
        pending_amount: float = 0,
    ) -> List[str]:
        """
        Link the document to its client; returns warnings.

        The client update runs in a savepoint so a failed flush rolls back
        only the link, never the already persisted document.
        """
        try:
            async with self.session.begin_nested():
                await self.client_service.link_document(
                    email,
                    receipt_id=receipt_id,
                    invoice_id=invoice_id,
                    paid_amount=paid_amount,
                    pending_amount=pending_amount,
                )
        except SQLAlchemyError as e:
            logger.warning(
                f"Client link failed for {receipt_id or invoice_id}: {type(e).__name__}",
                extra={"receipt_id": receipt_id, "invoice_id": invoice_id},
            )
            return [CLIENT_LINK_FAILED]
        return []
