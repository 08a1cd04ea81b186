"""
Maintenance tasks.

WHAT: Seeds default currencies and templates and repairs existing records:
missing QR codes and receipts stored without a freelancer section.

WHY: Records created before a template existed, while QR storage was down,
or before the freelancer identity was configured should not need manual
fixing one by one.

HOW: Every task is idempotent. Seeding skips anything already present and
never steals the default flag from an existing default.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.currency import CurrencyDAO
from receiptdesk.dao.invoice import InvoiceDAO
from receiptdesk.dao.receipt import ReceiptDAO
from receiptdesk.dao.template import EmailTemplateDAO, TemplateDAO
from receiptdesk.services.config_service import ConfigService
from receiptdesk.services.default_content import (
    DEFAULT_CURRENCIES,
    DEFAULT_EMAIL_TEMPLATES,
    DEFAULT_TEMPLATES,
)
from receiptdesk.services.encryption_service import FieldCipher, get_field_cipher
from receiptdesk.services.qr_service import QRCodeService, get_qr_service
from receiptdesk.services.sensitive_document import find_missing_fields

logger = logging.getLogger(__name__)

FREELANCER_KEYS = ("freelancerInfo.name", "freelancerInfo.email")


class MaintenanceService:
    def __init__(
        self,
        session: AsyncSession,
        cipher: Optional[FieldCipher] = None,
        qr_service: Optional[QRCodeService] = None,
    ):
        self.session = session
        self.cipher = cipher or get_field_cipher()
        self.qr_service = qr_service or get_qr_service()
        self.currency_dao = CurrencyDAO(session)
        self.template_dao = TemplateDAO(session)
        self.email_template_dao = EmailTemplateDAO(session)
        self.receipt_dao = ReceiptDAO(session)
        self.invoice_dao = InvoiceDAO(session)

    async def seed_defaults(self) -> Dict[str, int]:
        """
        Install default currencies, templates and email templates.

        Returns:
            Number of records created per kind
        """
        created = {"currencies": 0, "templates": 0, "emailTemplates": 0}

        for currency in DEFAULT_CURRENCIES:
            if await self.currency_dao.get_by_code(currency["code"], include_inactive=True) is None:
                await self.currency_dao.create(**currency)
                created["currencies"] += 1

        for template in DEFAULT_TEMPLATES:
            if await self.template_dao.get_default(template["type"]) is None:
                await self.template_dao.create_with_default(**template, is_default=True)
                created["templates"] += 1

        for email_template in DEFAULT_EMAIL_TEMPLATES:
            if await self.email_template_dao.get_default(email_template["type"]) is None:
                await self.email_template_dao.create_with_default(**email_template, is_default=True)
                created["emailTemplates"] += 1

        logger.info("Seeded defaults", extra=created)
        return created

    async def backfill_qr_codes(self) -> Dict[str, int]:
        """
        Generate QR codes for active documents whose QR step never completed.

        Returns:
            Number of receipts and invoices updated
        """
        counts = {"receipts": 0, "invoices": 0}
        for kind, records, id_attr in (
            ("receipt", await self.receipt_dao.get_missing_qr(), "receipt_id"),
            ("invoice", await self.invoice_dao.get_missing_qr(), "invoice_id"),
        ):
            for record in records:
                result = await self.qr_service.generate(kind, getattr(record, id_attr))
                record.qr_code_url = result.value
                counts[f"{kind}s"] += 1
        await self.session.flush()

        logger.info("Backfilled QR codes", extra=counts)
        return counts

    async def backfill_freelancer_info(self) -> int:
        """
        Re-encrypt receipts whose envelope lacks a freelancer name or email,
        filling the section from the stored freelancer identity.

        Returns:
            Number of receipts updated
        """
        identity = await ConfigService(self.session).get_freelancer_info()
        updated = 0
        for receipt in await self.receipt_dao.get_in_range():
            payload = self.cipher.decrypt_payload(receipt.encrypted_data)
            if not find_missing_fields(payload, FREELANCER_KEYS):
                continue
            payload["freelancerInfo"] = {**identity, **{
                k: v for k, v in (payload.get("freelancerInfo") or {}).items() if v
            }}
            receipt.encrypted_data = self.cipher.encrypt_payload(payload)
            updated += 1
        await self.session.flush()

        logger.info(f"Backfilled freelancer info on {updated} receipts", extra={"count": updated})
        return updated
