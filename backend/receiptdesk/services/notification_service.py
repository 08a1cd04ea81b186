"""
Templated document notifications.

WHAT: Renders the default EmailTemplate of a type with a variable map,
delivers it and records the attempt in the email log.

WHY: Receipt and invoice creation sends a notification as a secondary step.
Nothing here raises for a missing template or a failed delivery: the outcome
is returned as a warning code so the workflow can record it on the record.

HOW: Strict template lookup (default AND active, no fallback to another
template of the type), literal variable substitution, EmailService delivery
under its timeout, one EmailLog row per attempt.
"""

import html
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.template import EmailLogDAO, EmailTemplateDAO
from receiptdesk.models.email_template import EmailStatus, EmailTemplateType
from receiptdesk.services.email import EmailMessage, EmailService, get_email_service
from receiptdesk.services.template_engine import render

logger = logging.getLogger(__name__)

EMAIL_TEMPLATE_MISSING = "email_template_missing"
EMAIL_FAILED = "email_failed"


@dataclass
class NotificationOutcome:
    """What happened to one notification."""

    sent: bool
    warning: Optional[str] = None
    message_id: Optional[str] = None
    error: Optional[str] = None


class NotificationService:
    """Sends templated emails about receipts and invoices."""

    def __init__(self, session: AsyncSession, email_service: Optional[EmailService] = None):
        self.session = session
        self.template_dao = EmailTemplateDAO(session)
        self.log_dao = EmailLogDAO(session)
        self.email_service = email_service or get_email_service()

    async def send_templated(
        self,
        template_type: EmailTemplateType,
        to_email: str,
        variables: Mapping[str, str],
        receipt_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
    ) -> NotificationOutcome:
        """
        Render and send the default template of ``template_type``.

        Args:
            template_type: Which default template to use
            to_email: Recipient
            variables: Template variables (already formatted strings)
            receipt_id / invoice_id: Document the email is about, for the log

        Returns:
            NotificationOutcome; ``warning`` is set when nothing was delivered
        """
        template = await self.template_dao.get_default(template_type.value)
        if template is None:
            logger.warning(
                f"No default active {template_type.value} email template, skipping email",
                extra={"receipt_id": receipt_id, "invoice_id": invoice_id},
            )
            return NotificationOutcome(sent=False, warning=EMAIL_TEMPLATE_MISSING)

        # Variables arrive HTML-escaped; subject and text part are plain text
        plain = {name: html.unescape(value) for name, value in variables.items()}
        subject = render(template.subject, plain)
        message = EmailMessage(
            to_email=to_email,
            subject=subject,
            html_content=render(template.html_content, variables),
            text_content=render(template.text_content, plain) if template.text_content else None,
            email_type=template_type.value,
            metadata={"receipt_id": receipt_id, "invoice_id": invoice_id},
        )

        result = await self.email_service.send_email(message)

        try:
            async with self.session.begin_nested():
                await self.log_dao.create(
                    to=to_email,
                    subject=subject,
                    template_type=template_type.value,
                    status=EmailStatus.SENT.value if result.success else EmailStatus.FAILED.value,
                    error=result.error,
                    message_id=result.message_id,
                    receipt_id=receipt_id,
                    invoice_id=invoice_id,
                    sent_at=datetime.utcnow() if result.success else None,
                )
        except SQLAlchemyError as e:
            # Savepoint rolled back; the session stays usable for the document
            logger.error(
                f"Email log write failed: {type(e).__name__}",
                extra={"receipt_id": receipt_id, "invoice_id": invoice_id},
            )

        if not result.success:
            return NotificationOutcome(sent=False, warning=EMAIL_FAILED, error=result.error)
        return NotificationOutcome(sent=True, message_id=result.message_id)
