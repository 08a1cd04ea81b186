"""
Email transport.

WHAT: A provider-agnostic "deliver message" call used by notifications.

WHY: Receipt and invoice emails are best effort. The transport reports
failures as an EmailResult instead of raising, so callers decide whether a
failure matters (for the creation workflow it never does).

HOW: Uses the Resend API over httpx, or a mock provider in development and
tests. Every send runs under ``EMAIL_TIMEOUT_SECONDS``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from receiptdesk.core.config import settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


@dataclass
class EmailMessage:
    """One outgoing notification, already rendered."""

    to_email: str
    subject: str
    html_content: str
    text_content: Optional[str] = None

    from_email: Optional[str] = None
    """Overrides the configured sender when set."""

    reply_to: Optional[str] = None

    email_type: str = "custom"
    """"receipt", "invoice" or "custom"; only used in logs."""

    metadata: Optional[Dict[str, Any]] = None
    """Document ids the send relates to."""


@dataclass
class EmailResult:
    """Outcome of a single delivery attempt."""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    provider: Optional[str] = None


# ============================================================================
# Providers
# ============================================================================


class EmailProvider(ABC):
    """
    A delivery backend.

    Implementations must return an EmailResult for delivery problems rather
    than raising them.
    """

    name: str = "base"

    @abstractmethod
    async def send(self, message: EmailMessage) -> EmailResult:
        """Deliver ``message`` and report how it went."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs."""


class ResendProvider(EmailProvider):
    """Delivers through the Resend HTTP API."""

    name = "resend"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 30.0):
        self._api_key = api_key or settings.RESEND_API_KEY
        self._default_from = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
        self._timeout = timeout

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _payload(self, message: EmailMessage) -> Dict[str, Any]:
        return {
            "from": message.from_email or self._default_from,
            "to": [message.to_email],
            "subject": message.subject,
            "html": message.html_content,
            "text": message.text_content,
            "reply_to": message.reply_to,
        }

    async def send(self, message: EmailMessage) -> EmailResult:
        if not self.is_configured():
            return EmailResult(success=False, error="Resend API key not configured", provider=self.name)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as http:
                response = await http.post(
                    RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json=self._payload(message),
                )
        except httpx.HTTPError as e:
            logger.error(f"Resend request failed: {type(e).__name__}")
            return EmailResult(success=False, error=str(e) or type(e).__name__, provider=self.name)

        if response.status_code not in (200, 201):
            return EmailResult(
                success=False,
                error=f"Resend API error: {response.status_code} - {response.text}",
                provider=self.name,
            )
        return EmailResult(success=True, message_id=response.json().get("id"), provider=self.name)


class MockEmailProvider(EmailProvider):
    """
    Records messages instead of delivering them.

    Used whenever no real provider is configured. Tests read
    ``sent_emails`` and reset it with ``clear_sent_emails``.
    """

    name = "mock"

    sent_emails: List[EmailMessage] = []

    def is_configured(self) -> bool:
        return True

    async def send(self, message: EmailMessage) -> EmailResult:
        logger.info(f"[MOCK EMAIL] {message.email_type} to {message.to_email}: {message.subject}")
        MockEmailProvider.sent_emails.append(message)
        return EmailResult(
            success=True,
            message_id=f"mock-{datetime.utcnow().timestamp()}",
            provider=self.name,
        )

    @classmethod
    def clear_sent_emails(cls):
        cls.sent_emails = []


# ============================================================================
# Email Service
# ============================================================================


class EmailService:
    """
    High-level email sending with logging and a per-send timeout.
    """

    def __init__(self, provider: Optional[EmailProvider] = None, timeout: Optional[float] = None):
        """
        Args:
            provider: Email provider to use (selected from settings if not provided)
            timeout: Seconds allowed per send
        """
        if provider:
            self._provider = provider
        elif settings.EMAIL_PROVIDER == "resend" and settings.RESEND_API_KEY:
            self._provider = ResendProvider()
        else:
            if settings.EMAIL_PROVIDER == "resend":
                logger.warning("Resend selected but RESEND_API_KEY is not set, using mock provider")
            self._provider = MockEmailProvider()
        self._timeout = settings.EMAIL_TIMEOUT_SECONDS if timeout is None else timeout

    @property
    def provider(self) -> EmailProvider:
        return self._provider

    async def send_email(self, message: EmailMessage) -> EmailResult:
        """
        Send an email message. Never raises for delivery problems.

        Returns:
            EmailResult with send status
        """
        logger.info(
            f"Sending {message.email_type} email",
            extra={"email_type": message.email_type, "metadata": message.metadata},
        )

        try:
            result = await asyncio.wait_for(self._provider.send(message), timeout=self._timeout)
        except asyncio.TimeoutError:
            result = EmailResult(
                success=False,
                error=f"Email send timed out after {self._timeout}s",
                provider=self._provider.name,
            )

        if result.success:
            logger.info(
                f"Email sent successfully: {result.message_id}",
                extra={"message_id": result.message_id, "provider": result.provider},
            )
        else:
            logger.error(
                f"Email send failed: {result.error}",
                extra={"email_type": message.email_type, "error": result.error},
            )

        return result


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get or create the global email service instance."""
    global _email_service

    if _email_service is None:
        _email_service = EmailService()

    return _email_service
