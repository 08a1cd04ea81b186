"""
Unit tests for templated notifications.

WHY: Template lookup is strict. Only the default, active template of a type
is used, and a missing one is reported instead of raised.
"""

import asyncio

import pytest
from sqlalchemy import select

from receiptdesk.dao.template import EmailTemplateDAO
from receiptdesk.models.email_template import EmailLog, EmailTemplateType
from receiptdesk.services.email import EmailProvider, EmailResult, EmailService, MockEmailProvider
from receiptdesk.services.notification_service import (
    EMAIL_FAILED,
    EMAIL_TEMPLATE_MISSING,
    NotificationService,
)
from tests.factories import EmailTemplateFactory


class SlowProvider(EmailProvider):
    name = "slow"

    def is_configured(self) -> bool:
        return True

    async def send(self, message):
        await asyncio.sleep(1)
        return EmailResult(success=True, message_id="late", provider=self.name)


@pytest.fixture
def notifications(db_session):
    return NotificationService(db_session, email_service=EmailService(provider=MockEmailProvider()))


class TestSendTemplated:
    @pytest.mark.asyncio
    async def test_renders_subject_body_and_text(self, db_session, notifications):
        await EmailTemplateFactory.create(
            db_session,
            subject="Receipt {{receiptId}}",
            html_content="<p>{{clientName}}</p>",
            text_content="Hello {{clientName}} {{unknown}}",
        )

        outcome = await notifications.send_templated(
            EmailTemplateType.RECEIPT_SENT,
            "sam@client.test",
            {"receiptId": "RCP1", "clientName": "Sam"},
            receipt_id="RCP1",
        )

        assert outcome.sent is True
        assert outcome.warning is None
        assert outcome.message_id.startswith("mock-")
        message = MockEmailProvider.sent_emails[0]
        assert message.subject == "Receipt RCP1"
        assert message.html_content == "<p>Sam</p>"
        assert message.text_content == "Hello Sam {{unknown}}"
        assert message.email_type == "receipt_sent"

    @pytest.mark.asyncio
    async def test_plain_text_parts_are_unescaped(self, db_session, notifications):
        """
        Test escaped variables in the subject and text part.

        WHY: Document variables are HTML-escaped. Only the HTML body should
        keep the entities; a subject must read "Tom & Jerry", not "&amp;".
        """
        await EmailTemplateFactory.create(
            db_session,
            subject="Receipt for {{clientName}}",
            html_content="<p>{{clientName}}</p>",
            text_content="Hi {{clientName}}",
        )

        await notifications.send_templated(
            EmailTemplateType.RECEIPT_SENT, "sam@client.test", {"clientName": "Tom &amp; Jerry"}
        )

        message = MockEmailProvider.sent_emails[0]
        assert message.subject == "Receipt for Tom & Jerry"
        assert message.text_content == "Hi Tom & Jerry"
        assert message.html_content == "<p>Tom &amp; Jerry</p>"

    @pytest.mark.asyncio
    async def test_missing_template(self, notifications):
        outcome = await notifications.send_templated(EmailTemplateType.RECEIPT_SENT, "sam@client.test", {})
        assert outcome.sent is False
        assert outcome.warning == EMAIL_TEMPLATE_MISSING
        assert MockEmailProvider.sent_emails == []

    @pytest.mark.asyncio
    async def test_non_default_template_is_not_a_fallback(self, db_session, notifications):
        await EmailTemplateFactory.create(db_session, is_default=False)

        outcome = await notifications.send_templated(EmailTemplateType.RECEIPT_SENT, "sam@client.test", {})

        assert outcome.warning == EMAIL_TEMPLATE_MISSING

    @pytest.mark.asyncio
    async def test_inactive_default_is_not_used(self, db_session, notifications):
        template = await EmailTemplateFactory.create(db_session)
        await EmailTemplateDAO(db_session).soft_delete(template.id)

        outcome = await notifications.send_templated(EmailTemplateType.RECEIPT_SENT, "sam@client.test", {})

        assert outcome.warning == EMAIL_TEMPLATE_MISSING

    @pytest.mark.asyncio
    async def test_timeout_is_a_failed_send(self, db_session):
        await EmailTemplateFactory.create(db_session)
        notifications = NotificationService(
            db_session, email_service=EmailService(provider=SlowProvider(), timeout=0.01)
        )

        outcome = await notifications.send_templated(
            EmailTemplateType.RECEIPT_SENT, "sam@client.test", {}, receipt_id="RCP9"
        )

        assert outcome.sent is False
        assert outcome.warning == EMAIL_FAILED
        assert "timed out" in outcome.error
        log = (await db_session.execute(select(EmailLog))).scalar_one()
        assert log.status == "failed"
        assert log.sent_at is None
        assert log.receipt_id == "RCP9"
