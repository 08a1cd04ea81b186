"""Template and EmailTemplate DAOs (default singleton per type)."""

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.base import BaseDAO
from receiptdesk.dao.defaults import DefaultSingletonDAO
from receiptdesk.models.email_template import EmailLog, EmailTemplate
from receiptdesk.models.template import Template


class TemplateDAO(DefaultSingletonDAO[Template]):
    """Receipt/invoice layouts; one default per ``type``."""

    search_fields = ("name",)
    group_field = "type"

    def __init__(self, session: AsyncSession):
        super().__init__(Template, session)


class EmailTemplateDAO(DefaultSingletonDAO[EmailTemplate]):
    """Notification layouts; one default per ``type``."""

    search_fields = ("name", "subject")
    group_field = "type"

    def __init__(self, session: AsyncSession):
        super().__init__(EmailTemplate, session)


class EmailLogDAO(BaseDAO[EmailLog]):
    """Append-only delivery log."""

    search_fields = ("to", "subject")

    def __init__(self, session: AsyncSession):
        super().__init__(EmailLog, session)
