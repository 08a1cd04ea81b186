"""
Freelancer identity configuration.

WHAT: Reads and writes the ``freelancer_info`` config entry.

WHY: New receipts that omit the FROM side get the stored identity. The
stored value starts as the FREELANCER_* settings and can then be edited
through the API without a redeploy.
"""

import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.config import settings
from receiptdesk.dao.config_entry import ConfigDAO
from receiptdesk.models.config_entry import FREELANCER_INFO_KEY

logger = logging.getLogger(__name__)

FREELANCER_FIELDS = ("name", "email", "phone", "address", "website")


class ConfigService:
    def __init__(self, session: AsyncSession):
        self.config_dao = ConfigDAO(session)

    async def get_freelancer_info(self) -> Dict[str, Any]:
        """
        Stored freelancer identity, created from settings on first access.
        """
        value = await self.config_dao.get_value(FREELANCER_INFO_KEY)
        if value is None:
            value = settings.freelancer_info
            await self.config_dao.set_value(FREELANCER_INFO_KEY, value)
            logger.info("Initialized freelancer_info from settings")
        # Fill fields added after the entry was stored
        return {**settings.freelancer_info, **{k: v for k, v in value.items() if v is not None}}

    async def update_freelancer_info(self, info: Dict[str, Any]) -> Dict[str, Any]:
        value = {field: info.get(field) or "" for field in FREELANCER_FIELDS}
        await self.config_dao.set_value(FREELANCER_INFO_KEY, value)
        logger.info("Updated freelancer_info")
        return value

    async def reset_freelancer_info(self) -> Dict[str, Any]:
        """Restore the identity from settings."""
        value = settings.freelancer_info
        await self.config_dao.set_value(FREELANCER_INFO_KEY, value)
        logger.info("Reset freelancer_info to configured defaults")
        return value
