"""Config key/value DAO."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.base import BaseDAO
from receiptdesk.models.config_entry import ConfigEntry


class ConfigDAO(BaseDAO[ConfigEntry]):
    def __init__(self, session: AsyncSession):
        super().__init__(ConfigEntry, session)

    async def get_value(self, key: str) -> Optional[Any]:
        entry = await self.get_by_field("key", key)
        return entry.value if entry else None

    async def set_value(self, key: str, value: Any) -> ConfigEntry:
        """Insert or replace the value stored under ``key``."""
        entry = await self.get_by_field("key", key)
        if entry is None:
            return await self.create(key=key, value=value)
        entry.value = value
        return await self.save(entry)
