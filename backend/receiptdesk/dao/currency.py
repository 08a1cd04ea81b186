"""Currency and TaxSetting DAOs."""

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.dao.base import BaseDAO
from receiptdesk.dao.defaults import DefaultSingletonDAO
from receiptdesk.models.currency import Currency
from receiptdesk.models.tax_setting import TaxSetting


class CurrencyDAO(BaseDAO[Currency]):
    search_fields = ("code", "name")
    default_sort = "code"

    def __init__(self, session: AsyncSession):
        super().__init__(Currency, session)

    async def get_by_code(self, code: str, include_inactive: bool = False) -> Optional[Currency]:
        return await self.get_by_field("code", code.upper(), include_inactive=include_inactive)

    async def update_rates(self, rates: Dict[str, float]) -> int:
        """
        Set exchange rates for the given codes.

        Unknown or inactive codes are skipped.

        Returns:
            Number of currencies updated
        """
        updated = 0
        now = datetime.utcnow()
        for code, rate in rates.items():
            currency = await self.get_by_code(code)
            if currency is None:
                continue
            currency.exchange_rate = rate
            currency.last_updated = now
            updated += 1
        await self.session.flush()
        return updated


class TaxSettingDAO(DefaultSingletonDAO[TaxSetting]):
    """Tax settings; one default per ``region``."""

    search_fields = ("name", "region")
    group_field = "region"

    def __init__(self, session: AsyncSession):
        super().__init__(TaxSetting, session)
