"""
Pricing setting Data Access Object.

WHAT: Read and upsert of the named JSON pricing documents.
"""

from typing import Any, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.dao.base import BaseDAO
from pricing_api.models.pricing_setting import PricingSetting


class PricingSettingDAO(BaseDAO[PricingSetting]):
    """Data Access Object for PricingSetting model."""

    def __init__(self, session: AsyncSession):
        super().__init__(PricingSetting, session)

    async def get_by_key(self, key: str) -> Optional[PricingSetting]:
        result = await self.session.execute(
            select(PricingSetting).where(PricingSetting.key == key)
        )
        return result.scalar_one_or_none()

    async def get_value(self, key: str) -> Optional[Any]:
        """Stored JSON document for key, None when nothing is stored."""
        setting = await self.get_by_key(key)
        return setting.value if setting else None

    async def upsert(self, key: str, value: Any, updated_by: Optional[int] = None) -> PricingSetting:
        """
        Store a document under key, replacing any previous value.

        Args:
            key: Document name (vmPricingConfig, ...)
            value: JSON serializable document
            updated_by: Editing user id
        """
        setting = await self.get_by_key(key)
        if setting is None:
            return await self.create(key=key, value=value, updated_by=updated_by)

        setting.value = value
        setting.updated_by = updated_by
        await self.session.flush()
        await self.session.refresh(setting)
        return setting
