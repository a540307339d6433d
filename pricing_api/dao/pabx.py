"""
PABX settings and price Data Access Objects.

WHAT: Per-user calculator form (pabx_settings) and standard price table
overrides (pabx_prices).

WHY: Both tables are written with upsert semantics: one settings row per
user, one price row per (price_type, category, range_key) cell.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.dao.base import BaseDAO
from pricing_api.models.pabx import PabxSettings, PabxPrice


class PabxSettingsDAO(BaseDAO[PabxSettings]):
    """Data Access Object for PabxSettings model."""

    def __init__(self, session: AsyncSession):
        super().__init__(PabxSettings, session)

    async def get_by_user(self, user_id: int) -> Optional[PabxSettings]:
        result = await self.session.execute(
            select(PabxSettings).where(PabxSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def upsert_for_user(
        self,
        user_id: int,
        user_name: Optional[str],
        values: Dict[str, Any],
    ) -> PabxSettings:
        """
        Save the calculator form of a user, creating the row on first save.

        Args:
            user_id: Owner of the settings
            user_name: Display name stored alongside
            values: Column values to write
        """
        settings = await self.get_by_user(user_id)
        if settings is None:
            return await self.create(user_id=user_id, user_name=user_name, **values)

        for field, value in values.items():
            setattr(settings, field, value)
        settings.user_name = user_name
        await self.session.flush()
        await self.session.refresh(settings)
        return settings


class PabxPriceDAO(BaseDAO[PabxPrice]):
    """Data Access Object for PabxPrice model."""

    def __init__(self, session: AsyncSession):
        super().__init__(PabxPrice, session)

    async def get_prices(self, price_type: str = "standard") -> List[PabxPrice]:
        result = await self.session.execute(
            select(PabxPrice)
            .where(PabxPrice.price_type == price_type)
            .order_by(PabxPrice.category, PabxPrice.range_key)
        )
        return list(result.scalars().all())

    async def upsert_price(
        self,
        category: str,
        range_key: str,
        price: float,
        updated_by: Optional[int] = None,
        price_type: str = "standard",
    ) -> PabxPrice:
        """Insert or update one cell of the price table."""
        result = await self.session.execute(
            select(PabxPrice).where(
                PabxPrice.price_type == price_type,
                PabxPrice.category == category,
                PabxPrice.range_key == range_key,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            return await self.create(
                price_type=price_type,
                category=category,
                range_key=range_key,
                price=price,
                updated_by=updated_by,
            )

        row.price = price
        row.updated_by = updated_by
        await self.session.flush()
        return row

    async def upsert_table(
        self,
        table: Dict[str, Dict[str, float]],
        updated_by: Optional[int] = None,
        price_type: str = "standard",
    ) -> int:
        """
        Upsert every cell of a {category: {range_key: price}} table.

        Returns:
            Number of cells written
        """
        written = 0
        for category, prices in table.items():
            for range_key, price in prices.items():
                await self.upsert_price(category, range_key, price, updated_by, price_type)
                written += 1
        return written
