"""
Pricing settings service.

WHAT: Loads and saves the shared price tables (VM pricing config, double
fiber/radio plans, commission tables, standard PABX prices).

WHY: Every calculator endpoint prices against the stored tables and falls
back to the built-in defaults when nothing has been saved yet. Keeping the
load/validate/save logic here lets the settings and calculator routers share
it.

HOW: JSON documents go through PricingSettingDAO under their keys; PABX
prices are one row per cell in pabx_prices, overlaid on the defaults.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.core.exceptions import ValidationError
from pricing_api.dao.pricing_setting import PricingSettingDAO
from pricing_api.dao.pabx import PabxPriceDAO
from pricing_api.models.pricing_setting import (
    VM_PRICING_CONFIG_KEY,
    FIBER_RADIO_PLANS_KEY,
    COMMISSION_TABLES_KEY,
)
from pricing_api.schemas.commission import CommissionTables, CommissionTerms, CommissionBracket
from pricing_api.schemas.fiber_radio import FiberRadioPlan, FiberRadioPlanList
from pricing_api.schemas.pabx import PabxStandardPrices, PabxPricesUpdate
from pricing_api.schemas.vm import PricingConfig
from pricing_api.services.commissions import default_commission_tables
from pricing_api.services.fiber_radio import default_plans
from pricing_api.services.pabx_sip import merge_price_rows


logger = logging.getLogger(__name__)


_TERM_TABLES = ("channel_seller", "channel_director", "seller")
_BRACKET_TABLES = ("channel_influencer", "channel_indicator")


def resolve_commission_table_name(table: str) -> str:
    """
    Map a table name (snake_case or the camelCase document key) to its field.

    Raises:
        ValidationError: If the table is unknown
    """
    for name, field in CommissionTables.model_fields.items():
        if table in (name, field.alias):
            return name
    raise ValidationError(
        message=f"Unknown commission table: {table}",
        table=table,
    )


class PricingSettingsService:
    """
    Shared price tables backed by the settings store.

    Example:
        async def quote(db: AsyncSession):
            config = await PricingSettingsService(db).get_vm_pricing_config()
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.settings = PricingSettingDAO(session)
        self.pabx_prices = PabxPriceDAO(session)

    # ------------------------------------------------------------------
    # VM pricing
    # ------------------------------------------------------------------

    async def get_vm_pricing_config(self) -> PricingConfig:
        stored = await self.settings.get_value(VM_PRICING_CONFIG_KEY)
        if stored is None:
            return PricingConfig()
        return PricingConfig.model_validate(stored)

    async def save_vm_pricing_config(self, config: PricingConfig, user_id: Optional[int] = None) -> PricingConfig:
        await self.settings.upsert(
            VM_PRICING_CONFIG_KEY,
            config.model_dump(mode="json", by_alias=True),
            updated_by=user_id,
        )
        logger.info(f"VM pricing config updated by user {user_id}")
        return config

    # ------------------------------------------------------------------
    # Double fiber/radio plans
    # ------------------------------------------------------------------

    async def get_fiber_radio_plans(self) -> List[FiberRadioPlan]:
        stored = await self.settings.get_value(FIBER_RADIO_PLANS_KEY)
        if not stored:
            return default_plans()
        return FiberRadioPlanList.model_validate(stored).root

    async def save_fiber_radio_plans(
        self,
        plans: List[FiberRadioPlan],
        user_id: Optional[int] = None,
    ) -> List[FiberRadioPlan]:
        plans = sorted(plans, key=lambda p: p.speed)
        await self.settings.upsert(
            FIBER_RADIO_PLANS_KEY,
            FiberRadioPlanList(plans).model_dump(mode="json", by_alias=True),
            updated_by=user_id,
        )
        logger.info(f"{len(plans)} fiber/radio plans saved by user {user_id}")
        return plans

    # ------------------------------------------------------------------
    # Commission tables
    # ------------------------------------------------------------------

    async def get_commission_tables(self) -> CommissionTables:
        """
        Stored commission tables, each missing table taken from the defaults.
        """
        tables = default_commission_tables()
        stored = await self.settings.get_value(COMMISSION_TABLES_KEY)
        if stored:
            saved = CommissionTables.model_validate(stored)
            overrides = {
                name: getattr(saved, name)
                for name in CommissionTables.model_fields
                if getattr(saved, name) is not None
            }
            tables = tables.model_copy(update=overrides)
        return tables

    async def update_commission_table(
        self,
        table: str,
        data: Union[Dict[str, Any], List[Dict[str, Any]]],
        user_id: Optional[int] = None,
    ) -> CommissionTables:
        """
        Replace one commission table, or one bracket of a bracket table.

        HOW: Term tables are replaced by data. Bracket tables accept either a
        full list, or a single bracket which replaces the bracket with the
        same id (appended when no bracket has that id).

        Raises:
            ValidationError: Unknown table or invalid rates
        """
        name = resolve_commission_table_name(table)
        tables = await self.get_commission_tables()

        try:
            if name in _TERM_TABLES:
                if not isinstance(data, dict):
                    raise ValidationError(message=f"{table} expects a single rate row", table=table)
                value: Any = CommissionTerms.model_validate(data)
            elif isinstance(data, list):
                value = [CommissionBracket.model_validate(row) for row in data]
            else:
                bracket = CommissionBracket.model_validate(data)
                value = list(getattr(tables, name) or [])
                index = next(
                    (i for i, row in enumerate(value) if bracket.id and row.id == bracket.id),
                    None,
                )
                if index is None:
                    value.append(bracket)
                else:
                    value[index] = bracket
                value.sort(key=lambda row: row.revenue_min)
        except PydanticValidationError as e:
            raise ValidationError(
                message="Invalid commission table data",
                table=table,
                errors=[{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()],
            )

        tables = tables.model_copy(update={name: value})
        await self.settings.upsert(
            COMMISSION_TABLES_KEY,
            tables.model_dump(mode="json", by_alias=True),
            updated_by=user_id,
        )
        logger.info(f"Commission table {name} updated by user {user_id}")
        return tables

    # ------------------------------------------------------------------
    # Standard PABX prices
    # ------------------------------------------------------------------

    async def get_pabx_prices(self) -> PabxStandardPrices:
        return merge_price_rows(await self.pabx_prices.get_prices())

    async def save_pabx_prices(
        self,
        update: PabxPricesUpdate,
        user_id: Optional[int] = None,
    ) -> PabxStandardPrices:
        table = {
            category: prices
            for category, prices in update.model_dump().items()
            if prices
        }
        written = await self.pabx_prices.upsert_table(table, updated_by=user_id)
        logger.info(f"{written} PABX price cells saved by user {user_id}")
        return await self.get_pabx_prices()
