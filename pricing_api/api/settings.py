"""
Settings API endpoints.

WHAT: Read/write access to the shared price tables and to the saved PABX/SIP
calculator form of each user.

WHY: Price tables are shared by every seller, so only admins change them.
Reads return the built-in defaults until a table is first saved.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.core.deps import get_current_user, require_admin
from pricing_api.db.session import get_db
from pricing_api.dao.pabx import PabxSettingsDAO
from pricing_api.models.user import User
from pricing_api.schemas.fiber_radio import FiberRadioPlan
from pricing_api.schemas.pabx import (
    PabxSettingsUpdate,
    PabxSettingsResponse,
    PabxStandardPrices,
    PabxPricesUpdate,
)
from pricing_api.schemas.vm import PricingConfig
from pricing_api.services.pricing_settings import PricingSettingsService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/vm-pricing", response_model=PricingConfig, summary="Get VM pricing config")
async def get_vm_pricing(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PricingConfig:
    return await PricingSettingsService(db).get_vm_pricing_config()


@router.put(
    "/vm-pricing",
    response_model=PricingConfig,
    summary="Update VM pricing config",
    description="Replace the VM pricing config (admin only)",
)
async def update_vm_pricing(
    config: PricingConfig,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PricingConfig:
    return await PricingSettingsService(db).save_vm_pricing_config(config, current_user.id)


@router.get(
    "/fiber-radio-plans",
    response_model=List[FiberRadioPlan],
    summary="Get double fiber/radio plans",
)
async def get_fiber_radio_plans(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[FiberRadioPlan]:
    return await PricingSettingsService(db).get_fiber_radio_plans()


@router.put(
    "/fiber-radio-plans",
    response_model=List[FiberRadioPlan],
    summary="Update double fiber/radio plans",
    description="Replace the plan list (admin only); plans are kept sorted by speed",
)
async def update_fiber_radio_plans(
    plans: List[FiberRadioPlan],
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[FiberRadioPlan]:
    return await PricingSettingsService(db).save_fiber_radio_plans(plans, current_user.id)


@router.get(
    "/pabx",
    response_model=PabxSettingsResponse,
    summary="Get saved PABX/SIP form",
    description="Last PABX/SIP calculator form saved by the current user, defaults when none",
)
async def get_pabx_settings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PabxSettingsResponse:
    settings = await PabxSettingsDAO(db).get_by_user(current_user.id)
    if settings is None:
        return PabxSettingsResponse(user_id=current_user.id, user_name=current_user.name)
    return PabxSettingsResponse.model_validate(settings)


@router.put(
    "/pabx",
    response_model=PabxSettingsResponse,
    summary="Save PABX/SIP form",
)
async def save_pabx_settings(
    data: PabxSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PabxSettingsResponse:
    settings = await PabxSettingsDAO(db).upsert_for_user(
        current_user.id,
        current_user.name,
        data.model_dump(mode="json"),
    )
    logger.info(f"PABX settings saved for user {current_user.id}")
    return PabxSettingsResponse.model_validate(settings)


@router.get(
    "/pabx-prices",
    response_model=PabxStandardPrices,
    summary="Get standard PABX prices",
)
async def get_pabx_prices(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PabxStandardPrices:
    return await PricingSettingsService(db).get_pabx_prices()


@router.put(
    "/pabx-prices",
    response_model=PabxStandardPrices,
    summary="Update standard PABX prices",
    description="Upsert price cells of the standard PABX table (admin only)",
)
async def update_pabx_prices(
    update: PabxPricesUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PabxStandardPrices:
    return await PricingSettingsService(db).save_pabx_prices(update, current_user.id)
