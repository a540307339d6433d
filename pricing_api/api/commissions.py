"""
Commission tables API endpoints.

WHAT: Read and edit the commission tables used by every calculator.

WHY: Directors negotiate channel rates and admins maintain the seller
tables, so both roles may edit; sellers only read.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.core.deps import get_current_user, require_role
from pricing_api.core.exceptions import ValidationError
from pricing_api.db.session import get_db
from pricing_api.models.user import User, UserRole
from pricing_api.schemas.commission import CommissionTables, CommissionTableUpdate
from pricing_api.services.pricing_settings import PricingSettingsService


router = APIRouter(prefix="/commissions", tags=["commissions"])


@router.get(
    "",
    response_model=CommissionTables,
    summary="Get commission tables",
    description="Stored commission tables, defaults for tables never edited",
)
async def get_commission_tables(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CommissionTables:
    return await PricingSettingsService(db).get_commission_tables()


@router.put(
    "",
    response_model=CommissionTables,
    summary="Update commission table",
    description="Replace one commission table or one revenue bracket (admin or director)",
)
async def update_commission_table(
    body: CommissionTableUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.DIRECTOR)),
    db: AsyncSession = Depends(get_db),
) -> CommissionTables:
    """
    Update a commission table.

    Raises:
        ValidationError (400): If table or data is missing, or the table is unknown
        AuthorizationError (403): If the user is a seller
    """
    if not body.table or not body.data:
        raise ValidationError(message="Table and data are required")

    return await PricingSettingsService(db).update_commission_table(
        body.table, body.data, user_id=current_user.id
    )
