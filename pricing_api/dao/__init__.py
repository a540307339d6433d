"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from pricing_api.dao.base import BaseDAO
from pricing_api.dao.user import UserDAO
from pricing_api.dao.proposal import ProposalDAO
from pricing_api.dao.pricing_setting import PricingSettingDAO
from pricing_api.dao.pabx import PabxSettingsDAO, PabxPriceDAO

__all__ = [
    "BaseDAO",
    "UserDAO",
    "ProposalDAO",
    "PricingSettingDAO",
    "PabxSettingsDAO",
    "PabxPriceDAO",
]
