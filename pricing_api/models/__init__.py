"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from pricing_api.models.base import Base, TimestampMixin, PrimaryKeyMixin
from pricing_api.models.user import User, UserRole
from pricing_api.models.proposal import Proposal, ProposalType, DEFAULT_PROPOSAL_STATUS
from pricing_api.models.pricing_setting import (
    PricingSetting,
    VM_PRICING_CONFIG_KEY,
    FIBER_RADIO_PLANS_KEY,
    COMMISSION_TABLES_KEY,
)
from pricing_api.models.pabx import PabxSettings, PabxPrice

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "User",
    "UserRole",
    "Proposal",
    "ProposalType",
    "DEFAULT_PROPOSAL_STATUS",
    "PricingSetting",
    "VM_PRICING_CONFIG_KEY",
    "FIBER_RADIO_PLANS_KEY",
    "COMMISSION_TABLES_KEY",
    "PabxSettings",
    "PabxPrice",
]
