"""
Pricing setting model.

WHAT: Key/value store for the editable rate tables shared by all sellers.

WHY: The calculators keep their tables as nested JSON documents
(vmPricingConfig, doubleFiberRadioLinkPrices, commissionTables). Storing
each document under its key keeps the original shape so the frontend can
read it back unchanged.
"""

from sqlalchemy import Column, String, Integer, ForeignKey

from pricing_api.models.base import Base, TimestampMixin, PrimaryKeyMixin, JSONType


VM_PRICING_CONFIG_KEY = "vmPricingConfig"
FIBER_RADIO_PLANS_KEY = "doubleFiberRadioLinkPrices"
COMMISSION_TABLES_KEY = "commissionTables"


class PricingSetting(Base, PrimaryKeyMixin, TimestampMixin):
    """A named JSON pricing document."""

    __tablename__ = "pricing_settings"

    key = Column(String(100), unique=True, index=True, nullable=False)
    value = Column(JSONType, nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self) -> str:
        return f"<PricingSetting(key={self.key})>"
