"""
PABX/SIP settings models.

WHAT: Two tables used by the PABX/SIP calculator:
- pabx_settings: the last form state of each user (one row per user)
- pabx_prices: admin overrides of the standard PABX price table

WHY: Sellers reopen the calculator where they left it, and price changes
made by an admin apply to everybody. Prices are stored one row per
(price_type, category, range_key) so a single cell can be upserted.
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    Numeric,
    ForeignKey,
    UniqueConstraint,
)

from pricing_api.models.base import Base, TimestampMixin, PrimaryKeyMixin


class PabxSettings(Base, PrimaryKeyMixin, TimestampMixin):
    """Saved PABX/SIP calculator form for one user."""

    __tablename__ = "pabx_settings"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        index=True,
        nullable=False,
    )
    user_name = Column(String(255), nullable=True)

    # PABX
    pabx_extensions = Column(Integer, nullable=False, default=0)
    pabx_modality = Column(String(20), nullable=False, default="Standard")
    pabx_premium_plan = Column(String(20), nullable=False, default="Essencial")
    pabx_premium_sub_plan = Column(String(20), nullable=False, default="Ilimitado")
    pabx_premium_equipment = Column(String(10), nullable=False, default="Sem")
    contract_duration = Column(Integer, nullable=False, default=12)
    pabx_include_setup = Column(Boolean, nullable=False, default=True)
    pabx_include_devices = Column(Boolean, nullable=False, default=False)
    pabx_device_quantity = Column(Integer, nullable=False, default=0)
    pabx_include_ai = Column(Boolean, nullable=False, default=False)
    pabx_ai_plan = Column(String(20), nullable=True)
    include_parceiro_indicador = Column(Boolean, nullable=False, default=False)

    # SIP
    sip_plan = Column(String(100), nullable=True)
    sip_include_setup = Column(Boolean, nullable=False, default=False)
    sip_additional_channels = Column(Integer, nullable=False, default=0)
    sip_with_equipment = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<PabxSettings(user_id={self.user_id}, modality={self.pabx_modality})>"


class PabxPrice(Base, PrimaryKeyMixin, TimestampMixin):
    """
    One cell of the standard PABX price table.

    category is one of setup, monthly, hosting, device; range_key is the
    extension range (10, 20, 30, 50, 100, 500, 1000).
    """

    __tablename__ = "pabx_prices"
    __table_args__ = (
        UniqueConstraint("price_type", "category", "range_key", name="uq_pabx_prices_cell"),
    )

    price_type = Column(String(20), nullable=False, default="standard")
    category = Column(String(20), nullable=False)
    range_key = Column(String(10), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self) -> str:
        return f"<PabxPrice({self.price_type}/{self.category}/{self.range_key}={self.price})>"
