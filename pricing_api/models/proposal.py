"""
Proposal model for priced telecom offers.

WHAT: SQLAlchemy model representing a commercial proposal built with one of
the calculators (VM, PABX/SIP, double fiber/radio, ...).

WHY: A proposal is the snapshot a seller sends to a client:
1. Client and account manager details
2. The priced products (each with its own setup and monthly value)
3. Totals after salesperson/director discounts (setup is never discounted)
4. Negotiation history and discount flags kept in metadata

HOW: Uses SQLAlchemy 2.0 with:
- JSON columns for the client, products and metadata blobs
- Numeric columns for totals
- Version tracking (2 once any discount has been applied)
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Numeric,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped

from pricing_api.models.base import Base, JSONType
from pricing_api.services.discounts import apply_monthly_discounts


DEFAULT_PROPOSAL_STATUS = "Rascunho"


class ProposalType(str, Enum):
    """
    Calculator that produced the proposal.

    WHY: The proposal list is filtered per calculator screen.
    """

    FIBER = "FIBER"
    VM = "VM"
    RADIO = "RADIO"
    DOUBLE = "DOUBLE"
    PABX = "PABX"
    MAN = "MAN"
    GENERAL = "GENERAL"


PROPOSAL_TYPE_DESCRIPTIONS: Dict[ProposalType, tuple[str, str]] = {
    ProposalType.FIBER: ("Fiber Internet", "Fiber optic internet connection proposals"),
    ProposalType.VM: ("Virtual Machines", "Virtual machine hosting and cloud service proposals"),
    ProposalType.RADIO: ("Radio Internet", "Radio-based internet connection proposals"),
    ProposalType.DOUBLE: ("Double Fiber/Radio", "Redundant fiber plus radio link proposals"),
    ProposalType.PABX: ("PABX SIP", "PABX SIP telephony system proposals"),
    ProposalType.MAN: ("Metropolitan Area Network", "Metropolitan area network infrastructure proposals"),
    ProposalType.GENERAL: ("General", "General or miscellaneous proposals"),
}


class Proposal(Base):
    """
    Commercial proposal model.

    Attributes:
        id: Primary key
        base_id: Public identifier shared by every version (PROP-...)
        proposal_number: Sequential number per year (NNNN/YYYY)
        title: Proposal title
        type: Calculator that produced it
        status: Free-text workflow status (Rascunho, Aguardando Aprovação do Cliente, ...)
        client: Client snapshot (name, contact, email, phone, project name)
        client_data: Extra client fields from the calculator forms
        account_manager: Account manager snapshot
        value: Contract value
        total_setup: Setup total (never discounted)
        total_monthly: Monthly total after discounts
        contract_period: Contract term in months
        date: Proposal date
        expiry_date: Validity limit
        version: Revision number
        products: Priced line items [{type, description, setup, monthly, details}]
        items_data: Raw calculator items (VM configs, ...)
        extra_data: Metadata blob (discount flags, base monthly, negotiation rounds)
        created_by: User who created the proposal
    """

    __tablename__ = "proposals"

    id: Mapped[int] = Column(Integer, primary_key=True, index=True)

    base_id: Mapped[str] = Column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        comment="Public proposal identifier",
    )
    proposal_number: Mapped[Optional[str]] = Column(
        String(16),
        nullable=True,
        index=True,
        comment="Sequential number NNNN/YYYY",
    )
    title: Mapped[str] = Column(
        String(255),
        nullable=False,
        comment="Proposal title",
    )
    type: Mapped[ProposalType] = Column(
        SQLEnum(
            ProposalType,
            name="proposaltype",
            native_enum=False,
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
        default=ProposalType.GENERAL,
        index=True,
    )
    status: Mapped[str] = Column(
        String(64),
        nullable=False,
        default=DEFAULT_PROPOSAL_STATUS,
        index=True,
    )

    client: Mapped[Dict[str, Any]] = Column(JSONType, nullable=False, default=dict)
    client_data: Mapped[Optional[Dict[str, Any]]] = Column(JSONType, nullable=True)
    account_manager: Mapped[Optional[Dict[str, Any]]] = Column(JSONType, nullable=True)

    # Pricing
    value: Mapped[Decimal] = Column(Numeric(14, 2), nullable=False, default=0)
    total_setup: Mapped[Decimal] = Column(Numeric(14, 2), nullable=False, default=0)
    total_monthly: Mapped[Decimal] = Column(Numeric(14, 2), nullable=False, default=0)
    contract_period: Mapped[int] = Column(Integer, nullable=False, default=12)

    date: Mapped[datetime] = Column(DateTime, nullable=False, default=datetime.utcnow)
    expiry_date: Mapped[Optional[datetime]] = Column(DateTime, nullable=True)
    version: Mapped[int] = Column(Integer, nullable=False, default=1)

    # Line items
    # Format: [{"type": str, "description": str, "setup": float, "monthly": float, "details": {...}}]
    products: Mapped[List[Dict[str, Any]]] = Column(JSONType, nullable=False, default=list)
    items_data: Mapped[List[Dict[str, Any]]] = Column(JSONType, nullable=False, default=list)
    # WHY: "metadata" is reserved by the declarative base, so the attribute is renamed
    extra_data: Mapped[Dict[str, Any]] = Column("metadata", JSONType, nullable=False, default=dict)

    created_by: Mapped[Optional[int]] = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Proposal(id={self.id}, base_id={self.base_id}, status={self.status})>"

    @property
    def discount_info(self) -> Dict[str, Any]:
        """
        Discount flags stored in metadata.

        Returns:
            Dict with apply_salesperson_discount, applied_director_discount_percentage
            and base_total_monthly (raw monthly before discounts)
        """
        meta = self.extra_data or {}
        return {
            "apply_salesperson_discount": bool(meta.get("applySalespersonDiscount", False)),
            "applied_director_discount_percentage": float(
                meta.get("appliedDirectorDiscountPercentage", 0) or 0
            ),
            "base_total_monthly": meta.get("baseTotalMonthly", self.total_monthly),
        }

    @property
    def negotiation_rounds(self) -> List[Dict[str, Any]]:
        """Negotiation rounds stored in metadata, oldest first."""
        return list((self.extra_data or {}).get("negotiationRounds", []))

    def calculate_totals(self) -> None:
        """
        Recalculate setup and monthly totals from the products.

        HOW: Sums product setup and monthly values, then applies the
        discount flags from metadata to the monthly sum only. The raw
        monthly sum is kept in metadata as baseTotalMonthly.
        """
        products = self.products or []
        raw_setup = sum(Decimal(str(p.get("setup", 0) or 0)) for p in products)
        raw_monthly = sum(Decimal(str(p.get("monthly", 0) or 0)) for p in products)

        info = self.discount_info
        monthly = apply_monthly_discounts(
            float(raw_monthly),
            salesperson=info["apply_salesperson_discount"],
            director_percentage=info["applied_director_discount_percentage"],
        )

        self.total_setup = raw_setup
        self.total_monthly = Decimal(str(round(monthly, 2)))
        meta = dict(self.extra_data or {})
        meta["baseTotalMonthly"] = float(raw_monthly)
        self.extra_data = meta
