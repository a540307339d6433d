"""
Pydantic schemas for the VM calculator.

WHAT: The VM pricing configuration document, a VM configuration, and the
quote/negotiation request and response models.

WHY: The pricing configuration is edited in the settings screen and stored as
JSON under the vmPricingConfig key with camelCase keys. Attributes stay
snake_case in Python; aliases keep the stored document shape.

HOW: PricingConfig and TaxRates use a camelCase alias generator with
populate_by_name, so both spellings are accepted on input and the stored
shape is produced by model_dump(by_alias=True).
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _default_storage_per_gb() -> Dict[str, float]:
    return {"HDD SAS": 0.30, "SSD SATA": 0.80, "SSD NVMe": 1.20}


def _default_os_license() -> Dict[str, float]:
    return {"Linux": 0, "Windows Server": 200, "FreeBSD": 0, "Custom": 100}


def _default_taxes() -> Dict[str, "TaxRates"]:
    return {
        "Lucro Real": TaxRates(pis_cofins=9.25, iss=5, csll_ir=34),
        "Lucro Presumido": TaxRates(pis_cofins=3.65, iss=5, csll_ir=15),
        "Lucro Real Reduzido": TaxRates(pis_cofins=9.25, iss=2, csll_ir=15.25),
        "Simples Nacional": TaxRates(pis_cofins=0, iss=0, csll_ir=6),
    }


class TaxRates(BaseModel):
    """Tax percentages of one tax regime."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    pis_cofins: float = Field(0, ge=0, le=100)
    iss: float = Field(0, ge=0, le=100)
    csll_ir: float = Field(0, ge=0, le=100)


class PricingConfig(BaseModel):
    """
    Unit prices, taxes and commercial parameters of the VM calculator.

    Unknown storage types or operating systems price at 0, so the maps can be
    extended from the settings screen without code changes.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    vcpu_per_core: float = Field(50, ge=0)
    ram_per_gb: float = Field(30, ge=0, alias="ramPerGB")
    storage_per_gb: Dict[str, float] = Field(
        default_factory=_default_storage_per_gb, alias="storagePerGB"
    )
    network_per_gbps: float = Field(20, ge=0)
    os_license: Dict[str, float] = Field(default_factory=_default_os_license)
    backup_per_gb: float = Field(0.10, ge=0, alias="backupPerGB")
    additional_ip: float = Field(50, ge=0, alias="additionalIP")
    additional_snapshot: float = Field(25, ge=0)
    vpn_site_to_site: float = Field(150, ge=0)
    taxes: Dict[str, TaxRates] = Field(default_factory=_default_taxes)
    markup: float = Field(100, ge=0)
    net_margin: float = 0
    commission: float = Field(5, ge=0, le=100)
    selected_tax_regime: str = "Lucro Presumido"
    storage_costs: Dict[str, float] = Field(
        default_factory=lambda: {"HDD SAS": 0.15, "NVMe": 0.60, "SSD Performance": 0.40}
    )
    network_costs: Dict[str, float] = Field(
        default_factory=lambda: {"1 Gbps": 10, "10 Gbps": 100}
    )
    contract_discounts: Dict[str, float] = Field(
        default_factory=lambda: {"12": 5, "24": 10, "36": 15, "48": 20, "60": 25}
    )
    setup_fee: float = Field(500, ge=0)
    management_support: float = Field(200, ge=0)


class VMConfig(BaseModel):
    """One virtual machine configuration."""

    id: Optional[str] = None
    name: str = Field(..., max_length=255)
    vcpu: int = Field(2, ge=0)
    ram: float = Field(4, ge=0, description="RAM in GB")
    storage_type: str = "HDD SAS"
    storage_size: float = Field(100, ge=0, description="Storage in GB")
    network_card: str = "1 Gbps"
    os: str = "Linux"
    backup_size: float = Field(0, ge=0, description="Backup in GB")
    additional_ip: bool = False
    additional_snapshot: bool = False
    vpn_site_to_site: bool = False
    quantity: int = Field(1, ge=1)


class VMPriceRequest(BaseModel):
    """List of VMs to price with the stored configuration."""

    vms: List[VMConfig] = Field(..., min_length=1)


class VMPriceLine(BaseModel):
    name: str
    quantity: int
    unit_price: float
    total_price: float


class VMPriceResponse(BaseModel):
    lines: List[VMPriceLine]
    total_monthly: float


class VMQuoteRequest(BaseModel):
    """
    Markup based quote for one VM configuration.

    The VM cost is marked up, grossed up for commission and revenue tax, and
    then discounted by contract term and director discount.
    """

    vm: VMConfig
    contract_period: int = Field(12, ge=1, le=120)
    director_discount_percentage: float = Field(0, ge=0, le=100)
    include_referral_partner: bool = False
    include_influencer_partner: bool = False


class VMQuoteResult(BaseModel):
    """Price build-up and profitability of a VM quote, per unit unless noted."""

    base_cost: float
    markup_amount: float
    price_before_discounts: float
    contract_discount_percentage: float
    contract_discount_amount: float
    director_discount_percentage: float
    director_discount_amount: float
    price_after_director_discount: float
    referral_partner_commission: float
    influencer_partner_commission: float
    final_price: float
    seller_commission_rate: float
    seller_commission: float
    total_commissions: float
    net_profit: float
    net_margin: float
    setup: float = Field(..., description="Setup fee times quantity")
    monthly: float = Field(..., description="Final price times quantity")


class NegotiationStatus(str, Enum):
    ACTIVE = "active"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class NegotiationRound(BaseModel):
    """A discount round offered to the client over a proposal total."""

    round_number: int = Field(..., ge=1)
    date: datetime
    description: str = ""
    discount: float = Field(0, ge=0, le=100)
    vms: List[VMConfig] = Field(default_factory=list)
    original_price: float
    total_price: float
    status: NegotiationStatus = NegotiationStatus.ACTIVE


class NegotiationRoundCreate(BaseModel):
    """Request body for adding a negotiation round to a proposal."""

    description: str = Field("", max_length=1000)
    discount: float = Field(0, ge=0, le=100)
    vms: List[VMConfig] = Field(default_factory=list)
