"""
Pydantic schemas for the PABX/SIP calculator.

WHAT: Price tables, calculator requests/results, proposal totals and the
saved calculator form (pabx_settings).

WHY: PABX Standard is priced by extension range, PABX Premium by contract
term, plan and range label, and SIP trunks by plan name. Keeping each table
as a typed model lets the settings endpoints validate admin edits.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, get_args
from pydantic import BaseModel, ConfigDict, Field

from pricing_api.schemas.dre import DRETable, PabxResultSummary
from pricing_api.schemas.payback import PaybackValidation


# Upper bounds of the extension ranges of the standard price table
PabxRangeKey = Literal["10", "20", "30", "50", "100", "500", "1000"]
RANGE_KEYS = get_args(PabxRangeKey)

PriceCells = Dict[PabxRangeKey, Annotated[float, Field(ge=0)]]


class PabxModality(str, Enum):
    STANDARD = "Standard"
    PREMIUM = "Premium"


class PabxPriceCategory(str, Enum):
    SETUP = "setup"
    MONTHLY = "monthly"
    HOSTING = "hosting"
    DEVICE = "device"


class PabxStandardPrices(BaseModel):
    """
    Standard PABX prices keyed by extension range.

    Range keys are the maximum number of extensions of the range
    ("10", "20", "30", "50", "100", "500", "1000").
    """

    setup: Dict[str, float]
    monthly: Dict[str, float]
    hosting: Dict[str, float]
    device: Dict[str, float]


class AIAgentPlan(BaseModel):
    price: float = Field(..., ge=0)
    credits: int = 0
    messages: int = 0
    minutes: int = 0
    premium: int = 0


class PremiumPriceRow(BaseModel):
    """Premium price per extension for one range label."""

    range: str
    com_equipamento: float = Field(..., ge=0)
    sem_equipamento: float = Field(..., ge=0)


class SipPlan(BaseModel):
    setup: float = 0
    monthly: float
    monthly_with_equipment: Optional[float] = None
    channels: int


class AdditionalChannelPrice(BaseModel):
    """Extra channels allowed on a plan and the price of each."""

    max: int
    price: float


class PabxResult(BaseModel):
    setup: float = 0
    base_monthly: float = 0
    device_rental_cost: float = 0
    ai_agent_cost: float = 0
    total_monthly: float = 0


class SipResult(BaseModel):
    setup: float = 0
    monthly: float = 0


class PabxDRERequest(BaseModel):
    """Priced PABX and SIP results to build the income statement from."""

    pabx: Optional[PabxResult] = None
    sip: Optional[SipResult] = None
    contract_duration: int = Field(12, ge=1, le=120)
    include_referral_partner: bool = False
    include_influencer_partner: bool = False
    revenue_tax_rate: float = Field(15, ge=0, le=100)
    profit_tax_rate: float = Field(0, ge=0, le=100)


class PabxRequest(BaseModel):
    """PABX calculator form."""

    modality: PabxModality = PabxModality.STANDARD
    extensions: int = Field(..., ge=0)
    include_setup: bool = True
    include_devices: bool = False
    device_quantity: int = Field(0, ge=0)
    include_ai: bool = False
    ai_plan: Optional[str] = None
    premium_plan: str = "Essencial"
    premium_sub_plan: str = "Ilimitado"
    premium_equipment: str = "Sem"
    contract_duration: int = Field(12, ge=1, le=120)


class SipRequest(BaseModel):
    """SIP trunk calculator form."""

    plan: str
    include_setup: bool = False
    additional_channels: int = Field(0, ge=0)
    with_equipment: bool = False


class PabxCalculationRequest(BaseModel):
    """PABX and/or SIP priced together, with the income statement."""

    pabx: Optional[PabxRequest] = None
    sip: Optional[SipRequest] = None
    contract_duration: int = Field(12, ge=1, le=120)
    include_referral_partner: bool = False
    include_influencer_partner: bool = False
    director_discount_percentage: float = Field(0, ge=0, le=100)


class PabxCalculationResponse(BaseModel):
    pabx: Optional[PabxResult] = None
    sip: Optional[SipResult] = None
    summary: PabxResultSummary
    dre: DRETable
    payback: PaybackValidation


class ProposalItem(BaseModel):
    """A priced line added to a proposal."""

    id: Optional[str] = None
    description: str = ""
    setup: float = 0
    monthly: float = 0
    type: Optional[str] = None


class PabxProposalTotalsRequest(BaseModel):
    client_name: str = Field(..., min_length=1)
    items: List[ProposalItem] = Field(default_factory=list)
    contract_duration: int = Field(12, ge=1, le=120)
    apply_salesperson_discount: bool = False
    director_discount_percentage: float = Field(0, ge=0, le=100)
    include_referral_partner: bool = False
    include_influencer_partner: bool = False


class PabxProposalTotals(BaseModel):
    """Proposal totals before and after discounts and partner commissions."""

    title: str
    type: str = "PABX"
    status: str
    raw_total_setup: float
    raw_total_monthly: float
    total_setup: float
    total_monthly: float
    partner_indicator_commission: float
    influencer_partner_commission: float
    apply_salesperson_discount: bool
    applied_director_discount_percentage: float
    version: int


class PabxSettingsBase(BaseModel):
    """Saved PABX/SIP calculator form."""

    pabx_extensions: int = Field(0, ge=0)
    pabx_modality: PabxModality = PabxModality.STANDARD
    pabx_premium_plan: str = "Essencial"
    pabx_premium_sub_plan: str = "Ilimitado"
    pabx_premium_equipment: str = "Sem"
    contract_duration: int = Field(12, ge=1, le=120)
    pabx_include_setup: bool = True
    pabx_include_devices: bool = False
    pabx_device_quantity: int = Field(0, ge=0)
    pabx_include_ai: bool = False
    pabx_ai_plan: Optional[str] = None
    include_parceiro_indicador: bool = False
    sip_plan: Optional[str] = None
    sip_include_setup: bool = False
    sip_additional_channels: int = Field(0, ge=0)
    sip_with_equipment: bool = False


class PabxSettingsUpdate(PabxSettingsBase):
    pass


class PabxSettingsResponse(PabxSettingsBase):
    model_config = ConfigDict(from_attributes=True)

    user_id: Optional[int] = None
    user_name: Optional[str] = None
    updated_at: Optional[datetime] = None


class PabxPricesUpdate(BaseModel):
    """Partial edit of the standard price table; only given cells change."""

    setup: PriceCells = Field(default_factory=dict)
    monthly: PriceCells = Field(default_factory=dict)
    hosting: PriceCells = Field(default_factory=dict)
    device: PriceCells = Field(default_factory=dict)

