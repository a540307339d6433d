"""
Pydantic schemas for the double fiber/radio link calculator.

WHAT: Link plans (stored under doubleFiberRadioLinkPrices), the quote and DRE
requests, and their results.

WHY: Plans are edited from the settings screen and stored with camelCase
keys (price12, installationCost, doubleFiberRadioCost); aliases keep that
shape while Python code reads snake_case attributes.
"""

from typing import Annotated, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel

from pricing_api.schemas.payback import PaybackValidation


class FiberRadioPlan(BaseModel):
    """One link speed and its prices per contract term."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    speed: int = Field(..., gt=0, description="Speed in Mbps")
    price12: float = Field(..., ge=0)
    price24: float = Field(..., ge=0)
    price36: float = Field(..., ge=0)
    price48: float = Field(..., ge=0)
    price60: float = Field(..., ge=0)
    installation_cost: float = Field(..., ge=0)
    description: str = ""
    base_cost: float = Field(0, ge=0)
    double_fiber_radio_cost: float = Field(0, ge=0, description="Equipment cost of the link")


class FiberRadioPlanList(RootModel[List[FiberRadioPlan]]):
    """The stored plan list."""


class FiberRadioQuoteRequest(BaseModel):
    """Link calculator form."""

    speed: int = Field(..., gt=0)
    contract_term: int = Field(12, ge=1, le=120)
    include_installation: bool = True
    apply_salesperson_discount: bool = False
    director_discount_percentage: float = Field(0, ge=0, le=100)
    include_referral_partner: bool = False
    include_influencer_partner: bool = False
    is_existing_client: bool = False
    previous_monthly_fee: float = Field(0, ge=0)
    create_last_mile: bool = False
    last_mile_cost: float = Field(0, ge=0)


class FiberRadioQuote(BaseModel):
    speed: int
    description: str
    contract_term: int
    base_monthly: float = Field(..., description="Plan price for the term before discounts")
    monthly: float = Field(..., description="Monthly price after discounts and partner surcharge")
    installation: float
    equipment_cost: float
    has_partners: bool
    payback: PaybackValidation


class FiberRadioDRE(BaseModel):
    """Income statement of a link over one period."""

    months: int
    receita_mensal: float
    receita_total_periodo: float
    receita_instalacao: float
    receita_total_primeiro_mes: float
    custo_double_fiber_radio: float
    custo_banda: float
    fundraising: float = 0
    last_mile: float
    simples_nacional: float
    comissao_vendedor: float
    comissao_parceiro_indicador: float
    comissao_parceiro_influenciador: float
    total_comissoes: float
    custo_despesa: float
    balance: float
    rentabilidade: float
    lucratividade: float
    margem_liquida: float
    markup: float
    roi: float
    roi_anualizado: float
    payback_months: int
    diferenca_valores_contrato: float


class FiberRadioDREResponse(BaseModel):
    quote: FiberRadioQuote
    periods: Dict[int, FiberRadioDRE]


class FiberRadioTaxRates(BaseModel):
    """Percentages used by the link DRE; banda is BRL per Mbps per month."""

    banda: float = Field(2.09, ge=0)
    simples_nacional: float = Field(15.0, ge=0, le=100)
    custo_despesa: float = Field(10.0, ge=0, le=100)


class FiberRadioDRERequest(FiberRadioQuoteRequest):
    periods: Optional[List[Annotated[int, Field(gt=0, le=120)]]] = None
    tax_rates: FiberRadioTaxRates = Field(default_factory=FiberRadioTaxRates)
