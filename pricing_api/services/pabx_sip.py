"""
PABX/SIP pricing service.

WHAT: Price tables and calculations of the PABX/SIP calculator:
- PABX Standard: per extension price, hosting and device rental by range
- PABX Premium: per extension price by term, plan, sub-plan and range
- AI agent plans added to either modality
- SIP trunks with optional additional channels
- Proposal totals with discounts and partner commissions

WHY: Telephony proposals combine a PABX and a SIP trunk; both are priced
from editable tables and summed into one proposal.

HOW: Module level defaults are copied into pydantic models on each call so
stored overrides never mutate them.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional

from pricing_api.models.proposal import DEFAULT_PROPOSAL_STATUS
from pricing_api.schemas.commission import CommissionTables
from pricing_api.schemas.pabx import (
    AdditionalChannelPrice,
    AIAgentPlan,
    PabxModality,
    PabxProposalTotals,
    PabxRequest,
    PabxResult,
    PabxStandardPrices,
    PremiumPriceRow,
    ProposalItem,
    RANGE_KEYS,
    SipPlan,
    SipRequest,
    SipResult,
)
from pricing_api.services.commissions import partner_rates
from pricing_api.services.discounts import discount_totals


logger = logging.getLogger(__name__)


DEFAULT_STANDARD_PRICES = {
    "setup": dict(zip(RANGE_KEYS, (1250, 2000, 2500, 3000, 3500, 4000, 4500))),
    "monthly": dict(zip(RANGE_KEYS, (30.00, 29.00, 28.00, 27.50, 26.00, 25.00, 24.50))),
    "hosting": dict(zip(RANGE_KEYS, (200.00, 220.00, 250.00, 300.00, 400.00, 450.00, 500.00))),
    "device": dict(zip(RANGE_KEYS, (35.00, 34.00, 33.00, 32.50, 30.00, 29.00, 28.00))),
}

AI_AGENT_PLANS = {
    "20K": AIAgentPlan(price=720, credits=20000, messages=10000, minutes=2000, premium=1000),
    "40K": AIAgentPlan(price=1370, credits=40000, messages=20000, minutes=4000, premium=2000),
    "60K": AIAgentPlan(price=1940, credits=60000, messages=30000, minutes=6000, premium=3000),
    "100K": AIAgentPlan(price=3060, credits=100000, messages=50000, minutes=10000, premium=5000),
    "150K": AIAgentPlan(price=4320, credits=150000, messages=75000, minutes=15000, premium=7500),
    "200K": AIAgentPlan(price=5400, credits=200000, messages=100000, minutes=20000, premium=10000),
}

PREMIUM_SETUP_FEE = 2500

_ILIMITADO_RANGES = (
    "2 a 9 ramais",
    "10 a 19 ramais",
    "20 a 49 ramais",
    "50 a 99 ramais",
    "100 a 199 ramais",
    "+ de 200 ramais",
)
_TARIFADO_RANGES = (
    "2 a 9 ramais",
    "10 a 49 ramais",
    "50 a 99 ramais",
    "100 a 199 ramais",
    "+ de 200 ramais",
)


def _rows(labels, com, sem) -> List[PremiumPriceRow]:
    return [
        PremiumPriceRow(range=label, com_equipamento=c, sem_equipamento=s)
        for label, c, s in zip(labels, com, sem)
    ]


# term -> plan -> sub-plan -> rows (com / sem equipamento)
PREMIUM_PRICES = {
    24: {
        "essencial": {
            "ilimitado": _rows(_ILIMITADO_RANGES, (84, 65, 62, 59, 55, 52), (75, 57, 54, 52, 48, 45)),
            "tarifado": _rows(_TARIFADO_RANGES, (59, 49, 38, 34, 32), (44, 34, 30, 27, 25)),
        },
        "profissional": {
            "ilimitado": _rows(_ILIMITADO_RANGES, (104, 77, 73, 69, 65, 62), (95, 72, 68, 66, 62, 55)),
            "tarifado": _rows(_TARIFADO_RANGES, (79, 59, 51, 39, 35), (64, 44, 36, 32, 28)),
        },
    },
    36: {
        "essencial": {
            "ilimitado": _rows(_ILIMITADO_RANGES, (77, 59, 55, 53, 48, 45), (71, 53, 48, 44, 40, 38)),
            "tarifado": _rows(_TARIFADO_RANGES, (57, 47, 36, 32, 30), (42, 32, 28, 25, 23)),
        },
        "profissional": {
            "ilimitado": _rows(_ILIMITADO_RANGES, (97, 73, 69, 65, 60, 57), (91, 69, 66, 63, 59, 52)),
            "tarifado": _rows(_TARIFADO_RANGES, (75, 57, 49, 37, 33), (60, 42, 34, 30, 26)),
        },
    },
}

SIP_PLANS = {
    "SIP TARIFADO Call Center 2 Canais": SipPlan(setup=0, monthly=200, monthly_with_equipment=None, channels=2),
    "SIP TARIFADO 2 Canais": SipPlan(setup=0, monthly=150, monthly_with_equipment=None, channels=2),
    "SIP TARIFADO 4 Canais": SipPlan(setup=0, monthly=250, monthly_with_equipment=500, channels=4),
    "SIP TARIFADO 10 Canais": SipPlan(setup=0, monthly=350, monthly_with_equipment=650, channels=10),
    "SIP TARIFADO 30 Canais": SipPlan(setup=0, monthly=550, monthly_with_equipment=1200, channels=30),
    "SIP TARIFADO 60 Canais": SipPlan(setup=0, monthly=1000, monthly_with_equipment=1200, channels=60),
    "SIP ILIMITADO 5 Canais": SipPlan(setup=0, monthly=350, monthly_with_equipment=500, channels=5),
    "SIP ILIMITADO 10 Canais": SipPlan(setup=0, monthly=450, monthly_with_equipment=600, channels=10),
    "SIP ILIMITADO 20 Canais": SipPlan(setup=0, monthly=650, monthly_with_equipment=800, channels=20),
    "SIP ILIMITADO 30 Canais": SipPlan(setup=0, monthly=850, monthly_with_equipment=950, channels=30),
    "SIP ILIMITADO 60 Canais": SipPlan(setup=0, monthly=1600, monthly_with_equipment=1700, channels=60),
}

# Additional channels by plan channel count: ILIMITADO plans use the
# subscription table, TARIFADO plans the allowance table.
SIP_ASSINATURA_CHANNELS = {
    "5": AdditionalChannelPrice(max=3, price=30),
    "10": AdditionalChannelPrice(max=5, price=20),
    "20": AdditionalChannelPrice(max=3, price=20),
    "30": AdditionalChannelPrice(max=20, price=5),
}
SIP_FRANQUIA_CHANNELS = {
    "4": AdditionalChannelPrice(max=10, price=25),
    "10": AdditionalChannelPrice(max=20, price=25),
    "30": AdditionalChannelPrice(max=30, price=25),
}

SIP_INCLUDED_MINUTES = {"5": 15000, "10": 20000, "20": 25000, "30": 30000, "60": 60000}
SIP_ADDITIONAL_NUMBER_PRICE = 10
SIP_TARIFFS = {
    "localFixo": {"callCenter": 0.015, "tarifado": 0.02},
    "dddFixo": {"callCenter": 0.05, "tarifado": 0.06},
    "brasilMovel": {"callCenter": 0.09, "default": 0.10},
}


def default_standard_prices() -> PabxStandardPrices:
    return PabxStandardPrices(**{category: dict(prices) for category, prices in DEFAULT_STANDARD_PRICES.items()})


def merge_price_rows(rows: Iterable) -> PabxStandardPrices:
    """
    Overlay stored price rows on the default standard table.

    Rows need category, range_key and price attributes; unknown categories
    are ignored.
    """
    prices = default_standard_prices()
    for row in rows:
        table = getattr(prices, row.category, None)
        if isinstance(table, dict):
            table[row.range_key] = float(row.price)
    return prices


def get_price_range(extensions: int) -> str:
    """Range key of the standard table for an extension count."""
    for key in RANGE_KEYS:
        if extensions <= int(key):
            return key
    return RANGE_KEYS[-1]


def get_premium_price_range(extensions: int, sub_plan: str) -> str:
    """Range label of the premium table, or "" below 2 extensions."""
    if 2 <= extensions <= 9:
        return "2 a 9 ramais"
    if sub_plan.lower() == "ilimitado":
        if 10 <= extensions <= 19:
            return "10 a 19 ramais"
        if 20 <= extensions <= 49:
            return "20 a 49 ramais"
    elif 10 <= extensions <= 49:
        return "10 a 49 ramais"
    if 50 <= extensions <= 99:
        return "50 a 99 ramais"
    if 100 <= extensions <= 199:
        return "100 a 199 ramais"
    if extensions >= 200:
        return "+ de 200 ramais"
    return ""


def ai_agent_cost(include_ai: bool, ai_plan: Optional[str]) -> float:
    if not include_ai or not ai_plan:
        return 0
    plan = AI_AGENT_PLANS.get(ai_plan)
    return plan.price if plan else 0


def calculate_standard_pabx(
    extensions: int,
    include_setup: bool,
    include_devices: bool,
    device_quantity: int,
    ai_plan: Optional[str] = None,
    prices: Optional[PabxStandardPrices] = None,
) -> PabxResult:
    """Price a PABX Standard: per extension monthly plus hosting, devices and AI agent."""
    prices = prices or default_standard_prices()
    key = get_price_range(extensions)

    setup = prices.setup.get(key, 0) if include_setup else 0
    base_monthly = prices.monthly.get(key, 0) * extensions + prices.hosting.get(key, 0)
    devices = prices.device.get(key, 0) * device_quantity if include_devices else 0
    ai = ai_agent_cost(ai_plan is not None, ai_plan)

    return PabxResult(
        setup=setup,
        base_monthly=base_monthly,
        device_rental_cost=devices,
        ai_agent_cost=ai,
        total_monthly=base_monthly + devices + ai,
    )


def calculate_premium_pabx(
    extensions: int,
    contract_duration: int,
    plan: str,
    sub_plan: str,
    equipment: str,
    include_setup: bool,
    ai_plan: Optional[str] = None,
) -> PabxResult:
    """
    Price a PABX Premium.

    Only 24 and 36 month terms have prices; any other term, unknown plan or
    range yields an all zero result. Devices are included in the price.
    """
    plans = PREMIUM_PRICES.get(contract_duration)
    sub_plans = plans.get(plan.lower()) if plans else None
    rows = sub_plans.get(sub_plan.lower()) if sub_plans else None
    label = get_premium_price_range(extensions, sub_plan)
    row = next((r for r in rows or [] if r.range == label), None) if label else None

    if row is None:
        logger.debug(
            f"No premium price for {extensions} extensions, term={contract_duration}, "
            f"plan={plan}/{sub_plan}"
        )
        return PabxResult()

    per_extension = row.com_equipamento if equipment.lower() == "com" else row.sem_equipamento
    base_monthly = per_extension * extensions
    ai = ai_agent_cost(ai_plan is not None, ai_plan)

    return PabxResult(
        setup=PREMIUM_SETUP_FEE if include_setup else 0,
        base_monthly=base_monthly,
        device_rental_cost=0,
        ai_agent_cost=ai,
        total_monthly=base_monthly + ai,
    )


def calculate_pabx(request: PabxRequest, prices: Optional[PabxStandardPrices] = None) -> PabxResult:
    ai_plan = request.ai_plan if request.include_ai else None
    if request.modality == PabxModality.PREMIUM:
        return calculate_premium_pabx(
            request.extensions,
            request.contract_duration,
            request.premium_plan,
            request.premium_sub_plan,
            request.premium_equipment,
            request.include_setup,
            ai_plan,
        )
    return calculate_standard_pabx(
        request.extensions,
        request.include_setup,
        request.include_devices,
        request.device_quantity,
        ai_plan,
        prices,
    )


def additional_channels_cost(plan_name: str, channels: int) -> float:
    """
    Cost of extra SIP channels.

    The plan channel count is the first number in the plan name. Requests
    above the allowed maximum are not priced.
    """
    if channels <= 0:
        return 0
    match = re.search(r"\d+", plan_name)
    if match is None:
        return 0

    if "ILIMITADO" in plan_name:
        config = SIP_ASSINATURA_CHANNELS.get(match.group())
    elif "TARIFADO" in plan_name:
        config = SIP_FRANQUIA_CHANNELS.get(match.group())
    else:
        config = None

    if config is None or channels > config.max:
        return 0
    return channels * config.price


def calculate_sip(
    plan_name: str,
    include_setup: bool,
    additional_channels: int = 0,
    with_equipment: bool = False,
) -> Optional[SipResult]:
    """Price a SIP trunk; None for an unknown plan."""
    plan = SIP_PLANS.get(plan_name)
    if plan is None:
        return None

    setup = plan.setup if include_setup else 0
    if with_equipment and plan.monthly_with_equipment:
        monthly = plan.monthly_with_equipment
    else:
        monthly = plan.monthly
    monthly += additional_channels_cost(plan_name, additional_channels)

    return SipResult(setup=setup, monthly=monthly)


def calculate_sip_request(request: SipRequest) -> Optional[SipResult]:
    return calculate_sip(
        request.plan,
        request.include_setup,
        request.additional_channels,
        request.with_equipment,
    )


def calculate_proposal_totals(
    client_name: str,
    items: List[ProposalItem],
    tables: CommissionTables,
    contract_duration: int = 12,
    salesperson: bool = False,
    director_pct: float = 0,
    include_indicator: bool = False,
    include_influencer: bool = False,
) -> PabxProposalTotals:
    """
    Totals of a PABX/SIP proposal.

    Discounts apply to the monthly total only. Partner commissions are
    computed over the raw monthly total and subtracted from the discounted
    one. A discounted proposal is saved as version 2.
    """
    raw_setup = sum(item.setup for item in items)
    raw_monthly = sum(item.monthly for item in items)

    totals = discount_totals(raw_setup, raw_monthly, salesperson, director_pct)
    indicator_rate, influencer_rate = partner_rates(
        tables, raw_monthly, contract_duration, include_indicator, include_influencer
    )
    indicator = raw_monthly * indicator_rate / 100
    influencer = raw_monthly * influencer_rate / 100

    return PabxProposalTotals(
        title=f"Proposta PABX/SIP - {client_name}",
        type="PABX",
        status=DEFAULT_PROPOSAL_STATUS,
        raw_total_setup=raw_setup,
        raw_total_monthly=raw_monthly,
        total_setup=totals.setup,
        total_monthly=totals.monthly - indicator - influencer,
        partner_indicator_commission=indicator,
        influencer_partner_commission=influencer,
        apply_salesperson_discount=salesperson,
        applied_director_discount_percentage=director_pct,
        version=2 if totals.has_discount else 1,
    )
