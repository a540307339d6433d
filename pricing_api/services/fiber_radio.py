"""
Double fiber/radio link pricing service.

WHAT: Link plans, monthly price per contract term, quote with discounts and
partner surcharge, and the DRE of a link over each contract period.

WHY: A double fiber/radio link is a redundant connection sold per speed.
Its DRE weighs the equipment cost against the contract revenue to decide
whether the deal pays back within the allowed limit.

HOW: Pure functions over the plan list; the API layer loads the stored
plans (or the defaults) and the commission tables.
"""

import logging
from typing import Dict, List, Optional, Sequence

from pricing_api.core.exceptions import PlanNotFoundError
from pricing_api.schemas.commission import CommissionTables
from pricing_api.schemas.fiber_radio import (
    FiberRadioDRE,
    FiberRadioPlan,
    FiberRadioQuote,
    FiberRadioQuoteRequest,
    FiberRadioTaxRates,
)
from pricing_api.services.commissions import partner_rates, resolve_seller_rate
from pricing_api.services.discounts import apply_monthly_discounts, apply_partner_surcharge
from pricing_api.services.payback import (
    DEFAULT_COMMISSION_RATE,
    calculate_payback,
    validate_payback,
)


logger = logging.getLogger(__name__)


DRE_PERIODS = (12, 24, 36, 48, 60)

# speed, price12, price24, price36/48/60, installation, base cost, equipment cost
_PLAN_ROWS = [
    (25, 1080.00, 790.50, 711.00, 998, 1580, 7080),
    (30, 1110.12, 868.50, 790.50, 998, 1580, 7080),
    (40, 1372.52, 948.00, 868.50, 998, 1580, 7080),
    (50, 1655.09, 1027.50, 948.00, 998, 1580, 7080),
    (60, 2321.16, 1185.00, 1105.50, 998, 1580, 7080),
    (80, 2738.97, 1500.00, 1422.00, 998, 5700, 7080),
    (100, 3025.58, 2367.00, 1974.00, 1996, 5700, 10200),
    (150, 3814.77, 2682.00, 2290.50, 1996, 5700, 10200),
    (200, 4823.97, 3079.50, 2605.50, 1996, 5700, 10200),
    (300, 11283.00, 6474.00, 6000.00, 2500, 23300, 26700),
    (400, 14203.50, 7816.50, 7104.00, 2500, 23300, 32360),
    (500, 16761.00, 8683.50, 7879.50, 2500, 23300, 32360),
    (600, 18750.00, 9472.50, 8685.00, 2500, 23300, 32360),
    (700, 20700.00, 10350.00, 9450.00, 2500, 23300, 32360),
    (800, 22500.00, 11250.00, 10200.00, 2500, 23300, 32360),
    (900, 24300.00, 12150.00, 10950.00, 2500, 23300, 32360),
    (1000, 26250.00, 13125.00, 11850.00, 2500, 23300, 32360),
]


def default_plans() -> List[FiberRadioPlan]:
    plans = []
    for speed, p12, p24, p36, installation, base_cost, equipment in _PLAN_ROWS:
        description = f"{speed} Mbps"
        if speed == 1000:
            description = "1000 Mbps (1 Gbps)"
        plans.append(
            FiberRadioPlan(
                speed=speed,
                price12=p12,
                price24=p24,
                price36=p36,
                price48=p36,
                price60=p36,
                installation_cost=installation,
                description=description,
                base_cost=base_cost,
                double_fiber_radio_cost=equipment,
            )
        )
    return plans


def find_plan(plans: Sequence[FiberRadioPlan], speed: int) -> FiberRadioPlan:
    """
    Raises:
        PlanNotFoundError: If no plan has the given speed
    """
    for plan in plans:
        if plan.speed == speed:
            return plan
    raise PlanNotFoundError(message=f"Plan of {speed} Mbps not found", speed=speed)


def monthly_price(plan: FiberRadioPlan, term: int) -> float:
    """Plan price for a 12/24/36/48/60 month term; 0 for any other term."""
    if term in DRE_PERIODS:
        return getattr(plan, f"price{term}")
    return 0


def discounted_monthly(plan: FiberRadioPlan, request: FiberRadioQuoteRequest) -> float:
    """Term price after salesperson and director discounts, plus partner surcharge."""
    monthly = apply_monthly_discounts(
        monthly_price(plan, request.contract_term),
        request.apply_salesperson_discount,
        request.director_discount_percentage,
    )
    return apply_partner_surcharge(monthly, _has_partners(request))


def _has_partners(request: FiberRadioQuoteRequest) -> bool:
    return request.include_referral_partner or request.include_influencer_partner


def quote_link(plans: Sequence[FiberRadioPlan], request: FiberRadioQuoteRequest) -> FiberRadioQuote:
    """Price a link and check its payback against the limit for the term."""
    plan = find_plan(plans, request.speed)
    monthly = discounted_monthly(plan, request)
    installation = plan.installation_cost if request.include_installation else 0

    payback = validate_payback(
        installation,
        plan.double_fiber_radio_cost,
        monthly,
        request.contract_term,
    )

    return FiberRadioQuote(
        speed=plan.speed,
        description=plan.description,
        contract_term=request.contract_term,
        base_monthly=monthly_price(plan, request.contract_term),
        monthly=monthly,
        installation=installation,
        equipment_cost=plan.double_fiber_radio_cost,
        has_partners=_has_partners(request),
        payback=payback,
    )


def calculate_dre_for_period(
    months: int,
    plan: FiberRadioPlan,
    request: FiberRadioQuoteRequest,
    tables: CommissionTables,
    tax_rates: Optional[FiberRadioTaxRates] = None,
) -> FiberRadioDRE:
    """
    DRE of a link over a period of `months`.

    The monthly value always comes from the selected contract term; only the
    revenue horizon changes with the period. Commissions are paid on the
    monthly value (or its increase, for existing clients) times the contract
    term, so they repeat across periods.
    """
    tax_rates = tax_rates or FiberRadioTaxRates()
    term = request.contract_term

    monthly = discounted_monthly(plan, request)
    installation = plan.installation_cost if request.include_installation else 0
    equipment = plan.double_fiber_radio_cost

    total_revenue = monthly * months
    first_month_total = total_revenue + installation

    band = 0 if request.create_last_mile else plan.speed * tax_rates.banda * months
    last_mile = request.last_mile_cost if request.create_last_mile else 0
    simples = first_month_total * tax_rates.simples_nacional / 100

    if request.is_existing_client:
        base = monthly - request.previous_monthly_fee
    else:
        base = monthly

    has_partners = _has_partners(request)
    seller_rate = resolve_seller_rate(tables, term, has_partners)
    indicator_rate, influencer_rate = partner_rates(
        tables,
        base,
        term,
        request.include_referral_partner,
        request.include_influencer_partner,
    )
    seller = base * seller_rate / 100 * term
    indicator = base * indicator_rate / 100 * term
    influencer = base * influencer_rate / 100 * term
    total_commissions = seller + indicator + influencer

    expenses = first_month_total * tax_rates.custo_despesa / 100
    balance = first_month_total - equipment - band - simples - total_commissions - expenses

    commission_base = base * term
    if total_commissions > 0 and commission_base != 0:
        average_commission_rate = total_commissions / commission_base
    else:
        average_commission_rate = DEFAULT_COMMISSION_RATE

    # monthly is already discounted
    payback_months = calculate_payback(
        installation,
        equipment,
        monthly,
        months,
        commission_rate=average_commission_rate,
    )

    margin = balance / first_month_total * 100 if first_month_total > 0 else 0
    invested = equipment + last_mile + installation
    roi = balance / invested * 100 if invested > 0 else 0
    total_cost = band + equipment + last_mile + simples + total_commissions + expenses

    if request.is_existing_client and request.previous_monthly_fee > 0:
        contract_difference = (monthly - request.previous_monthly_fee) * months
    else:
        contract_difference = 0

    return FiberRadioDRE(
        months=months,
        receita_mensal=monthly,
        receita_total_periodo=total_revenue,
        receita_instalacao=installation,
        receita_total_primeiro_mes=first_month_total,
        custo_double_fiber_radio=equipment,
        custo_banda=band,
        fundraising=0,
        last_mile=last_mile,
        simples_nacional=simples,
        comissao_vendedor=seller,
        comissao_parceiro_indicador=indicator,
        comissao_parceiro_influenciador=influencer,
        total_comissoes=total_commissions,
        custo_despesa=expenses,
        balance=balance,
        rentabilidade=balance / equipment * 100 if equipment > 0 else 0,
        lucratividade=margin,
        margem_liquida=margin,
        markup=(first_month_total - total_cost) / total_cost * 100 if total_cost > 0 else 0,
        roi=roi,
        roi_anualizado=roi * 12 / months if months > 0 else 0,
        payback_months=payback_months,
        diferenca_valores_contrato=contract_difference,
    )


def calculate_dre_all_periods(
    plans: Sequence[FiberRadioPlan],
    request: FiberRadioQuoteRequest,
    tables: CommissionTables,
    periods: Optional[Sequence[int]] = None,
    tax_rates: Optional[FiberRadioTaxRates] = None,
) -> Dict[int, FiberRadioDRE]:
    plan = find_plan(plans, request.speed)
    return {
        months: calculate_dre_for_period(months, plan, request, tables, tax_rates)
        for months in periods or DRE_PERIODS
    }
