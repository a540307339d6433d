"""
Payback service.

WHAT: Month in which a contract recovers its initial investment, and the
check of that month against the limit allowed for the contract term.

WHY: Proposals whose payback exceeds the limit need director approval. Links
and PABX contracts are simulated month by month with the DRE deductions;
generic services use a plain investment / monthly revenue ratio.

HOW: Each simulation walks months 1..term, accumulating the net flow over a
negative opening balance, and stops at the first month the balance is no
longer negative. When the contract never pays back, the term is returned.
"""

import logging
import math

from pricing_api.schemas.payback import PaybackKind, PaybackRequest, PaybackValidation
from pricing_api.services.discounts import apply_monthly_discounts, director_factor


logger = logging.getLogger(__name__)


BAND_COST_RATE = 0.0725
REVENUE_TAX_RATE = 0.15
EXPENSE_RATE = 0.10
PABX_MONTHLY_EXPENSE_RATE = 0.05
DEFAULT_COMMISSION_RATE = 0.05

MAX_PAYBACK_BY_TERM = {12: 8, 24: 10, 36: 11, 48: 13, 60: 14}


def max_payback_months(term: int) -> int:
    """Payback limit of link and PABX contracts; half the term for non standard terms."""
    return MAX_PAYBACK_BY_TERM.get(term, term // 2)


def calculate_payback(
    installation_fee: float,
    equipment_cost: float,
    monthly_revenue: float,
    term: int,
    salesperson_discount: bool = False,
    director_pct: float = 0,
    commission_rate: float = DEFAULT_COMMISSION_RATE,
) -> int:
    """
    Simulate the payback of a link contract.

    Month 1 also receives the installation fee. Each month pays band cost,
    revenue tax and expenses over the month revenue, plus commission over
    the discounted monthly value.

    Returns:
        First month with a non negative cumulative balance, or term
    """
    if monthly_revenue <= 0:
        return term

    discounted = apply_monthly_discounts(monthly_revenue, salesperson_discount, director_pct)
    balance = -equipment_cost

    for month in range(1, term + 1):
        revenue = discounted + (installation_fee if month == 1 else 0)
        flow = (
            revenue
            - revenue * BAND_COST_RATE
            - revenue * REVENUE_TAX_RATE
            - discounted * commission_rate
            - revenue * EXPENSE_RATE
        )
        balance += flow
        if balance >= 0:
            return month

    return term


def calculate_pabx_payback(
    installation_fee: float,
    equipment_cost: float,
    monthly_revenue: float,
    term: int,
    director_pct: float = 0,
    seller_rate: float = 0,
) -> int:
    """
    Simulate the payback of a PABX contract.

    The installation fee is received up front, net of tax and expenses. The
    seller commission (seller_rate is a percentage) is paid on month 1 only.
    """
    if monthly_revenue <= 0:
        return term

    discounted = monthly_revenue * director_factor(director_pct)
    balance = (
        installation_fee
        - equipment_cost
        - installation_fee * REVENUE_TAX_RATE
        - installation_fee * EXPENSE_RATE
    )

    for month in range(1, term + 1):
        flow = discounted - discounted * REVENUE_TAX_RATE - discounted * PABX_MONTHLY_EXPENSE_RATE
        if month == 1:
            flow -= discounted * seller_rate / 100
        balance += flow
        if balance >= 0:
            return month

    return term


def check_payback(actual: int, term: int) -> PaybackValidation:
    """Check a simulated link or PABX payback against the limit of its term."""
    limit = max_payback_months(term)
    validation = PaybackValidation(
        is_valid=0 < actual <= limit,
        actual_payback=actual,
        max_payback=limit,
    )
    validation.message = format_payback_message(validation, term)
    if not validation.is_valid:
        logger.info(f"Payback of {actual} months exceeds the {limit} month limit for a {term} month term")
    return validation


def validate_payback(
    installation_fee: float,
    equipment_cost: float,
    monthly_revenue: float,
    term: int,
    salesperson_discount: bool = False,
    director_pct: float = 0,
) -> PaybackValidation:
    """Check a link payback, computed with the default commission rate, against its limit."""
    actual = calculate_payback(
        installation_fee,
        equipment_cost,
        monthly_revenue,
        term,
        salesperson_discount,
        director_pct,
        DEFAULT_COMMISSION_RATE,
    )
    return check_payback(actual, term)


def simple_payback_limit(term: int) -> int:
    if term >= 60:
        return 24
    if term >= 48:
        return 20
    if term >= 36:
        return 18
    if term >= 24:
        return 12
    return 6


def simple_payback(installation_fee: float, service_cost: float, monthly_revenue: float) -> int:
    """ceil((installation + service cost) / monthly revenue), 0 without revenue."""
    if monthly_revenue <= 0:
        return 0
    return math.ceil((installation_fee + service_cost) / monthly_revenue)


def validate_simple_payback(
    installation_fee: float,
    service_cost: float,
    monthly_revenue: float,
    term: int,
) -> PaybackValidation:
    actual = simple_payback(installation_fee, service_cost, monthly_revenue)
    limit = simple_payback_limit(term)
    validation = PaybackValidation(
        is_valid=actual <= limit,
        actual_payback=actual,
        max_payback=limit,
    )
    validation.message = format_payback_message(validation, term)
    return validation


def format_payback_message(validation: PaybackValidation, term: int) -> str:
    if validation.is_valid:
        return (
            f"O payback de {validation.actual_payback} meses está dentro do limite "
            f"de {validation.max_payback} meses."
        )
    return (
        f"O payback de {validation.actual_payback} meses excede o limite de "
        f"{validation.max_payback} meses para contratos de {term} meses."
    )


def evaluate_payback(request: PaybackRequest) -> PaybackValidation:
    """
    Run the payback model selected by request.kind and check it against its limit.

    LINK and PABX use the link/PABX limit table; SIMPLE treats equipment_cost
    as the service cost and uses the generic limits.
    """
    term = request.contract_term
    if request.kind == PaybackKind.SIMPLE:
        return validate_simple_payback(
            request.installation_fee,
            request.equipment_cost,
            request.monthly_revenue,
            term,
        )

    if request.kind == PaybackKind.PABX:
        actual = calculate_pabx_payback(
            request.installation_fee,
            request.equipment_cost,
            request.monthly_revenue,
            term,
            request.director_discount_percentage,
            request.commission_rate * 100,
        )
    else:
        actual = calculate_payback(
            request.installation_fee,
            request.equipment_cost,
            request.monthly_revenue,
            term,
            request.apply_salesperson_discount,
            request.director_discount_percentage,
            request.commission_rate,
        )

    return check_payback(actual, term)
