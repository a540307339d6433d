"""
DRE (income statement) service.

WHAT: First-month DRE over explicit cost lines, multi-period DRE, the PABX/SIP
monthly DRE table and the PABX/SIP result summary.

WHY: Every proposal shows whether the deal is profitable after taxes,
commissions and expenses. Percentages are always over gross revenue.

HOW: Pure functions returning pydantic result models. Commission rates are
percentages resolved by the caller from the commission tables.
"""

import math
from typing import Dict, List, Optional, Sequence

from pricing_api.schemas.dre import (
    DREFormatted,
    DREInput,
    DRELine,
    DRETable,
    DREResult,
    PabxResultSummary,
)
from pricing_api.schemas.pabx import PabxResult, SipResult


DEFAULT_PERIODS = (12, 24, 36, 48, 60)

PABX_COST_RATE = 0.50
SIP_COST_RATE = 0.70
FALLBACK_COST_RATE = 0.60
DEFAULT_AMORTIZATION_MONTHS = 24

SUMMARY_TAX_RATE = 0.15
SUMMARY_EXPENSE_RATE = 0.10


def _percent_of(value: float, base: float) -> float:
    return value / base * 100 if base > 0 else 0


def calculate_dre(inputs: DREInput) -> DREResult:
    """
    Build the first-month DRE.

    Revenue is the monthly value plus the installation fee; every cost line
    is taken as given.
    """
    revenue = inputs.monthly_revenue + inputs.installation_revenue
    total_cost = (
        inputs.service_cost
        + inputs.bandwidth_cost
        + inputs.last_mile_cost
        + inputs.simples_nacional
        + inputs.commissions
        + inputs.expense_cost
    )
    balance = revenue - total_cost
    margem_liquida = _percent_of(balance, revenue)
    markup = _percent_of(balance, total_cost)

    return DREResult(
        monthly_revenue=inputs.monthly_revenue,
        installation_revenue=inputs.installation_revenue,
        first_month_revenue=revenue,
        service_cost=inputs.service_cost,
        bandwidth_cost=inputs.bandwidth_cost,
        last_mile_cost=inputs.last_mile_cost,
        simples_nacional=inputs.simples_nacional,
        total_commissions=inputs.commissions,
        expense_cost=inputs.expense_cost,
        total_cost=total_cost,
        balance=balance,
        margem_liquida=margem_liquida,
        markup=markup,
        lucratividade=margem_liquida,
        rentabilidade=margem_liquida,
    )


def calculate_multiple_period_dre(
    inputs: DREInput,
    periods: Sequence[int] = DEFAULT_PERIODS,
) -> Dict[int, DREResult]:
    """DRE for each period that fits in the contract period."""
    return {
        period: calculate_dre(inputs)
        for period in periods
        if period <= inputs.contract_period
    }


def calculate_payback_from_dre(
    installation_revenue: float,
    service_cost: float,
    monthly_revenue: float,
) -> int:
    if monthly_revenue <= 0:
        return 0
    return math.ceil((installation_revenue + service_cost) / monthly_revenue)


def validate_dre_values(inputs: DREInput) -> List[str]:
    """Consistency errors of DRE inputs; an empty list means valid."""
    errors = []
    if inputs.monthly_revenue < 0:
        errors.append("Receita mensal não pode ser negativa")
    if inputs.installation_revenue < 0:
        errors.append("Receita de instalação não pode ser negativa")
    if inputs.service_cost < 0:
        errors.append("Custo de serviço não pode ser negativo")
    if inputs.contract_period <= 0:
        errors.append("Período contratual deve ser maior que zero")
    return errors


def format_brl(value: float) -> str:
    """
    Format a value as Brazilian currency.

    Example:
        >>> format_brl(1234.5)
        'R$ 1.234,50'
    """
    sign = "-" if value < 0 else ""
    formatted = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {formatted}"


def format_dre_for_display(dre: DREResult) -> DREFormatted:
    return DREFormatted(
        **dre.model_dump(),
        monthly_revenue_formatted=format_brl(dre.monthly_revenue),
        installation_revenue_formatted=format_brl(dre.installation_revenue),
        balance_formatted=format_brl(dre.balance),
        margem_liquida_formatted=f"{dre.margem_liquida:.2f}%",
        markup_formatted=f"{dre.markup:.2f}%",
    )


def build_dre_table(
    pabx: Optional[PabxResult],
    sip: Optional[SipResult],
    contract_duration: int,
    seller_rate: float,
    director_rate: float,
    partner_rate: float,
    monthly_revenue: float = 0,
    total_costs: float = 0,
    revenue_tax_rate: float = 15,
    profit_tax_rate: float = 0,
) -> DRETable:
    """
    Monthly income statement of a PABX/SIP proposal.

    Revenue is the PABX plus SIP monthly value (monthly_revenue when neither
    is priced). Operating costs are estimated as a share of each product's
    revenue. Setup fees are amortized over the contract as fixed expenses.
    Profit tax applies only to a positive profit. All rates are percentages.
    """
    revenue = 0.0
    if pabx is not None:
        revenue += pabx.total_monthly
    if sip is not None:
        revenue += sip.monthly
    if revenue <= 0:
        revenue = monthly_revenue

    if pabx is not None or sip is not None:
        costs = 0.0
        if pabx is not None:
            costs += pabx.total_monthly * PABX_COST_RATE
        if sip is not None:
            costs += sip.monthly * SIP_COST_RATE
    else:
        costs = total_costs if total_costs > 0 else revenue * FALLBACK_COST_RATE

    revenue_taxes = revenue * revenue_tax_rate / 100
    net_revenue = revenue - revenue_taxes

    seller = revenue * seller_rate / 100
    director = revenue * director_rate / 100
    partner = revenue * partner_rate / 100

    gross_profit = net_revenue - costs
    after_commissions = gross_profit - seller - director - partner

    total_setup = (pabx.setup if pabx is not None else 0) + (sip.setup if sip is not None else 0)
    fixed_expenses = total_setup / (contract_duration or DEFAULT_AMORTIZATION_MONTHS)
    before_taxes = after_commissions - fixed_expenses

    profit_taxes = before_taxes * profit_tax_rate / 100 if before_taxes > 0 else 0
    net_profit = before_taxes - profit_taxes

    rows = [
        ("Receita Bruta", revenue),
        ("Impostos sobre Receita", revenue_taxes),
        ("Receita Líquida", net_revenue),
        ("Custos Operacionais", costs),
        ("Lucro Bruto", gross_profit),
        ("Comissão Vendedor", seller),
        ("Comissão Diretor", director),
        ("Comissão Parceiro", partner),
        ("Lucro após Comissões", after_commissions),
        ("Despesas Fixas", fixed_expenses),
        ("Lucro antes dos Impostos", before_taxes),
        ("Impostos sobre Lucro", profit_taxes),
        ("Lucro Líquido", net_profit),
    ]

    return DRETable(
        monthly_revenue=revenue,
        total_costs=costs,
        revenue_taxes=revenue_taxes,
        net_revenue=net_revenue,
        gross_profit=gross_profit,
        seller_commission=seller,
        director_commission=director,
        partner_commission=partner,
        profit_after_commissions=after_commissions,
        fixed_expenses=fixed_expenses,
        profit_before_taxes=before_taxes,
        profit_taxes=profit_taxes,
        net_profit=net_profit,
        lines=[
            DRELine(label=label, value=value, percentage=_percent_of(value, revenue))
            for label, value in rows
        ],
    )


def build_pabx_result_summary(
    monthly_revenue: float,
    seller_rate: float,
    director_rate: float,
    indicator_rate: float,
    influencer_rate: float,
    installation_fee: float = 0,
) -> PabxResultSummary:
    """DRE summary of the PABX/SIP result tab. Rates are percentages of revenue."""
    tax = monthly_revenue * SUMMARY_TAX_RATE
    expenses = monthly_revenue * SUMMARY_EXPENSE_RATE
    net_revenue = monthly_revenue - tax - expenses

    seller = monthly_revenue * seller_rate / 100
    director = monthly_revenue * director_rate / 100
    indicator = monthly_revenue * indicator_rate / 100
    influencer = monthly_revenue * influencer_rate / 100

    profit = net_revenue - seller - director - indicator - influencer

    return PabxResultSummary(
        receita_bruta=monthly_revenue,
        receita_liquida=net_revenue,
        custo_despesa=expenses,
        total_impostos=tax,
        comissao_vendedor=seller,
        comissao_diretor=director,
        comissao_parceiro_indicador=indicator,
        comissao_parceiro_influenciador=influencer,
        lucro_operacional=profit,
        lucro_liquido=profit,
        rentabilidade=_percent_of(profit, monthly_revenue),
        payback_meses=0,
        taxa_instalacao=installation_fee,
        receita_anual=monthly_revenue * 12,
        lucro_anual=profit * 12,
    )
