"""
Pydantic schemas for DRE (Demonstrativo de Resultado do Exercício).

WHAT: Inputs and results of the income statements built by the calculators:
the generic first-month DRE, the PABX/SIP DRE table, and the PABX/SIP
result summary.

WHY: The financial line names (margem líquida, lucratividade,
rentabilidade) are the terms the commercial team reads on the proposal, so
the result fields keep them.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class DREInput(BaseModel):
    """Values feeding a first-month DRE. All amounts in BRL."""

    monthly_revenue: float = 0
    installation_revenue: float = 0
    service_cost: float = 0
    bandwidth_cost: float = 0
    last_mile_cost: float = 0
    simples_nacional: float = 0
    commissions: float = 0
    expense_cost: float = 0
    contract_period: int = 12


class DREResult(BaseModel):
    monthly_revenue: float
    installation_revenue: float
    first_month_revenue: float
    service_cost: float
    bandwidth_cost: float
    last_mile_cost: float
    simples_nacional: float
    total_commissions: float
    expense_cost: float
    total_cost: float
    balance: float
    margem_liquida: float
    markup: float
    lucratividade: float
    rentabilidade: float


class DREFormatted(DREResult):
    """DRE with BRL strings for display."""

    monthly_revenue_formatted: str
    installation_revenue_formatted: str
    balance_formatted: str
    margem_liquida_formatted: str
    markup_formatted: str


class DRERequest(DREInput):
    periods: List[int] = Field(default_factory=lambda: [12, 24, 36, 48, 60])


class DREResponse(BaseModel):
    """DRE per contract period, with payback and consistency checks."""

    periods: Dict[int, DREResult]
    formatted: Optional[DREFormatted] = None
    payback_months: int
    is_valid: bool
    errors: List[str] = Field(default_factory=list)


class DRELine(BaseModel):
    """One row of an income statement: label, amount and share of revenue."""

    label: str
    value: float
    percentage: float


class DRETable(BaseModel):
    """Monthly income statement of a PABX/SIP proposal."""

    monthly_revenue: float
    total_costs: float
    revenue_taxes: float
    net_revenue: float
    gross_profit: float
    seller_commission: float
    director_commission: float
    partner_commission: float
    profit_after_commissions: float
    fixed_expenses: float
    profit_before_taxes: float
    profit_taxes: float
    net_profit: float
    lines: List[DRELine]


class PabxResultSummary(BaseModel):
    """DRE summary shown in the PABX/SIP result tab."""

    receita_bruta: float
    receita_liquida: float
    custo_despesa: float
    total_impostos: float
    comissao_vendedor: float
    comissao_diretor: float
    comissao_parceiro_indicador: float
    comissao_parceiro_influenciador: float
    lucro_operacional: float
    lucro_liquido: float
    rentabilidade: float
    payback_meses: int = 0
    taxa_instalacao: float = 0
    receita_anual: float
    lucro_anual: float

