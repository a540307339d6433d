"""
Commission rate lookups.

WHAT: Default commission tables and the lookups every calculator uses to
turn a contract term (and, for partners, a monthly revenue) into a rate.

WHY: Sellers are paid by contract term; referral (indicator) and influencer
partners are paid by term and by the monthly revenue bracket of the deal.
When a partner takes part, the seller is paid from the channel_seller table
instead of the seller table.

HOW: Tables are pydantic models (see pricing_api.schemas.commission). The
stored document is loaded by the API layer; when nothing is stored the
defaults below apply.
"""

from typing import List, Optional, Sequence

from pricing_api.schemas.commission import (
    CommissionBracket,
    CommissionTables,
    CommissionTerms,
)


# (label, min, max) of the partner revenue brackets
_BRACKET_RANGES = [
    ("Até 500,00", 0, 500),
    ("500,01 a 1.000,00", 500.01, 1000),
    ("1.000,01 a 1.500,00", 1000.01, 1500),
    ("1.500,01 a 3.000,00", 1500.01, 3000),
    ("3.000,01 a 5.000,00", 3000.01, 5000),
    ("Acima de 5.000,01", 5000.01, 99999999),
]

_INFLUENCER_RATES = [
    (1.50, 2.00, 2.50, 2.50, 2.50),
    (2.51, 3.25, 4.00, 4.00, 4.00),
    (4.01, 4.50, 5.00, 5.00, 5.00),
    (5.01, 5.50, 6.00, 6.00, 6.00),
    (6.01, 6.50, 7.00, 7.00, 7.00),
    (7.01, 7.50, 8.00, 8.00, 8.00),
]

_INDICATOR_RATES = [
    (0.50, 0.67, 0.83, 0.83, 0.83),
    (0.84, 1.08, 1.33, 1.33, 1.33),
    (1.34, 1.50, 1.67, 1.67, 1.67),
    (1.67, 1.83, 2.00, 2.00, 2.00),
    (2.00, 2.17, 2.50, 2.50, 2.50),
    (2.34, 2.50, 3.00, 3.00, 3.00),
]


def _terms(id: str, rates: Sequence[float]) -> CommissionTerms:
    return CommissionTerms(
        id=id,
        months_12=rates[0],
        months_24=rates[1],
        months_36=rates[2],
        months_48=rates[3],
        months_60=rates[4],
    )


def _brackets(prefix: str, rates: List[Sequence[float]]) -> List[CommissionBracket]:
    brackets = []
    for index, ((label, low, high), row) in enumerate(zip(_BRACKET_RANGES, rates), start=1):
        brackets.append(
            CommissionBracket(
                id=f"{prefix}_range_{index:03d}",
                revenue_range=label,
                revenue_min=low,
                revenue_max=high,
                months_12=row[0],
                months_24=row[1],
                months_36=row[2],
                months_48=row[3],
                months_60=row[4],
            )
        )
    return brackets


def default_commission_tables() -> CommissionTables:
    """Build a fresh copy of the default commission tables."""
    return CommissionTables(
        channel_seller=_terms("cs_default_001", (0.60, 1.20, 2.00, 2.00, 2.00)),
        channel_director=_terms("cd_default_001", (0, 0, 0, 0, 0)),
        seller=_terms("s_default_001", (1.2, 2.4, 3.6, 3.6, 3.6)),
        channel_influencer=_brackets("ci", _INFLUENCER_RATES),
        channel_indicator=_brackets("cind", _INDICATOR_RATES),
    )


def term_rate(terms: Optional[CommissionTerms], months: int) -> float:
    """
    Pick the rate for a contract term.

    Terms between the table columns round up to the next column; anything
    above 48 months uses the 60 month rate.
    """
    if terms is None:
        return 0
    if months <= 12:
        return terms.months_12
    if months <= 24:
        return terms.months_24
    if months <= 36:
        return terms.months_36
    if months <= 48:
        return terms.months_48
    return terms.months_60


def bracket_rate(
    brackets: Optional[List[CommissionBracket]],
    monthly_revenue: float,
    months: int,
) -> float:
    """Rate of the first bracket containing monthly_revenue, 0 when none does."""
    for bracket in brackets or []:
        if bracket.revenue_min <= monthly_revenue <= bracket.revenue_max:
            return term_rate(bracket, months)
    return 0


def seller_rate(tables: CommissionTables, months: int) -> float:
    return term_rate(tables.seller, months)


def channel_seller_rate(tables: CommissionTables, months: int) -> float:
    return term_rate(tables.channel_seller, months)


def channel_director_rate(tables: CommissionTables, months: int) -> float:
    return term_rate(tables.channel_director, months)


def channel_indicator_rate(tables: CommissionTables, monthly_revenue: float, months: int) -> float:
    return bracket_rate(tables.channel_indicator, monthly_revenue, months)


def channel_influencer_rate(tables: CommissionTables, monthly_revenue: float, months: int) -> float:
    return bracket_rate(tables.channel_influencer, monthly_revenue, months)


def resolve_seller_rate(tables: CommissionTables, months: int, has_partners: bool) -> float:
    """Seller rate for a deal, taken from channel_seller when a partner participates."""
    if has_partners:
        return channel_seller_rate(tables, months)
    return seller_rate(tables, months)


def partner_rates(
    tables: CommissionTables,
    monthly_revenue: float,
    months: int,
    include_indicator: bool,
    include_influencer: bool,
) -> tuple:
    """(indicator_rate, influencer_rate) for the partners taking part in a deal."""
    indicator = channel_indicator_rate(tables, monthly_revenue, months) if include_indicator else 0
    influencer = channel_influencer_rate(tables, monthly_revenue, months) if include_influencer else 0
    return indicator, influencer
