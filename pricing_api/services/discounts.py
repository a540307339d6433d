"""
Commercial discounts shared by every calculator.

WHAT: Salesperson discount (fixed 5%), director discount (X%) and the 20%
partner surcharge used by the double fiber/radio links.

WHY: All calculators apply the same factors, multiplicatively and to the
monthly value only. Setup/installation fees are never discounted.
"""

from dataclasses import dataclass

from pricing_api.core.exceptions import InvalidDiscountError


SALESPERSON_DISCOUNT_FACTOR = 0.95
PARTNER_SURCHARGE_FACTOR = 1.20


def validate_director_percentage(percentage: float) -> float:
    """
    Reject director discounts outside 0..100.

    Raises:
        InvalidDiscountError: If the percentage is out of range
    """
    if percentage < 0 or percentage > 100:
        raise InvalidDiscountError(director_discount_percentage=percentage)
    return percentage


def salesperson_factor(apply_discount: bool) -> float:
    return SALESPERSON_DISCOUNT_FACTOR if apply_discount else 1.0


def director_factor(percentage: float) -> float:
    return 1 - validate_director_percentage(percentage) / 100


def apply_monthly_discounts(
    monthly: float,
    salesperson: bool = False,
    director_percentage: float = 0,
) -> float:
    """
    Apply salesperson and director discounts to a monthly value.

    The two factors commute, so the order they are granted in doesn't matter.

    Example:
        >>> apply_monthly_discounts(1000, salesperson=True, director_percentage=10)
        855.0
    """
    return monthly * salesperson_factor(salesperson) * director_factor(director_percentage)


def apply_partner_surcharge(monthly: float, has_partners: bool) -> float:
    """Add 20% to the monthly price when a referral or influencer partner participates."""
    return monthly * PARTNER_SURCHARGE_FACTOR if has_partners else monthly


@dataclass
class DiscountedTotals:
    """Proposal totals before and after discounts."""

    raw_setup: float
    raw_monthly: float
    setup: float
    monthly: float
    apply_salesperson_discount: bool
    applied_director_discount_percentage: float

    @property
    def has_discount(self) -> bool:
        return self.apply_salesperson_discount or self.applied_director_discount_percentage > 0


def discount_totals(
    raw_setup: float,
    raw_monthly: float,
    salesperson: bool = False,
    director_percentage: float = 0,
) -> DiscountedTotals:
    """Discount the monthly total of a proposal; setup passes through unchanged."""
    return DiscountedTotals(
        raw_setup=raw_setup,
        raw_monthly=raw_monthly,
        setup=raw_setup,
        monthly=apply_monthly_discounts(raw_monthly, salesperson, director_percentage),
        apply_salesperson_discount=salesperson,
        applied_director_discount_percentage=director_percentage,
    )
