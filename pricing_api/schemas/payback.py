"""
Pydantic schemas for payback calculations.
"""

from enum import Enum
from pydantic import BaseModel, Field


class PaybackKind(str, Enum):
    """
    Payback model to apply.

    LINK simulates a fiber/radio link month by month, PABX simulates a
    telephony contract, SIMPLE divides the investment by the monthly revenue.
    """

    LINK = "link"
    PABX = "pabx"
    SIMPLE = "simple"


class PaybackRequest(BaseModel):
    """Inputs of a payback calculation."""

    kind: PaybackKind = PaybackKind.LINK
    installation_fee: float = Field(0, ge=0)
    equipment_cost: float = Field(0, ge=0, description="Equipment (or service) cost recovered by the contract")
    monthly_revenue: float
    contract_term: int = Field(..., ge=1, le=120)
    apply_salesperson_discount: bool = False
    director_discount_percentage: float = Field(0, ge=0, le=100)
    commission_rate: float = Field(0.05, ge=0, le=1, description="Fraction of the monthly revenue paid as commission")


class PaybackValidation(BaseModel):
    """Payback month checked against the limit for the contract term."""

    is_valid: bool
    actual_payback: int
    max_payback: int
    message: str = ""
