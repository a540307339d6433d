"""
Commission table schemas.

WHY: Commission rates are edited by the commercial team and stored as one
JSON document. Field names follow the stored document (months_12,
revenue_min, ...) so existing tables load without conversion.

All rates are percentages (1.2 means 1.2%).
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CommissionTerms(BaseModel):
    """Rates by contract term."""

    id: Optional[str] = None
    months_12: float = Field(0, ge=0, le=100)
    months_24: float = Field(0, ge=0, le=100)
    months_36: float = Field(0, ge=0, le=100)
    months_48: float = Field(0, ge=0, le=100)
    months_60: float = Field(0, ge=0, le=100)


class CommissionBracket(CommissionTerms):
    """Rates by contract term for one monthly revenue bracket."""

    revenue_range: str = ""
    revenue_min: float = Field(..., ge=0)
    revenue_max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> "CommissionBracket":
        if self.revenue_max < self.revenue_min:
            raise ValueError("revenue_max must be greater than or equal to revenue_min")
        return self


class CommissionTables(BaseModel):
    """
    Every commission table used by the calculators.

    channel_seller replaces seller when a partner (indicator or influencer)
    takes part in the deal.
    """

    model_config = ConfigDict(populate_by_name=True)

    channel_seller: Optional[CommissionTerms] = Field(None, alias="channelSeller")
    channel_director: Optional[CommissionTerms] = Field(None, alias="channelDirector")
    seller: Optional[CommissionTerms] = None
    channel_influencer: Optional[List[CommissionBracket]] = Field(None, alias="channelInfluencer")
    channel_indicator: Optional[List[CommissionBracket]] = Field(None, alias="channelIndicator")


class CommissionTableUpdate(BaseModel):
    """
    Edit of one commission table.

    table is the field name or document key (seller, channelIndicator, ...);
    data is a rate row, a bracket, or the full bracket list.
    """

    table: Optional[str] = None
    data: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None
