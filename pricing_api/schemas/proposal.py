"""
Pydantic schemas for proposal endpoints.

WHAT: Request/response schemas for proposal management API.

WHY: Schemas define API contracts for proposal operations:
1. Validate incoming request data including priced products
2. Accept both snake_case and camelCase keys (the calculators send either)
3. Surface the discount flags kept in the metadata blob

HOW: Uses Pydantic v2 with a camelCase alias generator and populate_by_name,
so `total_monthly` and `totalMonthly` are both accepted on input and the
response is serialized in camelCase.
"""

from datetime import datetime
from typing import Optional, Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pricing_api.models.proposal import ProposalType


class ProposalProduct(BaseModel):
    """
    Priced line item of a proposal.

    WHY: Totals are recalculated from these values, setup and monthly kept
    apart because discounts only touch the monthly part.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field("", description="Product kind (VM, PABX, SIP, FIBER, ...)")
    description: str = Field("", description="Product description")
    setup: float = Field(0, ge=0, description="One-time setup value")
    monthly: float = Field(0, ge=0, description="Monthly value")
    details: Dict[str, Any] = Field(default_factory=dict)


class _ProposalFields(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProposalCreate(_ProposalFields):
    """
    Proposal creation request schema.

    WHY: Only the title is required; identifiers, number, status and
    contract period get their defaults on save.
    """

    title: str = Field(..., min_length=1, max_length=255, description="Proposal title")
    base_id: Optional[str] = Field(None, max_length=40, description="Public identifier")
    type: ProposalType = Field(ProposalType.GENERAL, description="Calculator type")
    status: Optional[str] = Field(None, max_length=64, description="Workflow status")
    client: Dict[str, Any] = Field(default_factory=dict, description="Client snapshot")
    client_data: Optional[Dict[str, Any]] = None
    account_manager: Optional[Dict[str, Any]] = None
    value: float = Field(0, ge=0)
    total_setup: float = Field(0, ge=0)
    total_monthly: float = Field(0, ge=0)
    contract_period: int = Field(12, gt=0, le=120, description="Contract term in months")
    date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    version: int = Field(1, ge=1)
    products: List[ProposalProduct] = Field(default_factory=list)
    items_data: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Proposta VM - Cliente Exemplo",
                "type": "VM",
                "client": {"name": "Cliente Exemplo", "email": "contato@cliente.com.br"},
                "totalSetup": 500.0,
                "totalMonthly": 1860.0,
                "contractPeriod": 24,
                "products": [
                    {"type": "VM", "description": "VM 4 vCPU / 8 GB", "setup": 500, "monthly": 1860}
                ],
            }
        },
    )


class ProposalUpdate(_ProposalFields):
    """
    Proposal update request schema.

    WHY: All fields optional for partial updates. The discount flags and
    change notes are merged into metadata instead of replacing it.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[ProposalType] = None
    status: Optional[str] = Field(None, max_length=64)
    client: Optional[Dict[str, Any]] = None
    client_data: Optional[Dict[str, Any]] = None
    account_manager: Optional[Dict[str, Any]] = None
    value: Optional[float] = Field(None, ge=0)
    total_setup: Optional[float] = Field(None, ge=0)
    total_monthly: Optional[float] = Field(None, ge=0)
    contract_period: Optional[int] = Field(None, gt=0, le=120)
    date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    version: Optional[int] = Field(None, ge=1)
    products: Optional[List[ProposalProduct]] = None
    items_data: Optional[List[Dict[str, Any]]] = None
    metadata: Optional[Dict[str, Any]] = None

    # Merged into metadata
    apply_salesperson_discount: Optional[bool] = None
    applied_director_discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    base_total_monthly: Optional[float] = Field(None, ge=0)
    changes: Optional[str] = None


class ProposalResponse(_ProposalFields):
    """Proposal as returned by the API, discount flags lifted from metadata."""

    id: int
    base_id: str
    proposal_number: Optional[str] = None
    title: str
    type: ProposalType
    status: str
    client: Dict[str, Any] = Field(default_factory=dict)
    client_data: Optional[Dict[str, Any]] = None
    account_manager: Optional[Dict[str, Any]] = None
    value: float
    total_setup: float
    total_monthly: float
    contract_period: int
    date: datetime
    expiry_date: Optional[datetime] = None
    version: int
    products: List[Dict[str, Any]] = Field(default_factory=list)
    items_data: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    apply_salesperson_discount: bool = False
    applied_director_discount_percentage: float = 0
    base_total_monthly: Optional[float] = None
    changes: Optional[str] = None


class ProposalListResponse(BaseModel):
    """
    Paginated proposal list response.

    WHY: Pagination metadata lets the frontend render page controls.
    """

    items: List[ProposalResponse] = Field(..., description="Proposals, newest first")
    total: int = Field(..., ge=0, description="Total matching proposals")
    page: int = Field(..., ge=1, description="Current page")
    limit: int = Field(..., ge=1, description="Page size")
    pages: int = Field(..., ge=0, description="Total pages")


class ProposalTypeInfo(BaseModel):
    id: ProposalType
    name: str
    description: str


class ProposalTypesResponse(BaseModel):
    types: List[ProposalTypeInfo]
    count: int


class ProposalNextIdResponse(_ProposalFields):
    """Next typed identifier for a calculator, e.g. Prop_Inter_Double_004_v1."""

    type: ProposalType
    base_id: str
