"""
Proposal API endpoints.

WHAT: RESTful API for the proposals produced by the calculators.

WHY: Every calculator saves its result as a proposal that sellers list,
search, reopen and renegotiate. The endpoints:
1. List with pagination, status/type filters and text search
2. Create with generated base id and yearly proposal number
3. Partial update that merges discount flags into metadata
4. Delete
5. Negotiation rounds over the monthly total
6. Typed per-calculator ids (Prop_Pabx_Sip_001_v1) and new versions

HOW: Uses FastAPI router with dependency injection for auth and database.
Totals are recalculated from the products when products or discount flags
change and the caller did not send explicit totals.
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.core.deps import get_current_user
from pricing_api.core.exceptions import ProposalNotFoundError
from pricing_api.db.session import get_db
from pricing_api.dao.proposal import ProposalDAO
from pricing_api.models.proposal import Proposal, ProposalType, PROPOSAL_TYPE_DESCRIPTIONS
from pricing_api.models.user import User
from pricing_api.schemas.proposal import (
    ProposalCreate,
    ProposalUpdate,
    ProposalResponse,
    ProposalListResponse,
    ProposalTypeInfo,
    ProposalTypesResponse,
    ProposalNextIdResponse,
)
from pricing_api.schemas.vm import NegotiationRound, NegotiationRoundCreate
from pricing_api.services.vm_pricing import add_negotiation_round


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proposals", tags=["proposals"])

# ProposalUpdate fields stored inside metadata, with their metadata keys
_METADATA_FIELDS = {
    "apply_salesperson_discount": "applySalespersonDiscount",
    "applied_director_discount_percentage": "appliedDirectorDiscountPercentage",
    "base_total_monthly": "baseTotalMonthly",
    "changes": "changes",
}

# Fields an update may clear with an explicit null
_NULLABLE_FIELDS = {"client_data", "account_manager", "expiry_date", "base_total_monthly", "changes"}


def _proposal_to_response(proposal: Proposal) -> ProposalResponse:
    """
    Convert Proposal model to ProposalResponse schema.

    WHY: The discount flags live in the metadata blob; the response lifts
    them to top-level fields so the proposal view can show them.
    """
    info = proposal.discount_info
    meta = proposal.extra_data or {}
    base_monthly = info["base_total_monthly"]

    return ProposalResponse(
        id=proposal.id,
        base_id=proposal.base_id,
        proposal_number=proposal.proposal_number,
        title=proposal.title,
        type=proposal.type,
        status=proposal.status,
        client=proposal.client or {},
        client_data=proposal.client_data,
        account_manager=proposal.account_manager,
        value=float(proposal.value or 0),
        total_setup=float(proposal.total_setup or 0),
        total_monthly=float(proposal.total_monthly or 0),
        contract_period=proposal.contract_period,
        date=proposal.date,
        expiry_date=proposal.expiry_date,
        version=proposal.version,
        products=proposal.products or [],
        items_data=proposal.items_data or [],
        metadata=meta,
        created_by=proposal.created_by,
        created_at=proposal.created_at,
        updated_at=proposal.updated_at,
        apply_salesperson_discount=info["apply_salesperson_discount"],
        applied_director_discount_percentage=info["applied_director_discount_percentage"],
        base_total_monthly=float(base_monthly) if base_monthly is not None else None,
        changes=meta.get("changes"),
    )


async def _get_proposal_or_404(dao: ProposalDAO, proposal_id: int) -> Proposal:
    proposal = await dao.get_by_id(proposal_id)
    if not proposal:
        raise ProposalNotFoundError(
            message="Proposal not found",
            resource_type="Proposal",
            resource_id=proposal_id,
        )
    return proposal


@router.get(
    "",
    response_model=ProposalListResponse,
    summary="List proposals",
    description="List proposals newest first with filters and search",
)
async def list_proposals(
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: int = Query(default=10, ge=1, le=100, description="Page size"),
    all: bool = Query(default=False, description="Return every match without paging"),
    status_filter: Optional[str] = Query(default=None, alias="status", description="Filter by status"),
    type: Optional[ProposalType] = Query(default=None, description="Filter by calculator type"),
    search: Optional[str] = Query(default=None, description="Text in title or base id"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProposalListResponse:
    """
    List proposals.

    Pagination metadata is computed from the requested limit even when
    `all` returns every match in one page.
    """
    proposals, total = await ProposalDAO(db).list_proposals(
        skip=(page - 1) * limit,
        limit=None if all else limit,
        status=status_filter,
        type=type,
        search=search,
    )

    return ProposalListResponse(
        items=[_proposal_to_response(p) for p in proposals],
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit),
    )


@router.get(
    "/types",
    response_model=ProposalTypesResponse,
    summary="List proposal types",
)
async def list_proposal_types(
    current_user: User = Depends(get_current_user),
) -> ProposalTypesResponse:
    types = [
        ProposalTypeInfo(id=proposal_type, name=name, description=description)
        for proposal_type, (name, description) in PROPOSAL_TYPE_DESCRIPTIONS.items()
    ]
    return ProposalTypesResponse(types=types, count=len(types))


@router.get(
    "/next-id",
    response_model=ProposalNextIdResponse,
    summary="Next typed proposal id",
    description="Next free Prop_<Type>_<NNN>_v1 identifier for a calculator",
)
async def get_next_proposal_id(
    type: ProposalType = Query(..., description="Calculator type"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProposalNextIdResponse:
    """
    Raises:
        ValidationError (400): For GENERAL, which has no typed scheme
    """
    base_id = await ProposalDAO(db).next_typed_base_id(type)
    return ProposalNextIdResponse(type=type, base_id=base_id)


@router.post(
    "",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create proposal",
    description="Save a calculator result as a proposal",
)
async def create_proposal(
    data: ProposalCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    """
    Create a new proposal.

    WHY: The base id is generated when absent and suffixed when it collides
    with an existing one, so saving twice from the same calculator session
    never fails.

    Raises:
        ValidationError (400): If the body is invalid
    """
    fields = data.model_dump(exclude={"metadata", "products"})
    fields["extra_data"] = dict(data.metadata)
    fields["products"] = [p.model_dump() for p in data.products]
    if not data.status:
        fields.pop("status")

    dao = ProposalDAO(db)
    proposal = await dao.create_proposal(created_by=current_user.id, **fields)

    # WHY: Calculators that only send products get totals computed here
    explicit_totals = {"total_setup", "total_monthly"} & data.model_fields_set
    if data.products and not explicit_totals:
        proposal.calculate_totals()
        await db.flush()
        await db.refresh(proposal)

    logger.info(
        f"Proposal {proposal.base_id} ({proposal.proposal_number}) created by user {current_user.id}"
    )
    return _proposal_to_response(proposal)


@router.get(
    "/{proposal_id}",
    response_model=ProposalResponse,
    summary="Get proposal",
)
async def get_proposal(
    proposal_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    """
    Get proposal by ID.

    Raises:
        ProposalNotFoundError (404): If proposal doesn't exist
    """
    proposal = await _get_proposal_or_404(ProposalDAO(db), proposal_id)
    return _proposal_to_response(proposal)


@router.put(
    "/{proposal_id}",
    response_model=ProposalResponse,
    summary="Update proposal",
    description="Partial update; discount flags and notes are merged into metadata",
)
async def update_proposal(
    proposal_id: int,
    data: ProposalUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    """
    Update proposal.

    HOW:
    1. Column fields present in the body replace the stored values; nulls are
       ignored except for the optional client, manager and expiry fields
    2. `metadata` keys and the discount fields are merged into the stored metadata
    3. Totals are recalculated when products or discount flags changed and
       the body carries no explicit totals

    Raises:
        ProposalNotFoundError (404): If proposal doesn't exist
    """
    dao = ProposalDAO(db)
    proposal = await _get_proposal_or_404(dao, proposal_id)

    updates = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in _NULLABLE_FIELDS
    }
    meta_updates = dict(updates.pop("metadata", None) or {})
    for field, key in _METADATA_FIELDS.items():
        if field in updates:
            meta_updates[key] = updates.pop(field)

    for field, value in updates.items():
        setattr(proposal, field, value)
    if meta_updates:
        meta = dict(proposal.extra_data or {})
        meta.update(meta_updates)
        proposal.extra_data = meta

    discount_changed = bool(
        {"applySalespersonDiscount", "appliedDirectorDiscountPercentage"} & meta_updates.keys()
    )
    explicit_totals = {"total_setup", "total_monthly"} & updates.keys()
    if ("products" in updates or discount_changed) and not explicit_totals:
        proposal.calculate_totals()

    await db.flush()
    await db.refresh(proposal)

    logger.info(f"Proposal {proposal.base_id} updated by user {current_user.id}")
    return _proposal_to_response(proposal)


@router.delete(
    "/{proposal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete proposal",
)
async def delete_proposal(
    proposal_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete proposal.

    Raises:
        ProposalNotFoundError (404): If proposal doesn't exist
    """
    dao = ProposalDAO(db)
    proposal = await _get_proposal_or_404(dao, proposal_id)
    await dao.delete(proposal.id)
    logger.info(f"Proposal {proposal.base_id} deleted by user {current_user.id}")


@router.post(
    "/{proposal_id}/negotiation-rounds",
    response_model=NegotiationRound,
    status_code=status.HTTP_201_CREATED,
    summary="Add negotiation round",
    description="Offer a discount over the current monthly total of a proposal",
)
async def create_negotiation_round(
    proposal_id: int,
    data: NegotiationRoundCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> NegotiationRound:
    """
    Add a negotiation round.

    WHY: Each round starts from the price of the previous round, so the
    client sees the successive discounts compound.
    """
    dao = ProposalDAO(db)
    proposal = await _get_proposal_or_404(dao, proposal_id)

    rounds = [NegotiationRound.model_validate(r) for r in proposal.negotiation_rounds]
    current_total = rounds[-1].total_price if rounds else float(proposal.total_monthly or 0)

    new_round = add_negotiation_round(
        rounds,
        current_total=current_total,
        discount=data.discount,
        description=data.description,
        vms=data.vms,
    )
    stored = [r.model_dump(mode="json") for r in rounds + [new_round]]
    await dao.merge_metadata(proposal, {"negotiationRounds": stored})

    return new_round


@router.post(
    "/{proposal_id}/versions",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new proposal version",
    description="Copy a typed proposal under the next version id (..._v2, _v3, ...)",
)
async def create_proposal_version(
    proposal_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProposalResponse:
    """
    Create a new version of a proposal.

    WHY: A revised offer keeps its number and type part; only the version
    suffix moves, past the highest version already stored. The copy keeps
    the proposal number, products, totals and metadata, and starts as a
    draft.

    Raises:
        ProposalNotFoundError (404): If proposal doesn't exist
        ValidationError (400): If the proposal has no typed id
    """
    dao = ProposalDAO(db)
    source = await _get_proposal_or_404(dao, proposal_id)
    base_id = await dao.new_version_base_id(source.base_id)

    proposal = await dao.create_proposal(
        created_by=current_user.id,
        base_id=base_id,
        proposal_number=source.proposal_number,
        title=source.title,
        type=source.type,
        client=dict(source.client or {}),
        client_data=source.client_data,
        account_manager=source.account_manager,
        value=source.value,
        total_setup=source.total_setup,
        total_monthly=source.total_monthly,
        contract_period=source.contract_period,
        expiry_date=source.expiry_date,
        version=int(base_id.rsplit("_v", 1)[1]),
        products=list(source.products or []),
        items_data=list(source.items_data or []),
        extra_data=dict(source.extra_data or {}),
    )

    logger.info(f"Proposal {source.base_id} versioned as {proposal.base_id} by user {current_user.id}")
    return _proposal_to_response(proposal)
