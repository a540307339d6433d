"""
Proposal Data Access Object (DAO).

WHAT: Database operations for the Proposal model.

WHY: The proposal screens of every calculator list, search and edit the same
table. Keeping the queries here gives the routes one consistent API for
pagination, search and identifier generation.

HOW: Extends BaseDAO with proposal-specific queries:
- Paginated listing with status/type filters and text search
- Lookup by public base id
- Typed per-calculator ids and their versions
- Yearly sequence for proposal numbers
- Metadata merging for discount flags and negotiation rounds
"""

from datetime import datetime
from typing import List, Optional, Dict, Any, Tuple
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.dao.base import BaseDAO
from pricing_api.models.proposal import Proposal, ProposalType, DEFAULT_PROPOSAL_STATUS
from pricing_api.services.proposal_numbering import (
    generate_base_id,
    deduplicate_base_id,
    format_proposal_number,
    new_version_id,
    next_typed_id,
    typed_id_prefix,
)


class ProposalDAO(BaseDAO[Proposal]):
    """
    Data Access Object for Proposal model.

    Example:
        async def latest(db: AsyncSession):
            proposals, total = await ProposalDAO(db).list_proposals(limit=5)
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize ProposalDAO.

        Args:
            session: Async database session
        """
        super().__init__(Proposal, session)

    def _apply_filters(
        self,
        query,
        status: Optional[str] = None,
        type: Optional[ProposalType] = None,
        search: Optional[str] = None,
    ):
        if status:
            query = query.where(Proposal.status == status)
        if type:
            query = query.where(Proposal.type == type)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(Proposal.title).like(pattern),
                    func.lower(Proposal.base_id).like(pattern),
                )
            )
        return query

    async def list_proposals(
        self,
        skip: int = 0,
        limit: Optional[int] = 10,
        status: Optional[str] = None,
        type: Optional[ProposalType] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Proposal], int]:
        """
        List proposals newest first.

        WHY: The search box matches the title or the base id, case
        insensitively, so sellers can paste either.

        Args:
            skip: Pagination offset
            limit: Page size; None returns every match
            status: Exact status filter
            type: Calculator type filter
            search: Text contained in title or base id

        Returns:
            Tuple of (proposals, total matching count)
        """
        count_query = self._apply_filters(
            select(func.count()).select_from(Proposal), status, type, search
        )
        total = (await self.session.execute(count_query)).scalar_one()

        query = self._apply_filters(select(Proposal), status, type, search)
        query = query.order_by(Proposal.created_at.desc(), Proposal.id.desc())
        if limit is not None:
            query = query.offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_by_base_id(self, base_id: str) -> Optional[Proposal]:
        return await self.get_by_field("base_id", base_id)

    async def base_id_taken(self, base_id: str) -> bool:
        result = await self.session.execute(
            select(Proposal.id).where(func.lower(Proposal.base_id) == base_id.lower()).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def base_ids_starting_with(self, prefix: str) -> List[str]:
        result = await self.session.execute(
            select(Proposal.base_id).where(Proposal.base_id.startswith(prefix, autoescape=True))
        )
        return list(result.scalars().all())

    async def next_typed_base_id(self, proposal_type: ProposalType) -> str:
        """Next free Prop_<Type>_<NNN>_v1 id for a calculator."""
        prefix = typed_id_prefix(proposal_type)
        return next_typed_id(await self.base_ids_starting_with(prefix + "_"), proposal_type)

    async def new_version_base_id(self, base_id: str) -> str:
        """Id of the next version of a typed proposal, across every stored version."""
        stem = base_id.rsplit("_v", 1)[0]
        return new_version_id(base_id, await self.base_ids_starting_with(stem + "_v"))

    async def count_for_year(self, year: int) -> int:
        """Number of proposals dated in the given year."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Proposal)
            .where(
                Proposal.date >= datetime(year, 1, 1),
                Proposal.date < datetime(year + 1, 1, 1),
            )
        )
        return result.scalar_one()

    async def next_proposal_number(self, date: Optional[datetime] = None) -> str:
        year = (date or datetime.utcnow()).year
        return format_proposal_number(await self.count_for_year(year), year)

    async def unique_base_id(self, base_id: Optional[str] = None) -> str:
        """
        Return base_id (or a generated one), suffixed when already taken.

        Ids differing only in case count as taken.
        """
        candidate = base_id or generate_base_id()
        if await self.base_id_taken(candidate):
            candidate = deduplicate_base_id(candidate).upper()
        return candidate

    async def create_proposal(self, created_by: Optional[int], **fields: Any) -> Proposal:
        """
        Create a proposal, filling the generated identifiers and defaults.

        Args:
            created_by: Creating user id
            **fields: Proposal columns; base_id is optional

        Returns:
            Created proposal
        """
        date = fields.get("date") or datetime.utcnow()
        fields["date"] = date
        fields["base_id"] = await self.unique_base_id(fields.get("base_id"))
        if not fields.get("proposal_number"):
            fields["proposal_number"] = await self.next_proposal_number(date)
        fields.setdefault("status", DEFAULT_PROPOSAL_STATUS)
        fields.setdefault("type", ProposalType.GENERAL)
        fields.setdefault("contract_period", 12)
        fields.setdefault("version", 1)
        return await self.create(created_by=created_by, **fields)

    async def merge_metadata(self, proposal: Proposal, updates: Dict[str, Any]) -> Proposal:
        """
        Merge keys into the proposal metadata.

        WHY: JSON columns are only flushed when the attribute is reassigned,
        so the merged dict is written back as a new object.
        """
        meta = dict(proposal.extra_data or {})
        meta.update(updates)
        proposal.extra_data = meta
        await self.session.flush()
        await self.session.refresh(proposal)
        return proposal
