"""
Tests for ProposalDAO.

WHY: Proposal identifiers must be unique and numbers sequential per year;
listing must filter and search the way the proposal screens expect.
"""

import re
from datetime import datetime
from decimal import Decimal

import pytest

from pricing_api.dao.proposal import ProposalDAO
from pricing_api.models.proposal import ProposalType

from tests.factories import ProposalFactory


class TestTypedIds:
    """Per-calculator ids and versions."""

    async def test_next_typed_base_id(self, db_session):
        dao = ProposalDAO(db_session)
        assert await dao.next_typed_base_id(ProposalType.DOUBLE) == "Prop_Inter_Double_001_v1"

        await ProposalFactory.create(db_session, base_id="Prop_Inter_Double_001_v1", type=ProposalType.DOUBLE)
        await ProposalFactory.create(db_session, base_id="Prop_Inter_Double_002_v3", type=ProposalType.DOUBLE)
        await ProposalFactory.create(db_session, base_id="Prop_Pabx_Sip_007_v1", type=ProposalType.PABX)

        assert await dao.next_typed_base_id(ProposalType.DOUBLE) == "Prop_Inter_Double_003_v1"
        assert await dao.next_typed_base_id(ProposalType.PABX) == "Prop_Pabx_Sip_008_v1"

    async def test_new_version_base_id(self, db_session):
        for base_id in ("Prop_MV_001_v1", "Prop_MV_001_v2", "Prop_MV_010_v4"):
            await ProposalFactory.create(db_session, base_id=base_id, type=ProposalType.VM)

        dao = ProposalDAO(db_session)
        assert await dao.new_version_base_id("Prop_MV_001_v1") == "Prop_MV_001_v3"
        assert await dao.new_version_base_id("Prop_MV_010_v4") == "Prop_MV_010_v5"


class TestCreateProposal:
    """Identifier generation and defaults."""

    async def test_defaults(self, db_session, test_user):
        proposal = await ProposalFactory.create(
            db_session, created_by=test_user.id, date=datetime(2025, 3, 10)
        )

        assert re.fullmatch(r"PROP-[0-9A-Z]+-[0-9A-Z]{6}", proposal.base_id)
        assert proposal.proposal_number == "0001/2025"
        assert proposal.status == "Rascunho"
        assert proposal.type == ProposalType.GENERAL
        assert proposal.contract_period == 12
        assert proposal.version == 1
        assert proposal.created_by == test_user.id

    async def test_numbers_are_sequential_per_year(self, db_session):
        await ProposalFactory.create(db_session, date=datetime(2024, 12, 31))
        first = await ProposalFactory.create(db_session, date=datetime(2025, 1, 1))
        second = await ProposalFactory.create(db_session, date=datetime(2025, 6, 1))

        assert first.proposal_number == "0001/2025"
        assert second.proposal_number == "0002/2025"

    async def test_given_base_id_is_kept(self, db_session):
        proposal = await ProposalFactory.create(db_session, base_id="Prop_Inter_Double_001_v1")
        assert proposal.base_id == "Prop_Inter_Double_001_v1"

    async def test_taken_base_id_is_deduplicated(self, db_session):
        first = await ProposalFactory.create(db_session, base_id="PROP-DUP")
        second = await ProposalFactory.create(db_session, base_id="prop-dup")

        assert first.base_id == "PROP-DUP"
        assert second.base_id.startswith("PROP-DUP_")
        assert second.base_id != first.base_id

    async def test_get_by_base_id(self, db_session):
        created = await ProposalFactory.create(db_session, base_id="PROP-FIND")

        found = await ProposalDAO(db_session).get_by_base_id("PROP-FIND")
        assert found.id == created.id


class TestListProposals:
    """Listing, filtering and search."""

    async def test_newest_first_with_total(self, db_session):
        for index in range(3):
            await ProposalFactory.create(db_session, title=f"Proposta {index}")

        items, total = await ProposalDAO(db_session).list_proposals(skip=0, limit=2)

        assert total == 3
        assert [p.title for p in items] == ["Proposta 2", "Proposta 1"]

    async def test_limit_none_returns_all(self, db_session):
        for index in range(12):
            await ProposalFactory.create(db_session, title=f"P{index}")

        items, total = await ProposalDAO(db_session).list_proposals(limit=None)
        assert len(items) == total == 12

    async def test_filters(self, db_session):
        await ProposalFactory.create(db_session, title="VM", type=ProposalType.VM)
        await ProposalFactory.create(db_session, title="PABX", type=ProposalType.PABX, status="Aprovada")

        dao = ProposalDAO(db_session)
        items, total = await dao.list_proposals(type=ProposalType.VM)
        assert total == 1 and items[0].title == "VM"

        items, total = await dao.list_proposals(status="Aprovada")
        assert total == 1 and items[0].title == "PABX"

    async def test_search_title_or_base_id(self, db_session):
        await ProposalFactory.create(db_session, title="Cloud ACME", base_id="PROP-AAA")
        await ProposalFactory.create(db_session, title="Link Beta", base_id="PROP-BBB")

        dao = ProposalDAO(db_session)
        items, total = await dao.list_proposals(search="acme")
        assert total == 1 and items[0].base_id == "PROP-AAA"

        items, total = await dao.list_proposals(search="prop-bbb")
        assert total == 1 and items[0].title == "Link Beta"


class TestMetadata:
    """Metadata merging and total calculation."""

    async def test_merge_keeps_existing_keys(self, db_session):
        proposal = await ProposalFactory.create(db_session, metadata={"source": "vm"})

        proposal = await ProposalDAO(db_session).merge_metadata(proposal, {"applySalespersonDiscount": True})

        assert proposal.extra_data == {"source": "vm", "applySalespersonDiscount": True}
        assert proposal.discount_info["apply_salesperson_discount"] is True

    async def test_calculate_totals_discounts_monthly_only(self, db_session):
        proposal = await ProposalFactory.create(
            db_session,
            products=[
                {"type": "VM", "description": "web", "setup": 500, "monthly": 600},
                {"type": "VM", "description": "db", "setup": 500, "monthly": 400},
            ],
            metadata={"applySalespersonDiscount": True, "appliedDirectorDiscountPercentage": 10},
        )

        proposal.calculate_totals()

        assert proposal.total_setup == Decimal("1000")
        assert proposal.total_monthly == Decimal("855.0")
        assert proposal.extra_data["baseTotalMonthly"] == pytest.approx(1000)
