"""
Integration tests for proposal endpoints.

WHY: Proposals are what sellers send to clients; totals, discount flags and
negotiation rounds must survive the round trip through the API.
"""

import pytest
from httpx import AsyncClient

from pricing_api.models.proposal import ProposalType

from tests.factories import ProposalFactory


PRODUCTS = [
    {"type": "VM", "description": "web", "setup": 500, "monthly": 600},
    {"type": "VM", "description": "db", "setup": 500, "monthly": 400},
]


class TestCreateProposal:
    """POST /api/proposals"""

    async def test_create_minimal(self, client: AsyncClient, user_headers, test_user):
        response = await client.post("/api/proposals", json={"title": "Proposta Cloud"}, headers=user_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Proposta Cloud"
        assert data["baseId"].startswith("PROP-")
        assert data["proposalNumber"].startswith("0001/")
        assert data["status"] == "Rascunho"
        assert data["type"] == "GENERAL"
        assert data["contractPeriod"] == 12
        assert data["createdBy"] == test_user.id

    async def test_totals_calculated_from_products(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/proposals",
            json={
                "title": "Proposta VM",
                "type": "VM",
                "products": PRODUCTS,
                "metadata": {"applySalespersonDiscount": True},
            },
            headers=user_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["totalSetup"] == 1000
        assert data["totalMonthly"] == pytest.approx(950)
        assert data["baseTotalMonthly"] == pytest.approx(1000)
        assert data["applySalespersonDiscount"] is True

    async def test_explicit_totals_are_kept(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/proposals",
            json={"title": "Manual", "products": PRODUCTS, "totalSetup": 10, "totalMonthly": 20},
            headers=user_headers,
        )

        data = response.json()
        assert data["totalSetup"] == 10
        assert data["totalMonthly"] == 20

    async def test_snake_case_body_is_accepted(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/proposals",
            json={"title": "Snake", "contract_period": 36, "total_monthly": 99},
            headers=user_headers,
        )

        assert response.status_code == 201
        assert response.json()["contractPeriod"] == 36

    async def test_title_required(self, client: AsyncClient, user_headers):
        response = await client.post("/api/proposals", json={"type": "VM"}, headers=user_headers)
        assert response.status_code == 400

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/proposals", json={"title": "x"})
        assert response.status_code in (401, 403)


class TestListProposals:
    """GET /api/proposals"""

    async def test_pagination(self, client: AsyncClient, db_session, user_headers):
        for index in range(12):
            await ProposalFactory.create(db_session, title=f"Proposta {index}")

        response = await client.get("/api/proposals?page=2&limit=5", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 12
        assert data["pages"] == 3
        assert data["page"] == 2
        assert len(data["items"]) == 5
        assert data["items"][0]["title"] == "Proposta 6"

    async def test_all_returns_every_match(self, client: AsyncClient, db_session, user_headers):
        for index in range(12):
            await ProposalFactory.create(db_session, title=f"Proposta {index}")

        response = await client.get("/api/proposals?all=true&limit=5", headers=user_headers)
        assert len(response.json()["items"]) == 12

    async def test_filters_and_search(self, client: AsyncClient, db_session, user_headers):
        await ProposalFactory.create(db_session, title="Cloud ACME", type=ProposalType.VM)
        await ProposalFactory.create(db_session, title="PABX Beta", type=ProposalType.PABX, status="Aprovada")

        response = await client.get("/api/proposals?type=PABX", headers=user_headers)
        assert [p["title"] for p in response.json()["items"]] == ["PABX Beta"]

        response = await client.get("/api/proposals?status=Aprovada", headers=user_headers)
        assert response.json()["total"] == 1

        response = await client.get("/api/proposals?search=acme", headers=user_headers)
        assert [p["title"] for p in response.json()["items"]] == ["Cloud ACME"]

    async def test_limit_bounds(self, client: AsyncClient, user_headers):
        response = await client.get("/api/proposals?limit=500", headers=user_headers)
        assert response.status_code == 400

    async def test_types(self, client: AsyncClient, user_headers):
        response = await client.get("/api/proposals/types", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == len(data["types"])
        assert "PABX" in {t["id"] for t in data["types"]}


class TestGetUpdateDelete:
    """GET/PUT/DELETE /api/proposals/{id}"""

    async def test_get(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session, title="Detalhe")

        response = await client.get(f"/api/proposals/{proposal.id}", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["baseId"] == proposal.base_id

    async def test_get_not_found(self, client: AsyncClient, user_headers):
        response = await client.get("/api/proposals/99999", headers=user_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "ProposalNotFoundError"

    async def test_update_columns(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session, title="Antigo")

        response = await client.put(
            f"/api/proposals/{proposal.id}",
            json={"title": "Novo", "status": "Aguardando Aprovação do Cliente"},
            headers=user_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Novo"
        assert data["status"] == "Aguardando Aprovação do Cliente"

    async def test_discount_flags_recalculate_totals(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session, products=PRODUCTS, total_monthly=1000, total_setup=1000)

        response = await client.put(
            f"/api/proposals/{proposal.id}",
            json={"applySalespersonDiscount": True, "appliedDirectorDiscountPercentage": 10, "changes": "desconto"},
            headers=user_headers,
        )

        data = response.json()
        assert data["totalMonthly"] == pytest.approx(855)
        assert data["totalSetup"] == 1000
        assert data["appliedDirectorDiscountPercentage"] == 10
        assert data["changes"] == "desconto"
        assert data["metadata"]["applySalespersonDiscount"] is True

    async def test_metadata_is_merged(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session, metadata={"source": "pabx"})

        response = await client.put(
            f"/api/proposals/{proposal.id}",
            json={"metadata": {"note": "ok"}},
            headers=user_headers,
        )

        assert response.json()["metadata"] == {"source": "pabx", "note": "ok"}

    async def test_null_required_fields_are_ignored(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session, title="Mantido", client_data={"cnpj": "1"})

        response = await client.put(
            f"/api/proposals/{proposal.id}",
            json={"title": None, "status": None, "contractPeriod": None, "products": None, "clientData": None},
            headers=user_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Mantido"
        assert data["status"] == "Rascunho"
        assert data["contractPeriod"] == 12
        assert data["clientData"] is None

        response = await client.put(f"/api/proposals/{proposal.id}", json={"title": "Depois"}, headers=user_headers)
        assert response.json()["title"] == "Depois"

    async def test_invalid_director_discount(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session)

        response = await client.put(
            f"/api/proposals/{proposal.id}",
            json={"appliedDirectorDiscountPercentage": 120},
            headers=user_headers,
        )
        assert response.status_code == 400

    async def test_update_not_found(self, client: AsyncClient, user_headers):
        response = await client.put("/api/proposals/99999", json={"title": "x"}, headers=user_headers)
        assert response.status_code == 404

    async def test_delete(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session)

        response = await client.delete(f"/api/proposals/{proposal.id}", headers=user_headers)
        assert response.status_code == 204

        response = await client.get(f"/api/proposals/{proposal.id}", headers=user_headers)
        assert response.status_code == 404


class TestNegotiationRounds:
    """POST /api/proposals/{id}/negotiation-rounds"""

    async def test_rounds_compound(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session, products=PRODUCTS, total_monthly=1000)
        url = f"/api/proposals/{proposal.id}/negotiation-rounds"

        first = await client.post(url, json={"discount": 10, "description": "primeira"}, headers=user_headers)
        assert first.status_code == 201
        assert first.json()["round_number"] == 1
        assert first.json()["total_price"] == pytest.approx(900)

        second = await client.post(url, json={"discount": 10}, headers=user_headers)
        assert second.json()["round_number"] == 2
        assert second.json()["original_price"] == pytest.approx(900)
        assert second.json()["total_price"] == pytest.approx(810)

        response = await client.get(f"/api/proposals/{proposal.id}", headers=user_headers)
        assert len(response.json()["metadata"]["negotiationRounds"]) == 2

    async def test_invalid_discount(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session)

        response = await client.post(
            f"/api/proposals/{proposal.id}/negotiation-rounds",
            json={"discount": 150},
            headers=user_headers,
        )
        assert response.status_code == 400


class TestTypedIdsAndVersions:
    """GET /api/proposals/next-id and POST /api/proposals/{id}/versions"""

    async def test_next_id(self, client: AsyncClient, db_session, user_headers):
        await ProposalFactory.create(db_session, base_id="Prop_Inter_Double_001_v1", type=ProposalType.DOUBLE)

        response = await client.get("/api/proposals/next-id?type=DOUBLE", headers=user_headers)

        assert response.status_code == 200
        assert response.json() == {"type": "DOUBLE", "baseId": "Prop_Inter_Double_002_v1"}

    async def test_next_id_for_general_is_rejected(self, client: AsyncClient, user_headers):
        response = await client.get("/api/proposals/next-id?type=GENERAL", headers=user_headers)
        assert response.status_code == 400

    async def test_create_with_typed_id(self, client: AsyncClient, user_headers):
        response = await client.post(
            "/api/proposals",
            json={"title": "Link", "type": "DOUBLE", "baseId": "Prop_Inter_Double_001_v1"},
            headers=user_headers,
        )
        assert response.json()["baseId"] == "Prop_Inter_Double_001_v1"

    async def test_new_version_copies_proposal(self, client: AsyncClient, db_session, user_headers):
        source = await ProposalFactory.create(
            db_session,
            base_id="Prop_Pabx_Sip_003_v1",
            type=ProposalType.PABX,
            products=PRODUCTS,
            total_monthly=1000,
            metadata={"applySalespersonDiscount": True},
            status="Aprovada",
        )

        response = await client.post(f"/api/proposals/{source.id}/versions", headers=user_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["baseId"] == "Prop_Pabx_Sip_003_v2"
        assert data["version"] == 2
        assert data["proposalNumber"] == source.proposal_number
        assert data["status"] == "Rascunho"
        assert data["totalMonthly"] == 1000
        assert data["applySalespersonDiscount"] is True
        assert len(data["products"]) == 2

        response = await client.post(f"/api/proposals/{source.id}/versions", headers=user_headers)
        assert response.json()["baseId"] == "Prop_Pabx_Sip_003_v3"

    async def test_generic_id_cannot_be_versioned(self, client: AsyncClient, db_session, user_headers):
        proposal = await ProposalFactory.create(db_session)

        response = await client.post(f"/api/proposals/{proposal.id}/versions", headers=user_headers)
        assert response.status_code == 400
