"""
Tests for the PABX/SIP pricing service.

WHY: Telephony prices come from range tables, so off-by-one range lookups
are the main risk.
"""

import pytest
from types import SimpleNamespace

from pricing_api.schemas.pabx import PabxModality, PabxRequest, ProposalItem, SipRequest
from pricing_api.services.commissions import default_commission_tables
from pricing_api.services.pabx_sip import (
    additional_channels_cost,
    calculate_pabx,
    calculate_premium_pabx,
    calculate_proposal_totals,
    calculate_sip,
    calculate_sip_request,
    calculate_standard_pabx,
    default_standard_prices,
    get_premium_price_range,
    get_price_range,
    merge_price_rows,
)


class TestPriceRanges:
    """Extension count to table range."""

    @pytest.mark.parametrize(
        "extensions,key",
        [(0, "10"), (10, "10"), (11, "20"), (30, "30"), (31, "50"), (500, "500"), (501, "1000"), (5000, "1000")],
    )
    def test_standard_range(self, extensions, key):
        assert get_price_range(extensions) == key

    @pytest.mark.parametrize(
        "extensions,sub_plan,label",
        [
            (1, "Ilimitado", ""),
            (5, "Tarifado", "2 a 9 ramais"),
            (15, "Ilimitado", "10 a 19 ramais"),
            (25, "Ilimitado", "20 a 49 ramais"),
            (25, "Tarifado", "10 a 49 ramais"),
            (75, "Tarifado", "50 a 99 ramais"),
            (150, "Ilimitado", "100 a 199 ramais"),
            (250, "Tarifado", "+ de 200 ramais"),
        ],
    )
    def test_premium_range(self, extensions, sub_plan, label):
        assert get_premium_price_range(extensions, sub_plan) == label


class TestStandardPabx:
    """PABX Standard pricing."""

    def test_full_price(self):
        result = calculate_standard_pabx(15, True, True, 5, ai_plan="20K")

        assert result.setup == 2000
        assert result.base_monthly == pytest.approx(29 * 15 + 220)
        assert result.device_rental_cost == pytest.approx(34 * 5)
        assert result.ai_agent_cost == 720
        assert result.total_monthly == pytest.approx(655 + 170 + 720)

    def test_without_setup_or_devices(self):
        result = calculate_standard_pabx(15, False, False, 5)

        assert result.setup == 0
        assert result.device_rental_cost == 0
        assert result.total_monthly == result.base_monthly

    def test_unknown_ai_plan_costs_nothing(self):
        assert calculate_standard_pabx(5, True, False, 0, ai_plan="1M").ai_agent_cost == 0

    def test_stored_prices_override_defaults(self):
        rows = [
            SimpleNamespace(category="monthly", range_key="20", price=10),
            SimpleNamespace(category="unknown", range_key="20", price=99),
        ]
        prices = merge_price_rows(rows)

        assert prices.monthly["20"] == 10
        assert prices.monthly["10"] == 30
        assert calculate_standard_pabx(15, False, False, 0, prices=prices).base_monthly == 10 * 15 + 220

    def test_default_prices_are_not_mutated(self):
        merge_price_rows([SimpleNamespace(category="setup", range_key="10", price=1)])
        assert default_standard_prices().setup["10"] == 1250


class TestPremiumPabx:
    """PABX Premium pricing."""

    def test_price_per_extension(self):
        result = calculate_premium_pabx(15, 24, "Essencial", "Ilimitado", "Sem", True)

        assert result.setup == 2500
        assert result.base_monthly == 57 * 15
        assert result.total_monthly == 57 * 15

    def test_with_equipment(self):
        result = calculate_premium_pabx(25, 36, "Profissional", "Tarifado", "Com", False)

        assert result.setup == 0
        assert result.base_monthly == 57 * 25

    def test_unpriced_term_is_zero(self):
        result = calculate_premium_pabx(15, 12, "Essencial", "Ilimitado", "Sem", True)
        assert result.total_monthly == 0
        assert result.setup == 0

    def test_dispatch_by_modality(self):
        request = PabxRequest(
            modality=PabxModality.PREMIUM,
            extensions=15,
            contract_duration=24,
            include_ai=True,
            ai_plan="40K",
        )
        result = calculate_pabx(request)

        assert result.ai_agent_cost == 1370
        assert result.total_monthly == 57 * 15 + 1370

    def test_ai_ignored_when_not_included(self):
        request = PabxRequest(extensions=5, include_ai=False, ai_plan="40K")
        assert calculate_pabx(request).ai_agent_cost == 0


class TestSip:
    """SIP trunk pricing."""

    def test_plan_price(self):
        assert calculate_sip("SIP ILIMITADO 10 Canais", False).monthly == 450

    def test_with_equipment(self):
        assert calculate_sip("SIP ILIMITADO 10 Canais", False, with_equipment=True).monthly == 600

    def test_plan_without_equipment_price_keeps_monthly(self):
        assert calculate_sip("SIP TARIFADO 2 Canais", False, with_equipment=True).monthly == 150

    def test_additional_channels(self):
        assert calculate_sip("SIP ILIMITADO 10 Canais", False, additional_channels=5).monthly == 550
        assert additional_channels_cost("SIP TARIFADO 4 Canais", 2) == 50

    def test_channels_above_maximum_are_not_priced(self):
        assert additional_channels_cost("SIP ILIMITADO 10 Canais", 6) == 0

    def test_unknown_plan(self):
        assert calculate_sip("SIP INEXISTENTE", True) is None
        assert calculate_sip_request(SipRequest(plan="SIP INEXISTENTE")) is None


class TestProposalTotals:
    """PABX/SIP proposal totals."""

    items = [
        ProposalItem(description="PABX", setup=1000, monthly=400),
        ProposalItem(description="SIP", setup=0, monthly=200),
    ]

    def test_without_discounts(self):
        totals = calculate_proposal_totals("ACME", self.items, default_commission_tables())

        assert totals.title == "Proposta PABX/SIP - ACME"
        assert totals.status == "Rascunho"
        assert totals.total_setup == 1000
        assert totals.total_monthly == 600
        assert totals.version == 1

    def test_discounts_and_partner_commission(self):
        totals = calculate_proposal_totals(
            "ACME",
            self.items,
            default_commission_tables(),
            contract_duration=12,
            salesperson=True,
            include_indicator=True,
        )

        # Indicator bracket 500.01..1000 at 12 months pays 0.84% of the raw monthly
        assert totals.partner_indicator_commission == pytest.approx(600 * 0.0084)
        assert totals.total_monthly == pytest.approx(570 - 600 * 0.0084)
        assert totals.total_setup == 1000
        assert totals.version == 2
