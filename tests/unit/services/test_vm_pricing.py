"""
Tests for the VM pricing service.

WHY: VM prices are built from several unit prices; the quote then stacks
markup, gross-up and discounts. Both must match a hand computation.
"""

import pytest

from pricing_api.core.exceptions import InvalidDiscountError, PricingValidationError
from pricing_api.schemas.vm import NegotiationStatus, PricingConfig, VMConfig, VMQuoteRequest
from pricing_api.services.commissions import default_commission_tables
from pricing_api.services.vm_pricing import (
    add_negotiation_round,
    calculate_vm_price,
    calculate_vm_total,
    quote_vm,
    revenue_tax_rate,
    validate_vm_proposal,
)


@pytest.fixture
def config() -> PricingConfig:
    return PricingConfig()


class TestCalculateVmPrice:
    """Monthly price of one VM."""

    def test_price_matches_manual_sum(self, config):
        vm = VMConfig(
            name="db",
            vcpu=4,
            ram=16,
            storage_type="SSD NVMe",
            storage_size=200,
            os="Windows Server",
            backup_size=500,
            additional_ip=True,
            additional_snapshot=True,
            vpn_site_to_site=True,
        )
        expected = 4 * 50 + 16 * 30 + 200 * 1.20 + 20 + 200 + 500 * 0.10 + 50 + 25 + 150

        assert calculate_vm_price(vm, config) == pytest.approx(expected)

    def test_unknown_storage_and_os_price_zero(self, config):
        vm = VMConfig(name="x", vcpu=0, ram=0, storage_type="Tape", storage_size=100, os="Plan9")
        # Only the network charge remains
        assert calculate_vm_price(vm, config) == pytest.approx(20)

    def test_total_multiplies_by_quantity(self, config):
        vms = [
            VMConfig(name="web", vcpu=2, ram=4, storage_size=0, quantity=3),
            VMConfig(name="db", vcpu=2, ram=4, storage_size=0),
        ]
        assert calculate_vm_total(vms, config) == pytest.approx(240 * 4)

    def test_stored_camel_case_config_is_accepted(self):
        config = PricingConfig.model_validate({"vcpuPerCore": 10, "ramPerGB": 1, "networkPerGbps": 0})
        vm = VMConfig(name="x", vcpu=2, ram=2, storage_size=0)
        assert calculate_vm_price(vm, config) == pytest.approx(22)


class TestQuoteVm:
    """Markup based quote."""

    def test_quote_build_up(self, config):
        request = VMQuoteRequest(
            vm=VMConfig(name="app", vcpu=2, ram=4, storage_size=100, quantity=2),
            contract_period=12,
        )
        result = quote_vm(request, config, default_commission_tables())

        cost = 100 + 120 + 30 + 20
        price_before = cost * 2 / (1 - 0.05 - 0.0365)
        after_contract = price_before * 0.95

        assert result.base_cost == pytest.approx(cost)
        assert result.markup_amount == pytest.approx(cost)
        assert result.price_before_discounts == pytest.approx(price_before)
        assert result.contract_discount_percentage == 5
        assert result.price_after_director_discount == pytest.approx(after_contract)
        assert result.final_price == pytest.approx(after_contract)
        assert result.seller_commission == pytest.approx(after_contract * 0.012)
        assert result.setup == 1000
        assert result.monthly == pytest.approx(after_contract * 2)

    def test_director_discount_applies_after_contract_discount(self, config):
        request = VMQuoteRequest(vm=VMConfig(name="app"), contract_period=24, director_discount_percentage=10)
        result = quote_vm(request, config, default_commission_tables())

        after_contract = result.price_before_discounts * 0.90
        assert result.director_discount_amount == pytest.approx(after_contract * 0.10)
        assert result.price_after_director_discount == pytest.approx(after_contract * 0.90)

    def test_partner_commission_reduces_final_price(self, config):
        base = quote_vm(VMQuoteRequest(vm=VMConfig(name="app")), config, default_commission_tables())
        with_partner = quote_vm(
            VMQuoteRequest(vm=VMConfig(name="app"), include_referral_partner=True),
            config,
            default_commission_tables(),
        )

        assert with_partner.referral_partner_commission > 0
        assert with_partner.final_price < base.final_price

    def test_non_positive_denominator_gives_zero_price(self):
        config = PricingConfig(commission=100)
        result = quote_vm(VMQuoteRequest(vm=VMConfig(name="app")), config, default_commission_tables())

        assert result.price_before_discounts == 0
        assert result.final_price == 0
        assert result.net_margin == 0

    def test_unknown_tax_regime_has_no_revenue_tax(self):
        assert revenue_tax_rate(PricingConfig(selected_tax_regime="Outro")) == 0

    def test_director_discount_out_of_range(self, config):
        request = VMQuoteRequest.model_construct(
            vm=VMConfig(name="app"),
            contract_period=12,
            director_discount_percentage=150,
            include_referral_partner=False,
            include_influencer_partner=False,
        )
        with pytest.raises(InvalidDiscountError):
            quote_vm(request, config, default_commission_tables())


class TestNegotiationRounds:
    """Negotiation rounds over a proposal total."""

    def test_first_round(self):
        new_round = add_negotiation_round([], 1000, 10, "primeira rodada")

        assert new_round.round_number == 1
        assert new_round.original_price == 1000
        assert new_round.total_price == pytest.approx(900)
        assert new_round.status == NegotiationStatus.ACTIVE

    def test_round_number_follows_history(self):
        first = add_negotiation_round([], 1000, 10)
        second = add_negotiation_round([first], first.total_price, 10)

        assert second.round_number == 2
        assert second.total_price == pytest.approx(810)

    def test_invalid_discount(self):
        with pytest.raises(PricingValidationError):
            add_negotiation_round([], 1000, 120)


class TestValidateVmProposal:
    """Required fields before saving a VM proposal."""

    def test_valid_proposal(self):
        validate_vm_proposal("ACME", "Cloud", [VMConfig(name="web")])

    def test_lists_every_problem(self):
        with pytest.raises(PricingValidationError) as exc_info:
            validate_vm_proposal(" ", "", [VMConfig(name=" ")])

        errors = exc_info.value.context["errors"]
        assert errors == [
            "client name is required",
            "proposal name is required",
            "VM 1 needs a name",
        ]

    def test_requires_a_vm(self):
        with pytest.raises(PricingValidationError) as exc_info:
            validate_vm_proposal("ACME", "Cloud", [])
        assert "at least one VM is required" in exc_info.value.context["errors"]
