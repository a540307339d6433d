"""
Tests for the payback service.

WHY: Payback decides whether a proposal needs director approval, so the
simulated month and the limit table must both be exact.
"""

import pytest

from pricing_api.schemas.payback import PaybackKind, PaybackRequest
from pricing_api.services.payback import (
    calculate_pabx_payback,
    calculate_payback,
    check_payback,
    evaluate_payback,
    max_payback_months,
    simple_payback,
    simple_payback_limit,
    validate_payback,
    validate_simple_payback,
)


class TestLimits:
    """Payback limits by contract term."""

    @pytest.mark.parametrize("term,limit", [(12, 8), (24, 10), (36, 11), (48, 13), (60, 14)])
    def test_link_limits(self, term, limit):
        assert max_payback_months(term) == limit

    def test_non_standard_term_uses_half(self):
        assert max_payback_months(18) == 9

    @pytest.mark.parametrize("actual,valid", [(0, False), (1, True), (8, True), (9, False)])
    def test_check_payback_bounds(self, actual, valid):
        validation = check_payback(actual, 12)

        assert validation.is_valid is valid
        assert validation.max_payback == 8
        assert validation.message

    @pytest.mark.parametrize("term,limit", [(12, 6), (24, 12), (36, 18), (48, 20), (60, 24), (72, 24)])
    def test_simple_limits(self, term, limit):
        assert simple_payback_limit(term) == limit


class TestLinkPayback:
    """Month by month link simulation."""

    def test_recovers_equipment(self):
        # Net flow per month: 500 * (1 - 0.0725 - 0.15 - 0.10) - 500 * 0.05 = 313.75
        assert calculate_payback(0, 1000, 500, 12) == 4

    def test_installation_fee_counts_on_first_month(self):
        assert calculate_payback(2000, 1000, 500, 12) == 1

    def test_without_revenue_returns_term(self):
        assert calculate_payback(0, 1000, 0, 24) == 24

    def test_never_paying_back_returns_term(self):
        assert calculate_payback(0, 1_000_000, 500, 12) == 12

    def test_monotonic_in_revenue(self):
        """More monthly revenue never delays the payback."""
        paybacks = [calculate_payback(0, 5000, revenue, 36) for revenue in (200, 400, 800, 1600, 3200)]
        assert paybacks == sorted(paybacks, reverse=True)

    def test_discounts_delay_payback(self):
        plain = calculate_payback(0, 3000, 500, 36)
        discounted = calculate_payback(0, 3000, 500, 36, salesperson_discount=True, director_pct=30)
        assert discounted >= plain

    def test_validate_payback(self):
        validation = validate_payback(0, 1000, 500, 12)

        assert validation.is_valid is True
        assert validation.actual_payback == 4
        assert validation.max_payback == 8
        assert "dentro do limite" in validation.message

    def test_validate_payback_over_limit(self):
        validation = validate_payback(0, 1_000_000, 500, 12)

        assert validation.is_valid is False
        assert "excede o limite de 8 meses para contratos de 12 meses" in validation.message


class TestPabxPayback:
    """PABX payback simulation."""

    def test_installation_covers_equipment(self):
        assert calculate_pabx_payback(1000, 0, 100, 12) == 1

    def test_seller_commission_on_first_month_only(self):
        # Opening -1000, month 1 nets 70, the following months net 80
        assert calculate_pabx_payback(0, 1000, 100, 24, seller_rate=10) == 13

    def test_without_revenue_returns_term(self):
        assert calculate_pabx_payback(0, 1000, 0, 36) == 36


class TestSimplePayback:
    """Investment over monthly revenue."""

    def test_rounds_up(self):
        assert simple_payback(100, 500, 100) == 6
        assert simple_payback(100, 501, 100) == 7

    def test_without_revenue(self):
        assert simple_payback(100, 500, 0) == 0

    def test_validation(self):
        assert validate_simple_payback(100, 500, 100, 12).is_valid is True
        assert validate_simple_payback(100, 501, 100, 12).is_valid is False


class TestEvaluatePayback:
    """Dispatch by payback kind."""

    def test_link(self):
        result = evaluate_payback(
            PaybackRequest(kind=PaybackKind.LINK, equipment_cost=1000, monthly_revenue=500, contract_term=12)
        )
        assert result.actual_payback == 4
        assert result.is_valid is True

    def test_pabx_commission_rate_is_a_fraction(self):
        result = evaluate_payback(
            PaybackRequest(
                kind=PaybackKind.PABX,
                equipment_cost=1000,
                monthly_revenue=100,
                contract_term=24,
                commission_rate=0.10,
            )
        )
        assert result.actual_payback == 13
        assert result.max_payback == 10
        assert result.is_valid is False

    def test_simple(self):
        result = evaluate_payback(
            PaybackRequest(
                kind=PaybackKind.SIMPLE,
                installation_fee=100,
                equipment_cost=500,
                monthly_revenue=100,
                contract_term=24,
            )
        )
        assert result.actual_payback == 6
        assert result.max_payback == 12
