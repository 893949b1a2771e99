"""Unit tests for the split calculator (pure functions)."""

from decimal import Decimal

import pytest

from rallypay.application.payment.split_calculator import (
    cash_in_token_units,
    classify_selection,
    compute_breakdown,
    round_cash,
)
from rallypay.domain.payment.entities import PaymentRequest, PaymentStatus


def _request(cost: int, available: int) -> PaymentRequest:
    return PaymentRequest(service_cost=cost, available_tokens=available)


class TestComputeBreakdown:
    """Test compute_breakdown on the documented scenarios."""

    def test_partial_tokens_leaves_cash_remainder(self) -> None:
        breakdown = compute_breakdown(_request(150, 75), 75)

        assert breakdown.tokens == 75
        assert breakdown.cash == Decimal("0.75")
        assert breakdown.status is PaymentStatus.VALID
        assert breakdown.total_value == Decimal("1.50")
        assert breakdown.savings == Decimal("0.75")
        assert breakdown.savings_percentage == Decimal("50.0")

    def test_empty_balance_pays_all_cash(self) -> None:
        breakdown = compute_breakdown(_request(100, 0), 0)

        assert breakdown.tokens == 0
        assert breakdown.cash == Decimal("1.00")
        assert breakdown.status is PaymentStatus.VALID
        assert breakdown.max_usable_tokens == 0

    def test_tokens_above_cost_is_overspend_even_with_balance(self) -> None:
        breakdown = compute_breakdown(_request(50, 200), 60)

        assert breakdown.status is PaymentStatus.OVERSPEND
        assert breakdown.cash == Decimal("0.00")

    def test_free_service(self) -> None:
        breakdown = compute_breakdown(_request(0, 100), 0)

        assert breakdown.cash == Decimal("0")
        assert breakdown.status is PaymentStatus.VALID
        assert breakdown.savings_percentage == Decimal("0")
        assert breakdown.max_usable_tokens == 0

    def test_free_service_rejects_any_tokens(self) -> None:
        breakdown = compute_breakdown(_request(0, 100), 1)

        assert breakdown.status is PaymentStatus.OVERSPEND
        assert breakdown.cash == Decimal("0")

    def test_zero_balance_rejects_any_tokens(self) -> None:
        assert compute_breakdown(_request(100, 0), 1).status is PaymentStatus.OVERSPEND

    def test_exact_match_pays_nothing_in_cash(self) -> None:
        breakdown = compute_breakdown(_request(120, 120), 120)

        assert breakdown.cash == Decimal("0.00")
        assert breakdown.status is PaymentStatus.VALID
        assert breakdown.savings_percentage == Decimal("100.0")

    def test_negative_tokens_is_overspend_and_cash_never_negative(self) -> None:
        breakdown = compute_breakdown(_request(100, 100), -5)

        assert breakdown.status is PaymentStatus.OVERSPEND
        assert breakdown.cash >= 0
        assert breakdown.savings == Decimal("0.00")

    def test_pure_cash_displays_as_zero_tokens(self) -> None:
        breakdown = compute_breakdown(_request(100, 100), 0)

        assert breakdown.status is PaymentStatus.VALID
        assert breakdown.display_status is PaymentStatus.ZERO_TOKENS

    def test_minimum_cash_charge_flag(self) -> None:
        request = _request(1000, 1000)

        small = compute_breakdown(request, 990, minimum_cash_charge=Decimal("0.50"))
        none_left = compute_breakdown(request, 1000, minimum_cash_charge=Decimal("0.50"))
        large = compute_breakdown(request, 500, minimum_cash_charge=Decimal("0.50"))

        assert small.below_minimum_cash_charge is True
        assert small.status is PaymentStatus.VALID
        assert none_left.below_minimum_cash_charge is False
        assert large.below_minimum_cash_charge is False

    def test_recompute_is_deterministic(self) -> None:
        request = _request(333, 200)
        assert compute_breakdown(request, 123) == compute_breakdown(request, 123)


class TestSplitProperties:
    """Invariants checked over a grid of inputs."""

    CASES = [(cost, available) for cost in (0, 1, 7, 99, 150, 1001) for available in (0, 3, 75, 150, 5000)]

    @pytest.mark.parametrize("cost,available", CASES)
    def test_conservation_within_one_cent(self, cost: int, available: int) -> None:
        request = _request(cost, available)
        for tokens in range(0, request.max_usable_tokens + 1, max(1, request.max_usable_tokens // 7)):
            breakdown = compute_breakdown(request, tokens)
            assert breakdown.status is PaymentStatus.VALID
            paid = breakdown.tokens * request.token_rate + breakdown.cash
            assert abs(paid - request.total_value) <= Decimal("0.01")
            restored = breakdown.tokens + cash_in_token_units(breakdown, request.token_rate)
            assert abs(restored - cost) <= 1

    @pytest.mark.parametrize("cost,available", CASES)
    def test_overspend_above_either_bound(self, cost: int, available: int) -> None:
        request = _request(cost, available)
        for tokens in (available + 1, cost + 1, max(cost, available) + 50):
            if tokens > available or tokens > cost:
                assert classify_selection(request, tokens) is PaymentStatus.OVERSPEND

    @pytest.mark.parametrize("cost,available", CASES)
    def test_savings_monotonic(self, cost: int, available: int) -> None:
        request = _request(cost, available)
        previous = None
        for tokens in range(request.max_usable_tokens + 1):
            breakdown = compute_breakdown(request, tokens)
            if previous is not None:
                assert breakdown.savings >= previous.savings
                assert breakdown.cash <= previous.cash
            previous = breakdown


class TestRoundCash:
    def test_rounds_half_up(self) -> None:
        assert round_cash(Decimal("0.125")) == Decimal("0.13")
        assert round_cash(Decimal("0.124")) == Decimal("0.12")
