"""Pure functions computing the token/cash split of a purchase.

These functions contain no state and no I/O, so they can be tested in
isolation and called as often as the selection changes.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...domain.payment.entities import PaymentBreakdown, PaymentRequest, PaymentStatus

CENT = Decimal("0.01")
PERCENT_PLACES = Decimal("0.1")


def round_cash(value: Decimal) -> Decimal:
    """Round a monetary amount to cents for display."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def classify_selection(request: PaymentRequest, tokens_to_use: int) -> PaymentStatus:
    """Classify a candidate token amount. Pure function.

    Out-of-range values are flagged, never rejected.
    """
    if (
        tokens_to_use < 0
        or tokens_to_use > request.available_tokens
        or tokens_to_use > request.service_cost
    ):
        return PaymentStatus.OVERSPEND
    return PaymentStatus.VALID


def savings_percentage(request: PaymentRequest, tokens_to_use: int) -> Decimal:
    """Share of the cost covered by tokens, 0 when nothing is used or nothing is owed."""
    if tokens_to_use <= 0 or request.service_cost == 0:
        return Decimal("0")
    pct = Decimal(tokens_to_use) / Decimal(request.service_cost) * 100
    return pct.quantize(PERCENT_PLACES, rounding=ROUND_HALF_UP)


def compute_breakdown(
    request: PaymentRequest,
    tokens_to_use: int,
    *,
    minimum_cash_charge: Optional[Decimal] = None,
) -> PaymentBreakdown:
    """Compute the payment breakdown for ``tokens_to_use``. Pure function.

    Args:
        request: Service cost, payer balance and token rate
        tokens_to_use: Candidate token amount, possibly out of range
        minimum_cash_charge: Smallest non-zero cash amount a card can be charged

    Returns:
        The breakdown; ``status`` is ``overspend`` when the amount exceeds the
        balance or the cost, or is negative.
    """
    remaining_cost = max(0, request.service_cost - tokens_to_use)
    unrounded_cash = remaining_cost * request.token_rate
    cash = round_cash(unrounded_cash)

    below_minimum = False
    if minimum_cash_charge is not None:
        below_minimum = 0 < unrounded_cash < minimum_cash_charge

    return PaymentBreakdown(
        tokens=tokens_to_use,
        cash=cash,
        total_value=round_cash(request.total_value),
        savings=round_cash(max(0, tokens_to_use) * request.token_rate),
        savings_percentage=savings_percentage(request, tokens_to_use),
        max_usable_tokens=request.max_usable_tokens,
        status=classify_selection(request, tokens_to_use),
        below_minimum_cash_charge=below_minimum,
    )


def cash_in_token_units(breakdown: PaymentBreakdown, token_rate: Decimal) -> Decimal:
    """Convert the cash portion of a breakdown back into tokens."""
    return breakdown.cash / token_rate
