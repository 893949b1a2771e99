"""Selection controller turning user input into published payment splits."""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Callable, Literal, Optional

from ...domain.payment.entities import (
    PaymentBreakdown,
    PaymentRequest,
    PaymentSelection,
)
from .dtos import PaymentChangeDTO
from .split_calculator import compute_breakdown

logger = logging.getLogger(__name__)

PresetName = Literal["max-tokens", "half-and-half", "cash-only"]
PRESET_NAMES: tuple[PresetName, ...] = ("max-tokens", "half-and-half", "cash-only")

PaymentChangeCallback = Callable[[PaymentChangeDTO], None]

_LEADING_INTEGER = re.compile(r"\s*([+-]?)(\d+)")
# Longer inputs are clamped anyway; cap them before int() sees them.
_MAX_INPUT_DIGITS = 15


def parse_token_input(raw_value: str) -> int:
    """Parse typed token input the way a number field reports it.

    Only the leading integer counts, so ``"12.7"`` reads as 12 and
    ``"75 tokens"`` as 75. Input without leading digits counts as 0.
    """
    match = _LEADING_INTEGER.match(raw_value or "")
    if match is None:
        return 0
    sign, digits = match.groups()
    digits = digits.lstrip("0") or "0"
    if len(digits) > _MAX_INPUT_DIGITS:
        digits = "9" * _MAX_INPUT_DIGITS
    value = int(digits)
    return -value if sign == "-" else value


class PaymentSelectionController:
    """Owns the chosen token amount and republishes valid splits.

    Every mutation recomputes the breakdown. The ``on_payment_change`` observer
    is called only for payable splits, so the last published split stays
    authoritative while the selection is out of range.
    """

    def __init__(
        self,
        request: PaymentRequest,
        on_payment_change: Optional[PaymentChangeCallback] = None,
        *,
        minimum_cash_charge: Optional[Decimal] = None,
        disabled: bool = False,
    ) -> None:
        self._request = request
        self._on_payment_change = on_payment_change
        self._minimum_cash_charge = minimum_cash_charge
        self._disabled = disabled
        self._selection = PaymentSelection(tokens_to_use=request.max_usable_tokens)
        self._breakdown: PaymentBreakdown = self._compute()
        self._last_published: Optional[PaymentChangeDTO] = None
        self._publish()

    @property
    def request(self) -> PaymentRequest:
        return self._request

    @property
    def tokens_to_use(self) -> int:
        return self._selection.tokens_to_use

    @property
    def breakdown(self) -> PaymentBreakdown:
        return self._breakdown

    @property
    def last_published(self) -> Optional[PaymentChangeDTO]:
        return self._last_published

    @property
    def max_usable_tokens(self) -> int:
        return self._request.max_usable_tokens

    @property
    def can_submit(self) -> bool:
        return (
            not self._disabled
            and self._breakdown.is_valid
            and not self._breakdown.below_minimum_cash_charge
        )

    def preset_value(self, name: PresetName) -> int:
        """Token amount a preset would select."""
        max_usable = self.max_usable_tokens
        if name == "max-tokens":
            return max_usable
        if name == "half-and-half":
            return max_usable // 2
        if name == "cash-only":
            return 0
        raise ValueError(f"Unknown payment preset: {name}")

    def active_preset(self) -> Optional[PresetName]:
        """First preset matching the current selection, if any."""
        for name in PRESET_NAMES:
            if self.preset_value(name) == self.tokens_to_use:
                return name
        return None

    def set_from_numeric_input(self, raw_value: str) -> PaymentBreakdown:
        """Typed input is clamped into ``[0, max_usable_tokens]`` before storing."""
        value = parse_token_input(raw_value)
        clamped = max(0, min(value, self.max_usable_tokens))
        if clamped != value:
            logger.debug("Clamped typed token amount %s to %s", value, clamped)
        return self._set(clamped)

    def set_from_slider(self, value: int) -> PaymentBreakdown:
        """Slider values are bounded by the slider itself and stored as-is."""
        return self._set(int(value))

    def apply_preset(self, name: PresetName) -> PaymentBreakdown:
        return self._set(self.preset_value(name))

    def set_disabled(self, disabled: bool) -> None:
        self._disabled = disabled
        if not disabled:
            self._publish()

    def update_balance(self, available_tokens: int) -> PaymentBreakdown:
        """Re-base the request on a refreshed balance, keeping the chosen amount.

        The previous amount is kept as-is so an amount the new balance cannot
        cover shows up as overspend instead of being silently reduced.
        """
        self._request = self._request.model_copy(
            update={"available_tokens": available_tokens}
        )
        return self._set(self.tokens_to_use, force=True)

    def _compute(self) -> PaymentBreakdown:
        return compute_breakdown(
            self._request,
            self._selection.tokens_to_use,
            minimum_cash_charge=self._minimum_cash_charge,
        )

    def _set(self, tokens_to_use: int, *, force: bool = False) -> PaymentBreakdown:
        if tokens_to_use == self._selection.tokens_to_use and not force:
            return self._breakdown
        self._selection.tokens_to_use = tokens_to_use
        self._breakdown = self._compute()
        if not self._breakdown.is_valid:
            logger.info(
                "Token selection %s exceeds usable maximum %s",
                tokens_to_use,
                self.max_usable_tokens,
            )
        self._publish()
        return self._breakdown

    def _publish(self) -> None:
        if self._disabled or not self._breakdown.is_valid:
            return
        change = PaymentChangeDTO(
            tokens=self._breakdown.tokens, cash=self._breakdown.cash
        )
        if change == self._last_published:
            return
        self._last_published = change
        if self._on_payment_change is not None:
            self._on_payment_change(change)
