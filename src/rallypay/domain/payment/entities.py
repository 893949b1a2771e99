"""Payment domain entities: PaymentRequest, PaymentSelection and PaymentBreakdown."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer


# 100 tokens = $1.00
DEFAULT_TOKEN_RATE = Decimal("0.01")


class PaymentStatus(str, Enum):
    """Classification of a token/cash split."""

    VALID = "valid"
    OVERSPEND = "overspend"
    ZERO_TOKENS = "zero-tokens"

    @property
    def is_payable(self) -> bool:
        return self is not PaymentStatus.OVERSPEND


class PaymentRequest(BaseModel):
    """Inputs of one split computation, expressed in token units."""

    model_config = ConfigDict(frozen=True)

    service_cost: int = Field(..., ge=0)
    available_tokens: int = Field(..., ge=0)
    token_rate: Decimal = Field(DEFAULT_TOKEN_RATE, gt=0)

    @property
    def max_usable_tokens(self) -> int:
        return min(self.available_tokens, self.service_cost)

    @property
    def total_value(self) -> Decimal:
        return self.service_cost * self.token_rate


class PaymentSelection(BaseModel):
    """Mutable token amount chosen by the payer."""

    tokens_to_use: int = 0


class PaymentBreakdown(BaseModel):
    """Derived split between the token-paid and cash-paid portions of a cost."""

    model_config = ConfigDict(frozen=True)

    tokens: int
    cash: Decimal
    total_value: Decimal
    savings: Decimal
    savings_percentage: Decimal
    max_usable_tokens: int
    status: PaymentStatus
    below_minimum_cash_charge: bool = False

    @field_serializer("cash", "total_value", "savings", "savings_percentage")
    def serialize_decimal(self, value: Decimal) -> str:
        return str(value)

    @property
    def is_valid(self) -> bool:
        return self.status.is_payable

    @property
    def display_status(self) -> PaymentStatus:
        """Status for rendering; a payable pure-cash split shows as zero-tokens."""
        if self.status is PaymentStatus.VALID and self.tokens == 0:
            return PaymentStatus.ZERO_TOKENS
        return self.status
