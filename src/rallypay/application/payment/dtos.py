"""Data Transfer Objects for the payment application layer."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class PaymentChangeDTO(BaseModel):
    """Split published to the host whenever a payable selection is made."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"example": {"tokens": 75, "cash": "0.75"}},
    )

    tokens: int = Field(..., ge=0)
    cash: Decimal = Field(..., ge=0)

    @field_serializer("cash")
    def serialize_cash(self, value: Decimal) -> str:
        return str(value)


class BalanceDTO(BaseModel):
    """Payer token balance as reported by the backend."""

    tokens: int = Field(..., ge=0)


class RedemptionCalculationDTO(BaseModel):
    """Result of applying a club redemption policy to a service price."""

    model_config = ConfigDict(frozen=True)

    max_tokens_allowed: int
    tokens_to_use: int
    token_value: Decimal
    cash_amount: Decimal
    redemption_percentage: Decimal
    savings: Decimal


class RedemptionValidationDTO(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
