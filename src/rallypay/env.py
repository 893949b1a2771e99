from __future__ import annotations

import os
from decimal import Decimal
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    """Typed library settings built from environment variables."""

    # Backend settings
    backend_base_url: str = "http://localhost:54321"
    backend_api_key: Optional[str] = None
    http_timeout: float = Field(10.0, gt=0)

    # Flow settings
    flow_timeout: Optional[float] = Field(None, gt=0)

    # Economics
    token_rate: Decimal = Field(Decimal("0.01"), gt=0)
    platform_fee_rate: Decimal = Field(Decimal("0.10"), ge=0, le=1)
    minimum_cash_charge: Decimal = Field(Decimal("0.50"), ge=0)

    @field_validator("backend_base_url")
    @classmethod
    def validate_backend_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Backend base URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("Backend base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("Backend base URL must include a host")
        return v.rstrip("/")


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    return Settings(
        backend_base_url=os.environ.get(
            "RALLYPAY_BACKEND_URL", "http://localhost:54321"
        ),
        backend_api_key=os.environ.get("RALLYPAY_API_KEY"),
        http_timeout=float(os.environ.get("RALLYPAY_HTTP_TIMEOUT", "10.0")),
        flow_timeout=_optional_float(os.environ.get("RALLYPAY_FLOW_TIMEOUT")),
        token_rate=Decimal(os.environ.get("RALLYPAY_TOKEN_RATE", "0.01")),
        platform_fee_rate=Decimal(os.environ.get("RALLYPAY_PLATFORM_FEE_RATE", "0.10")),
        minimum_cash_charge=Decimal(
            os.environ.get("RALLYPAY_MIN_CASH_CHARGE", "0.50")
        ),
    )
