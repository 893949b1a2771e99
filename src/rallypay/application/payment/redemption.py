"""Club token-pool redemption policy.

Clubs cap how much of a service price may be paid from their token pool,
per service type, and some services only accept tokens on certain days or
hours. Calculations are pure; validation also asks the pool whether it can
cover the requested tokens.
"""

from __future__ import annotations

from datetime import datetime, time
from decimal import ROUND_FLOOR, Decimal
from typing import Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .dtos import RedemptionCalculationDTO, RedemptionValidationDTO
from .split_calculator import round_cash

# Club pool tokens are worth less than player tokens.
CLUB_POOL_TOKEN_RATE = Decimal("0.007")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")


class TimeRestrictions(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed_days: Optional[tuple[str, ...]] = None
    allowed_hours: Optional[tuple[time, time]] = None


class ServiceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    max_redemption_percentage: int = Field(..., ge=0, le=100)
    time_restrictions: Optional[TimeRestrictions] = None


DEFAULT_SERVICE_CONFIGS: Dict[str, ServiceConfig] = {
    "court_booking": ServiceConfig(
        name="Court Booking",
        max_redemption_percentage=30,
        time_restrictions=TimeRestrictions(allowed_days=WEEKDAYS),
    ),
    "coaching_lesson": ServiceConfig(
        name="Coaching Lesson", max_redemption_percentage=25
    ),
    "group_clinic": ServiceConfig(name="Group Clinic", max_redemption_percentage=20),
    "equipment_rental": ServiceConfig(
        name="Equipment Rental", max_redemption_percentage=50
    ),
    "club_merchandise": ServiceConfig(
        name="Club Merchandise", max_redemption_percentage=15
    ),
}

TokenAvailabilityCheck = Callable[[int], Awaitable[bool]]


def get_service_config(
    service_type: str,
    configs: Optional[Dict[str, ServiceConfig]] = None,
) -> ServiceConfig:
    configs = DEFAULT_SERVICE_CONFIGS if configs is None else configs
    try:
        return configs[service_type]
    except KeyError:
        raise ValueError(f"Unknown service type: {service_type}") from None


def calculate_redemption(
    service_type: str,
    total_service_value: Decimal,
    requested_tokens: Optional[int] = None,
    *,
    token_rate: Decimal = CLUB_POOL_TOKEN_RATE,
    configs: Optional[Dict[str, ServiceConfig]] = None,
) -> RedemptionCalculationDTO:
    """Apply the service's redemption cap to a cash price. Pure function.

    Without ``requested_tokens`` the maximum allowed amount is used; a request
    above the cap is reduced to the cap.

    Raises:
        ValueError: If the service type is unknown.
    """
    config = get_service_config(service_type, configs)
    total_service_value = Decimal(total_service_value)

    max_token_value = total_service_value * config.max_redemption_percentage / 100
    max_tokens_allowed = int(
        (max_token_value / token_rate).to_integral_value(rounding=ROUND_FLOOR)
    )

    if requested_tokens:
        tokens_to_use = min(requested_tokens, max_tokens_allowed)
    else:
        tokens_to_use = max_tokens_allowed

    token_value = tokens_to_use * token_rate
    cash_amount = total_service_value - token_value
    if total_service_value > 0:
        redemption_percentage = token_value / total_service_value * 100
    else:
        redemption_percentage = Decimal("0")

    return RedemptionCalculationDTO(
        max_tokens_allowed=max_tokens_allowed,
        tokens_to_use=tokens_to_use,
        token_value=round_cash(token_value),
        cash_amount=round_cash(cash_amount),
        redemption_percentage=redemption_percentage.quantize(Decimal("0.01")),
        savings=round_cash(token_value),
    )


def check_time_restrictions(
    config: ServiceConfig, scheduled_at: datetime
) -> list[str]:
    """Return the day/hour restriction violations for ``scheduled_at``."""
    restrictions = config.time_restrictions
    if restrictions is None:
        return []

    errors: list[str] = []
    if restrictions.allowed_days is not None:
        day = scheduled_at.strftime("%A").lower()
        if day not in restrictions.allowed_days:
            errors.append(
                f"Token redemption for {config.name} is only allowed on: "
                f"{', '.join(restrictions.allowed_days)}"
            )
    if restrictions.allowed_hours is not None:
        start, end = restrictions.allowed_hours
        if not (start <= scheduled_at.time() <= end):
            errors.append(
                f"Token redemption for {config.name} is only allowed between "
                f"{start.strftime('%H:%M')} and {end.strftime('%H:%M')}"
            )
    return errors


async def validate_redemption(
    service_type: str,
    total_service_value: Decimal,
    tokens_to_use: int,
    check_token_availability: TokenAvailabilityCheck,
    scheduled_at: Optional[datetime] = None,
    *,
    token_rate: Decimal = CLUB_POOL_TOKEN_RATE,
    configs: Optional[Dict[str, ServiceConfig]] = None,
) -> RedemptionValidationDTO:
    """Collect every reason a redemption cannot go through."""
    configs = DEFAULT_SERVICE_CONFIGS if configs is None else configs
    config = configs.get(service_type)
    if config is None:
        return RedemptionValidationDTO(
            valid=False,
            errors=[f'Service type "{service_type}" is not supported'],
        )

    errors: list[str] = []
    if not await check_token_availability(tokens_to_use):
        errors.append("Insufficient tokens available in club pool")

    # The cap is checked on the raw request, before calculate_redemption trims it.
    total = Decimal(total_service_value)
    if total > 0:
        requested_percentage = tokens_to_use * token_rate / total * 100
        if requested_percentage > config.max_redemption_percentage:
            errors.append(
                f"Token redemption cannot exceed {config.max_redemption_percentage}% "
                f"for {config.name}"
            )

    if scheduled_at is not None:
        errors.extend(check_time_restrictions(config, scheduled_at))

    return RedemptionValidationDTO(valid=not errors, errors=errors)
