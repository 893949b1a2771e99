"""Data Transfer Objects for the completion application layer."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...domain.completion.entities import TargetSelection
from ..payment.dtos import PaymentChangeDTO


class CommitRequestDTO(BaseModel):
    """Everything the backend needs to perform the irreversible commit."""

    model_config = ConfigDict(frozen=True)

    target: TargetSelection
    payment: Optional[PaymentChangeDTO] = None
    idempotency_key: str
    completion_data: Dict[str, Any] = Field(default_factory=dict)


class CommitResponseDTO(BaseModel):
    """Backend reply to a commit: success, or a business-rule rejection."""

    success: bool
    error: Optional[str] = None
    session_id: Optional[str] = None
    total_stakes: Optional[int] = None
    platform_fee: Optional[int] = None
    net_payout: Optional[int] = None
    winner_id: Optional[str] = None
    rollback: bool = False


class FlowErrorDTO(BaseModel):
    """What the error state shows: the reason plus generic remediation hints."""

    model_config = ConfigDict(frozen=True)

    reason: str
    suggestions: tuple[str, ...] = ()
    from_server: bool = False
