"""Completion domain entities: participants, target selections, reward previews and outcomes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator


class Participant(BaseModel):
    """A session participant with the tokens they put at stake."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    stakes_contributed: int = Field(0, ge=0)


class TargetSelection(BaseModel):
    """What the user chose to settle: a winner, an item, or a draw when neither is set.

    Two selections are the same target iff they compare equal.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., min_length=1)
    winner_id: Optional[str] = None
    item_id: Optional[str] = None

    @model_validator(mode="after")
    def check_single_target(self) -> "TargetSelection":
        if self.winner_id is not None and self.item_id is not None:
            raise ValueError("A target is either a winner or an item, not both")
        return self

    @property
    def is_draw(self) -> bool:
        return self.winner_id is None and self.item_id is None

    @property
    def is_purchase(self) -> bool:
        return self.item_id is not None

    @classmethod
    def draw(cls, session_id: str) -> "TargetSelection":
        return cls(session_id=session_id, winner_id=None)


class RewardPreview(BaseModel):
    """Stake distribution shown to the user before the commit."""

    model_config = ConfigDict(frozen=True)

    total_stakes: int = Field(..., ge=0)
    platform_fee: int = Field(..., ge=0)
    net_payout: int = Field(..., ge=0)
    participant_count: int = Field(0, ge=0)


class CommitSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"


class CommitFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    reason: str


CommitResult = Union[CommitSuccess, CommitFailure]


class CompletionOutcome(BaseModel):
    """Terminal record of one confirmation attempt. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    target: TargetSelection
    reward_preview: RewardPreview
    result: CommitResult = Field(..., discriminator="kind")
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("completed_at")
    def serialize_completed_at(self, value: datetime) -> str:
        return value.isoformat()

    @property
    def winner_id(self) -> Optional[str]:
        return self.target.winner_id

    @property
    def succeeded(self) -> bool:
        return isinstance(self.result, CommitSuccess)
