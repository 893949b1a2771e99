"""Protocol interfaces for the remote collaborators of the payment core.

These protocols define the contracts the host application must satisfy.
They enable dependency injection and make the controller and flow testable
without a backend by allowing in-memory implementations.
"""

from __future__ import annotations

from typing import Literal, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    # Avoid circular imports by only importing types during type checking
    from ...application.payment.dtos import BalanceDTO
    from ...application.completion.dtos import (
        CommitRequestDTO,
        CommitResponseDTO,
        FlowErrorDTO,
    )
    from ..completion.entities import (
        CompletionOutcome,
        RewardPreview,
        TargetSelection,
    )


NotificationKind = Literal["success", "error", "info"]


class BalanceProviderProtocol(Protocol):
    """Source of the payer's authoritative token balance."""

    async def fetch_balance(self) -> "BalanceDTO":
        """Return the current payer token balance.

        Called when a purchase opens and again after a successful commit.
        """
        ...


class OutcomePreviewerProtocol(Protocol):
    """Computes what a commit would distribute, without performing it."""

    async def preview_outcome(self, target: "TargetSelection") -> "RewardPreview":
        """Return the reward/cost preview for ``target``.

        Must be safe to call repeatedly. Failures are raised as exceptions.
        """
        ...


class CommitOperationProtocol(Protocol):
    """The irreversible purchase or session completion."""

    async def commit(self, request: "CommitRequestDTO") -> "CommitResponseDTO":
        """Perform the commit.

        Returns:
            A response with ``success=False`` and an ``error`` for business-rule
            rejections. Network and unexpected failures are raised.
        """
        ...


class NotifierProtocol(Protocol):
    """Fire-and-forget user-facing notification surface."""

    def notify(self, kind: NotificationKind, message: str) -> None: ...


class FlowObserverProtocol(Protocol):
    """Receives the typed results of the confirmation flow.

    The flow never formats user-facing text itself; observers decide how a
    result is surfaced.
    """

    def preview_failed(self, error: "FlowErrorDTO") -> None:
        """Called when the preview for the current target could not be loaded."""
        ...

    def outcome_recorded(
        self, outcome: "CompletionOutcome", error: Optional["FlowErrorDTO"]
    ) -> None:
        """Called once per commit attempt; ``error`` is set when it failed."""
        ...
