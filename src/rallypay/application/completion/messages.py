"""User-facing wording for flow results."""

from __future__ import annotations

from ...domain.completion.entities import CompletionOutcome

GENERIC_COMMIT_ERROR = "Failed to complete session"
GENERIC_PREVIEW_ERROR = "Could not load the reward preview"

REMEDIATION_SUGGESTIONS: tuple[str, ...] = (
    "Check your internet connection",
    "Verify the session is still active and all participants are present",
    "Try again in a few moments",
)


def success_message(outcome: CompletionOutcome) -> str:
    preview = outcome.reward_preview
    if outcome.target.is_purchase:
        return f"Purchase of {outcome.target.item_id} completed"
    if outcome.target.is_draw:
        return (
            f"Session completed as a draw. {preview.total_stakes} tokens refunded"
        )
    return (
        f"Session completed successfully! {preview.net_payout} tokens distributed to winner"
    )
