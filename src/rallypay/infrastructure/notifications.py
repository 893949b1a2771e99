"""Notification adapters turning typed flow results into ``notify`` calls."""

from __future__ import annotations

import logging
from typing import Optional

from ..application.completion.dtos import FlowErrorDTO
from ..application.completion.messages import success_message
from ..domain.completion.entities import CommitFailure, CompletionOutcome
from ..domain.shared import NotificationKind, NotifierProtocol

_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "error": logging.ERROR,
}


class LoggingNotifier:
    """Send user-facing notifications to the log."""

    def __init__(self, name: str = "rallypay.notifications") -> None:
        self._logger = logging.getLogger(name)

    def notify(self, kind: NotificationKind, message: str) -> None:
        self._logger.log(_LEVELS.get(kind, logging.INFO), "[%s] %s", kind, message)


def suggestions_message(error: FlowErrorDTO) -> Optional[str]:
    if not error.suggestions:
        return None
    return "Suggestions: " + "; ".join(error.suggestions)


def notify_error(notifier: NotifierProtocol, error: FlowErrorDTO) -> None:
    """Report the reason, then the remediation hints when there are any."""
    notifier.notify("error", error.reason)
    hints = suggestions_message(error)
    if hints is not None:
        notifier.notify("info", hints)


def notify_outcome(
    notifier: NotifierProtocol,
    outcome: CompletionOutcome,
    error: Optional[FlowErrorDTO] = None,
) -> None:
    """Map a commit outcome to notifications.

    Success produces one ``success`` toast. A failure reports ``error`` when
    given, falling back to the reason stored on the outcome.
    """
    if outcome.succeeded:
        notifier.notify("success", success_message(outcome))
        return
    if error is not None:
        notify_error(notifier, error)
        return
    assert isinstance(outcome.result, CommitFailure)
    notifier.notify("error", outcome.result.reason)


class OutcomeNotifier:
    """Flow observer that surfaces results through a ``NotifierProtocol``."""

    def __init__(self, notifier: NotifierProtocol) -> None:
        self.notifier = notifier

    def preview_failed(self, error: FlowErrorDTO) -> None:
        notify_error(self.notifier, error)

    def outcome_recorded(
        self, outcome: CompletionOutcome, error: Optional[FlowErrorDTO]
    ) -> None:
        notify_outcome(self.notifier, outcome, error)
