"""Shared pytest fixtures for payment and completion tests."""

from __future__ import annotations

import pytest

from rallypay.application.completion.flow import PurchaseConfirmationFlow
from rallypay.domain.completion.entities import Participant, TargetSelection
from rallypay.infrastructure.notifications import OutcomeNotifier
from tests.fixtures import (
    RecordingNotifier,
    StubBalanceProvider,
    StubCommitter,
    StubPreviewer,
)


SESSION_ID = "session-42"


@pytest.fixture
def participants() -> list[Participant]:
    """Two singles players staking 50 tokens each."""
    return [
        Participant(user_id="alice", display_name="Alice", stakes_contributed=50),
        Participant(user_id="bob", display_name="Bob", stakes_contributed=50),
    ]


@pytest.fixture
def winner_target() -> TargetSelection:
    return TargetSelection(session_id=SESSION_ID, winner_id="alice")


@pytest.fixture
def draw_target() -> TargetSelection:
    return TargetSelection.draw(SESSION_ID)


@pytest.fixture
def previewer() -> StubPreviewer:
    return StubPreviewer()


@pytest.fixture
def committer() -> StubCommitter:
    return StubCommitter()


@pytest.fixture
def balance_provider() -> StubBalanceProvider:
    return StubBalanceProvider(tokens=500)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def flow(
    previewer: StubPreviewer,
    committer: StubCommitter,
    balance_provider: StubBalanceProvider,
    notifier: RecordingNotifier,
) -> PurchaseConfirmationFlow:
    """Confirmation flow wired to stub collaborators."""
    return PurchaseConfirmationFlow(
        previewer,
        committer,
        balance_provider=balance_provider,
        observer=OutcomeNotifier(notifier),
    )
