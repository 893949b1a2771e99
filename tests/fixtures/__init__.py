"""Test fixtures for in-memory collaborator implementations."""

from .collaborators import (
    RecordingNotifier,
    StubBalanceProvider,
    StubCommitter,
    StubPreviewer,
)

__all__ = [
    "RecordingNotifier",
    "StubBalanceProvider",
    "StubCommitter",
    "StubPreviewer",
]
