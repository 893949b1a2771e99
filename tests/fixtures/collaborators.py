"""Test implementations of the collaborator protocols."""

from __future__ import annotations

import asyncio
from typing import Optional

from rallypay.application.completion.dtos import CommitRequestDTO, CommitResponseDTO
from rallypay.application.payment.dtos import BalanceDTO
from rallypay.domain.completion.entities import RewardPreview, TargetSelection
from rallypay.domain.shared import NotificationKind


class StubPreviewer:
    """Previewer returning a configured preview, or raising a configured error.

    With ``gated=True`` every call blocks until the test resolves it through
    ``release`` or ``fail``, so responses can be delivered out of order.
    """

    def __init__(
        self,
        preview: Optional[RewardPreview] = None,
        *,
        gated: bool = False,
    ) -> None:
        self.calls: list[TargetSelection] = []
        self._preview = preview or RewardPreview(
            total_stakes=100, platform_fee=10, net_payout=90, participant_count=2
        )
        self._should_raise: Optional[Exception] = None
        self._gated = gated
        self._pending: list[tuple[TargetSelection, asyncio.Future[RewardPreview]]] = []

    def set_preview(self, preview: RewardPreview) -> None:
        self._preview = preview

    def set_error(self, error: Optional[Exception]) -> None:
        self._should_raise = error

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def release(self, index: int, preview: Optional[RewardPreview] = None) -> None:
        _, future = self._pending[index]
        future.set_result(preview or self._preview)

    def fail(self, index: int, error: Exception) -> None:
        _, future = self._pending[index]
        future.set_exception(error)

    async def preview_outcome(self, target: TargetSelection) -> RewardPreview:
        self.calls.append(target)
        if self._gated:
            future: asyncio.Future[RewardPreview] = (
                asyncio.get_running_loop().create_future()
            )
            self._pending.append((target, future))
            return await future
        if self._should_raise is not None:
            raise self._should_raise
        return self._preview


class StubCommitter:
    """Commit operation with a queue of configured responses or errors."""

    def __init__(self) -> None:
        self.calls: list[CommitRequestDTO] = []
        self._responses: list[CommitResponseDTO | Exception] = []
        self._gate: Optional[asyncio.Event] = None

    def queue_response(self, response: CommitResponseDTO | Exception) -> None:
        self._responses.append(response)

    def hold(self) -> asyncio.Event:
        """Block commits until the returned event is set."""
        self._gate = asyncio.Event()
        return self._gate

    async def commit(self, request: CommitRequestDTO) -> CommitResponseDTO:
        self.calls.append(request)
        if self._gate is not None:
            await self._gate.wait()
        response = (
            self._responses.pop(0)
            if self._responses
            else CommitResponseDTO(success=True)
        )
        if isinstance(response, Exception):
            raise response
        return response


class StubBalanceProvider:
    def __init__(self, tokens: int = 0) -> None:
        self.tokens = tokens
        self.calls = 0

    async def fetch_balance(self) -> BalanceDTO:
        self.calls += 1
        return BalanceDTO(tokens=self.tokens)


class RecordingNotifier:
    def __init__(self) -> None:
        self.notifications: list[tuple[NotificationKind, str]] = []

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.notifications.append((kind, message))

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.notifications]
