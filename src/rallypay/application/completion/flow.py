"""Select → preview → confirm workflow for purchases and session completion."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
from uuid import uuid4

from ...domain.completion.entities import (
    CommitFailure,
    CommitSuccess,
    CompletionOutcome,
    RewardPreview,
    TargetSelection,
)
from ...domain.errors import FlowStateError, RequestRejectedError
from ...domain.shared import (
    BalanceProviderProtocol,
    CommitOperationProtocol,
    FlowObserverProtocol,
    OutcomePreviewerProtocol,
)
from ...metrics import (
    commit_request_duration_seconds,
    commit_requests_total,
    preview_request_duration_seconds,
    preview_requests_total,
)
from ..payment.dtos import BalanceDTO, PaymentChangeDTO
from .dtos import CommitRequestDTO, FlowErrorDTO
from .messages import (
    GENERIC_COMMIT_ERROR,
    GENERIC_PREVIEW_ERROR,
    REMEDIATION_SUGGESTIONS,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

BalanceCallback = Callable[[BalanceDTO], None]


class FlowStep(str, Enum):
    SELECT = "select"
    PREVIEW = "preview"
    CONFIRM = "confirm"
    ERROR = "error"


class PurchaseConfirmationFlow:
    """State machine sequencing the preview and commit collaborators.

    No collaborator failure escapes this class: preview failures send the flow
    back to ``select`` with ``last_error`` set, commit failures move it to
    ``error``. Only caller contract violations raise ``FlowStateError``.

    Late preview responses are dropped unless they belong to the most recent
    request for the current target.

    Results reach the optional observer as typed values (outcome plus error);
    the flow itself never formats notifications.
    """

    def __init__(
        self,
        previewer: OutcomePreviewerProtocol,
        committer: CommitOperationProtocol,
        *,
        balance_provider: Optional[BalanceProviderProtocol] = None,
        observer: Optional[FlowObserverProtocol] = None,
        on_balance_change: Optional[BalanceCallback] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._previewer = previewer
        self._committer = committer
        self._balance_provider = balance_provider
        self._observer = observer
        self._on_balance_change = on_balance_change
        self._timeout = timeout

        self._step = FlowStep.SELECT
        self._target: Optional[TargetSelection] = None
        self._reward_preview: Optional[RewardPreview] = None
        self._preview_seq = 0
        self._loading_preview = False
        self._committing = False
        self._idempotency_key: Optional[str] = None
        self._last_error: Optional[FlowErrorDTO] = None
        self._last_outcome: Optional[CompletionOutcome] = None
        self._balance: Optional[BalanceDTO] = None

    # State

    @property
    def step(self) -> FlowStep:
        return self._step

    @property
    def target(self) -> Optional[TargetSelection]:
        return self._target

    @property
    def reward_preview(self) -> Optional[RewardPreview]:
        return self._reward_preview

    @property
    def is_loading_preview(self) -> bool:
        return self._loading_preview

    @property
    def is_committing(self) -> bool:
        return self._committing

    @property
    def can_confirm(self) -> bool:
        return (
            self._step is FlowStep.PREVIEW
            and self._reward_preview is not None
            and not self._loading_preview
            and not self._committing
        )

    @property
    def last_error(self) -> Optional[FlowErrorDTO]:
        return self._last_error

    @property
    def last_outcome(self) -> Optional[CompletionOutcome]:
        return self._last_outcome

    @property
    def balance(self) -> Optional[BalanceDTO]:
        return self._balance

    # Balance

    async def load_balance(self) -> Optional[BalanceDTO]:
        """Fetch the payer balance; failures are logged and leave it unchanged."""
        if self._balance_provider is None:
            return None
        try:
            balance = await self._with_timeout(self._balance_provider.fetch_balance())
            self._balance = balance
            if self._on_balance_change is not None:
                self._on_balance_change(balance)
        except Exception:
            logger.warning("Failed to refresh token balance", exc_info=True)
            return None
        return balance

    # Transitions

    async def select_target(self, target: TargetSelection) -> Optional[RewardPreview]:
        """Choose a winner, draw or item and load its preview."""
        if self._step is not FlowStep.SELECT:
            raise FlowStateError(f"Cannot select a target while in {self._step.value}")
        if self._committing:
            raise FlowStateError("A commit is already in progress")
        self._target = target
        self._idempotency_key = uuid4().hex
        self._last_error = None
        return await self._load_preview(target)

    def back(self) -> None:
        """Return from ``preview`` to ``select``; any in-flight preview is ignored."""
        if self._step is not FlowStep.PREVIEW:
            raise FlowStateError(f"Cannot go back from {self._step.value}")
        self._to_select()

    async def confirm(
        self,
        payment: Optional[PaymentChangeDTO] = None,
        completion_data: Optional[Dict[str, Any]] = None,
    ) -> CompletionOutcome:
        """Run the irreversible commit for the previewed target.

        Raises:
            FlowStateError: If a commit is in flight or no preview is loaded.
        """
        if self._committing:
            raise FlowStateError("A commit is already in progress")
        if not self.can_confirm:
            raise FlowStateError(f"Cannot confirm from {self._step.value}")

        target = self._target
        reward_preview = self._reward_preview
        assert target is not None and reward_preview is not None
        request = CommitRequestDTO(
            target=target,
            payment=payment,
            idempotency_key=self._idempotency_key or uuid4().hex,
            completion_data=completion_data or {},
        )

        self._step = FlowStep.CONFIRM
        self._committing = True
        start_time = time.perf_counter()
        logger.info(
            "Committing session %s (winner=%s, draw=%s)",
            target.session_id,
            target.winner_id,
            target.is_draw,
        )
        try:
            try:
                response = await self._with_timeout(self._committer.commit(request))
            except RequestRejectedError as e:
                return self._fail(
                    target, reward_preview, e.reason, "rejected", start_time
                )
            except Exception:
                logger.exception("Commit for session %s failed", target.session_id)
                return self._fail(target, reward_preview, None, "error", start_time)

            if not response.success:
                if response.rollback:
                    logger.warning("Commit for %s was rolled back", target.session_id)
                return self._fail(
                    target,
                    reward_preview,
                    response.error or GENERIC_COMMIT_ERROR,
                    "rejected",
                    start_time,
                )

            outcome = CompletionOutcome(
                target=target,
                reward_preview=reward_preview,
                result=CommitSuccess(),
            )
            commit_requests_total.labels(status="success").inc()
            commit_request_duration_seconds.labels(status="success").observe(
                time.perf_counter() - start_time
            )
            self._last_outcome = outcome
            self._to_select()
            self._emit_outcome(outcome, None)
        finally:
            self._committing = False
            if self._step is FlowStep.CONFIRM:
                # Cancelled mid-commit: the result is unknown, keep the target for a retry.
                logger.warning("Commit for session %s was cancelled", target.session_id)
                commit_requests_total.labels(status="cancelled").inc()
                self._last_error = FlowErrorDTO(
                    reason=GENERIC_COMMIT_ERROR, suggestions=REMEDIATION_SUGGESTIONS
                )
                self._step = FlowStep.ERROR

        await self.load_balance()
        return outcome

    def start_over(self) -> None:
        """Leave ``error`` discarding the chosen target."""
        if self._step is not FlowStep.ERROR:
            raise FlowStateError(f"Cannot start over from {self._step.value}")
        self._last_error = None
        self._to_select()

    async def try_again(self) -> Optional[RewardPreview]:
        """Leave ``error`` keeping the target and re-request its preview."""
        if self._step is not FlowStep.ERROR:
            raise FlowStateError(f"Cannot retry from {self._step.value}")
        target = self._target
        assert target is not None
        self._last_error = None
        return await self._load_preview(target)

    def reset(self) -> None:
        """Discard everything; used when the dialog closes or reopens."""
        if self._committing:
            raise FlowStateError("A commit is already in progress")
        self._last_error = None
        self._to_select()

    # Internals

    async def _load_preview(self, target: TargetSelection) -> Optional[RewardPreview]:
        self._preview_seq += 1
        seq = self._preview_seq
        self._step = FlowStep.PREVIEW
        self._reward_preview = None
        self._loading_preview = True
        start_time = time.perf_counter()

        try:
            preview = await self._with_timeout(self._previewer.preview_outcome(target))
        except Exception as e:
            if not self._is_current(seq, target):
                preview_requests_total.labels(status="stale").inc()
                return None
            logger.warning("Preview for %s failed: %s", target.session_id, e)
            preview_requests_total.labels(status="error").inc()
            preview_request_duration_seconds.labels(status="error").observe(
                time.perf_counter() - start_time
            )
            self._to_select()
            error = FlowErrorDTO(reason=GENERIC_PREVIEW_ERROR)
            self._last_error = error
            self._emit_preview_failed(error)
            return None

        if not self._is_current(seq, target):
            logger.debug("Dropping stale preview for %s", target)
            preview_requests_total.labels(status="stale").inc()
            return None

        preview_requests_total.labels(status="success").inc()
        preview_request_duration_seconds.labels(status="success").observe(
            time.perf_counter() - start_time
        )
        self._reward_preview = preview
        self._loading_preview = False
        return preview

    def _is_current(self, seq: int, target: TargetSelection) -> bool:
        return (
            seq == self._preview_seq
            and self._step is FlowStep.PREVIEW
            and self._target == target
        )

    def _fail(
        self,
        target: TargetSelection,
        reward_preview: RewardPreview,
        server_reason: Optional[str],
        status: str,
        start_time: float,
    ) -> CompletionOutcome:
        reason = server_reason or GENERIC_COMMIT_ERROR
        commit_requests_total.labels(status=status).inc()
        commit_request_duration_seconds.labels(status=status).observe(
            time.perf_counter() - start_time
        )
        outcome = CompletionOutcome(
            target=target,
            reward_preview=reward_preview,
            result=CommitFailure(reason=reason),
        )
        self._last_outcome = outcome
        error = FlowErrorDTO(
            reason=reason,
            suggestions=REMEDIATION_SUGGESTIONS,
            from_server=server_reason is not None,
        )
        self._last_error = error
        self._step = FlowStep.ERROR
        self._emit_outcome(outcome, error)
        return outcome

    def _to_select(self) -> None:
        # Bumping the sequence invalidates any preview still in flight.
        self._preview_seq += 1
        self._step = FlowStep.SELECT
        self._target = None
        self._reward_preview = None
        self._loading_preview = False

    def _emit_preview_failed(self, error: FlowErrorDTO) -> None:
        if self._observer is None:
            return
        try:
            self._observer.preview_failed(error)
        except Exception:
            logger.warning("Observer raised on preview failure", exc_info=True)

    def _emit_outcome(
        self, outcome: CompletionOutcome, error: Optional[FlowErrorDTO]
    ) -> None:
        if self._observer is None:
            return
        try:
            self._observer.outcome_recorded(outcome, error)
        except Exception:
            logger.warning("Observer raised while recording outcome", exc_info=True)

    async def _with_timeout(self, awaitable: Awaitable[T]) -> T:
        if self._timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self._timeout)
