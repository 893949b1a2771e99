"""HTTP implementations of the collaborator protocols against the hosted backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type
from types import TracebackType

import httpx
from pydantic import ValidationError

from ...application.completion.dtos import CommitRequestDTO, CommitResponseDTO
from ...application.payment.dtos import BalanceDTO
from ...domain.completion.entities import RewardPreview, TargetSelection
from ...domain.errors import CollaboratorError, RequestRejectedError
from ...middleware.timing import log_timing
from ..http.http_client import AsyncHttpClient

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


class AsyncBackendClient:
    """Asynchronous client for the backend's remote procedures.

    Satisfies ``BalanceProviderProtocol`` and ``OutcomePreviewerProtocol``
    directly; commits go through ``SessionCompletionCommitter`` or
    ``PurchaseCommitter``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers: Dict[str, str] = {}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._http = AsyncHttpClient(
            base_url, timeout=timeout, headers=headers, transport=transport
        )

    async def _rpc(self, function: str, params: Dict[str, Any]) -> Any:
        try:
            resp = await self._http.post(f"/rpc/{function}", json=params)
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.warning(
                "RPC %s failed with status %s: %s",
                function,
                e.response.status_code,
                message,
            )
            if 400 <= e.response.status_code < 500:
                raise RequestRejectedError(message) from e
            raise CollaboratorError(f"{function} failed: {message}") from e
        except httpx.RequestError as e:
            raise CollaboratorError(f"Could not reach backend: {e}") from e
        return resp.json()

    @log_timing("backend_fetch_balance")
    async def fetch_balance(self) -> BalanceDTO:
        data = await self._rpc("get_token_balance", {})
        try:
            return BalanceDTO.model_validate(data)
        except ValidationError as e:
            raise CollaboratorError(f"Invalid balance data from backend: {e}") from e

    @log_timing("backend_preview_outcome")
    async def preview_outcome(self, target: TargetSelection) -> RewardPreview:
        data = await self._rpc(
            "preview_session_rewards",
            {
                "session_id_param": target.session_id,
                "winner_id_param": target.winner_id,
                "item_id_param": target.item_id,
            },
        )
        try:
            return RewardPreview.model_validate(data)
        except ValidationError as e:
            raise CollaboratorError(f"Invalid reward preview from backend: {e}") from e

    @log_timing("backend_complete_session")
    async def complete_session(self, request: CommitRequestDTO) -> CommitResponseDTO:
        data = await self._rpc(
            "complete_session_unified",
            {
                "session_id_param": request.target.session_id,
                "winner_id_param": request.target.winner_id,
                "winning_team_param": None,
                "completion_data": request.completion_data,
                "idempotency_key": request.idempotency_key,
            },
        )
        return CommitResponseDTO.model_validate(data)

    @log_timing("backend_create_payment")
    async def create_payment(
        self, request: CommitRequestDTO, *, item_name: str
    ) -> CommitResponseDTO:
        if request.payment is None or request.target.item_id is None:
            raise ValueError("A purchase commit requires an item and a payment split")
        data = await self._rpc(
            "create_payment",
            {
                "item_id": request.target.item_id,
                "item_name": item_name,
                "tokens_to_use": request.payment.tokens,
                "cash_amount": str(request.payment.cash),
                "idempotency_key": request.idempotency_key,
                "metadata": request.completion_data,
            },
        )
        return CommitResponseDTO.model_validate(data)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncBackendClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()


class SessionCompletionCommitter:
    """Commit operation completing a social session."""

    def __init__(self, client: AsyncBackendClient) -> None:
        self._client = client

    async def commit(self, request: CommitRequestDTO) -> CommitResponseDTO:
        return await self._client.complete_session(request)


class PurchaseCommitter:
    """Commit operation buying a marketplace item with a token/cash split."""

    def __init__(self, client: AsyncBackendClient, item_name: str) -> None:
        self._client = client
        self.item_name = item_name

    async def commit(self, request: CommitRequestDTO) -> CommitResponseDTO:
        return await self._client.create_payment(request, item_name=self.item_name)
