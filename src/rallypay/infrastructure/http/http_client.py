from __future__ import annotations

from typing import Any, Dict, Optional, Type
from types import TracebackType

import httpx


class AsyncHttpClient:
    """Thin asynchronous JSON client around httpx.AsyncClient.

    - Resolves relative paths against the backend base URL.
    - Sends default headers (API key, bearer token) on every request.
    - Raises for non-successful responses.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        *,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @property
    def base_url(self) -> httpx.URL:
        return self._client.base_url

    async def post(
        self, path: str, *, json: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        resp = await self._client.post(path.lstrip("/"), json=json)
        resp.raise_for_status()
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
