"""
Async HTTP client for the public battle endpoint.

Read-only: the player view never changes battle state. Failed polls are
logged and the last good snapshot stays on screen.
"""

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from .models import ViewSnapshot

logger = logging.getLogger("battle-view")


class ViewerError(Exception):
    """Base exception for player view request failures."""
    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class BattleNotFoundError(ViewerError):
    """Endpoint or battle not found (404)."""
    pass


SnapshotHandler = Callable[[ViewSnapshot], Awaitable[None] | None]


class BattleViewClient:
    """Polls the public battle projection."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BattleViewClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get(self, path: str, params: dict | None = None) -> dict:
        """GET a JSON object and map failures onto ViewerError."""
        client = await self._get_client()

        try:
            response = await client.get(path, params=params)
        except httpx.RequestError as e:
            logger.error(f"HTTP request failed: {e}")
            raise ViewerError(f"Request failed: {e}") from e

        if response.status_code == 404:
            raise BattleNotFoundError(
                f"Resource not found: {path}",
                status_code=404,
                response=response.json() if response.content else None,
            )

        if response.status_code >= 400:
            error_data = response.json() if response.content else {}
            raise ViewerError(
                f"API error {response.status_code}: {error_data.get('detail', 'Unknown error')}",
                status_code=response.status_code,
                response=error_data,
            )

        return response.json()

    async def fetch(self, battle_id: int | None = None) -> ViewSnapshot:
        """Current redacted snapshot of the selected (or most recent) live battle."""
        params = {"battle_id": battle_id} if battle_id is not None else None
        data = await self._get("/public/battle", params=params)
        return ViewSnapshot.model_validate(data)

    async def poll(
        self,
        on_snapshot: SnapshotHandler,
        interval: float = 0.5,
        battle_id: int | None = None,
        max_polls: int | None = None,
    ) -> None:
        """Fetch on a fixed interval and hand each changed snapshot to ``on_snapshot``.

        Runs until cancelled, or for ``max_polls`` requests when given.
        """
        last: ViewSnapshot | None = None
        polls = 0

        while max_polls is None or polls < max_polls:
            polls += 1
            try:
                snapshot = await self.fetch(battle_id)
            except ViewerError as e:
                logger.error(f"Poll failed, keeping last snapshot: {e}")
            else:
                if snapshot != last:
                    last = snapshot
                    result = on_snapshot(snapshot)
                    if asyncio.iscoroutine(result):
                        await result

            if max_polls is None or polls < max_polls:
                await asyncio.sleep(interval)
