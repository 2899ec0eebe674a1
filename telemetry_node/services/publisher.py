from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Optional

import httpx
import jwt

logger = logging.getLogger(__name__)

UPDATE_METADATA_PATH = "/twirp/livekit.RoomService/UpdateRoomMetadata"


class RoomMetadataPublisher:
    """Pushes snapshot payloads into a LiveKit room's metadata."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_secret: str,
        room: str,
        timeout_s: float = 5.0,
        token_ttl_s: int = 600,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._api_secret = api_secret
        self._room = room
        self._token_ttl_s = token_ttl_s
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._pending: set[asyncio.Task] = set()
        self._tail: Optional[asyncio.Task] = None

    @property
    def room(self) -> str:
        return self._room

    def _token(self) -> str:
        now = int(time.time())
        claims = {
            "iss": self._api_key,
            "sub": self._api_key,
            "nbf": now,
            "exp": now + self._token_ttl_s,
            "video": {"roomAdmin": True, "room": self._room},
        }
        return jwt.encode(claims, self._api_secret, algorithm="HS256")

    async def publish(self, payload: dict[str, Any]) -> None:
        """Send one payload. Raises on transport or HTTP error."""
        metadata = json.dumps(payload)
        logger.debug("Updating room metadata. payload=%s", metadata)
        resp = await self._client.post(
            f"{self._base_url}{UPDATE_METADATA_PATH}",
            json={"room": self._room, "metadata": metadata},
            headers={"Authorization": f"Bearer {self._token()}"},
        )
        resp.raise_for_status()
        logger.info("Room metadata updated (room=%s)", self._room)

    def dispatch(self, payload: dict[str, Any]) -> asyncio.Task:
        """Fire-and-forget publish. Failures are logged, never retried.

        Each publish starts only after the previous one finished, so a slow
        request can never overwrite newer metadata.
        """
        task = asyncio.create_task(
            self._publish_after(self._tail, payload), name="room_metadata_publish"
        )
        self._tail = task
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def _publish_after(self, previous: Optional[asyncio.Task], payload: dict[str, Any]) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        await self.publish(payload)

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if self._tail is task:
            self._tail = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Failed to update room metadata (room=%s): %s", self._room, exc)

    async def aclose(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._client.aclose()
