from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from ..core.timeutil import now_unix
from ..domain.change_gate import ChangeGate
from ..domain.models import Snapshot
from .builder import SnapshotBuilder


logger = logging.getLogger(__name__)


class Publisher(Protocol):
    def dispatch(self, payload: dict[str, Any]) -> Any:
        ...


@dataclass
class LiveState:
    last_snapshot: Optional[Snapshot] = None
    last_payload: Optional[dict[str, Any]] = None
    cycles: int = 0
    published: int = 0
    suppressed: int = 0


class TelemetryService:
    """The 1 Hz cycle: build a snapshot, gate it, hand it to the publisher."""

    def __init__(
        self,
        builder: SnapshotBuilder,
        gate: ChangeGate,
        publisher: Publisher,
        cycle_s: float = 1.0,
    ) -> None:
        self._builder = builder
        self._gate = gate
        self._publisher = publisher
        self._cycle_s = cycle_s

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()

        self.live = LiveState()

    @property
    def gate(self) -> ChangeGate:
        return self._gate

    async def start(self) -> None:
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="telemetry_loop")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

    async def run_cycle(self) -> bool:
        """One tick. Returns True when the snapshot was handed to the publisher."""
        snapshot = await self._builder.build()
        self.live.cycles += 1
        self.live.last_snapshot = snapshot

        if not self._gate.offer(snapshot):
            self.live.suppressed += 1
            logger.debug("Snapshot unchanged, not publishing")
            return False

        payload = dict(snapshot.to_dict())
        payload["timestamp"] = now_unix()
        self.live.last_payload = payload
        self.live.published += 1

        self._publisher.dispatch(payload)
        return True

    async def _run(self) -> None:
        logger.info("Telemetry loop started (cycle_seconds=%s)", self._cycle_s)

        while not self._stop.is_set():
            try:
                await self.run_cycle()
            except Exception as e:
                logger.exception("Telemetry cycle error: %s", e)

            # sleep with cancellation awareness
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._cycle_s)
            except asyncio.TimeoutError:
                pass

        logger.info("Telemetry loop stopped")
