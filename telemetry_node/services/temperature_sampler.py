from __future__ import annotations
import asyncio
import logging
from typing import Optional, Protocol

from ..domain.window import TemperatureWindow


logger = logging.getLogger(__name__)


class TemperatureSensor(Protocol):
    sensor_id: str

    def read(self) -> float:
        ...


class TemperatureSampler:
    """Feeds the rolling window from the IMU at a fixed tick."""

    def __init__(self, sensor: TemperatureSensor, window: TemperatureWindow, interval_s: float = 0.1) -> None:
        self._sensor = sensor
        self._window = window
        self._interval_s = interval_s

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()

    @property
    def window(self) -> TemperatureWindow:
        return self._window

    async def start(self) -> None:
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="temperature_sampler")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

    async def sample_once(self) -> bool:
        loop = asyncio.get_running_loop()
        try:
            # sync I2C read, run in thread to keep the event loop free
            value = await loop.run_in_executor(None, self._sensor.read)
        except Exception as e:
            # window stays as it was; retried next tick
            logger.error("Failed to read temperature from %s: %s", self._sensor.sensor_id, e)
            return False
        self._window.push(value)
        return True

    async def _run(self) -> None:
        logger.info(
            "Temperature sampler started (interval=%ss window=%s)",
            self._interval_s,
            self._window.capacity,
        )

        while not self._stop.is_set():
            await self.sample_once()

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval_s)
            except asyncio.TimeoutError:
                pass

        logger.info("Temperature sampler stopped")
