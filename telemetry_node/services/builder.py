from __future__ import annotations
import asyncio
import logging

from ..domain.models import ModemReading, Snapshot
from ..domain.window import TemperatureWindow
from ..sources.base import Source

logger = logging.getLogger(__name__)


class SnapshotBuilder:
    def __init__(
        self,
        system: Source,
        ups: Source,
        modem: Source,
        window: TemperatureWindow,
    ) -> None:
        self._system = system
        self._ups = ups
        self._modem = modem
        self._window = window

    async def _read(self, source: Source):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, source.read)
        except Exception:
            logger.exception("Reader %s failed, publishing its fields as absent", source.source_id)
            return source.empty()

    async def build(self) -> Snapshot:
        # disjoint hardware: read concurrently, but all finish before assembly
        system, ups, modem = await asyncio.gather(
            self._read(self._system),
            self._read(self._ups),
            self._read(self._modem),
        )
        modem_reading: ModemReading = modem
        return Snapshot(
            modem=modem_reading.modem,
            location=modem_reading.location,
            system=system,
            ups=ups,
            temp=self._window.average(),
        )
