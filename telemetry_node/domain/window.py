from __future__ import annotations
from collections import deque
from typing import Optional

from .numeric import truncate


class TemperatureWindow:
    """Fixed-capacity FIFO of recent IMU temperature samples.

    Slots never written hold None. Zero-valued slots are not averaged in,
    so a warming-up window only averages the samples it really has.
    """

    def __init__(self, capacity: int = 32) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._slots: deque[Optional[float]] = deque([None] * capacity, maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._slots.maxlen or 0

    def push(self, value: float) -> None:
        self._slots.append(float(value))

    def samples(self) -> list[Optional[float]]:
        return list(self._slots)

    def average(self) -> Optional[float]:
        total = 0.0
        count = 0
        for v in list(self._slots):
            if v:
                total += v
                count += 1
        if count == 0:
            return None
        return truncate(total / count, 1)
