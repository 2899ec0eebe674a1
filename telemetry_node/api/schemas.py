from __future__ import annotations
from pydantic import BaseModel
from typing import Any, Optional, List


class CycleCounters(BaseModel):
    cycles: int
    published: int
    suppressed: int


class LiveResponse(BaseModel):
    app: str
    room: str
    counters: CycleCounters
    last_snapshot: Optional[dict[str, Any]] = None
    last_payload: Optional[dict[str, Any]] = None
    fingerprint: Optional[str] = None


class TemperatureResponse(BaseModel):
    capacity: int
    samples: List[Optional[float]]
    average: Optional[float] = None
