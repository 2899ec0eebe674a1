from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ..domain.window import TemperatureWindow
from ..services.telemetry import TelemetryService
from .schemas import CycleCounters, LiveResponse, TemperatureResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getters ---
# main.py points these at the running components via app.dependency_overrides.
def get_telemetry() -> TelemetryService:  # overridden in main
    raise RuntimeError("Telemetry dependency not configured")

def get_window() -> TemperatureWindow:  # overridden in main
    raise RuntimeError("Temperature window dependency not configured")

def get_identity() -> dict:  # overridden in main
    raise RuntimeError("Identity dependency not configured")


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/live", response_model=LiveResponse)
async def get_live(
    svc: TelemetryService = Depends(get_telemetry),
    identity: dict = Depends(get_identity),
):
    live = svc.live
    last = svc.gate.last
    return LiveResponse(
        app=identity["app"],
        room=identity["room"],
        counters=CycleCounters(
            cycles=live.cycles,
            published=live.published,
            suppressed=live.suppressed,
        ),
        last_snapshot=live.last_snapshot.to_dict() if live.last_snapshot else None,
        last_payload=live.last_payload,
        fingerprint=last.fingerprint.hex() if last else None,
    )


@router.get("/temperature", response_model=TemperatureResponse)
async def get_temperature(window: TemperatureWindow = Depends(get_window)):
    return TemperatureResponse(
        capacity=window.capacity,
        samples=window.samples(),
        average=window.average(),
    )
