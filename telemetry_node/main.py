from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .core.config import Settings, load_settings
from .core.log import configure_logging

from .api.routes import router as api_router
import telemetry_node.api.routes as routes_module

from .domain.change_gate import ChangeGate
from .domain.window import TemperatureWindow
from .drivers.i2c_device import DeviceOpenError
from .services.builder import SnapshotBuilder
from .services.publisher import RoomMetadataPublisher
from .services.telemetry import TelemetryService
from .services.temperature_sampler import TemperatureSampler
from .sources.imu_temperature import ImuTemperatureSensor
from .sources.modem import ModemSource
from .sources.system_stats import SystemStatsSource
from .sources.ups_gauge import UpsGaugeSource


logger = logging.getLogger(__name__)


settings: Optional[Settings] = None
window: Optional[TemperatureWindow] = None
telemetry: Optional[TelemetryService] = None


def get_telemetry() -> TelemetryService:
    assert telemetry is not None
    return telemetry


def get_window() -> TemperatureWindow:
    assert window is not None
    return window


def get_identity() -> dict:
    assert settings is not None
    return {"app": settings.app_name, "room": settings.livekit_room}


def open_mandatory_devices(imu: ImuTemperatureSensor, ups: UpsGaugeSource) -> None:
    """IMU and UPS gauge must be present at startup."""
    try:
        imu.open()
    except DeviceOpenError as e:
        logger.critical("Failed to open IMU: %s", e)
        raise
    try:
        ups.open()
    except DeviceOpenError as e:
        imu.close()
        logger.critical("Failed to open UPS gauge: %s", e)
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    global settings, window, telemetry

    configure_logging(log_dir=None)
    settings = load_settings()
    configure_logging(level=settings.log_level.upper(), log_dir=settings.log_dir)
    logger.info("Starting %s (room=%s)", settings.app_name, settings.livekit_room)

    imu = ImuTemperatureSensor(bus=settings.i2c_bus, address=settings.imu_address)
    ups = UpsGaugeSource(bus=settings.i2c_bus, address=settings.ups_address)
    open_mandatory_devices(imu, ups)

    window = TemperatureWindow(capacity=settings.temperature_window)
    sampler = TemperatureSampler(imu, window, interval_s=settings.temperature_sample_seconds)

    builder = SnapshotBuilder(
        system=SystemStatsSource(
            proc_stat_path=settings.proc_stat_path,
            cooling_fan_path=settings.cooling_fan_path,
            command_timeout_s=settings.command_timeout_seconds,
        ),
        ups=ups,
        modem=ModemSource(
            vendor=settings.modem_vendor,
            command_timeout_s=settings.command_timeout_seconds,
        ),
        window=window,
    )
    publisher = RoomMetadataPublisher(
        base_url=settings.livekit_url,
        api_key=settings.livekit_api_key,
        api_secret=settings.livekit_api_secret,
        room=settings.livekit_room,
        timeout_s=settings.publish_timeout_seconds,
        token_ttl_s=settings.token_ttl_seconds,
    )
    telemetry = TelemetryService(builder, ChangeGate(), publisher, cycle_s=settings.cycle_seconds)

    await sampler.start()
    await telemetry.start()

    try:
        yield
    finally:
        await telemetry.stop()
        await sampler.stop()
        await publisher.aclose()
        ups.close()
        imu.close()

        logger.info("Shutdown complete")


app = FastAPI(title="Node Telemetry", lifespan=lifespan)

# Make the dependency functions in routes resolve to the real ones
app.dependency_overrides[routes_module.get_telemetry] = get_telemetry
app.dependency_overrides[routes_module.get_window] = get_window
app.dependency_overrides[routes_module.get_identity] = get_identity

app.include_router(api_router, prefix="/api")


def run() -> None:
    import uvicorn

    uvicorn.run("telemetry_node.main:app", host="0.0.0.0", port=8000)
