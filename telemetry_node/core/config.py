from __future__ import annotations

import logging

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    pass


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Node Telemetry"
    log_level: str = "DEBUG"
    log_dir: str = "logs"

    # Remote room registry (required)
    livekit_domain: str
    livekit_api_key: str
    livekit_api_secret: str
    livekit_room: str
    livekit_tls: bool = True

    # Sampling
    cycle_seconds: float = 1.0
    temperature_sample_seconds: float = 0.1
    temperature_window: int = Field(default=32, ge=1)

    # I2C bus shared by the UPS gauge and the IMU
    i2c_bus: int = 1
    ups_address: int = 0x36
    imu_address: int = 0x68

    # OS sources
    proc_stat_path: str = "/proc/stat"
    cooling_fan_path: str = "/sys/devices/platform/cooling_fan"
    modem_vendor: str = "QUECTEL"
    command_timeout_seconds: float = 5.0

    # Publisher
    publish_timeout_seconds: float = 5.0
    token_ttl_seconds: int = 600

    @property
    def livekit_url(self) -> str:
        scheme = "https" if self.livekit_tls else "http"
        return f"{scheme}://{self.livekit_domain}"


def load_settings(**overrides) -> Settings:
    """Load settings from the environment and .env, once, at startup.

    Missing remote credentials are fatal: the caller is expected to let the
    ConfigurationError terminate the process.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        logger.critical("Invalid or missing configuration: %s", ", ".join(missing))
        raise ConfigurationError(f"Invalid configuration: {', '.join(missing)}") from e
