from __future__ import annotations

import logging
from typing import Optional

from ..drivers.i2c_device import DeviceOpenError, I2CConfig, I2CDevice

logger = logging.getLogger(__name__)

PWR_MGMT_1 = 0x6B
TEMP_OUT_H = 0x41


def decode_imu_temperature(data: bytes) -> float:
    if len(data) < 2:
        raise ValueError(f"Expected 2 temperature bytes, got {len(data)}")
    raw = int.from_bytes(data[:2], "big", signed=True)
    return raw / 340.0 + 36.53


class ImuTemperatureSensor:
    """MPU-6050 die temperature. Feeds the rolling smoother."""

    sensor_id = "imu_temperature"
    unit = "C"

    def __init__(self, bus: int = 1, address: int = 0x68, device: Optional[I2CDevice] = None) -> None:
        self._device = device or I2CDevice(I2CConfig(bus=bus, address=address))

    def open(self) -> None:
        self._device.open()
        try:
            self._device.write_byte(PWR_MGMT_1, 0x00)
        except OSError as e:
            self._device.close()
            raise DeviceOpenError(f"Failed to wake up IMU: {e}") from e
        logger.info("IMU woken up")

    def close(self) -> None:
        self._device.close()

    def read(self) -> float:
        """Return degrees Celsius. Raise on failure."""
        return decode_imu_temperature(self._device.read_bytes(TEMP_OUT_H, 2))
