from __future__ import annotations

import logging
from typing import Optional

from .base import Source
from ..domain.models import UpsState
from ..domain.numeric import round_half_away
from ..drivers.i2c_device import I2CConfig, I2CDevice

logger = logging.getLogger(__name__)

VOLTAGE_REGISTER = 0x02
CAPACITY_REGISTER = 0x04


def _swapped_u16(data: bytes) -> int:
    # the gauge's word read little-endian, then byte-swapped
    raw = int.from_bytes(data[:2], "little")
    return ((raw >> 8) & 0xFF) | ((raw & 0xFF) << 8)


def decode_ups_voltage(data: bytes) -> float:
    """1.25 mV per 16 counts."""
    return round_half_away(_swapped_u16(data) * 1.25 / 1000 / 16, 2)


def decode_ups_capacity(data: bytes) -> float:
    """1/256 % per count."""
    return round_half_away(_swapped_u16(data) / 256, 2)


class UpsGaugeSource(Source):
    def __init__(self, bus: int = 1, address: int = 0x36, device: Optional[I2CDevice] = None) -> None:
        self._device = device or I2CDevice(I2CConfig(bus=bus, address=address))

    @property
    def source_id(self) -> str:
        return "ups"

    def open(self) -> None:
        """Mandatory at startup: DeviceOpenError propagates."""
        self._device.open()

    def close(self) -> None:
        self._device.close()

    def empty(self) -> UpsState:
        return UpsState()

    def read(self) -> UpsState:
        return UpsState(
            voltage=self._read_register(VOLTAGE_REGISTER, decode_ups_voltage, "voltage"),
            capacity=self._read_register(CAPACITY_REGISTER, decode_ups_capacity, "capacity"),
        )

    def _read_register(self, register: int, decode, what: str) -> Optional[float]:
        try:
            data = self._device.read_bytes(register, 2)
        except (OSError, RuntimeError) as e:
            logger.error("Failed to read %s from UPS: %s", what, e)
            return None
        return decode(data)
