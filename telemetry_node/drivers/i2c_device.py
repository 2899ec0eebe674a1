from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from smbus2 import SMBus

logger = logging.getLogger(__name__)


class DeviceOpenError(RuntimeError):
    pass


@dataclass
class I2CConfig:
    bus: int = 1
    address: int = 0x36


class I2CDevice:
    """
    One device address on an I2C bus.
    Responsible for: opening the bus handle, raw register reads/writes.
    """

    def __init__(self, cfg: I2CConfig):
        self.cfg = cfg
        self._bus: Optional[SMBus] = None

    @property
    def is_open(self) -> bool:
        return self._bus is not None

    def open(self) -> None:
        if self._bus is not None:
            return
        try:
            self._bus = SMBus(self.cfg.bus)
        except OSError as e:
            raise DeviceOpenError(
                f"Unable to open I2C bus {self.cfg.bus} for device 0x{self.cfg.address:02x}: {e}"
            ) from e
        logger.info("I2C device 0x%02x opened on bus %s", self.cfg.address, self.cfg.bus)

    def close(self) -> None:
        try:
            if self._bus is not None:
                self._bus.close()
        finally:
            self._bus = None

    def _require_bus(self) -> SMBus:
        if self._bus is None:
            raise RuntimeError(f"I2C device 0x{self.cfg.address:02x} is not open")
        return self._bus

    def read_bytes(self, register: int, length: int) -> bytes:
        """Block read starting at register. Raw bytes in device order."""
        data = self._require_bus().read_i2c_block_data(self.cfg.address, register, length)
        if len(data) != length:
            raise RuntimeError(
                f"Short I2C read at 0x{register:02x}: expected {length} bytes, got {len(data)}"
            )
        return bytes(data)

    def write_byte(self, register: int, value: int) -> None:
        self._require_bus().write_byte_data(self.cfg.address, register, value)
