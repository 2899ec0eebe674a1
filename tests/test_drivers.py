from __future__ import annotations

import sys

import pytest

from telemetry_node.drivers.commands import CommandError, run_command
from telemetry_node.drivers.i2c_device import DeviceOpenError, I2CConfig, I2CDevice


class FakeSMBus:
    opened: list[int] = []

    def __init__(self, bus: int) -> None:
        if bus == 9:
            raise FileNotFoundError(2, "No such file or directory", f"/dev/i2c-{bus}")
        FakeSMBus.opened.append(bus)
        self.closed = False
        self.written: list[tuple[int, int, int]] = []

    def read_i2c_block_data(self, address: int, register: int, length: int) -> list[int]:
        if register == 0x10:
            return [0x01]
        return [address & 0xFF, register][:length]

    def write_byte_data(self, address: int, register: int, value: int) -> None:
        self.written.append((address, register, value))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_smbus(monkeypatch):
    monkeypatch.setattr("telemetry_node.drivers.i2c_device.SMBus", FakeSMBus)
    return FakeSMBus


def test_i2c_read_returns_device_order_bytes(fake_smbus) -> None:
    device = I2CDevice(I2CConfig(bus=1, address=0x36))
    device.open()

    assert device.is_open
    assert device.read_bytes(0x02, 2) == bytes([0x36, 0x02])


def test_i2c_open_failure_raises_device_open_error(fake_smbus) -> None:
    device = I2CDevice(I2CConfig(bus=9, address=0x68))

    with pytest.raises(DeviceOpenError):
        device.open()
    assert not device.is_open


def test_i2c_short_read_raises(fake_smbus) -> None:
    device = I2CDevice(I2CConfig(bus=1, address=0x68))
    device.open()

    with pytest.raises(RuntimeError):
        device.read_bytes(0x10, 2)


def test_i2c_read_requires_open() -> None:
    with pytest.raises(RuntimeError):
        I2CDevice(I2CConfig()).read_bytes(0x02, 2)


def test_i2c_write_and_close(fake_smbus) -> None:
    device = I2CDevice(I2CConfig(bus=1, address=0x68))
    device.open()
    bus = device._bus
    device.write_byte(0x6B, 0x00)
    device.close()

    assert bus.written == [(0x68, 0x6B, 0x00)]
    assert bus.closed
    assert not device.is_open


def test_run_command_returns_stdout() -> None:
    assert run_command([sys.executable, "-c", "print('temp=48.3')"]).strip() == "temp=48.3"


def test_run_command_nonzero_exit() -> None:
    with pytest.raises(CommandError, match="exit status 3"):
        run_command([sys.executable, "-c", "import sys; sys.exit(3)"])


def test_run_command_missing_binary() -> None:
    with pytest.raises(CommandError, match="command not found"):
        run_command(["definitely-not-a-real-tool-xyz"])


def test_run_command_timeout() -> None:
    with pytest.raises(CommandError, match="timed out"):
        run_command([sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2)
