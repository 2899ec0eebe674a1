from __future__ import annotations

import pytest

from telemetry_node.drivers.i2c_device import DeviceOpenError
from telemetry_node.main import open_mandatory_devices
from telemetry_node.sources.imu_temperature import ImuTemperatureSensor
from telemetry_node.sources.ups_gauge import UpsGaugeSource

from fakes import FakeI2CDevice


def test_mandatory_devices_open() -> None:
    imu_dev, ups_dev = FakeI2CDevice(), FakeI2CDevice()

    open_mandatory_devices(ImuTemperatureSensor(device=imu_dev), UpsGaugeSource(device=ups_dev))

    assert imu_dev.is_open and ups_dev.is_open


def test_missing_ups_is_fatal_and_releases_imu(caplog) -> None:
    imu_dev, ups_dev = FakeI2CDevice(), FakeI2CDevice(fail_open=True)

    with pytest.raises(DeviceOpenError):
        open_mandatory_devices(ImuTemperatureSensor(device=imu_dev), UpsGaugeSource(device=ups_dev))

    assert not imu_dev.is_open
    assert "Failed to open UPS gauge" in caplog.text


def test_missing_imu_is_fatal(caplog) -> None:
    with pytest.raises(DeviceOpenError):
        open_mandatory_devices(
            ImuTemperatureSensor(device=FakeI2CDevice(fail_open=True)),
            UpsGaugeSource(device=FakeI2CDevice()),
        )

    assert "Failed to open IMU" in caplog.text
