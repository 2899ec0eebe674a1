from __future__ import annotations

import pytest

from fakes import FakeI2CDevice, RecordingPublisher


@pytest.fixture
def fake_device() -> FakeI2CDevice:
    return FakeI2CDevice()


@pytest.fixture
def recording_publisher() -> RecordingPublisher:
    return RecordingPublisher()
