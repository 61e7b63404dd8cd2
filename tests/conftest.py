"""Shared fixtures."""

import pytest

from blocksort.labels import ClassTable

from fakes import FakePin, FakeServo, FakeTransport, RecordingSleep


@pytest.fixture
def class_table():
    return ClassTable.from_dict(
        {
            1: {"name": "axel", "angle": 0},
            2: {"name": "connectors", "angle": 45},
            5: {"name": "gears", "angle": 180},
        }
    )


@pytest.fixture
def pins():
    return [FakePin(n) for n in (6, 13, 19, 26)]


@pytest.fixture
def servo():
    return FakeServo()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def transport():
    return FakeTransport()
