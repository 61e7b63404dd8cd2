"""Tests for opening the GPIO devices, using gpiozero's mock pins."""

import asyncio

import pytest
from gpiozero import Device, DigitalOutputDevice
from gpiozero.pins.mock import MockFactory, MockPWMPin

from blocksort.config import BeltSettings, BucketSettings
from blocksort.errors import ConfigurationError
from blocksort.hardware import PWMServo, open_belt, open_bucket
from blocksort.hardware.belt import BeltDirection


@pytest.fixture
def mock_factory():
    previous = Device.pin_factory
    Device.pin_factory = MockFactory(pin_class=MockPWMPin)
    yield Device.pin_factory
    Device.pin_factory.reset()
    Device.pin_factory = previous


def test_open_belt(mock_factory):
    belt = open_belt(BeltSettings(steps=3, phase_delay=0))

    assert all(isinstance(pin, DigitalOutputDevice) for pin in belt.pins)
    assert [pin.value for pin in belt.pins] == [0, 0, 0, 0]
    assert belt.direction is BeltDirection.REVERSE

    belt.step()
    assert [pin.value for pin in belt.pins] == [1, 0, 0, 0]

    asyncio.run(belt.advance())
    assert [pin.value for pin in belt.pins] == [0, 0, 0, 0]


def test_open_belt_forward(mock_factory):
    belt = open_belt(BeltSettings(direction="FORWARD"))
    assert belt.direction is BeltDirection.FORWARD


def test_open_belt_unknown_direction(mock_factory):
    with pytest.raises(ConfigurationError):
        open_belt(BeltSettings(direction="sideways"))


def test_open_bucket_sets_duty_cycle(mock_factory, class_table):
    bucket = open_bucket(BucketSettings(pin=18, settle_time=0), class_table)

    asyncio.run(bucket.rotate_to(2))

    # 1000us of a 20000us period
    assert bucket.servo.device.value == pytest.approx(0.05)
    assert bucket.servo.pulse_width == pytest.approx(1000)


def test_pwm_servo_rejects_pulse_longer_than_period():
    class FakePWMDevice:
        value = 0

    servo = PWMServo(FakePWMDevice(), frequency=50)

    with pytest.raises(ValueError):
        servo.write(25000)
    assert servo.pulse_width is None


def test_pwm_servo_period():
    class FakePWMDevice:
        value = 0

    servo = PWMServo(FakePWMDevice(), frequency=100)
    servo.write(2500)

    assert servo.period == 10000
    assert servo.device.value == pytest.approx(0.25)
