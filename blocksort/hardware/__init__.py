"""
Actuator drivers for the sorter.

Devices are opened once by :func:`open_belt` and :func:`open_bucket` and then
owned by the actuator for the life of the process.
"""

import logging
from typing import List

from gpiozero import DigitalOutputDevice, PWMOutputDevice

from blocksort.config import BeltSettings, BucketSettings
from blocksort.errors import ConfigurationError
from blocksort.hardware.belt import BeltActuator, BeltDirection, next_phase
from blocksort.hardware.bucket import BucketActuator
from blocksort.hardware.servo import PWMServo
from blocksort.labels import ClassTable

logger = logging.getLogger(__name__)


def open_belt_pins(pins: List[int]) -> List[DigitalOutputDevice]:
    """Open the stepper phase outputs, all initially low."""
    return [DigitalOutputDevice(pin, initial_value=False) for pin in pins]


def open_belt(settings: BeltSettings) -> BeltActuator:
    """
    Create the belt actuator on real GPIO pins.

    Args:
        settings: Belt settings

    Returns:
        BeltActuator
    """
    try:
        direction = BeltDirection(settings.direction.lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown belt direction {settings.direction!r}: expected 'forward' or 'reverse'"
        ) from None

    actuator = BeltActuator(
        pins=open_belt_pins(settings.pins),
        steps=settings.steps,
        phase_delay=settings.phase_delay,
        direction=direction,
    )
    logger.info(f"Belt motor on pins {settings.pins} ({settings.steps} steps, {direction.value})")
    return actuator


def open_bucket(settings: BucketSettings, class_table: ClassTable) -> BucketActuator:
    """
    Create the bucket actuator on a real PWM pin.

    Args:
        settings: Bucket settings
        class_table: Label to angle lookup

    Returns:
        BucketActuator
    """
    device = PWMOutputDevice(settings.pin, initial_value=0, frequency=settings.frequency)
    actuator = BucketActuator(
        servo=PWMServo(device, frequency=settings.frequency),
        class_table=class_table,
        settle_time=settings.settle_time,
        min_pulse_width=settings.min_pulse_width,
        max_pulse_width=settings.max_pulse_width,
    )
    logger.info(f"Bucket servo on pin {settings.pin} (settle {settings.settle_time:g}s)")
    return actuator


__all__ = [
    "BeltActuator",
    "BeltDirection",
    "BucketActuator",
    "PWMServo",
    "next_phase",
    "open_belt",
    "open_belt_pins",
    "open_bucket",
]
