"""Dispensing bucket servo driver."""

import asyncio
import logging
from typing import Awaitable, Callable, Union

from blocksort.labels import (
    MAX_PULSE_WIDTH,
    MIN_PULSE_WIDTH,
    ClassLabel,
    ClassTable,
    angle_to_pulse_width,
)

logger = logging.getLogger(__name__)


class BucketActuator:
    """Rotates the bucket to the position of a class and waits for it to settle."""

    def __init__(
        self,
        servo,
        class_table: ClassTable,
        settle_time: float = 2.0,
        min_pulse_width: float = MIN_PULSE_WIDTH,
        max_pulse_width: float = MAX_PULSE_WIDTH,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize bucket actuator.

        Args:
            servo: Servo output exposing write(pulse_width_us)
            class_table: Label to angle lookup
            settle_time: Time for a full 0-180 traversal (seconds)
            min_pulse_width: Pulse width for 0 degrees (us)
            max_pulse_width: Pulse width for 180 degrees (us)
            sleep: Coroutine used for the settle wait
        """
        self.servo = servo
        self.class_table = class_table
        self.settle_time = settle_time
        self.min_pulse_width = min_pulse_width
        self.max_pulse_width = max_pulse_width
        self._sleep = sleep

    def pulse_width_for(self, label: Union[int, str]) -> float:
        """
        Pulse width for a label, validating the configured angle.

        Raises:
            ConfigurationError: Unknown label or angle outside [0, 180]
        """
        target = self.class_table.lookup(label)
        return angle_to_pulse_width(target.angle, self.min_pulse_width, self.max_pulse_width)

    async def rotate_to(self, label: Union[int, str, ClassLabel]) -> float:
        """
        Rotate the bucket to a class and block until it has settled.

        Args:
            label: Class label id (int or numeric string) or ClassLabel

        Returns:
            The commanded pulse width (us)
        """
        if isinstance(label, ClassLabel):
            label = label.id

        target = self.class_table.lookup(label)
        pulse_width = angle_to_pulse_width(
            target.angle, self.min_pulse_width, self.max_pulse_width
        )

        logger.info(f"Rotating bucket to {target} at {target.angle:g} deg ({pulse_width:.0f}us)")
        self.servo.write(pulse_width)

        await self._sleep(self.settle_time)
        return pulse_width
