"""
Conveyor belt stepper driver.

The belt is moved by a 4-phase stepper motor driven as a ring counter: exactly
one of the four phase outputs is energised at a time, and each step moves the
active output one position around the ring.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Sequence

from blocksort.errors import ConfigurationError

logger = logging.getLogger(__name__)

PHASE_COUNT = 4


class BeltDirection(Enum):
    """Ring shift direction."""

    FORWARD = "forward"  # ring shift left: 0 -> 1 -> 2 -> 3 -> 0
    REVERSE = "reverse"  # ring shift right: 3 -> 2 -> 1 -> 0 -> 3


def next_phase(phase: int, direction: BeltDirection = BeltDirection.REVERSE) -> int:
    """
    Advance the ring counter by one position.

    Args:
        phase: Current phase, 0-3
        direction: Shift direction

    Returns:
        The next phase, wrapping at either end of the ring
    """
    if direction is BeltDirection.FORWARD:
        return (phase + 1) % PHASE_COUNT
    return (phase - 1) % PHASE_COUNT


def phase_mask(phase: int) -> int:
    """One-hot pin mask for a phase (bit i drives pin i)."""
    return 0x01 << phase


class BeltActuator:
    """Drives the belt stepper through a fixed advancement sequence."""

    def __init__(
        self,
        pins: Sequence,
        steps: int = 5,
        phase_delay: float = 0.01,
        direction: BeltDirection = BeltDirection.REVERSE,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize belt actuator.

        Args:
            pins: Four digital outputs, one per motor phase (need on()/off())
            steps: Phase-steps per belt increment
            phase_delay: Time each phase is held (seconds)
            direction: Ring shift direction
            sleep: Coroutine used to wait between phase-steps
        """
        if len(pins) != PHASE_COUNT:
            raise ConfigurationError(
                f"Belt motor needs exactly {PHASE_COUNT} pins, got {len(pins)}"
            )

        self.pins = list(pins)
        self.steps = steps
        self.phase_delay = phase_delay
        self.direction = direction
        self._sleep = sleep

        # Start so that the first step energises phase 0 in either direction
        self.phase = next_phase(0, self._opposite(direction))
        self.advance_count = 0

    @staticmethod
    def _opposite(direction: BeltDirection) -> BeltDirection:
        if direction is BeltDirection.FORWARD:
            return BeltDirection.REVERSE
        return BeltDirection.FORWARD

    def _write(self, mask: int):
        for i, pin in enumerate(self.pins):
            if mask & (0x01 << i):
                pin.on()
            else:
                pin.off()

    def step(self) -> int:
        """
        Move one phase and energise it.

        Returns:
            The phase now energised
        """
        self.phase = next_phase(self.phase, self.direction)
        self._write(phase_mask(self.phase))
        return self.phase

    def release(self):
        """Drive every phase low so the motor holds no current."""
        self._write(0)

    async def advance(self):
        """Advance the belt by one increment."""
        logger.debug(f"Advancing belt {self.steps} steps ({self.direction.value})")

        try:
            for _ in range(self.steps):
                self.step()
                await self._sleep(self.phase_delay)
        finally:
            self.release()

        self.advance_count += 1
