"""
Sort controller.

States: IDLE → CAPTURING → AWAITING_RESULT → ROTATING → IDLE

Each cycle photographs the item on the belt, asks the remote classifier for
its class, advances the belt while the answer is pending, and finally rotates
the bucket under the item. The classification round trip is overlapped with
belt motion, but its result is only consumed once the belt has stopped.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from blocksort.capture import CaptureDevice
from blocksort.channel import ClassificationChannel
from blocksort.errors import CaptureError
from blocksort.hardware.belt import BeltActuator
from blocksort.hardware.bucket import BucketActuator
from blocksort.labels import ClassLabel, ClassTable
from blocksort.utils.option import unwrap

logger = logging.getLogger(__name__)


class SortState(Enum):
    """Controller states"""

    IDLE = "idle"
    CAPTURING = "capturing"
    AWAITING_RESULT = "awaiting_result"
    ROTATING = "rotating"


@dataclass
class SortResult:
    """Outcome of one completed cycle."""

    image_ref: str
    label: ClassLabel
    pulse_width: float
    duration: float


class SortController:
    """Runs the capture/classify/advance/rotate cycle."""

    def __init__(
        self,
        capture: CaptureDevice,
        channel: ClassificationChannel,
        belt: BeltActuator,
        bucket: BucketActuator,
        class_table: Optional[ClassTable] = None,
    ):
        """
        Initialize controller.

        The components are created once at startup and reused by every cycle.

        Args:
            capture: Camera
            channel: Connection to the remote classifier
            belt: Conveyor belt stepper
            bucket: Dispensing bucket servo
            class_table: Label lookup (defaults to the bucket's table)
        """
        self.capture = capture
        self.channel = channel
        self.belt = belt
        self.bucket = bucket
        self.class_table = class_table or bucket.class_table

        self.state = SortState.IDLE
        self.cycles_completed = 0
        self.last_result: Optional[SortResult] = None

    def transition_to(self, new_state: SortState):
        old_state = self.state
        self.state = new_state
        logger.debug(f"State transition: {old_state.value} → {new_state.value}")

    async def run_cycle(self) -> SortResult:
        """
        Sort one item.

        Returns:
            SortResult for the item

        Raises:
            CaptureError: If no frame was captured; nothing is moved
            ConfigurationError: If the predicted label has no valid bucket angle
        """
        start_time = time.monotonic()

        try:
            self.transition_to(SortState.CAPTURING)
            logger.info("Capturing image...")
            frame = unwrap(await self.capture.capture(), "No image captured", CaptureError)
            image_ref = self.capture.reference(frame)

            self.transition_to(SortState.AWAITING_RESULT)
            logger.info("Classifying image...")
            pending = self.channel.classify(image_ref)

            await self.belt.advance()

            label = self.class_table.lookup(await pending)
            logger.info(f"Classified: {label.name}")

            self.transition_to(SortState.ROTATING)
            pulse_width = await self.bucket.rotate_to(label)
        except Exception as e:
            logger.error(f"Sort cycle aborted in {self.state.value} state: {e}")
            self.channel.abandon()
            raise
        finally:
            self.transition_to(SortState.IDLE)

        result = SortResult(
            image_ref=image_ref,
            label=label,
            pulse_width=pulse_width,
            duration=time.monotonic() - start_time,
        )
        self.last_result = result
        self.cycles_completed += 1
        logger.info(f"Sorted item {self.cycles_completed} into {label} in {result.duration:.2f}s")
        return result

    async def run(self, cycles: Optional[int] = None):
        """
        Sort items until the process stops.

        Args:
            cycles: Stop after this many cycles (None runs forever)
        """
        logger.info("Robot sorter started")

        completed = 0
        while cycles is None or completed < cycles:
            await self.run_cycle()
            completed += 1
