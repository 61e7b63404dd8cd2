"""
Class labels and the servo angle/pulse-width mapping.

Each class the remote classifier can predict is mapped to a bucket position,
expressed as a servo angle in degrees. The servo itself is commanded with a
pulse width in microseconds, derived from the angle by a fixed linear map.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Union

from blocksort.errors import ConfigurationError

logger = logging.getLogger(__name__)

MIN_ANGLE = 0.0
MAX_ANGLE = 180.0

# Servo duty-cycle bounds (microseconds)
MIN_PULSE_WIDTH = 500.0
MAX_PULSE_WIDTH = 2500.0

DEFAULT_CLASSES = {
    1: {"name": "axel", "angle": 0},
    2: {"name": "connectors", "angle": 45},
    3: {"name": "decorations", "angle": 90},
    4: {"name": "fasteners", "angle": 135},
    5: {"name": "gears", "angle": 180},
}


@dataclass(frozen=True)
class ClassLabel:
    """A sortable class and its bucket angle."""

    id: int
    name: str
    angle: float

    def __str__(self) -> str:
        return f"{self.id} ({self.name})"


def check_angle(angle: float) -> float:
    """
    Validate a bucket angle.

    Args:
        angle: Angle in degrees

    Returns:
        The angle unchanged

    Raises:
        ConfigurationError: If the angle lies outside [0, 180]
    """
    if not MIN_ANGLE <= angle <= MAX_ANGLE:
        raise ConfigurationError(
            f"Invalid angle {angle}: must lie in [{MIN_ANGLE:g}, {MAX_ANGLE:g}]"
        )
    return angle


def angle_to_pulse_width(
    angle: float,
    min_pulse_width: float = MIN_PULSE_WIDTH,
    max_pulse_width: float = MAX_PULSE_WIDTH,
) -> float:
    """
    Map a servo angle to a pulse width.

    Args:
        angle: Target angle in degrees, within [0, 180]
        min_pulse_width: Pulse width for 0 degrees (us)
        max_pulse_width: Pulse width for 180 degrees (us)

    Returns:
        Pulse width in microseconds
    """
    check_angle(angle)
    span = max_pulse_width - min_pulse_width
    return min_pulse_width + (angle / MAX_ANGLE) * span


def pulse_width_to_angle(
    pulse_width: float,
    min_pulse_width: float = MIN_PULSE_WIDTH,
    max_pulse_width: float = MAX_PULSE_WIDTH,
) -> float:
    """Inverse of :func:`angle_to_pulse_width`."""
    span = max_pulse_width - min_pulse_width
    return (pulse_width - min_pulse_width) / span * MAX_ANGLE


class ClassTable(Mapping):
    """Lookup table from label id to :class:`ClassLabel`."""

    def __init__(self, labels: Mapping[int, ClassLabel]):
        self._labels = dict(labels)

    @classmethod
    def from_dict(cls, classes: Mapping[Any, Mapping[str, Any]]) -> "ClassTable":
        """
        Build a table from the ``classes`` configuration section.

        Args:
            classes: Mapping of label id to ``{"name": ..., "angle": ...}``

        Returns:
            ClassTable

        Angles are not range-checked here; an out-of-range angle is reported
        when the bucket is asked to rotate to it.
        """
        labels = {}
        for key, entry in classes.items():
            try:
                label_id = int(key)
                label = ClassLabel(
                    id=label_id,
                    name=str(entry.get("name", label_id)),
                    angle=float(entry["angle"]),
                )
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise ConfigurationError(f"Malformed class entry {key!r}: {e}") from e
            labels[label_id] = label

        if not labels:
            raise ConfigurationError("Class table is empty")

        logger.debug(f"Loaded {len(labels)} classes: {', '.join(map(str, labels.values()))}")
        return cls(labels)

    @classmethod
    def default(cls) -> "ClassTable":
        return cls.from_dict(DEFAULT_CLASSES)

    def lookup(self, label: Union[int, str]) -> ClassLabel:
        """
        Resolve a label as received from the classifier.

        Args:
            label: Label id, as an int or a numeric string

        Returns:
            The matching ClassLabel

        Raises:
            ConfigurationError: If the label is not in the table
        """
        try:
            return self._labels[int(label)]
        except (KeyError, TypeError, ValueError):
            raise ConfigurationError(f"Unknown class label: {label!r}") from None

    def __getitem__(self, key: int) -> ClassLabel:
        return self._labels[key]

    def __iter__(self) -> Iterator[int]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def to_dict(self) -> Dict[int, Dict[str, Any]]:
        return {
            label.id: {"name": label.name, "angle": label.angle}
            for label in self._labels.values()
        }
