"""Pulse-width servo output on top of a gpiozero PWM device."""

import logging

logger = logging.getLogger(__name__)


class PWMServo:
    """Hold a servo at a commanded pulse width."""

    def __init__(self, device, frequency: float = 50.0):
        """
        Initialize servo output.

        Args:
            device: gpiozero.PWMOutputDevice already opened at ``frequency``
            frequency: PWM frequency (Hz)
        """
        self.device = device
        self.period = 1_000_000 / frequency  # microseconds
        self.pulse_width = None

    def write(self, pulse_width: float):
        """
        Command the servo to hold a pulse width.

        Args:
            pulse_width: Active time per period (microseconds)
        """
        if not 0 <= pulse_width <= self.period:
            raise ValueError(
                f"Pulse width {pulse_width}us outside PWM period {self.period:g}us"
            )
        self.device.value = pulse_width / self.period
        self.pulse_width = pulse_width
        logger.debug(f"Servo pulse width set to {pulse_width:.0f}us")

    def close(self):
        self.device.close()
