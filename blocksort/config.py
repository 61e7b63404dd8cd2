"""Configuration management for blocksort."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from blocksort.errors import ConfigurationError
from blocksort.labels import DEFAULT_CLASSES, MAX_PULSE_WIDTH, MIN_PULSE_WIDTH, ClassTable


class Config:
    """Configuration manager for the sorter."""

    def __init__(self, config_path: str = "settings.yaml"):
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            self._config = yaml.safe_load(f) or {}

        self._setup_logging()

    def _setup_logging(self):
        """Setup logging configuration."""
        log_config = self._config.get("logging", {})
        logging.basicConfig(
            level=getattr(logging, log_config.get("level", "INFO")),
            format=log_config.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'belt.steps')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def __getitem__(self, key: str) -> Any:
        """Get configuration section."""
        return self._config[key]

    def to_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary."""
        return self._config.copy()

    def class_table(self) -> ClassTable:
        """Build the class table from the ``classes`` section."""
        return ClassTable.from_dict(self.get("classes", DEFAULT_CLASSES))


@dataclass
class BeltSettings:
    """Stepper motor settings for the conveyor belt."""

    pins: List[int] = field(default_factory=lambda: [6, 13, 19, 26])
    steps: int = 5
    phase_delay: float = 0.01  # seconds
    direction: str = "reverse"

    @classmethod
    def from_config(cls, config: Config) -> "BeltSettings":
        settings = cls(
            pins=list(config.get("belt.pins", [6, 13, 19, 26])),
            steps=int(config.get("belt.steps", 5)),
            phase_delay=float(config.get("belt.phase_delay", 0.01)),
            direction=str(config.get("belt.direction", "reverse")),
        )
        if len(settings.pins) != 4:
            raise ConfigurationError(
                f"Belt motor needs exactly 4 pins, got {len(settings.pins)}"
            )
        if settings.steps < 0:
            raise ConfigurationError(f"Belt step count must be >= 0, got {settings.steps}")
        return settings


@dataclass
class BucketSettings:
    """Servo settings for the dispensing bucket."""

    pin: int = 1
    settle_time: float = 2.0  # seconds for a full 0-180 traversal
    min_pulse_width: float = MIN_PULSE_WIDTH
    max_pulse_width: float = MAX_PULSE_WIDTH
    frequency: float = 50.0

    @classmethod
    def from_config(cls, config: Config) -> "BucketSettings":
        return cls(
            pin=int(config.get("bucket.pin", 1)),
            settle_time=float(config.get("bucket.settle_time", 2.0)),
            min_pulse_width=float(config.get("bucket.min_pulse_width", MIN_PULSE_WIDTH)),
            max_pulse_width=float(config.get("bucket.max_pulse_width", MAX_PULSE_WIDTH)),
            frequency=float(config.get("bucket.frequency", 50.0)),
        )


@dataclass
class CaptureSettings:
    """Still-image capture settings."""

    command: str = "raspistill"
    output: str = "public/currentBlock.jpg"
    public_dir: Optional[str] = "public"
    resolution: int = 1000
    timeout: int = 1000  # milliseconds before the shot is taken

    @classmethod
    def from_config(cls, config: Config) -> "CaptureSettings":
        return cls(
            command=config.get("capture.command", "raspistill"),
            output=config.get("capture.output", "public/currentBlock.jpg"),
            public_dir=config.get("capture.public_dir", "public"),
            resolution=int(config.get("capture.resolution", 1000)),
            timeout=int(config.get("capture.timeout", 1000)),
        )


@dataclass
class ChannelSettings:
    """Listening address for the remote classifier."""

    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_config(cls, config: Config) -> "ChannelSettings":
        return cls(
            host=config.get("channel.host", "0.0.0.0"),
            port=int(config.get("channel.port", 3000)),
        )


def load_config(config_path: str = "settings.yaml") -> Config:
    """
    Load configuration from file.

    Args:
        config_path: Path to configuration file

    Returns:
        Config object
    """
    return Config(config_path)
