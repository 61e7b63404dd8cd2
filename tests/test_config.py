"""Tests for configuration management."""

import tempfile
from pathlib import Path

import pytest
import yaml

from blocksort.config import (
    BeltSettings,
    BucketSettings,
    CaptureSettings,
    ChannelSettings,
    Config,
    load_config,
)
from blocksort.errors import ConfigurationError


def write_config(config_data):
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(config_data, f)
        return f.name


def test_config_load():
    """Test configuration loading from YAML file."""
    config_data = {
        "belt": {"pins": [6, 13, 19, 26], "steps": 5},
        "bucket": {"pin": 1, "settle_time": 2.0},
        "classes": {1: {"name": "axel", "angle": 0}},
    }
    temp_path = write_config(config_data)

    try:
        config = Config(temp_path)

        # Test direct access
        assert config["belt"]["pins"] == [6, 13, 19, 26]
        assert config["bucket"]["pin"] == 1

        # Test dot notation
        assert config.get("belt.steps") == 5
        assert config.get("bucket.settle_time") == 2.0

        # Test default value
        assert config.get("nonexistent.key", "default") == "default"

    finally:
        Path(temp_path).unlink()


def test_config_missing_file():
    """Test error handling for missing config file."""
    with pytest.raises(FileNotFoundError):
        Config("nonexistent.yaml")


def test_config_nested_get():
    """Test nested key access."""
    config_data = {"level1": {"level2": {"level3": "value"}}}
    temp_path = write_config(config_data)

    try:
        config = load_config(temp_path)
        assert config.get("level1.level2.level3") == "value"
        assert config.get("level1.level2.nonexistent") is None
        assert config.get("level1.level2.nonexistent", "default") == "default"

    finally:
        Path(temp_path).unlink()


def test_settings_defaults_from_empty_config():
    """Every actuator option falls back to the calibrated defaults."""
    temp_path = write_config({})

    try:
        config = Config(temp_path)

        belt = BeltSettings.from_config(config)
        assert belt.pins == [6, 13, 19, 26]
        assert belt.steps == 5
        assert belt.phase_delay == 0.01
        assert belt.direction == "reverse"

        bucket = BucketSettings.from_config(config)
        assert bucket.settle_time == 2.0
        assert (bucket.min_pulse_width, bucket.max_pulse_width) == (500, 2500)

        capture = CaptureSettings.from_config(config)
        assert capture.command == "raspistill"
        assert capture.resolution == 1000

        assert ChannelSettings.from_config(config).port == 3000

        table = config.class_table()
        assert [label.name for label in table.values()] == [
            "axel",
            "connectors",
            "decorations",
            "fasteners",
            "gears",
        ]

    finally:
        Path(temp_path).unlink()


def test_belt_settings_rejects_wrong_pin_count():
    temp_path = write_config({"belt": {"pins": [6, 13, 19]}})

    try:
        with pytest.raises(ConfigurationError):
            BeltSettings.from_config(Config(temp_path))
    finally:
        Path(temp_path).unlink()


def test_class_table_from_config():
    config_data = {
        "classes": {
            1: {"name": "axel", "angle": 0},
            2: {"name": "connectors", "angle": 45},
        }
    }
    temp_path = write_config(config_data)

    try:
        table = Config(temp_path).class_table()
        assert len(table) == 2
        assert table[2].name == "connectors"
        assert table[2].angle == 45.0
    finally:
        Path(temp_path).unlink()


def test_shipped_settings_file_loads():
    settings = Path(__file__).resolve().parent.parent / "settings.yaml"
    config = Config(str(settings))

    assert BeltSettings.from_config(config).pins == [6, 13, 19, 26]
    assert config.class_table().lookup(5).angle == 180.0
