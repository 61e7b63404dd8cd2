"""Tests for optional value helpers."""

import pytest

from blocksort.errors import CaptureError, SorterError
from blocksort.utils import unwrap, unwrap_or


def test_unwrap_returns_value():
    assert unwrap("/currentBlock.jpg", "No image captured") == "/currentBlock.jpg"


def test_unwrap_keeps_falsy_values():
    assert unwrap(0, "missing") == 0
    assert unwrap("", "missing") == ""


def test_unwrap_none_raises_with_message():
    with pytest.raises(SorterError, match="No image captured"):
        unwrap(None, "No image captured")


def test_unwrap_none_raises_requested_error():
    with pytest.raises(CaptureError):
        unwrap(None, "No image captured", CaptureError)


def test_unwrap_or():
    assert unwrap_or(None, 3) == 3
    assert unwrap_or(5, 3) == 5
