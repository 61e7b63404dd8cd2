"""Tests for the belt stepper ring counter."""

import asyncio

import pytest

from blocksort.errors import ConfigurationError
from blocksort.hardware.belt import BeltActuator, BeltDirection, next_phase, phase_mask


def test_next_phase_reverse_wraps():
    """Reverse direction shifts toward lower phases and wraps 0 -> 3."""
    assert next_phase(3) == 2
    assert next_phase(2) == 1
    assert next_phase(1) == 0
    assert next_phase(0) == 3


def test_next_phase_forward_wraps():
    assert next_phase(0, BeltDirection.FORWARD) == 1
    assert next_phase(3, BeltDirection.FORWARD) == 0


@pytest.mark.parametrize("direction", list(BeltDirection))
def test_full_ring_visits_every_phase(direction):
    phase = 0
    seen = []
    for _ in range(4):
        phase = next_phase(phase, direction)
        seen.append(phase)

    assert sorted(seen) == [0, 1, 2, 3]
    assert phase == 0


def test_phase_mask_is_one_hot():
    assert [phase_mask(p) for p in range(4)] == [0x01, 0x02, 0x04, 0x08]


def active_pins(pins):
    return [i for i, pin in enumerate(pins) if pin.value]


def test_step_energises_exactly_one_pin(pins):
    belt = BeltActuator(pins)

    for expected in (0, 3, 2, 1, 0):
        assert belt.step() == expected
        assert active_pins(pins) == [expected]


def test_advance_runs_configured_steps_then_releases(pins, recording_sleep):
    belt = BeltActuator(pins, steps=5, phase_delay=0.01, sleep=recording_sleep)

    asyncio.run(belt.advance())

    assert recording_sleep.durations == [0.01] * 5
    assert active_pins(pins) == []
    assert belt.advance_count == 1

    # Each pin is written once per step plus once by the release
    for pin in pins:
        assert len(pin.history) == 6
        assert pin.history[-1] == 0


def test_advance_does_not_skip_phases(pins, recording_sleep):
    """Over N steps the energised phase walks the ring one position at a time."""
    belt = BeltActuator(pins, steps=9, sleep=recording_sleep)

    asyncio.run(belt.advance())

    energised = []
    for step in range(9):
        energised.append([i for i, pin in enumerate(pins) if pin.history[step]])

    assert all(len(active) == 1 for active in energised)
    sequence = [active[0] for active in energised]
    assert sequence == [0, 3, 2, 1, 0, 3, 2, 1, 0]


def test_phase_persists_between_advances(pins, recording_sleep):
    belt = BeltActuator(pins, steps=5, sleep=recording_sleep)

    asyncio.run(belt.advance())
    assert belt.phase == 0  # 0, 3, 2, 1, 0

    asyncio.run(belt.advance())
    assert belt.phase == 3  # continues from 0: 3, 2, 1, 0, 3
    assert belt.advance_count == 2


def test_forward_direction_sequence(pins, recording_sleep):
    belt = BeltActuator(pins, steps=4, direction=BeltDirection.FORWARD, sleep=recording_sleep)

    asyncio.run(belt.advance())

    sequence = [[i for i, pin in enumerate(pins) if pin.history[step]][0] for step in range(4)]
    assert sequence == [0, 1, 2, 3]


def test_advance_yields_between_steps(pins):
    """Other tasks get to run while the belt is moving."""
    ticks = []

    async def ticker():
        for _ in range(3):
            ticks.append(len([p for p in pins if p.history]))
            await asyncio.sleep(0)

    async def main():
        belt = BeltActuator(pins, steps=3, phase_delay=0)
        await asyncio.gather(belt.advance(), ticker())

    asyncio.run(main())

    # The ticker observed the belt part-way through its sequence
    assert ticks[-1] > 0


def test_release_on_failure(pins):
    async def failing_sleep(delay):
        raise RuntimeError("boom")

    belt = BeltActuator(pins, steps=3, sleep=failing_sleep)

    with pytest.raises(RuntimeError):
        asyncio.run(belt.advance())

    assert active_pins(pins) == []
    assert belt.advance_count == 0


def test_wrong_pin_count_rejected(pins):
    with pytest.raises(ConfigurationError):
        BeltActuator(pins[:3])
