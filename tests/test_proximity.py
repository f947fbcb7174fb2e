"""Tests for aura.proximity: interaction range and tie-break order."""

import pytest

from aura.models import Machine, Player
from aura.proximity import center, distance, first_in_range, in_range
from aura.world import INTERACT_RADIUS, MACHINES, machine_by_id


def _player_centered_at(cx: float, cy: float) -> Player:
    return Player(x=cx - 32, y=cy - 32)


def test_center_of_machine():
    power = machine_by_id("POWER")
    assert center(power) == (182, 182)


def test_distance_between_centers():
    power = machine_by_id("POWER")
    p = _player_centered_at(182 + 30, 182 + 40)
    assert distance(p, power) == pytest.approx(50)


def test_in_range_is_strict():
    power = machine_by_id("POWER")
    assert not in_range(_player_centered_at(182 + INTERACT_RADIUS, 182), power)
    assert in_range(_player_centered_at(182 + INTERACT_RADIUS - 0.01, 182), power)


def test_nothing_in_range_at_spawn():
    assert first_in_range(_player_centered_at(400, 300)) is None


def test_first_in_range_finds_each_machine():
    for machine in MACHINES:
        cx, cy = center(machine)
        assert first_in_range(_player_centered_at(cx + 10, cy)) == machine


def test_declaration_order_beats_nearest():
    a = Machine(id="POWER", x=0, y=0, name="A", color="#fff")
    b = Machine(id="NAV", x=60, y=0, name="B", color="#fff")
    # Player center at (80, 32): 48 from A's center, 12 from B's center.
    p = _player_centered_at(80, 32)
    assert in_range(p, a) and in_range(p, b)
    assert distance(p, b) < distance(p, a)
    assert first_in_range(p, [a, b]) == a
    assert first_in_range(p, [b, a]) == b

