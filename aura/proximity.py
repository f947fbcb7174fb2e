"""Distance queries between the player and the machines."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Protocol

from aura.models import Machine, Player
from aura.world import INTERACT_RADIUS, MACHINES


class Rect(Protocol):
    x: float
    y: float
    width: float
    height: float


def center(rect: Rect) -> tuple[float, float]:
    return rect.x + rect.width / 2, rect.y + rect.height / 2


def distance(player: Player, machine: Machine) -> float:
    """Euclidean distance between the player's center and the machine's center."""
    px, py = center(player)
    mx, my = center(machine)
    return math.hypot(px - mx, py - my)


def in_range(player: Player, machine: Machine, radius: float = INTERACT_RADIUS) -> bool:
    return distance(player, machine) < radius



def first_in_range(
    player: Player, machines: Iterable[Machine] = MACHINES
) -> Machine | None:
    """The first machine in declaration order within reach, not the nearest."""
    for machine in machines:
        if in_range(player, machine):
            return machine
    return None
