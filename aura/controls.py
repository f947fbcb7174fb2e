"""Keyboard input: held-key tracking and interact/close edge detection.

Key names follow the browser's KeyboardEvent.key values ("ArrowUp", "w",
"Escape", ...). Single-letter keys are matched case-insensitively so Shift or
Caps Lock does not stall the player.
"""

from __future__ import annotations

from typing import Literal

from aura.models import Directions

Edge = Literal["interact", "close"]

UP_KEYS = frozenset({"ArrowUp", "w"})
DOWN_KEYS = frozenset({"ArrowDown", "s"})
LEFT_KEYS = frozenset({"ArrowLeft", "a"})
RIGHT_KEYS = frozenset({"ArrowRight", "d"})
INTERACT_KEY = "e"
CLOSE_KEY = "Escape"


def normalize_key(key: str) -> str:
    return key.lower() if len(key) == 1 else key


class InputController:
    """Live set of depressed keys.

    `key_down` reports an edge only on the transition from released to held;
    auto-repeat key-downs for a key that is already held never fire twice.
    """

    def __init__(self) -> None:
        self._held: set[str] = set()

    @property
    def held(self) -> frozenset[str]:
        return frozenset(self._held)

    def key_down(self, key: str, *, running: bool, terminal_open: bool) -> Edge | None:
        key = normalize_key(key)
        repeat = key in self._held
        self._held.add(key)
        if repeat:
            return None

        if key == INTERACT_KEY and running and not terminal_open:
            return "interact"
        if key == CLOSE_KEY and terminal_open:
            return "close"
        return None

    def key_up(self, key: str) -> None:
        self._held.discard(normalize_key(key))

    def clear(self) -> None:
        self._held.clear()

    def directions(self) -> Directions:
        held = self._held
        return Directions(
            up=not held.isdisjoint(UP_KEYS),
            down=not held.isdisjoint(DOWN_KEYS),
            left=not held.isdisjoint(LEFT_KEYS),
            right=not held.isdisjoint(RIGHT_KEYS),
        )
