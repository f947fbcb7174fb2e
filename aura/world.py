"""World geometry and the three fixed machines.

    {CANVAS_WIDTH}×{CANVAS_HEIGHT} engineering bay
      POWER          (150, 150)  "POWER GENERATOR"
      NAV            (600, 150)  "NAV CONSOLE"
      LIFE_SUPPORT   (375, 450)  "LIFE SUPPORT"

Declaration order matters: interaction picks the first machine in range.
"""

from __future__ import annotations

from aura.models import Machine, SystemId

CANVAS_WIDTH = 800
CANVAS_HEIGHT = 600

PLAYER_SIZE = 64
PLAYER_SPEED = 250.0  # world units per second, per axis

ANIM_FRAMES = 6
ANIM_FRAME_SECONDS = 0.1

INTERACT_RADIUS = 80.0
TIME_BUDGET = 180  # seconds
CRITICAL_SECONDS = 30

SPAWN_X = CANVAS_WIDTH / 2 - PLAYER_SIZE / 2
SPAWN_Y = CANVAS_HEIGHT / 2 - PLAYER_SIZE / 2

MACHINES: tuple[Machine, ...] = (
    Machine(id="POWER", x=150, y=150, name="POWER GENERATOR", color="#ef4444"),
    Machine(id="NAV", x=600, y=150, name="NAV CONSOLE", color="#3b82f6"),
    Machine(id="LIFE_SUPPORT", x=375, y=450, name="LIFE SUPPORT", color="#22c55e"),
)

SYSTEM_IDS: tuple[SystemId, ...] = tuple(m.id for m in MACHINES)


def machine_by_id(system_id: str) -> Machine | None:
    for machine in MACHINES:
        if machine.id == system_id:
            return machine
    return None
