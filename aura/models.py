"""Core domain models.

Every component exchanges these types. Pydantic validates them at the API
boundary and serialises snapshots for the front end.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SystemId = Literal["POWER", "NAV", "LIFE_SUPPORT"]
SystemStatus = Literal["BROKEN", "FIXED"]
Role = Literal["user", "aura"]

Phase = Literal["not_started", "running", "won", "lost"]
View = Literal["exploring", "terminal_open"]


class Machine(BaseModel):
    """A fixed interactable console, bound one-to-one to a ship system."""

    model_config = ConfigDict(frozen=True)

    id: SystemId
    x: float
    y: float
    width: float = 64
    height: float = 64
    name: str
    color: str


class Player(BaseModel):
    """The engineer. Replaced (never mutated in place) once per simulation tick."""

    x: float
    y: float
    width: float = 64
    height: float = 64
    frame: int = Field(default=0, ge=0, le=5)
    anim_timer: float = 0.0
    flip: bool = False  # facing left


class Directions(BaseModel):
    """Directional keys held during a tick."""

    model_config = ConfigDict(frozen=True)

    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False

    @property
    def moving(self) -> bool:
        return self.up or self.down or self.left or self.right


class Message(BaseModel):
    """One transcript entry. The transcript is append-only."""

    role: Role
    text: str


class TerminalView(BaseModel):
    open: bool = False
    machine: SystemId | None = None


class GameSnapshot(BaseModel):
    """Read-only view of a game for renderers and the HTTP API."""

    session_id: int
    phase: Phase
    view: View | None
    terminal: TerminalView
    remaining: int
    clock: str
    critical: bool
    systems: dict[str, SystemStatus]
    player: Player
    nearby: SystemId | None = None
    pending: bool = False
    messages: list[Message] = Field(default_factory=list)
