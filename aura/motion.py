"""Player motion and sprite animation as a pure per-tick reducer.

    step_player(prior, directions, dt, frozen) -> next

Each held axis moves the player at PLAYER_SPEED. Diagonals are not
normalised, so diagonal speed is PLAYER_SPEED * sqrt(2).
"""

from __future__ import annotations

from aura.models import Directions, Player
from aura.world import (
    ANIM_FRAME_SECONDS,
    ANIM_FRAMES,
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    PLAYER_SIZE,
    PLAYER_SPEED,
    SPAWN_X,
    SPAWN_Y,
)


def spawn_player() -> Player:
    """A fresh player standing in the middle of the bay."""
    return Player(x=SPAWN_X, y=SPAWN_Y, width=PLAYER_SIZE, height=PLAYER_SIZE)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def step_player(
    player: Player,
    directions: Directions,
    dt: float,
    frozen: bool = False,
) -> Player:
    """Advance the player by one tick of `dt` seconds.

    While frozen (terminal open) nothing moves and the animation holds its
    frame. Releasing every direction snaps the frame back to 0.
    """
    if frozen:
        return player
    dt = max(dt, 0.0)

    x, y, flip = player.x, player.y, player.flip
    step = PLAYER_SPEED * dt

    if directions.up:
        y -= step
    if directions.down:
        y += step
    if directions.left:
        x -= step
        flip = True
    if directions.right:
        x += step
        flip = False

    x = _clamp(x, 0, CANVAS_WIDTH - player.width)
    y = _clamp(y, 0, CANVAS_HEIGHT - player.height)

    frame, anim_timer = player.frame, player.anim_timer
    if directions.moving:
        anim_timer += dt
        if anim_timer > ANIM_FRAME_SECONDS:
            frame = (frame + 1) % ANIM_FRAMES
            anim_timer = 0.0
    else:
        frame = 0

    return player.model_copy(
        update={"x": x, "y": y, "flip": flip, "frame": frame, "anim_timer": anim_timer}
    )
