"""Game controller: composes input, motion, proximity, countdown, dialogue
and puzzle tracking into one game session.

Writers per field:
  player               simulation loop (tick)
  remaining            countdown
  statuses, won        reply continuation (_on_reply)
  transcript, pending  dialogue controller
  terminal view        input edges, win/loss

Every reply is tagged with the session id that sent it; a restart bumps the
id, so replies from an older run never touch the current one.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Coroutine
from typing import Any

from aura.controls import InputController
from aura.countdown import Countdown, countdown_step, format_clock
from aura.dialogue import DialogueSessionController
from aura.llm import DialogueClient
from aura.loop import SimulationLoop
from aura.models import GameSnapshot, Machine, Message, Phase, Player, SystemId, SystemStatus
from aura.motion import spawn_player, step_player
from aura.proximity import first_in_range
from aura.puzzle import PuzzleTracker
from aura.state import SessionStateMachine
from aura.world import CRITICAL_SECONDS, TIME_BUDGET

logger = logging.getLogger(__name__)


class Game:
    """One player's game. `start()` begins a run; calling it again restarts.

    With realtime=False no background tasks are started and the host drives
    `tick(dt)` and `countdown_tick()` itself.
    """

    def __init__(
        self,
        client: DialogueClient,
        *,
        fps: float = 60.0,
        tick_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        realtime: bool = True,
    ) -> None:
        self._client = client
        self._realtime = realtime
        self._state = SessionStateMachine()
        self._input = InputController()
        self._puzzle = PuzzleTracker()
        self._player = spawn_player()
        self._remaining = TIME_BUDGET
        self._session_id = 0
        self._dialogue: DialogueSessionController | None = None
        self._countdown = Countdown(self.countdown_tick, interval=tick_interval)
        self._loop = SimulationLoop(self.tick, fps=fps, clock=clock)
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def state(self) -> SessionStateMachine:
        return self._state

    @property
    def session_id(self) -> int:
        return self._session_id

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def player(self) -> Player:
        return self._player

    @property
    def statuses(self) -> dict[SystemId, SystemStatus]:
        return self._puzzle.statuses

    @property
    def transcript(self) -> list[Message]:
        return self._dialogue.transcript if self._dialogue else []

    @property
    def pending(self) -> bool:
        return self._dialogue is not None and self._dialogue.pending

    @property
    def countdown_running(self) -> bool:
        return self._countdown.running

    @property
    def loop_running(self) -> bool:
        return self._loop.running

    def nearby_machine(self) -> Machine | None:
        """Machine the "Press [E]" hint points at, if any."""
        if not self._state.is_running or self._state.terminal_open:
            return None
        return first_in_range(self._player)

    def snapshot(self) -> GameSnapshot:
        nearby = self.nearby_machine()
        return GameSnapshot(
            session_id=self._session_id,
            phase=self._state.phase,
            view=self._state.view,
            terminal=self._state.terminal_view(),
            remaining=self._remaining,
            clock=format_clock(self._remaining),
            critical=self._remaining < CRITICAL_SECONDS,
            systems=dict(self._puzzle.statuses),
            player=self._player,
            nearby=nearby.id if nearby else None,
            pending=self.pending,
            messages=self.transcript,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start (or restart) a run and wait for AURA's opening alert list."""
        dialogue = self._reset()
        if self._realtime:
            self._countdown.start()
            self._loop.start()
        logger.info("session %d started", self._session_id)
        await dialogue.initialize()

    def _reset(self) -> DialogueSessionController:
        if self._dialogue is not None:
            self._dialogue.close()
        self._countdown.cancel()
        self._loop.stop()

        self._session_id += 1
        self._state.start()
        self._puzzle = PuzzleTracker()
        self._remaining = TIME_BUDGET
        self._player = spawn_player()
        self._input.clear()
        self._dialogue = DialogueSessionController(self._client, session_id=self._session_id)
        return self._dialogue

    async def wait_idle(self) -> None:
        """Wait for every background dialogue exchange to finish."""
        while self._tasks:
            await asyncio.gather(*self._tasks)

    async def shutdown(self) -> None:
        self._countdown.cancel()
        self._loop.stop()
        if self._dialogue is not None:
            self._dialogue.close()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def key_down(self, key: str) -> None:
        edge = self._input.key_down(
            key,
            running=self._state.is_running,
            terminal_open=self._state.terminal_open,
        )
        if edge == "interact":
            self.interact()
        elif edge == "close":
            self.close_terminal()

    def key_up(self, key: str) -> None:
        self._input.key_up(key)

    def interact(self) -> Machine | None:
        """Open the terminal of the first machine in reach and send "Open <id>"."""
        if not self._state.is_running or self._state.terminal_open:
            return None
        machine = first_in_range(self._player)
        if machine is None:
            return None

        self._state.open_terminal(machine.id)
        if self._dialogue is not None and self._dialogue.can_submit():
            self._spawn(self._exchange(f"Open {machine.id}"))
        else:
            logger.warning("auto command for %s dropped, request pending", machine.id)
        return machine

    def close_terminal(self) -> bool:
        if not self._state.terminal_open:
            return False
        self._state.close_terminal()
        return True

    async def submit(self, text: str) -> bool:
        """Send a typed command from the open terminal. False if it was rejected."""
        if not self._state.is_running or not self._state.terminal_open:
            return False
        if self._dialogue is None or not text.strip() or not self._dialogue.can_submit():
            logger.warning("submit rejected: %r", text)
            return False
        await self._exchange(text)
        return True

    # ------------------------------------------------------------------
    # Time sources
    # ------------------------------------------------------------------

    def tick(self, dt: float) -> None:
        """One simulation frame. Only the player changes here."""
        if not self._state.is_running:
            return
        self._player = step_player(
            self._player,
            self._input.directions(),
            dt,
            frozen=self._state.terminal_open,
        )

    def countdown_tick(self) -> bool:
        """One second of mission time. Returns True once the countdown is finished."""
        if not self._state.is_running:
            return True
        self._remaining, expired = countdown_step(self._remaining)
        if expired:
            self._loop.stop()
            self._state.lose()
            logger.info("session %d lost: time expired", self._session_id)
        return expired

    # ------------------------------------------------------------------
    # Dialogue
    # ------------------------------------------------------------------

    async def _exchange(self, command: str) -> None:
        dialogue = self._dialogue
        session_id = self._session_id
        assert dialogue is not None
        reply = await dialogue.submit(command, self._remaining)
        if reply is not None:
            self._on_reply(session_id, reply)

    def _on_reply(self, session_id: int, text: str) -> None:
        if session_id != self._session_id:
            logger.warning("dropping reply from superseded session %d", session_id)
            return
        if not self._state.is_running:
            logger.info("reply arrived after the game ended; ignored")
            return

        update = self._puzzle.apply(text)
        if update.mission_success:
            self._countdown.cancel()
            self._loop.stop()
            self._state.win()
            logger.info(
                "session %d won with %ds left (all systems fixed: %s)",
                self._session_id, self._remaining, self._puzzle.all_fixed,
            )

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
