"""Session state machine.

    NOT_STARTED ──start──▶ RUNNING ──time out──▶ LOST
                              │                   │
                              └──mission success──▶ WON
    WON / LOST ──restart (start)──▶ RUNNING

While RUNNING the view is EXPLORING or TERMINAL_OPEN. Leaving RUNNING always
closes the terminal.
"""

from __future__ import annotations

import logging

from aura.models import Phase, SystemId, TerminalView, View

logger = logging.getLogger(__name__)


class InvalidTransition(RuntimeError):
    """Raised when a transition is not allowed from the current state."""


class SessionStateMachine:
    def __init__(self) -> None:
        self._phase: Phase = "not_started"
        self._terminal: SystemId | None = None

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase == "running"

    @property
    def terminal_open(self) -> bool:
        return self._terminal is not None

    @property
    def active_machine(self) -> SystemId | None:
        return self._terminal

    @property
    def view(self) -> View | None:
        if not self.is_running:
            return None
        return "terminal_open" if self.terminal_open else "exploring"

    def terminal_view(self) -> TerminalView:
        return TerminalView(open=self.terminal_open, machine=self._terminal)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> None:
        """First start or restart. Always lands in RUNNING/EXPLORING."""
        logger.info("session %s -> running", self._phase)
        self._phase = "running"
        self._terminal = None

    def lose(self) -> None:
        self._require_running("lose")
        self._phase = "lost"
        self._terminal = None
        logger.info("session lost")

    def win(self) -> None:
        self._require_running("win")
        self._phase = "won"
        self._terminal = None
        logger.info("session won")

    def open_terminal(self, machine: SystemId) -> None:
        self._require_running("open a terminal")
        if self.terminal_open:
            raise InvalidTransition(f"Terminal already open on {self._terminal}")
        self._terminal = machine
        logger.info("terminal opened on %s", machine)

    def close_terminal(self) -> None:
        if not self.terminal_open:
            raise InvalidTransition("No terminal is open")
        self._terminal = None

    def _require_running(self, action: str) -> None:
        if not self.is_running:
            raise InvalidTransition(f"Cannot {action} while {self._phase}")
