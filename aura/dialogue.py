"""Dialogue session controller: one AURA conversation per game run.

Exchange flow for a command:
  1. Append the command to the transcript as a user message.
  2. Mark the controller pending; further submissions are no-ops.
  3. Send the command wrapped with the master timer.
  4. Append AURA's reply (or a fixed error line on failure).
  5. Clear pending.

Requests are strictly serialised: there is no queue, a second command while
one is in flight is dropped. A controller is closed when the game restarts;
replies that arrive after that are discarded.
"""

from __future__ import annotations

import logging

from aura.llm import DialogueClient, DialogueError
from aura.models import Message, Role
from aura.prompts import INITIALIZE_COMMAND, SYSTEM_INSTRUCTION, command_prompt

logger = logging.getLogger(__name__)

CONNECT_ERROR_TEXT = "ERROR CONNECTING TO AURA CORE."
CONNECTION_LOST_TEXT = "ERROR: CONNECTION LOST."


class DialogueSessionController:
    """Owns the session handle, the transcript and the pending flag."""

    def __init__(
        self,
        client: DialogueClient,
        session_id: int = 0,
        system_instruction: str = SYSTEM_INSTRUCTION,
    ) -> None:
        self.session_id = session_id
        self._session = client.create(system_instruction)
        self._transcript: list[Message] = []
        self._pending = False
        self._closed = False

    @property
    def transcript(self) -> list[Message]:
        return list(self._transcript)

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def closed(self) -> bool:
        return self._closed

    def can_submit(self) -> bool:
        return not self._pending and not self._closed

    def close(self) -> None:
        """Supersede this session. Late replies will be dropped."""
        self._closed = True

    async def initialize(self) -> str | None:
        """Ask AURA for the opening alert list. Returns the reply, or None on failure."""
        if not self.can_submit():
            return None
        return await self._exchange(INITIALIZE_COMMAND, error_text=CONNECT_ERROR_TEXT)

    async def submit(self, command: str, remaining: int) -> str | None:
        """Send a player command. Returns AURA's reply, or None if nothing came back.

        None covers three cases: the command was rejected (blank, pending or
        closed), the transport failed, or the session was superseded while
        waiting.
        """
        if not command.strip():
            return None
        if not self.can_submit():
            logger.warning("session %d busy, dropped command %r", self.session_id, command)
            return None

        self._append("user", command)
        return await self._exchange(
            command_prompt(command, remaining), error_text=CONNECTION_LOST_TEXT
        )

    async def _exchange(self, message: str, *, error_text: str) -> str | None:
        self._pending = True
        try:
            text = await self._session.send(message)
        except DialogueError:
            logger.exception("dialogue request failed (session %d)", self.session_id)
            if not self._closed:
                self._append("aura", error_text)
            return None
        finally:
            self._pending = False

        if self._closed:
            logger.warning("discarding reply for superseded session %d", self.session_id)
            return None
        self._append("aura", text)
        return text

    def _append(self, role: Role, text: str) -> None:
        self._transcript.append(Message(role=role, text=text))
