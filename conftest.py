import asyncio

import pytest

from aura.game import Game
from aura.llm import DialogueError


class StubDialogueClient:
    """Deterministic dialogue service stand-in for tests.

    Replies are consumed in order across all sessions. A reply that is an
    exception instance is raised instead of returned. Once the script runs
    dry every send gets `default`. `hold()` makes sends wait until
    `release()` so tests can observe the pending state.
    """

    def __init__(self, replies: list[str | Exception] | None = None,
                 default: str = "AURA: Standing by.") -> None:
        self.replies: list[str | Exception] = list(replies or [])
        self.default = default
        self.sessions: list[StubDialogueSession] = []
        self._gate: asyncio.Event | None = None

    def create(self, system_instruction: str) -> "StubDialogueSession":
        session = StubDialogueSession(self, system_instruction)
        self.sessions.append(session)
        return session

    def queue(self, *replies: str | Exception) -> None:
        self.replies.extend(replies)

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        gate, self._gate = self._gate, None
        if gate is not None:
            gate.set()

    @property
    def sent(self) -> list[str]:
        return [m for s in self.sessions for m in s.sent]

    async def _reply(self) -> str:
        if self._gate is not None:
            await self._gate.wait()
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return reply


class StubDialogueSession:
    def __init__(self, client: StubDialogueClient, system_instruction: str) -> None:
        self.system_instruction = system_instruction
        self.sent: list[str] = []
        self._client = client

    async def send(self, message: str) -> str:
        self.sent.append(message)
        return await self._client._reply()


@pytest.fixture
def stub() -> StubDialogueClient:
    return StubDialogueClient(["ALERTS: POWER CRITICAL, NAV CRITICAL, LIFE-SUPPORT CRITICAL"])


@pytest.fixture
async def game(stub: StubDialogueClient):
    """A game whose clock and frames are driven by the test."""
    g = Game(stub, realtime=False)
    yield g
    await g.shutdown()


@pytest.fixture
def transport_error() -> DialogueError:
    return DialogueError("Cannot connect to dialogue backend at http://test")
