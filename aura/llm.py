"""Dialogue service client: HTTP connection to a chat model.

The game talks to the service through two protocols:

    client.create(system_instruction) -> DialogueSession
    await session.send(message) -> str

A session is one conversation. The service is expected to remember earlier
turns; the HTTP implementations below keep the history on the client side
because the REST endpoints they call are stateless.

Two implementations are provided:

    HttpDialogueClient: real HTTP client, supports the Gemini
                        generateContent API and OpenAI-compatible chat
                        completions. Selected by provider_format.
    EchoDialogueClient: acknowledges every message without a network call.
                        Useful for driving the game with no credential.

Tests use StubDialogueClient (defined in conftest.py) instead.
"""

from __future__ import annotations

import logging
from typing import Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols: every dialogue implementation must match these signatures
# ---------------------------------------------------------------------------

class DialogueSession(Protocol):
    async def send(self, message: str) -> str: ...


class DialogueClient(Protocol):
    def create(self, system_instruction: str) -> DialogueSession: ...


# ---------------------------------------------------------------------------
# HttpDialogueClient: connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["gemini", "openai"]


class HttpDialogueClient:
    """Async HTTP client for chat backends.

    Supported formats:
      "gemini"  POST /v1beta/models/{model}:generateContent
                  {"systemInstruction": ..., "contents": [...]}
                  Response: {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
      "openai"  POST /v1/chat/completions  {"model": ..., "messages": [...]}
                  Response: {"choices": [{"message": {"content": "..."}}]}

    Args:
        provider_url:    Base URL of the backend.
        api_key:         Credential, or empty string if not required.
        provider_format: Wire format to use. Defaults to "gemini".
        model:           Model identifier.
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "gemini",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    def create(self, system_instruction: str) -> HttpDialogueSession:
        return HttpDialogueSession(self, system_instruction)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if not self._api_key:
            return headers
        if self._format == "gemini":
            headers["x-goog-api-key"] = self._api_key
        else:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(
        self, system_instruction: str, history: list[tuple[str, str]]
    ) -> tuple[str, dict]:
        """Return (url, body) for the configured format.

        `history` holds (role, text) pairs with role "user" or "model".
        """
        if self._format == "openai":
            url = f"{self._base_url}/v1/chat/completions"
            messages = [{"role": "system", "content": system_instruction}]
            for role, text in history:
                messages.append({
                    "role": "assistant" if role == "model" else "user",
                    "content": text,
                })
            body: dict = {"messages": messages}
            if self._model:
                body["model"] = self._model
            return url, body

        # gemini (default)
        url = f"{self._base_url}/v1beta/models/{self._model}:generateContent"
        return url, {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [
                {"role": role, "parts": [{"text": text}]} for role, text in history
            ],
        }

    def _parse_response(self, data: object) -> str:
        """Extract the reply text from the response body."""
        if self._format == "openai":
            try:
                content = data["choices"][0]["message"]["content"]
            except (KeyError, IndexError, TypeError) as e:
                raise DialogueError(
                    "Unexpected response format from OpenAI-compatible backend"
                ) from e
            if not isinstance(content, str):
                raise DialogueError("Unexpected response format from OpenAI-compatible backend")
            return content

        # gemini
        try:
            parts = data["candidates"][0]["content"]["parts"]
            texts = [p["text"] for p in parts if "text" in p]
        except (KeyError, IndexError, TypeError) as e:
            raise DialogueError("Unexpected response format from Gemini backend") from e
        if not texts or not all(isinstance(t, str) for t in texts):
            raise DialogueError("Unexpected response format from Gemini backend")
        return "".join(texts)

    async def complete(self, system_instruction: str, history: list[tuple[str, str]]) -> str:
        url, body = self._build_request(system_instruction, history)
        logger.debug("dialogue call url=%s turns=%d", url, len(history))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise DialogueError(f"Cannot connect to dialogue backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise DialogueError(
                f"Dialogue backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise DialogueError(f"Dialogue backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise DialogueError(f"Dialogue request failed: {e!r}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise DialogueError("Dialogue backend returned a non-JSON body") from e
        text = self._parse_response(data)
        logger.debug("dialogue response len=%d", len(text))
        return text


class HttpDialogueSession:
    """One conversation against an HttpDialogueClient.

    A turn is recorded in the history only after the backend answered, so a
    failed send can simply be retried by the player.
    """

    def __init__(self, client: HttpDialogueClient, system_instruction: str) -> None:
        self._client = client
        self._system_instruction = system_instruction
        self._history: list[tuple[str, str]] = []

    @property
    def history(self) -> list[tuple[str, str]]:
        return list(self._history)

    async def send(self, message: str) -> str:
        turns = [*self._history, ("user", message)]
        text = await self._client.complete(self._system_instruction, turns)
        self._history = [*turns, ("model", text)]
        return text


# ---------------------------------------------------------------------------
# EchoDialogueClient: no network; useful for offline smoke runs
# ---------------------------------------------------------------------------

class EchoDialogueClient:
    """Acknowledges each message. No network calls.

    Lets you walk the bay, open terminals and watch the transcript without a
    running model. It never emits a marker phrase, so nothing gets fixed.
    """

    def create(self, system_instruction: str) -> EchoDialogueSession:
        logger.debug("EchoDialogueClient session instruction_len=%d", len(system_instruction))
        return EchoDialogueSession()


class EchoDialogueSession:
    async def send(self, message: str) -> str:
        return f"AURA ECHO: {message}"


# ---------------------------------------------------------------------------
# DialogueError: raised for all connection and protocol failures
# ---------------------------------------------------------------------------

class DialogueError(RuntimeError):
    """Raised when the dialogue backend cannot be reached or returns an error."""
