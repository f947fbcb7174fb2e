"""Settings read from the environment (and a .env file, loaded by the caller).

    GEMINI_API_KEY     credential for the dialogue service
    AURA_PROVIDER      gemini | openai | echo            (default gemini)
    AURA_PROVIDER_URL  base URL of the dialogue backend
    AURA_MODEL         model identifier                  (default gemini-3-pro-preview)
    AURA_TIMEOUT       request timeout in seconds        (default 120)
    AURA_FPS           simulation frames per second      (default 60)
"""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field

from aura.llm import DialogueClient, EchoDialogueClient, HttpDialogueClient

Provider = Literal["gemini", "openai", "echo"]

_DEFAULT_URLS: dict[str, str] = {
    "gemini": "https://generativelanguage.googleapis.com",
    "openai": "https://api.openai.com",
    "echo": "",
}


class Settings(BaseModel):
    api_key: str = ""
    provider: Provider = "gemini"
    provider_url: str = _DEFAULT_URLS["gemini"]
    model: str = "gemini-3-pro-preview"
    timeout: float = Field(default=120.0, gt=0)
    fps: float = Field(default=60.0, gt=0)

    def public(self) -> dict:
        """Settings safe to show a client (no credential)."""
        data = self.model_dump(exclude={"api_key"})
        data["has_api_key"] = bool(self.api_key)
        return data


def load_settings() -> Settings:
    """Build Settings from environment variables, falling back to defaults."""
    provider = os.getenv("AURA_PROVIDER", "gemini").strip().lower()
    fields: dict = {
        "api_key": os.getenv("GEMINI_API_KEY", ""),
        "provider": provider,
        "provider_url": os.getenv("AURA_PROVIDER_URL", _DEFAULT_URLS.get(provider, "")),
    }
    for key, env in (("model", "AURA_MODEL"), ("timeout", "AURA_TIMEOUT"), ("fps", "AURA_FPS")):
        value = os.getenv(env)
        if value:
            fields[key] = value
    return Settings.model_validate(fields)


def build_client(settings: Settings) -> DialogueClient:
    """Construct the dialogue client the settings describe."""
    if settings.provider == "echo":
        return EchoDialogueClient()
    return HttpDialogueClient(
        provider_url=settings.provider_url,
        api_key=settings.api_key,
        provider_format=settings.provider,
        model=settings.model,
        timeout=settings.timeout,
    )
