"""Process-wide game runtime: settings, dialogue client and the one live Game."""

from aura.config import Settings, build_client, load_settings
from aura.game import Game

_settings: Settings | None = None
_game: Game | None = None


def init_runtime(settings: Settings | None = None, game: Game | None = None) -> None:
    """Configure the runtime. Tests pass a Game built on a stub client."""
    global _settings, _game
    _settings = settings or load_settings()
    _game = game or Game(build_client(_settings), fps=_settings.fps)


def settings() -> Settings:
    assert _settings is not None, "Call init_runtime() before using the runtime"
    return _settings


def game() -> Game:
    assert _game is not None, "Call init_runtime() before using the runtime"
    return _game


async def shutdown_runtime() -> None:
    if _game is not None:
        await _game.shutdown()
