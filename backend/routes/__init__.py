"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, public settings) and game (start/restart,
snapshot, key input, terminal commands, transcript). The game is a single
in-process session; see backend.runtime.
"""

from fastapi import APIRouter

from .game import router as game_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(game_router)
