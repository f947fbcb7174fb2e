import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from aura.config import Settings
from aura.game import Game
from backend import runtime
from backend.routes import router

load_dotenv(Path(__file__).parent.parent / ".env")

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    await runtime.shutdown_runtime()


def create_app(settings: Settings | None = None, game: Game | None = None) -> FastAPI:
    runtime.init_runtime(settings, game)

    app = FastAPI(title="AURA Emergency Protocol", lifespan=_lifespan)
    app.include_router(router, prefix="/api")

    if STATIC_DIR.exists() and not os.getenv("VITE_DEV", ""):
        # Serve static assets (JS, CSS, sprite sheet, etc.)
        app.mount("/assets", StaticFiles(directory=STATIC_DIR / "assets"), name="assets")

        # SPA fallback: all non-API routes serve index.html
        @app.get("/{path:path}")
        async def spa_fallback(path: str):
            return FileResponse(STATIC_DIR / "index.html")

    return app


# Default app instance for uvicorn (uses environment settings)
app = create_app()
