"""AURA Emergency Protocol: dev launcher. Starts the backend with uvicorn."""

import argparse
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")


def main():
    parser = argparse.ArgumentParser(description="AURA Emergency Protocol dev launcher")
    parser.add_argument("--host", default=HOST, help=f"Bind address (default: {HOST})")
    parser.add_argument("--port", type=int, default=int(PORT),
                        help=f"Backend port (default: {PORT})")
    parser.add_argument("--provider", choices=["gemini", "openai", "echo"], default=None,
                        help="Dialogue provider (overrides AURA_PROVIDER)")
    parser.add_argument("--reload", action="store_true",
                        help="Restart the server when source files change")
    args = parser.parse_args()

    # The app reads its settings from the environment at import time
    if args.provider:
        os.environ["AURA_PROVIDER"] = args.provider

    print(f"Starting backend on http://localhost:{args.port} ...")
    uvicorn.run("backend.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
