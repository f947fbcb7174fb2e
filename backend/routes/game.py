"""Game endpoints: start/restart, snapshot, keyboard input, terminal commands."""

from fastapi import APIRouter, HTTPException

from aura.models import GameSnapshot, Message
from backend import runtime

from .models import CommandBody, CommandResult, KeyBody

router = APIRouter()


@router.get("/game")
async def get_game() -> GameSnapshot:
    """Current game snapshot (phase, timer, systems, player, terminal, transcript)."""
    return runtime.game().snapshot()


@router.post("/game/start")
async def start_game() -> GameSnapshot:
    """Start or restart the game. Returns once AURA's opening alert list arrived."""
    game = runtime.game()
    await game.start()
    return game.snapshot()


@router.post("/game/keys")
async def press_key(body: KeyBody) -> GameSnapshot:
    """Report a key going down (pressed=true) or up (pressed=false)."""
    game = runtime.game()
    if body.pressed:
        game.key_down(body.key)
    else:
        game.key_up(body.key)
    return game.snapshot()


@router.post("/game/command")
async def send_command(body: CommandBody) -> CommandResult:
    """Send a typed command to AURA through the open terminal.

    accepted=false while a previous command is still pending or when the
    command is blank.
    """
    game = runtime.game()
    if not game.state.is_running:
        raise HTTPException(409, "Game is not running")
    if not game.state.terminal_open:
        raise HTTPException(409, "No terminal is open")
    accepted = await game.submit(body.message)
    return CommandResult(accepted=accepted, game=game.snapshot())


@router.post("/game/terminal/close")
async def close_terminal() -> GameSnapshot:
    """Close the open terminal (same as pressing Escape)."""
    game = runtime.game()
    game.close_terminal()
    return game.snapshot()


@router.get("/game/messages")
async def get_messages() -> list[Message]:
    """Transcript of the current run."""
    return runtime.game().transcript
