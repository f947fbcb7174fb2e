"""Tests for aura.game: the composed game session.

Walks the engineer between machines with real key events and explicit frame
ticks, feeds scripted AURA replies and checks the session-level guarantees:
win precedence, serialised requests, countdown loss, restart, and that
replies from a superseded run never leak into the current one.
"""

import asyncio
import logging

import pytest

from aura.dialogue import CONNECT_ERROR_TEXT, CONNECTION_LOST_TEXT
from aura.game import Game
from aura.proximity import center
from aura.world import TIME_BUDGET, machine_by_id

FRAME = 1 / 60


def walk(game: Game, keys: list[str], seconds: float) -> None:
    """Hold `keys` for `seconds` of simulated frames, then release them."""
    for key in keys:
        game.key_down(key)
    elapsed = 0.0
    while elapsed < seconds:
        game.tick(FRAME)
        elapsed += FRAME
    for key in keys:
        game.key_up(key)


def walk_to(game: Game, system_id: str) -> None:
    """Walk from wherever the player is to a machine's center (axis by axis)."""
    tx, ty = center(machine_by_id(system_id))
    px, py = center(game.player)
    if abs(tx - px) > 1:
        walk(game, ["ArrowRight" if tx > px else "ArrowLeft"], abs(tx - px) / 250)
    px, py = center(game.player)
    if abs(ty - py) > 1:
        walk(game, ["ArrowDown" if ty > py else "ArrowUp"], abs(ty - py) / 250)


async def press_e(game: Game) -> None:
    game.key_down("e")
    game.key_up("e")
    await game.wait_idle()


async def submit_in_background(game: Game, text: str) -> None:
    """Submit without waiting for the reply; the request is in flight on return."""
    game._spawn(game.submit(text))
    await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------

class TestStart:
    async def test_not_started(self, game: Game) -> None:
        snap = game.snapshot()
        assert snap.phase == "not_started"
        assert snap.remaining == TIME_BUDGET
        assert snap.clock == "3:00"
        assert snap.messages == []

    async def test_start_records_initialization_reply(self, game: Game, stub) -> None:
        await game.start()
        assert game.phase == "running"
        assert game.state.view == "exploring"
        assert [m.role for m in game.transcript] == ["aura"]
        assert game.transcript[0].text.startswith("ALERTS")
        assert set(game.statuses.values()) == {"BROKEN"}

    async def test_initialization_reply_is_not_scanned(self, game: Game, stub) -> None:
        stub.replies = ["POWER IS FIXED (just kidding)"]
        await game.start()
        assert game.statuses["POWER"] == "BROKEN"

    async def test_initialization_failure(self, game: Game, stub, transport_error) -> None:
        stub.replies = [transport_error]
        await game.start()
        assert game.phase == "running"
        assert [m.text for m in game.transcript] == [CONNECT_ERROR_TEXT]
        assert set(game.statuses.values()) == {"BROKEN"}

    async def test_realtime_start_arms_timer_and_loop(self, stub) -> None:
        game = Game(stub, tick_interval=3600, fps=30)
        await game.start()
        assert game.countdown_running
        assert game.loop_running
        await game.shutdown()
        assert not game.countdown_running
        assert not game.loop_running


# ---------------------------------------------------------------------------
# Motion inside the game
# ---------------------------------------------------------------------------

class TestMotion:
    async def test_no_motion_before_start(self, game: Game) -> None:
        before = game.player
        walk(game, ["ArrowLeft"], 0.5)
        assert game.player == before

    async def test_terminal_freezes_motion(self, game: Game) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)
        assert game.state.terminal_open
        frozen_at = game.player
        walk(game, ["ArrowRight", "ArrowDown"], 0.5)
        assert game.player == frozen_at

    async def test_motion_resumes_after_escape(self, game: Game) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)
        game.key_down("Escape")
        game.key_up("Escape")
        assert game.state.view == "exploring"
        x = game.player.x
        walk(game, ["ArrowRight"], 0.2)
        assert game.player.x > x


# ---------------------------------------------------------------------------
# Interaction
# ---------------------------------------------------------------------------

class TestInteract:
    async def test_e_out_of_range_does_nothing(self, game: Game, stub) -> None:
        await game.start()
        await press_e(game)
        assert not game.state.terminal_open
        assert len(game.transcript) == 1

    async def test_e_in_range_opens_terminal_and_sends_open(self, game: Game, stub) -> None:
        await game.start()
        walk_to(game, "NAV")
        assert game.snapshot().nearby == "NAV"
        stub.queue("NAV CONSOLE: heading drift detected.")
        await press_e(game)
        assert game.state.active_machine == "NAV"
        assert game.snapshot().nearby is None
        assert [(m.role, m.text) for m in game.transcript[1:]] == [
            ("user", "Open NAV"),
            ("aura", "NAV CONSOLE: heading drift detected."),
        ]
        assert stub.sent[-1] == "USER COMMAND: Open NAV. (Time remaining: 180s)"

    async def test_auto_open_dropped_while_pending(self, game: Game, stub) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)
        stub.hold()
        stub.queue("still thinking", "never used")
        await submit_in_background(game, "status?")
        assert game.pending
        game.close_terminal()
        game.key_down("e")
        game.key_up("e")
        assert game.state.terminal_open
        assert [m.text for m in game.transcript].count("Open POWER") == 1
        stub.release()
        await game.wait_idle()

    async def test_submit_requires_open_terminal(self, game: Game) -> None:
        await game.start()
        assert await game.submit("Open POWER") is False
        assert len(game.transcript) == 1


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

class TestSerialisation:
    async def test_second_command_while_pending_has_no_effect(self, game: Game, stub) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)

        stub.hold()
        stub.queue("first reply")
        await submit_in_background(game, "first")
        assert game.pending
        before = game.transcript

        assert await game.submit("second") is False
        assert game.transcript == before
        assert game.pending

        stub.release()
        await game.wait_idle()
        assert not game.pending
        assert [m.text for m in game.transcript[-2:]] == ["first", "first reply"]

    async def test_rejected_submission_is_logged_as_warning(
        self, game: Game, stub, caplog: pytest.LogCaptureFixture
    ) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)
        caplog.set_level(logging.WARNING, logger="aura.game")
        assert await game.submit("   ") is False
        assert any(
            r.levelno == logging.WARNING and "submit rejected" in r.getMessage()
            for r in caplog.records
        )

    async def test_transport_failure_leaves_puzzle_untouched(
        self, game: Game, stub, transport_error
    ) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)
        stub.queue(transport_error)
        assert await game.submit("reroute coolant") is True
        assert game.transcript[-1].text == CONNECTION_LOST_TEXT
        assert set(game.statuses.values()) == {"BROKEN"}
        assert game.phase == "running"


# ---------------------------------------------------------------------------
# Puzzle progress and winning
# ---------------------------------------------------------------------------

class TestWin:
    async def test_fixed_marker_updates_only_that_system(self, game: Game, stub) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)
        stub.queue("Output stable. POWER IS FIXED. Suggest switching to NAV.")
        await game.submit("set regulator to 1.2")
        assert game.statuses == {"POWER": "FIXED", "NAV": "BROKEN", "LIFE_SUPPORT": "BROKEN"}
        assert game.state.terminal_open

    async def test_mission_success_wins_without_all_fixed(
        self, game: Game, stub, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="aura.game")
        await game.start()
        walk_to(game, "LIFE_SUPPORT")
        await press_e(game)
        stub.queue("SYSTEMS STABILIZED - MISSION SUCCESS")
        await game.submit("override everything")
        assert game.phase == "won"
        assert not game.state.terminal_open
        assert set(game.statuses.values()) == {"BROKEN"}
        assert "all systems fixed: False" in caplog.text

    async def test_win_stops_the_clock(self, stub) -> None:
        stub.queue("SYSTEMS STABILIZED - MISSION SUCCESS")
        game = Game(stub, tick_interval=3600, fps=30)
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)
        assert game.phase == "won"
        assert not game.countdown_running
        assert not game.loop_running
        await game.shutdown()

    async def test_no_interaction_after_win(self, game: Game, stub) -> None:
        await game.start()
        walk_to(game, "POWER")
        stub.queue("MISSION SUCCESS")
        await press_e(game)
        assert game.phase == "won"
        await press_e(game)
        assert not game.state.terminal_open


# ---------------------------------------------------------------------------
# Countdown and losing
# ---------------------------------------------------------------------------

class TestCountdown:
    async def test_180_ticks_lose(self, game: Game) -> None:
        await game.start()
        for _ in range(179):
            assert game.countdown_tick() is False
        assert game.remaining == 1
        assert game.countdown_tick() is True
        assert game.phase == "lost"
        assert game.remaining == 0
        assert game.snapshot().clock == "0:00"

    async def test_remaining_never_increases_or_goes_negative(self, game: Game) -> None:
        await game.start()
        last = game.remaining
        for _ in range(200):
            game.countdown_tick()
            assert 0 <= game.remaining <= last
            last = game.remaining

    async def test_loss_closes_terminal(self, game: Game) -> None:
        await game.start()
        walk_to(game, "NAV")
        await press_e(game)
        for _ in range(TIME_BUDGET):
            game.countdown_tick()
        assert game.phase == "lost"
        assert not game.state.terminal_open

    async def test_remaining_time_sent_with_command(self, game: Game, stub) -> None:
        await game.start()
        for _ in range(30):
            game.countdown_tick()
        walk_to(game, "POWER")
        await press_e(game)
        assert stub.sent[-1] == "USER COMMAND: Open POWER. (Time remaining: 150s)"

    async def test_critical_under_thirty_seconds(self, game: Game) -> None:
        await game.start()
        for _ in range(150):
            game.countdown_tick()
        assert not game.snapshot().critical
        game.countdown_tick()
        assert game.snapshot().critical

    async def test_reply_after_loss_does_not_win(self, game: Game, stub) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)
        stub.hold()
        stub.queue("MISSION SUCCESS")
        await submit_in_background(game, "last try")
        for _ in range(TIME_BUDGET):
            game.countdown_tick()
        stub.release()
        await game.wait_idle()
        assert game.phase == "lost"

    async def test_realtime_countdown_expires(self, stub) -> None:
        game = Game(stub, tick_interval=0.0005, fps=30)
        await game.start()

        async def until_lost() -> None:
            while game.phase != "lost":
                await asyncio.sleep(0.01)

        await asyncio.wait_for(until_lost(), timeout=5)
        assert game.remaining == 0
        assert not game.loop_running
        await game.shutdown()


# ---------------------------------------------------------------------------
# Restart
# ---------------------------------------------------------------------------

class TestRestart:
    @pytest.mark.parametrize("ending", ["won", "lost"])
    async def test_restart_resets_everything(self, game: Game, stub, ending) -> None:
        await game.start()
        walk_to(game, "POWER")
        stub.queue("POWER IS FIXED")
        await press_e(game)
        if ending == "won":
            stub.queue("MISSION SUCCESS")
            await game.submit("finish")
        else:
            for _ in range(TIME_BUDGET):
                game.countdown_tick()
        assert game.phase == ending

        stub.queue("ALERTS AGAIN")
        await game.start()
        assert game.phase == "running"
        assert game.state.view == "exploring"
        assert game.remaining == TIME_BUDGET
        assert set(game.statuses.values()) == {"BROKEN"}
        assert [m.text for m in game.transcript] == ["ALERTS AGAIN"]
        assert game.session_id == 2
        assert len(stub.sessions) == 2

    async def test_restart_drops_in_flight_reply(self, game: Game, stub) -> None:
        await game.start()
        walk_to(game, "POWER")
        await press_e(game)

        stub.hold()
        stub.queue("POWER IS FIXED. SYSTEMS STABILIZED - MISSION SUCCESS")
        await submit_in_background(game, "stale request")
        restart = asyncio.create_task(game.start())
        await asyncio.sleep(0)

        stub.queue("FRESH ALERTS")
        stub.release()
        await restart
        await game.wait_idle()

        assert game.phase == "running"
        assert game.session_id == 2
        assert set(game.statuses.values()) == {"BROKEN"}
        assert [m.text for m in game.transcript] == ["FRESH ALERTS"]

    async def test_restart_clears_held_keys(self, game: Game) -> None:
        await game.start()
        game.key_down("ArrowLeft")
        await game.start()
        before = game.player
        game.tick(0.5)
        assert game.player.x == before.x


# ---------------------------------------------------------------------------
# End-to-end scenario
# ---------------------------------------------------------------------------

async def test_full_mission(game: Game, stub) -> None:
    """Start, repair all three systems through their terminals, win."""
    stub.replies = ["ALERTS: POWER CRITICAL | NAV CRITICAL | LIFE-SUPPORT CRITICAL"]
    await game.start()
    assert len(game.transcript) == 1

    walk_to(game, "POWER")
    stub.queue("POWER JSON: {...}")
    await press_e(game)
    assert game.transcript[-2].text == "Open POWER"
    stub.queue("Regulator accepted. POWER IS FIXED.")
    await game.submit("set regulator.output to 1.2")
    assert game.statuses == {"POWER": "FIXED", "NAV": "BROKEN", "LIFE_SUPPORT": "BROKEN"}
    game.key_down("Escape")
    game.key_up("Escape")

    walk_to(game, "NAV")
    stub.queue("NAV JSON: {...}")
    await press_e(game)
    stub.queue("Heading locked. nav is fixed.")
    await game.submit("set gyro.offset to 0")
    assert game.statuses == {"POWER": "FIXED", "NAV": "FIXED", "LIFE_SUPPORT": "BROKEN"}
    game.key_down("Escape")
    game.key_up("Escape")

    walk_to(game, "LIFE_SUPPORT")
    stub.queue("LIFE-SUPPORT JSON: {...}")
    await press_e(game)
    assert game.state.active_machine == "LIFE_SUPPORT"
    stub.queue("Scrubbers online. LIFE_SUPPORT IS FIXED. SYSTEMS STABILIZED - MISSION SUCCESS")
    await game.submit("set scrubber.cycle to auto")

    assert game.phase == "won"
    assert not game.state.terminal_open
    assert set(game.statuses.values()) == {"FIXED"}
    roles = [m.role for m in game.transcript]
    assert roles == ["aura"] + ["user", "aura"] * 6
