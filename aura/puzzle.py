"""Puzzle progress read from AURA's free-text replies.

The dialogue service is contracted to emit literal marker phrases:

    POWER IS FIXED
    NAV IS FIXED
    LIFE-SUPPORT IS FIXED   (LIFE_SUPPORT IS FIXED also accepted)
    MISSION SUCCESS

Matching is case-insensitive substring search. Marker detection is the only
way a system becomes FIXED, and FIXED never reverts. MISSION SUCCESS wins the
game even when the local flags are not all FIXED.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from aura.models import SystemId, SystemStatus
from aura.world import SYSTEM_IDS

logger = logging.getLogger(__name__)

FIXED_MARKERS: dict[SystemId, tuple[str, ...]] = {
    "POWER": ("POWER IS FIXED",),
    "NAV": ("NAV IS FIXED",),
    "LIFE_SUPPORT": ("LIFE-SUPPORT IS FIXED", "LIFE_SUPPORT IS FIXED"),
}
MISSION_SUCCESS_MARKER = "MISSION SUCCESS"


class MarkerScan(BaseModel):
    model_config = ConfigDict(frozen=True)

    fixed: frozenset[SystemId]
    mission_success: bool


class PuzzleUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    newly_fixed: frozenset[SystemId]
    mission_success: bool


def scan_markers(text: str) -> MarkerScan:
    """Find every marker phrase in a reply. Pure; no state involved."""
    upper = text.upper()
    fixed = frozenset(
        system_id
        for system_id, phrases in FIXED_MARKERS.items()
        if any(phrase in upper for phrase in phrases)
    )
    return MarkerScan(fixed=fixed, mission_success=MISSION_SUCCESS_MARKER in upper)


def initial_statuses() -> dict[SystemId, SystemStatus]:
    return {system_id: "BROKEN" for system_id in SYSTEM_IDS}


class PuzzleTracker:
    """Per-system BROKEN/FIXED map, updated only by marker phrases."""

    def __init__(self) -> None:
        self._statuses = initial_statuses()

    @property
    def statuses(self) -> dict[SystemId, SystemStatus]:
        return dict(self._statuses)

    @property
    def all_fixed(self) -> bool:
        return all(status == "FIXED" for status in self._statuses.values())

    def apply(self, text: str) -> PuzzleUpdate:
        scan = scan_markers(text)

        updated = dict(self._statuses)
        for system_id in scan.fixed:
            updated[system_id] = "FIXED"

        newly_fixed = frozenset(
            system_id for system_id in updated
            if updated[system_id] != self._statuses[system_id]
        )
        if newly_fixed:
            self._statuses = updated
            logger.info("systems fixed: %s", ", ".join(sorted(newly_fixed)))

        return PuzzleUpdate(newly_fixed=newly_fixed, mission_success=scan.mission_success)
