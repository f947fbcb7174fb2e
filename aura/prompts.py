"""Prompts for the AURA dialogue session, rendered with Handlebars.

The system instruction is the puzzle contract: the service generates the
three faults, discloses them in stages and must emit the literal marker
phrases that aura.puzzle scans for.
"""

from collections.abc import Callable
from typing import Any

import pybars

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


SYSTEM_INSTRUCTION = """\
You are AURA, a ship AI. The ship has 3 critical failures.
PHASE 1: GENERATION
Generate 3 systems (POWER, NAV, LIFE-SUPPORT) each with 3 subparts.
Corrupt ONE subpart in EACH system with a error fixable by adjusting parameters in JSON.
PHASE 2: INTERFACE RULES (CRITICAL)
1. At the start, LIST only the 3 System Names and their Alert Status.
2. DO NOT show all the JSON data at once.
3. Only show the JSON data for a system when the player says 'Switch to [System Name]' or 'Open [System]'.
4. If a player fixes the error in the active view, mark it RESOLVED and suggest they switch to another system. \
You MUST include the exact phrase "[SYSTEM_NAME] IS FIXED" (e.g., "POWER IS FIXED", "NAV IS FIXED", \
"LIFE-SUPPORT IS FIXED") in your response so the UI can update.
5. Keep track of the 'Master Timer' (which I will provide in the prompt).
6. Do not give technical details of the errors, just describe what is going wrong and let the player figure things out.
7. On follow ups on what is wrong, do not give the full answer but give leads that would help the player figure out the solution.
8. Make each problem multi-step and a bit challenging.
9. Make it so that the player will have to ask clarifying questions.
10. Do not give what steps to do that easily.
PHASE 3: WIN/LOSS
If all 3 are fixed, say 'SYSTEMS STABILIZED - MISSION SUCCESS'.
If time runs out, the ship is lost."""

INITIALIZE_COMMAND = "INITIALIZE. LIST ACTIVE ALERTS ONLY."

# Triple-stash: player text must reach the service unescaped.
COMMAND_TEMPLATE = "USER COMMAND: {{{command}}}. (Time remaining: {{remaining}}s)"


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return compiled(context)
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def command_prompt(command: str, remaining: int) -> str:
    """Wrap a player command with the current master timer."""
    return render_prompt(COMMAND_TEMPLATE, {"command": command, "remaining": str(remaining)})
