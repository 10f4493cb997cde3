"""Hands-free cooking mode: voice commands, step timers and step navigation.

parse_command() maps a speech transcript onto one of four commands by plain
substring matching against COMMANDS.  Commands are checked in table order and
the first hit wins, so "go back" resolves to "previous" only because no "next"
phrase occurs in it.  There is no confidence scoring.
"""

import re
from dataclasses import dataclass, replace
from typing import Literal, Optional

CookingCommand = Literal["next", "previous", "ingredients", "exit"]

COMMANDS: dict[str, tuple[str, ...]] = {
    "next": ("next", "continue", "next step", "go on", "forward"),
    "previous": ("previous", "back", "go back", "last step", "before"),
    "ingredients": ("ingredients", "show ingredients", "what do i need", "ingredient list"),
    "exit": ("exit", "done", "finish", "stop cooking", "close", "quit"),
}


def parse_command(transcript: str) -> Optional[CookingCommand]:
    lower = transcript.lower().strip()
    for command, phrases in COMMANDS.items():
        if any(phrase in lower for phrase in phrases):
            return command
    return None


def parse_time_string(time_string: str) -> Optional[int]:
    """Parse "5 minutes", "2-3 minutes", "30 seconds", "1 hour" into seconds.

    Ranges use their first number.  A bare number is taken as minutes.
    Returns None when the string holds no number.
    """
    lower = (time_string or "").lower()
    match = re.search(r"(\d+)", lower)
    if not match:
        return None
    value = int(match.group(1))

    if "hour" in lower:
        return value * 3600
    if "minute" in lower:
        return value * 60
    if "second" in lower:
        return value
    return value * 60


def format_time(total_seconds: int) -> str:
    """Format seconds as M:SS, or H:MM:SS from one hour up."""
    hours, rest = divmod(max(0, int(total_seconds)), 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def _clamp_step(step: int, total_steps: int) -> int:
    return min(max(step, 0), max(0, total_steps - 1))


@dataclass(frozen=True)
class CookingModeState:
    current_step: int = 0  # zero-based
    total_steps: int = 1
    show_ingredients: bool = False
    active: bool = True

    @classmethod
    def at_step(cls, current_step: int, total_steps: int, show_ingredients: bool = False) -> "CookingModeState":
        """Build a state with current_step pulled into [0, total_steps - 1]."""
        total_steps = max(1, total_steps)
        return cls(_clamp_step(current_step, total_steps), total_steps, show_ingredients)


def apply_command(state: CookingModeState, command: Optional[CookingCommand]) -> CookingModeState:
    """Return the cooking-mode state after a voice command; None leaves it unchanged."""
    if command is None or not state.active:
        return state
    if command == "next":
        step = _clamp_step(state.current_step + 1, state.total_steps)
        return replace(state, current_step=step, show_ingredients=False)
    if command == "previous":
        step = _clamp_step(state.current_step - 1, state.total_steps)
        return replace(state, current_step=step, show_ingredients=False)
    if command == "ingredients":
        return replace(state, show_ingredients=not state.show_ingredients)
    return replace(state, active=False, show_ingredients=False)
