"""Shared types and enums for the battle engine."""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeAlias, TypedDict


class BattlePhase(Enum):
    """Presentation phases of a single match."""

    IDLE = "idle"
    COUNTDOWN = "countdown"
    RESOLVING = "resolving"
    NARRATING = "narrating"
    CELEBRATING = "celebrating"
    TERMINAL = "terminal"


class NarrationPanel(Enum):
    """Result panels shown while narrating."""

    INTRO = "intro"
    FIGHT = "fight"
    RESULT = "result"


class PhaseChangeEvent(TypedDict):
    """Data structure for phase change callbacks."""

    phase: str
    round_number: int | None
    match_number: int | None
    slot_a: str | None
    slot_b: str | None
    countdown_value: int | None
    panel: str | None


# Callback type alias for presentation sinks
PhaseEventCallback: TypeAlias = Callable[[PhaseChangeEvent], Awaitable[None]]
