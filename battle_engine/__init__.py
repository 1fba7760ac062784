"""Fighter models, combat resolution and the engine's error taxonomy."""

from .exceptions import (
    ExternalCollaboratorFailure,
    InvalidTransition,
    MalformedRoster,
    TournamentError,
)
from .models import CombatantState, CombatResult, Fighter, MatchStats, StatBlock
from .resolver import DAMAGE_FLOOR, calculate_damage, resolve
from .types import BattlePhase, NarrationPanel, PhaseChangeEvent

__all__ = [
    "BattlePhase",
    "CombatResult",
    "CombatantState",
    "DAMAGE_FLOOR",
    "ExternalCollaboratorFailure",
    "Fighter",
    "InvalidTransition",
    "MalformedRoster",
    "MatchStats",
    "NarrationPanel",
    "PhaseChangeEvent",
    "StatBlock",
    "TournamentError",
    "calculate_damage",
    "resolve",
]
