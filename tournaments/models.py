"""Tournament system data models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from battle_engine.models import Fighter


class TournamentStatus(Enum):
    """Tournament execution status."""

    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MatchStatus(Enum):
    """Individual match status."""

    PENDING = "pending"
    COMPLETED = "completed"
    BYE = "bye"


class Match(BaseModel):
    """Individual bracket match. Slots hold fighter IDs."""

    round_number: int
    match_number: int  # Position within round, 1-based
    slot_a: str | None = None
    slot_b: str | None = None  # NULL for bye matches
    winner: str | None = None  # Write-once
    status: MatchStatus = MatchStatus.PENDING
    stats: dict[str, Any] | None = None

    @property
    def is_bye(self) -> bool:
        return self.slot_a is None or self.slot_b is None

    @property
    def is_decided(self) -> bool:
        return self.winner is not None

    @property
    def slots(self) -> tuple[str, ...]:
        return tuple(slot for slot in (self.slot_a, self.slot_b) if slot is not None)


class Round(BaseModel):
    """One round of the bracket."""

    ordinal: int = Field(..., ge=1)
    matches: list[Match] = Field(default_factory=list)

    @property
    def completed(self) -> bool:
        return all(match.is_decided for match in self.matches)

    @property
    def contested(self) -> bool:
        """True if at least one match in the round needed a battle."""
        return any(not match.is_bye for match in self.matches)

    def winners(self) -> list[str]:
        return [match.winner for match in self.matches if match.winner is not None]


class Bracket(BaseModel):
    """The full tournament tree. Rounds are append-only."""

    fighters: list[Fighter]
    rounds: list[Round] = Field(default_factory=list)
    champion: str | None = None

    @property
    def active_round(self) -> Round | None:
        return self.rounds[-1] if self.rounds else None

    @property
    def is_terminal(self) -> bool:
        return self.champion is not None


class RoundStatus(BaseModel):
    """Status of all matches in a round."""

    round_number: int
    total_matches: int
    completed_matches: int
    pending_matches: int
    bye_matches: int
    all_completed: bool


class NarratedOutcome(BaseModel):
    """History entry produced for every narrated match."""

    round_number: int
    match_number: int
    winner_id: str
    winner_name: str
    loser_id: str
    loser_name: str
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)


class BattleRecord(BaseModel):
    """A completed match as offered to the persistence sink."""

    round: int
    fighter1: Fighter
    fighter2: Fighter
    winner: Fighter
    loser: Fighter
    stats: dict[str, Any]


class LeaderboardEntry(BaseModel):
    """Win count of a single fighter across stored battles."""

    fighter_id: str
    name: str
    wins: int
    losses: int
