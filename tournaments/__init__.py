"""Single elimination tournaments between fighters."""

from .models import (
    BattleRecord,
    Bracket,
    LeaderboardEntry,
    Match,
    MatchStatus,
    NarratedOutcome,
    Round,
    RoundStatus,
    TournamentStatus,
)
from .bracket import BracketStore, calculate_total_rounds, pair_fighters
from .database import TournamentDatabaseManager
from .roster import (
    RosterProvider,
    StaticRosterProvider,
    fighter_from_creature_payload,
    load_roster_file,
    validate_roster,
)
from .sinks import (
    CallbackPresentationSink,
    LoggingPresentationSink,
    PersistenceSink,
    PresentationSink,
    SqlitePersistenceSink,
)
from .sequencer import PhaseSequencer
from .session import TournamentSession

__all__ = [
    "BattleRecord",
    "Bracket",
    "BracketStore",
    "CallbackPresentationSink",
    "LeaderboardEntry",
    "LoggingPresentationSink",
    "Match",
    "MatchStatus",
    "NarratedOutcome",
    "PersistenceSink",
    "PhaseSequencer",
    "PresentationSink",
    "Round",
    "RosterProvider",
    "RoundStatus",
    "SqlitePersistenceSink",
    "StaticRosterProvider",
    "TournamentDatabaseManager",
    "TournamentSession",
    "TournamentStatus",
    "calculate_total_rounds",
    "fighter_from_creature_payload",
    "load_roster_file",
    "pair_fighters",
    "validate_roster",
]
