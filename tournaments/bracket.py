"""Single elimination bracket generation and advancement."""

import logging
import math
from typing import Any

from battle_engine.exceptions import InvalidTransition, MalformedRoster
from battle_engine.models import Fighter
from .models import Bracket, Match, MatchStatus, Round, RoundStatus

logger = logging.getLogger(__name__)


def calculate_total_rounds(num_fighters: int) -> int:
    """Calculate rounds needed to crown a champion from num_fighters."""
    if num_fighters <= 1:
        return 0
    return math.ceil(math.log2(num_fighters))


def pair_fighters(round_number: int, fighter_ids: list[str]) -> list[Match]:
    """Pair fighters by position: 0 vs 1, 2 vs 3, ...

    An odd fighter out gets a bye, which is decided on the spot.
    """
    matches = []
    for i in range(0, len(fighter_ids), 2):
        slot_a = fighter_ids[i]
        slot_b = fighter_ids[i + 1] if i + 1 < len(fighter_ids) else None
        match = Match(
            round_number=round_number,
            match_number=(i // 2) + 1,
            slot_a=slot_a,
            slot_b=slot_b,
        )
        if slot_b is None:
            match.winner = slot_a
            match.status = MatchStatus.BYE
            logger.info(f"Round {round_number}: {slot_a} advances on a bye")
        matches.append(match)
    return matches


class BracketStore:
    """Owns one bracket and is the only code that mutates it."""

    def __init__(self, bracket: Bracket):
        self.bracket = bracket
        self._fighters: dict[str, Fighter] = {f.id: f for f in bracket.fighters}

    @classmethod
    def create(cls, fighters: list[Fighter]) -> "BracketStore":
        """Seed round 1 from fighters in the given order."""
        if not fighters:
            raise MalformedRoster("Cannot create a bracket without fighters")

        fighter_ids = [fighter.id for fighter in fighters]
        if len(set(fighter_ids)) != len(fighter_ids):
            raise MalformedRoster("Fighter IDs must be unique")

        bracket = Bracket(fighters=list(fighters))

        # A lone fighter is champion without playing.
        if len(fighters) == 1:
            bracket.champion = fighter_ids[0]
            logger.info(f"Single-fighter bracket, {fighter_ids[0]} is champion")
            return cls(bracket)

        bracket.rounds.append(Round(ordinal=1, matches=pair_fighters(1, fighter_ids)))
        logger.info(
            f"Created bracket with {len(fighters)} fighters, "
            f"{calculate_total_rounds(len(fighters))} rounds expected"
        )
        return cls(bracket)

    def get_fighter(self, fighter_id: str) -> Fighter:
        """Look up a bracket fighter by ID."""
        try:
            return self._fighters[fighter_id]
        except KeyError:
            raise KeyError(f"Fighter {fighter_id} is not in this bracket") from None

    @property
    def champion(self) -> Fighter | None:
        if self.bracket.champion is None:
            return None
        return self.get_fighter(self.bracket.champion)

    @property
    def is_terminal(self) -> bool:
        return self.bracket.is_terminal

    @property
    def round_number(self) -> int:
        active = self.bracket.active_round
        return active.ordinal if active else 0

    @property
    def rounds_played(self) -> int:
        return sum(1 for r in self.bracket.rounds if r.contested)

    def current_match(self) -> Match | None:
        """First undecided match of the active round, if any."""
        active = self.bracket.active_round
        if active is None or self.bracket.is_terminal:
            return None
        for match in active.matches:
            if not match.is_decided:
                return match
        return None

    def record_winner(
        self, match: Match, winner_id: str, stats: dict[str, Any] | None = None
    ) -> Bracket:
        """Set the winner of the current match.

        Raises InvalidTransition, leaving the bracket untouched, when the match
        is already decided, the winner did not play in it, or it is not the
        current match.
        """
        stored = self._find_match(match.round_number, match.match_number)

        if stored.is_decided:
            raise InvalidTransition(
                f"Match {stored.round_number}-{stored.match_number} already won by {stored.winner}",
                round_number=stored.round_number,
                match_number=stored.match_number,
            )

        if winner_id not in stored.slots:
            raise InvalidTransition(
                f"{winner_id} did not play in match {stored.round_number}-{stored.match_number}",
                round_number=stored.round_number,
                match_number=stored.match_number,
            )

        current = self.current_match()
        if current is not stored:
            raise InvalidTransition(
                f"Match {stored.round_number}-{stored.match_number} is not the current match",
                round_number=stored.round_number,
                match_number=stored.match_number,
            )

        stored.winner = winner_id
        stored.status = MatchStatus.COMPLETED
        if stats is not None:
            stored.stats = stats

        logger.info(
            f"Recorded winner {winner_id} for match "
            f"{stored.round_number}-{stored.match_number}"
        )
        return self.bracket

    def advance(self) -> Bracket:
        """Generate the next round or crown the champion.

        No-op while the active round has undecided matches or once the bracket
        is terminal.
        """
        active = self.bracket.active_round
        if active is None or self.bracket.is_terminal or not active.completed:
            return self.bracket

        winners = active.winners()
        if len(winners) == 1:
            self.bracket.champion = winners[0]
            logger.info(
                f"Tournament complete after round {active.ordinal}, champion: {winners[0]}"
            )
            return self.bracket

        next_ordinal = active.ordinal + 1
        self.bracket.rounds.append(
            Round(ordinal=next_ordinal, matches=pair_fighters(next_ordinal, winners))
        )
        logger.info(f"Advanced bracket to round {next_ordinal} with {len(winners)} fighters")
        return self.bracket

    def round_status(self, round_number: int) -> RoundStatus:
        """Get status of all matches in a round."""
        rnd = self._find_round(round_number)
        completed = sum(1 for m in rnd.matches if m.status == MatchStatus.COMPLETED)
        byes = sum(1 for m in rnd.matches if m.status == MatchStatus.BYE)
        pending = sum(1 for m in rnd.matches if m.status == MatchStatus.PENDING)
        return RoundStatus(
            round_number=round_number,
            total_matches=len(rnd.matches),
            completed_matches=completed,
            pending_matches=pending,
            bye_matches=byes,
            all_completed=rnd.completed,
        )

    def to_snapshot(self) -> dict[str, Any]:
        """Serializable state for the persistence sink."""
        return {
            "round": self.round_number,
            "rounds_played": self.rounds_played,
            "champion": self.bracket.champion,
            "bracket": self.bracket.model_dump(mode="json"),
        }

    def _find_round(self, round_number: int) -> Round:
        for rnd in self.bracket.rounds:
            if rnd.ordinal == round_number:
                return rnd
        raise InvalidTransition(f"Round {round_number} does not exist", round_number=round_number)

    def _find_match(self, round_number: int, match_number: int) -> Match:
        for match in self._find_round(round_number).matches:
            if match.match_number == match_number:
                return match
        raise InvalidTransition(
            f"Match {round_number}-{match_number} does not exist",
            round_number=round_number,
            match_number=match_number,
        )
