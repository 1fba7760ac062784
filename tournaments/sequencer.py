"""Phase state machine that plays one bracket match at a time."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

from battle_engine.models import CombatResult, Fighter
from battle_engine.resolver import resolve
from battle_engine.types import BattlePhase, NarrationPanel, PhaseChangeEvent
from config.settings import TournamentConfig
from narration.base import BaseNarrationProvider, narrate_or_fallback
from .bracket import BracketStore
from .models import BattleRecord, Match, NarratedOutcome
from .sinks import PersistenceSink, PresentationSink, offer_to_collaborator

logger = logging.getLogger(__name__)

SleepFunc: TypeAlias = Callable[[float], Awaitable[None]]


class PhaseSequencer:
    """Walks a match through countdown, resolution, narration and celebration.

    Only one match is ever in flight, and the resolver runs at most once per
    match. The bracket is mutated only when celebration ends.

    Presentation and persistence calls run as tasks owned by the sequencer, so
    a slow sink never holds up a phase change. Calls to one sink are delivered
    in the order they were made.
    """

    def __init__(
        self,
        store: BracketStore,
        config: TournamentConfig,
        narrator: BaseNarrationProvider | None = None,
        persistence: PersistenceSink | None = None,
        presentation: PresentationSink | None = None,
        history: list[NarratedOutcome] | None = None,
        sleep: SleepFunc = asyncio.sleep,
        resolver: Callable[[Fighter, Fighter], CombatResult] = resolve,
    ):
        self.store = store
        self.config = config
        self.narrator = narrator
        self.persistence = persistence
        self.presentation = presentation
        self.history = history if history is not None else []
        self._sleep = sleep
        self._resolver = resolver

        self.phase = BattlePhase.IDLE
        self.last_result: CombatResult | None = None
        self._resolved: set[tuple[int, int]] = set()
        self._in_flight = False
        self._pending: set[asyncio.Task[None]] = set()
        self._last_delivery: dict[str, asyncio.Task[None]] = {}

    @property
    def is_terminal(self) -> bool:
        return self.phase == BattlePhase.TERMINAL

    async def run(self) -> Fighter:
        """Play matches until the bracket has a champion."""
        while not self.is_terminal:
            await self.run_match()
        await self.drain()

        champion = self.store.champion
        if champion is None:
            raise RuntimeError("Sequencer terminated without a champion")
        return champion

    async def run_match(self) -> NarratedOutcome | None:
        """Play the current match through every phase.

        Returns the narrated outcome, or None when the bracket is already
        decided.
        """
        if self._in_flight:
            raise RuntimeError("A match is already being played")

        self._in_flight = True
        try:
            match = self._next_match()
            if match is None:
                self._enter(BattlePhase.TERMINAL)
                return None

            await self._countdown(match)
            result = await self._resolve(match)
            outcome = await self._narrate(match, result)
            await self._celebrate(match, result)
            return outcome
        finally:
            self._in_flight = False

    def _next_match(self) -> Match | None:
        """IDLE: wait for the bracket to expose a current match."""
        if self.store.is_terminal:
            return None

        match = self.store.current_match()
        if match is None:
            # Active round finished but not yet advanced
            self.store.advance()
            match = self.store.current_match()

        return None if self.store.is_terminal else match

    async def _countdown(self, match: Match) -> None:
        self._enter(BattlePhase.COUNTDOWN, match, countdown_value=self.config.countdown_from)
        for value in range(self.config.countdown_from - 1, -1, -1):
            await self._sleep(self.config.countdown_tick_seconds)
            self._emit(BattlePhase.COUNTDOWN, match, countdown_value=value)
        await self._sleep(self.config.resolve_delay_seconds)

    async def _resolve(self, match: Match) -> CombatResult:
        key = (match.round_number, match.match_number)
        if key in self._resolved:
            raise RuntimeError(
                f"Match {match.round_number}-{match.match_number} was already resolved"
            )
        if match.slot_a is None or match.slot_b is None:
            raise RuntimeError(
                f"Match {match.round_number}-{match.match_number} is a bye and has no battle"
            )

        self._enter(BattlePhase.RESOLVING, match)
        self._resolved.add(key)

        fighter_a = self.store.get_fighter(match.slot_a)
        fighter_b = self.store.get_fighter(match.slot_b)
        result = self._resolver(fighter_a, fighter_b)
        self.last_result = result

        logger.info(
            f"Round {match.round_number}, match {match.match_number}: "
            f"{result.winner.name} defeats {result.loser.name} in {result.turns} turns"
        )

        persistence = self.persistence
        if persistence is not None:
            record = BattleRecord(
                round=match.round_number,
                fighter1=fighter_a,
                fighter2=fighter_b,
                winner=result.winner,
                loser=result.loser,
                stats=result.stats().to_dict(),
            )
            self._deliver("Persistence sink", lambda: persistence.record_battle(record))

        return result

    async def _narrate(self, match: Match, result: CombatResult) -> NarratedOutcome:
        self._enter(BattlePhase.NARRATING, match)

        text = await narrate_or_fallback(
            self.narrator,
            result.winner.name,
            result.loser.name,
            match.round_number,
            timeout=self.config.collaborator_timeout_seconds,
        )
        outcome = NarratedOutcome(
            round_number=match.round_number,
            match_number=match.match_number,
            winner_id=result.winner.id,
            winner_name=result.winner.name,
            loser_id=result.loser.id,
            loser_name=result.loser.name,
            text=text,
        )
        self.history.append(outcome)

        for panel in NarrationPanel:
            self._emit(BattlePhase.NARRATING, match, panel=panel)
            await self._sleep(self.config.narration_panel_seconds)

        return outcome

    async def _celebrate(self, match: Match, result: CombatResult) -> None:
        self._enter(BattlePhase.CELEBRATING, match)
        await self._sleep(self.config.celebration_seconds)

        self.store.record_winner(match, result.winner.id, stats=result.stats().to_dict())
        self.store.advance()

        self.save_snapshot()

        if self.store.is_terminal:
            self._enter(BattlePhase.TERMINAL)
        else:
            self._enter(BattlePhase.IDLE)

    def _enter(
        self,
        phase: BattlePhase,
        match: Match | None = None,
        countdown_value: int | None = None,
    ) -> None:
        logger.debug(f"Phase {self.phase.value} -> {phase.value}")
        self.phase = phase
        self._emit(phase, match, countdown_value=countdown_value)

    def _emit(
        self,
        phase: BattlePhase,
        match: Match | None = None,
        countdown_value: int | None = None,
        panel: NarrationPanel | None = None,
    ) -> None:
        presentation = self.presentation
        if presentation is None:
            return

        event: PhaseChangeEvent = {
            "phase": phase.value,
            "round_number": match.round_number if match else None,
            "match_number": match.match_number if match else None,
            "slot_a": match.slot_a if match else None,
            "slot_b": match.slot_b if match else None,
            "countdown_value": countdown_value,
            "panel": panel.value if panel else None,
        }
        self._deliver("Presentation sink", lambda: presentation.on_phase(event))

    def save_snapshot(self) -> None:
        """Queue the current bracket state for the persistence sink."""
        persistence = self.persistence
        if persistence is None:
            return
        snapshot = self.store.to_snapshot()
        self._deliver("Persistence sink", lambda: persistence.save_tournament(snapshot))

    def _deliver(self, name: str, make_call: Callable[[], Awaitable[Any]]) -> None:
        previous = self._last_delivery.get(name)
        timeout = self.config.collaborator_timeout_seconds

        async def deliver() -> None:
            if previous is not None and not previous.done():
                await asyncio.wait({previous})
            await offer_to_collaborator(name, make_call(), timeout)

        task = asyncio.create_task(deliver())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self._last_delivery[name] = task

    async def drain(self) -> None:
        """Wait until every queued collaborator call has been delivered."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def cancel_pending(self) -> None:
        """Drop collaborator calls that have not been delivered yet."""
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
        self._last_delivery.clear()
