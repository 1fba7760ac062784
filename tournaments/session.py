"""Tournament session: one bracket, its sequencer and the narrated history."""

import asyncio
import logging

from battle_engine.models import Fighter
from config.settings import AppConfig
from narration.base import BaseNarrationProvider
from .bracket import BracketStore
from .models import Bracket, NarratedOutcome, TournamentStatus
from .roster import RosterProvider, validate_roster
from .sequencer import PhaseSequencer, SleepFunc
from .sinks import PersistenceSink, PresentationSink

logger = logging.getLogger(__name__)


class TournamentSession:
    """Owns the single active bracket of a process.

    Created empty; start() seeds a bracket, run() plays it to a champion and
    restart() tears everything down, cancelling any match in flight.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        narrator: BaseNarrationProvider | None = None,
        persistence: PersistenceSink | None = None,
        presentation: PresentationSink | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.config = config or AppConfig()
        self.narrator = narrator
        self.persistence = persistence
        self.presentation = presentation
        self._sleep = sleep

        self.store: BracketStore | None = None
        self.sequencer: PhaseSequencer | None = None
        self.history: list[NarratedOutcome] = []
        self.status: TournamentStatus | None = None
        self._task: asyncio.Task[Fighter] | None = None

    @property
    def bracket(self) -> Bracket | None:
        return self.store.bracket if self.store else None

    @property
    def round_number(self) -> int:
        return self.store.round_number if self.store else 0

    @property
    def champion(self) -> Fighter | None:
        return self.store.champion if self.store else None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, fighters: list[Fighter]) -> Bracket:
        """Seed a new bracket; any previous tournament is discarded first."""
        if self.store is not None:
            await self.restart()

        validate_roster(fighters)
        self.store = BracketStore.create(fighters)
        self.history = []
        self.sequencer = PhaseSequencer(
            self.store,
            self.config.tournament,
            narrator=self.narrator,
            persistence=self.persistence,
            presentation=self.presentation,
            history=self.history,
            sleep=self._sleep,
        )
        self.status = (
            TournamentStatus.COMPLETED if self.store.is_terminal else TournamentStatus.CREATED
        )

        self.sequencer.save_snapshot()

        logger.info(f"Started tournament with {len(fighters)} fighters")
        return self.store.bracket

    async def run(self) -> Fighter:
        """Play the bracket to completion and return the champion."""
        if self.sequencer is None:
            raise RuntimeError("No active tournament, call start() first")

        current = asyncio.current_task()
        if self.is_running and self._task is not current:
            raise RuntimeError("Tournament already running")
        # Track direct callers too so restart() can always cancel the run
        self._task = current

        self.status = TournamentStatus.IN_PROGRESS
        try:
            champion = await self.sequencer.run()
        finally:
            if self._task is current:
                self._task = None

        self.status = TournamentStatus.COMPLETED
        logger.info(
            f"Champion: {champion.name} after {self.store.rounds_played if self.store else 0} rounds"
        )
        return champion

    async def play(self, provider: RosterProvider) -> Fighter:
        """Fetch a roster, start and run a tournament."""
        fighters = await provider.get_roster()
        await self.start(fighters)
        return await self.run()

    def start_in_background(self) -> asyncio.Task[Fighter]:
        """Run the tournament as a task owned by this session."""
        if self.is_running:
            raise RuntimeError("Tournament already running")
        self._task = asyncio.create_task(self.run())
        return self._task

    async def restart(self) -> None:
        """Cancel any match in flight and discard the bracket and history."""
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.info("Tournament task cancelled")
        self._task = None

        if self.sequencer is not None:
            self.sequencer.cancel_pending()

        self.store = None
        self.sequencer = None
        self.history = []
        self.status = TournamentStatus.CANCELLED

        if self.persistence is not None:
            self.persistence.reset()

        logger.info("Tournament session reset")
