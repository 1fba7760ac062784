"""Persistence and presentation sinks fed by the phase sequencer."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import Any

from battle_engine.exceptions import ExternalCollaboratorFailure
from battle_engine.types import PhaseChangeEvent, PhaseEventCallback
from .database import TournamentDatabaseManager
from .models import BattleRecord

logger = logging.getLogger(__name__)


async def offer_to_collaborator(name: str, call: Awaitable[Any], timeout: float) -> bool:
    """Await a fire-and-forget collaborator call; failures are logged, never raised."""
    try:
        await asyncio.wait_for(call, timeout=timeout)
        return True
    except asyncio.TimeoutError:
        logger.warning(f"{name} did not respond within {timeout}s")
    except Exception as e:
        logger.error(f"{name} failed: {e}")
    return False


class PersistenceSink(ABC):
    """Receives completed matches and tournament snapshots."""

    @abstractmethod
    async def record_battle(self, record: BattleRecord) -> None:
        """Store one completed match."""
        pass

    @abstractmethod
    async def save_tournament(self, snapshot: dict[str, Any]) -> None:
        """Store the tournament state after a bracket mutation."""
        pass

    def reset(self) -> None:
        """Forget per-tournament state before a new bracket starts."""
        pass


class SqlitePersistenceSink(PersistenceSink):
    """Persists battles and snapshots into a TournamentDatabaseManager."""

    def __init__(self, db: TournamentDatabaseManager):
        self.db = db
        self.game_id: int | None = None

    async def record_battle(self, record: BattleRecord) -> None:
        try:
            await asyncio.to_thread(self.db.add_battle, record, self.game_id)
        except Exception as e:
            raise ExternalCollaboratorFailure("sqlite", f"could not store battle: {e}") from e

    async def save_tournament(self, snapshot: dict[str, Any]) -> None:
        try:
            if self.game_id is None:
                self.game_id = await asyncio.to_thread(self.db.create_game, snapshot)
            else:
                await asyncio.to_thread(self.db.save_game, self.game_id, snapshot)
        except Exception as e:
            raise ExternalCollaboratorFailure("sqlite", f"could not save tournament: {e}") from e

    def reset(self) -> None:
        """Start a new game row on the next snapshot."""
        self.game_id = None


class PresentationSink(ABC):
    """Observes phase changes. Cannot veto or delay a transition."""

    @abstractmethod
    async def on_phase(self, event: PhaseChangeEvent) -> None:
        pass


class LoggingPresentationSink(PresentationSink):
    """Writes each phase change to the log."""

    async def on_phase(self, event: PhaseChangeEvent) -> None:
        details = []
        if event["round_number"] is not None:
            details.append(f"round {event['round_number']} match {event['match_number']}")
        if event["slot_a"] is not None:
            details.append(f"{event['slot_a']} vs {event['slot_b']}")
        if event["countdown_value"] is not None:
            details.append(f"countdown {event['countdown_value']}")
        if event["panel"] is not None:
            details.append(f"panel {event['panel']}")
        logger.info(f"PHASE {event['phase'].upper()}: {', '.join(details)}")


class CallbackPresentationSink(PresentationSink):
    """Forwards phase changes to async callbacks."""

    def __init__(self, *callbacks: PhaseEventCallback):
        self.callbacks: list[PhaseEventCallback] = list(callbacks)

    def add_callback(self, callback: PhaseEventCallback) -> None:
        self.callbacks.append(callback)

    async def on_phase(self, event: PhaseChangeEvent) -> None:
        for callback in self.callbacks:
            try:
                await callback(event)
            except Exception as e:
                logger.error(f"Presentation callback failed: {e}")
