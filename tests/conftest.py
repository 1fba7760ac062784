"""Pytest configuration and shared fixtures.

Provides fighter factories, a zero-delay tournament config and recording
collaborators so the async phase sequencer runs instantly under test.
"""

from collections.abc import Callable
from typing import Any

import pytest

from battle_engine.models import Fighter, StatBlock
from battle_engine.types import PhaseChangeEvent
from config.settings import AppConfig, TournamentConfig
from tournaments.models import BattleRecord
from tournaments.sinks import PersistenceSink, PresentationSink


# =============================================================================
# FIGHTERS
# =============================================================================


def build_fighter(
    fighter_id: str,
    *,
    hp: int = 20,
    attack: int = 8,
    defense: int = 2,
    speed: int = 5,
    name: str | None = None,
) -> Fighter:
    return Fighter(
        id=fighter_id,
        name=name or fighter_id.capitalize(),
        stats=StatBlock(hp=hp, attack=attack, defense=defense, speed=speed),
    )


@pytest.fixture
def make_fighter() -> Callable[..., Fighter]:
    """Factory for fighters with sensible default stats."""
    return build_fighter


@pytest.fixture
def make_roster() -> Callable[[int], list[Fighter]]:
    """Factory for a roster of n fighters f1..fn, faster seeds first."""

    def _make(n: int) -> list[Fighter]:
        return [build_fighter(f"f{i}", speed=100 - i) for i in range(1, n + 1)]

    return _make


# =============================================================================
# CONFIG AND TIMING
# =============================================================================


@pytest.fixture
def fast_config() -> AppConfig:
    """Config with a short countdown and no dwell times."""
    return AppConfig(
        tournament=TournamentConfig(
            countdown_from=3,
            countdown_tick_seconds=0,
            resolve_delay_seconds=0,
            narration_panel_seconds=0,
            celebration_seconds=0,
            collaborator_timeout_seconds=1.0,
        )
    )


@pytest.fixture
def no_sleep() -> Callable[[float], Any]:
    """Sleep replacement that records requested delays and returns at once."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays  # type: ignore[attr-defined]
    return _sleep


# =============================================================================
# RECORDING COLLABORATORS
# =============================================================================


class RecordingPresentationSink(PresentationSink):
    def __init__(self) -> None:
        self.events: list[PhaseChangeEvent] = []

    async def on_phase(self, event: PhaseChangeEvent) -> None:
        self.events.append(event)

    @property
    def phases(self) -> list[str]:
        return [event["phase"] for event in self.events]


class RecordingPersistenceSink(PersistenceSink):
    def __init__(self) -> None:
        self.battles: list[BattleRecord] = []
        self.snapshots: list[dict[str, Any]] = []

    async def record_battle(self, record: BattleRecord) -> None:
        self.battles.append(record)

    async def save_tournament(self, snapshot: dict[str, Any]) -> None:
        self.snapshots.append(snapshot)


class FailingPersistenceSink(PersistenceSink):
    async def record_battle(self, record: BattleRecord) -> None:
        raise ConnectionError("store is down")

    async def save_tournament(self, snapshot: dict[str, Any]) -> None:
        raise ConnectionError("store is down")


@pytest.fixture
def presentation() -> RecordingPresentationSink:
    return RecordingPresentationSink()


@pytest.fixture
def persistence() -> RecordingPersistenceSink:
    return RecordingPersistenceSink()


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
