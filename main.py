#!/usr/bin/env python3
"""Headless runner: plays one tournament from a roster file."""

import asyncio
import logging
import sys
from pathlib import Path

from battle_engine.types import BattlePhase, PhaseChangeEvent
from config.settings import AppConfig, get_default_config
from narration import create_narrator
from tournaments import (
    CallbackPresentationSink,
    LoggingPresentationSink,
    SqlitePersistenceSink,
    TournamentDatabaseManager,
    TournamentSession,
    load_roster_file,
)


def setup_logging(level: str = "INFO"):
    """Configure logging for the tournament runner."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def print_usage():
    """Print usage information."""
    print("Battle Bracket Engine")
    print("=" * 40)
    print("Usage:")
    print("   python main.py <roster.json|roster.yaml> [config.json]")
    print()
    print("The roster is a list of creature records:")
    print('   [{"id": 25, "name": "pikachu", "stats": {"hp": 35, "attack": 55, ...}}]')
    print()


async def announce_phase(event: PhaseChangeEvent) -> None:
    """Print the countdown and the narration panels of the match in play."""
    if event["phase"] == BattlePhase.COUNTDOWN.value and event["countdown_value"] is not None:
        print(f"   {event['slot_a']} vs {event['slot_b']} ... {event['countdown_value']}")
    elif event["phase"] == BattlePhase.NARRATING.value and event["panel"] is not None:
        print(f"   [{event['panel']}] round {event['round_number']} match {event['match_number']}")


async def run_tournament(roster_path: Path, config: AppConfig) -> None:
    fighters = load_roster_file(roster_path)

    db = None
    persistence = None
    if config.system.save_battles:
        db = TournamentDatabaseManager(config.system.database_path)
        persistence = SqlitePersistenceSink(db)

    session = TournamentSession(
        config,
        narrator=create_narrator(config.narration),
        persistence=persistence,
        presentation=CallbackPresentationSink(LoggingPresentationSink().on_phase, announce_phase),
    )
    await session.start(fighters)
    champion = await session.run()

    print()
    print(f"🏆 Champion: {champion.name}")
    for outcome in session.history:
        print(f"   Round {outcome.round_number}: {outcome.winner_name} - {outcome.text}")

    if db is not None:
        print()
        print("Leaderboard:")
        for position, entry in enumerate(db.get_leaderboard(), start=1):
            print(f"   {position:>2}. {entry.name} ({entry.wins} wins)")


def main():
    """Main entry point."""
    args = [arg for arg in sys.argv[1:] if not arg.startswith("-")]
    if "--help" in sys.argv or "-h" in sys.argv or not args:
        print_usage()
        return

    config = (
        AppConfig.load_from_file(Path(args[1])) if len(args) > 1 else get_default_config()
    )
    setup_logging(config.system.log_level)
    asyncio.run(run_tournament(Path(args[0]), config))


if __name__ == "__main__":
    main()
