"""Roster providers and validation."""

import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from pydantic import ValidationError

from battle_engine.exceptions import MalformedRoster
from battle_engine.models import Fighter, StatBlock

logger = logging.getLogger(__name__)

# Creature database stat names -> StatBlock fields
CREATURE_STAT_NAMES = {
    "hp": "hp",
    "attack": "attack",
    "defense": "defense",
    "special-attack": "special_attack",
    "special-defense": "special_defense",
    "speed": "speed",
}


@runtime_checkable
class RosterProvider(Protocol):
    """Supplies the ordered fighters of a tournament."""

    async def get_roster(self) -> list[Fighter]: ...


class StaticRosterProvider:
    """Roster provider over an in-memory list."""

    def __init__(self, fighters: list[Fighter]):
        self.fighters = list(fighters)

    async def get_roster(self) -> list[Fighter]:
        return list(self.fighters)


def validate_roster(fighters: list[Fighter]) -> list[Fighter]:
    """Check a roster can seed a bracket; raises MalformedRoster otherwise."""
    if len(fighters) < 1:
        raise MalformedRoster("Roster must contain at least one fighter")

    seen: set[str] = set()
    duplicates: list[str] = []
    for fighter in fighters:
        if fighter.id in seen:
            duplicates.append(fighter.id)
        seen.add(fighter.id)
    if duplicates:
        raise MalformedRoster(f"Duplicate fighter IDs in roster: {sorted(set(duplicates))}")

    for fighter in fighters:
        if fighter.stats.hp <= 0:
            raise MalformedRoster(f"Fighter {fighter.id} has no hit points")
        if fighter.stats.hp != fighter.max_hp:
            raise MalformedRoster(
                f"Fighter {fighter.id} is not fresh (hp {fighter.stats.hp} of {fighter.max_hp})"
            )

    return fighters


def fighter_from_creature_payload(payload: dict[str, Any]) -> Fighter:
    """Build a Fighter from a creature database record.

    Stats may be a mapping of stat name to base value, or a list of
    {"base_stat": ..., "stat": {"name": ...}} entries.
    """
    raw_stats = payload.get("stats", {})
    if isinstance(raw_stats, list):
        raw_stats = {entry["stat"]["name"]: entry["base_stat"] for entry in raw_stats}

    stats = {
        field: raw_stats[name]
        for name, field in CREATURE_STAT_NAMES.items()
        if name in raw_stats
    }
    # Also accept already-normalized field names
    for field in CREATURE_STAT_NAMES.values():
        if field in raw_stats and field not in stats:
            stats[field] = raw_stats[field]

    try:
        return Fighter(
            id=str(payload["id"]),
            name=payload["name"],
            stats=StatBlock(**stats),
        )
    except (KeyError, ValidationError) as e:
        raise MalformedRoster(f"Invalid creature record {payload.get('name', '?')}: {e}") from e


def load_roster_file(roster_path: Path) -> list[Fighter]:
    """Load a roster from a JSON or YAML list of creature records."""
    if not roster_path.exists():
        raise FileNotFoundError(f"Roster file not found: {roster_path}")

    with open(roster_path, "r", encoding="utf-8") as f:
        if roster_path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if not isinstance(data, list):
        raise MalformedRoster(f"Roster file must contain a list: {roster_path}")

    fighters = [fighter_from_creature_payload(entry) for entry in data]
    logger.info(f"Loaded {len(fighters)} fighters from {roster_path}")
    return validate_roster(fighters)
