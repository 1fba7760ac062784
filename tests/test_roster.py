"""Tests for roster loading and validation."""

import asyncio
import json
import textwrap

import pytest

from battle_engine.exceptions import MalformedRoster
from battle_engine.models import Fighter, StatBlock
from tournaments.roster import (
    RosterProvider,
    StaticRosterProvider,
    fighter_from_creature_payload,
    load_roster_file,
    validate_roster,
)

PIKACHU = {
    "id": 25,
    "name": "pikachu",
    "stats": {
        "hp": 35,
        "attack": 55,
        "defense": 40,
        "special-attack": 50,
        "special-defense": 50,
        "speed": 90,
    },
}


def test_creature_payload_maps_stats() -> None:
    fighter = fighter_from_creature_payload(PIKACHU)

    assert fighter.id == "25"
    assert fighter.name == "pikachu"
    assert fighter.stats.special_attack == 50
    assert fighter.stats.speed == 90
    assert fighter.max_hp == 35


def test_creature_payload_accepts_stat_list() -> None:
    payload = {
        "id": 1,
        "name": "bulbasaur",
        "stats": [
            {"base_stat": 45, "stat": {"name": "hp"}},
            {"base_stat": 49, "stat": {"name": "attack"}},
            {"base_stat": 49, "stat": {"name": "defense"}},
            {"base_stat": 45, "stat": {"name": "speed"}},
        ],
    }

    fighter = fighter_from_creature_payload(payload)

    assert fighter.stats.hp == 45
    assert fighter.stats.special_defense == 0


def test_creature_payload_missing_stat_is_malformed() -> None:
    with pytest.raises(MalformedRoster):
        fighter_from_creature_payload({"id": 2, "name": "ivysaur", "stats": {"hp": 60}})


def test_validate_roster_rejects_bad_rosters(make_fighter) -> None:
    with pytest.raises(MalformedRoster):
        validate_roster([])
    with pytest.raises(MalformedRoster, match="Duplicate"):
        validate_roster([make_fighter("a"), make_fighter("b"), make_fighter("a")])
    with pytest.raises(MalformedRoster, match="no hit points"):
        validate_roster([make_fighter("a", hp=0)])


def test_validate_roster_rejects_worn_fighter() -> None:
    worn = Fighter(
        id="worn",
        name="Worn",
        stats=StatBlock(hp=10, attack=5, defense=5, speed=5),
        max_hp=40,
    )

    with pytest.raises(MalformedRoster, match="not fresh"):
        validate_roster([worn])


def test_load_roster_file_json(tmp_path) -> None:
    path = tmp_path / "roster.json"
    path.write_text(json.dumps([PIKACHU, {**PIKACHU, "id": 26, "name": "raichu"}]))

    fighters = load_roster_file(path)

    assert [f.name for f in fighters] == ["pikachu", "raichu"]


def test_load_roster_file_yaml(tmp_path) -> None:
    path = tmp_path / "roster.yaml"
    path.write_text(textwrap.dedent("""\
        - id: 4
          name: charmander
          stats: {hp: 39, attack: 52, defense: 43, speed: 65}
        """))

    (fighter,) = load_roster_file(path)

    assert fighter.id == "4"
    assert fighter.stats.attack == 52


def test_load_roster_file_requires_list(tmp_path) -> None:
    path = tmp_path / "roster.json"
    path.write_text(json.dumps(PIKACHU))

    with pytest.raises(MalformedRoster):
        load_roster_file(path)


def test_static_provider_returns_a_copy(make_roster) -> None:
    roster = make_roster(3)
    provider = StaticRosterProvider(roster)

    fetched = asyncio.run(provider.get_roster())
    fetched.pop()

    assert isinstance(provider, RosterProvider)
    assert len(asyncio.run(provider.get_roster())) == 3


def test_explicit_zero_max_hp_is_kept() -> None:
    fighter = Fighter(
        id="ghost",
        name="Ghost",
        stats=StatBlock(hp=10, attack=5, defense=5, speed=5),
        max_hp=0,
    )

    assert fighter.max_hp == 0
    with pytest.raises(MalformedRoster, match="not fresh"):
        validate_roster([fighter])
