"""Tests for the deterministic combat resolver."""

import pytest

from battle_engine.resolver import DAMAGE_FLOOR, calculate_damage, first_attacker_is_a, resolve


def test_faster_fighter_wins_even_trade(make_fighter) -> None:
    """A strikes first and strict alternation still gives B three swings."""
    a = make_fighter("a", hp=20, attack=8, defense=2, speed=10)
    b = make_fighter("b", hp=20, attack=8, defense=2, speed=5)

    result = resolve(a, b)

    assert result.winner is a
    assert result.loser is b
    assert result.turns == 7
    assert result.damage_dealt_by_a == 24
    assert result.damage_dealt_by_b == 18
    assert result.remaining_hp_a == 2
    assert result.remaining_hp_b == -4  # Overkill is not clamped


def test_speed_tie_favours_slot_a(make_fighter) -> None:
    a = make_fighter("a", hp=6, attack=10, defense=0, speed=5)
    b = make_fighter("b", hp=6, attack=10, defense=0, speed=5)

    assert first_attacker_is_a(a, b)
    result = resolve(a, b)

    assert result.winner is a
    assert result.turns == 1
    assert result.damage_dealt_by_b == 0


def test_faster_slot_b_strikes_first(make_fighter) -> None:
    a = make_fighter("a", hp=6, attack=10, defense=0, speed=4)
    b = make_fighter("b", hp=6, attack=10, defense=0, speed=5)

    result = resolve(a, b)

    assert result.winner is b
    assert result.turns == 1
    assert result.damage_dealt_by_a == 0


def test_damage_floor_applies_when_defense_exceeds_attack(make_fighter) -> None:
    a = make_fighter("a", hp=3, attack=1, defense=50, speed=2)
    b = make_fighter("b", hp=3, attack=1, defense=50, speed=1)

    result = resolve(a, b)

    assert calculate_damage(1, 50) == DAMAGE_FLOOR
    assert result.winner is a
    assert result.turns == 5
    assert result.remaining_hp_b == 0


def test_inputs_are_not_mutated(make_fighter) -> None:
    a = make_fighter("a", hp=20, speed=10)
    b = make_fighter("b", hp=20, speed=5)

    resolve(a, b)
    again = resolve(a, b)

    assert a.stats.hp == 20 and a.max_hp == 20
    assert b.stats.hp == 20 and b.max_hp == 20
    assert again.turns == 7


@pytest.mark.parametrize(
    "stats_a, stats_b",
    [
        ({"hp": 1, "attack": 0, "defense": 0, "speed": 0}, {"hp": 1, "attack": 0, "defense": 0, "speed": 0}),
        ({"hp": 255, "attack": 5, "defense": 230, "speed": 5}, {"hp": 255, "attack": 5, "defense": 230, "speed": 5}),
        ({"hp": 100, "attack": 90, "defense": 10, "speed": 30}, {"hp": 45, "attack": 49, "defense": 49, "speed": 45}),
    ],
)
def test_resolution_always_produces_one_winner(make_fighter, stats_a, stats_b) -> None:
    a = make_fighter("a", **stats_a)
    b = make_fighter("b", **stats_b)

    result = resolve(a, b)

    assert {result.winner.id, result.loser.id} == {"a", "b"}
    winner_hp = result.remaining_hp_a if result.winner_is_a else result.remaining_hp_b
    loser_hp = result.remaining_hp_b if result.winner_is_a else result.remaining_hp_a
    assert winner_hp > 0
    assert loser_hp <= 0
    assert result.turns <= stats_a["hp"] + stats_b["hp"]


def test_match_stats_balanced(make_fighter) -> None:
    a = make_fighter("a", hp=20, attack=8, defense=2, speed=10)
    b = make_fighter("b", hp=20, attack=8, defense=2, speed=5)

    stats = resolve(a, b).stats()

    assert stats.attack_delta == 6
    assert stats.defense_delta == 6
    assert stats.panel_reason == "Balanced"
    # Stored verdict only compares slot A damage (24) with slot B damage (18)
    assert stats.winner_reason == "Superior attack"
    assert stats.to_dict()["turns"] == 7


def test_match_stats_superior_attack(make_fighter) -> None:
    a = make_fighter("a", hp=50, attack=1, defense=0, speed=1)
    b = make_fighter("b", hp=50, attack=30, defense=0, speed=10)

    result = resolve(a, b)
    stats = result.stats()

    assert result.winner is b
    assert result.turns == 3
    assert stats.attack_delta == 59
    assert stats.panel_reason == "Superior attack"
    assert stats.winner_reason == "Balanced"
    assert stats.to_dict()["panel_reason"] == "Superior attack"
