"""Deterministic turn-based combat resolution."""

import logging

from .models import CombatantState, CombatResult, Fighter

logger = logging.getLogger(__name__)

# Every hit lands for at least this much, so hp strictly decreases each turn.
DAMAGE_FLOOR = 1


def calculate_damage(attack: int, defense: int) -> int:
    """Damage of a single hit."""
    return max(DAMAGE_FLOOR, attack - defense)


def first_attacker_is_a(fighter_a: Fighter, fighter_b: Fighter) -> bool:
    """Strictly faster fighter opens; speed ties go to slot A."""
    return fighter_a.stats.speed >= fighter_b.stats.speed


def resolve(fighter_a: Fighter, fighter_b: Fighter) -> CombatResult:
    """Resolve a battle between two fresh fighters.

    Both fighters must enter with positive hp. The inputs are never mutated:
    hit points are tracked on per-call CombatantState copies.

    Turns alternate strictly and each turn only the defender loses hp, so the
    battle ends with exactly one fighter still standing.
    """
    state_a = CombatantState.from_fighter(fighter_a)
    state_b = CombatantState.from_fighter(fighter_b)

    if first_attacker_is_a(fighter_a, fighter_b):
        attacker, defender = state_a, state_b
    else:
        attacker, defender = state_b, state_a

    turns = 0
    while not state_a.knocked_out and not state_b.knocked_out:
        damage = calculate_damage(attacker.attack, defender.defense)
        defender.hp -= damage
        attacker.damage_dealt += damage
        turns += 1
        attacker, defender = defender, attacker

    winner, loser = (state_a, state_b) if state_b.knocked_out else (state_b, state_a)

    logger.debug(
        f"{winner.fighter.name} defeated {loser.fighter.name} in {turns} turns "
        f"({state_a.damage_dealt}/{state_b.damage_dealt} damage)"
    )

    return CombatResult(
        fighter_a=fighter_a,
        fighter_b=fighter_b,
        winner=winner.fighter,
        loser=loser.fighter,
        turns=turns,
        damage_dealt_by_a=state_a.damage_dealt,
        damage_dealt_by_b=state_b.damage_dealt,
        remaining_hp_a=state_a.hp,
        remaining_hp_b=state_b.hp,
    )
