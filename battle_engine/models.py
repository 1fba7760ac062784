"""Data models for the battle engine."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StatBlock(BaseModel):
    """Base stats of a fighter."""

    model_config = ConfigDict(frozen=True)

    hp: int = Field(..., ge=0, description="Hit points at full health")
    attack: int = Field(..., ge=0)
    defense: int = Field(..., ge=0)
    speed: int = Field(..., ge=0, description="Higher speed strikes first")
    special_attack: int = Field(default=0, ge=0)
    special_defense: int = Field(default=0, ge=0)


class Fighter(BaseModel):
    """A tournament competitor. Immutable once supplied by the roster."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique, stable fighter ID")
    name: str
    stats: StatBlock
    max_hp: int = Field(default=0, ge=0, description="Display-only full hp")

    @model_validator(mode="before")
    @classmethod
    def default_max_hp(cls, data: Any) -> Any:
        if isinstance(data, dict) and "max_hp" not in data:
            stats = data.get("stats")
            hp = stats.get("hp") if isinstance(stats, dict) else getattr(stats, "hp", None)
            if hp is not None:
                data = {**data, "max_hp": hp}
        return data

    @property
    def hp(self) -> int:
        return self.stats.hp


@dataclass
class CombatantState:
    """Mutable per-battle copy of a fighter's hit points."""

    fighter: Fighter
    hp: int
    damage_dealt: int = 0

    @classmethod
    def from_fighter(cls, fighter: Fighter) -> "CombatantState":
        return cls(fighter=fighter, hp=fighter.stats.hp)

    @property
    def attack(self) -> int:
        return self.fighter.stats.attack

    @property
    def defense(self) -> int:
        return self.fighter.stats.defense

    @property
    def knocked_out(self) -> bool:
        return self.hp <= 0


@dataclass(frozen=True)
class MatchStats:
    """Statistics of a resolved battle.

    winner_reason is the verdict stored with the battle record: slot A
    out-damaging slot B counts as a superior attack. panel_reason is the
    verdict shown in the result panel, based on the winner's damage margin.
    """

    turns: int
    damage_dealt_by_a: int
    damage_dealt_by_b: int
    attack_delta: int
    defense_delta: int
    winner_reason: str
    panel_reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "turns": self.turns,
            "total_damage_a": self.damage_dealt_by_a,
            "total_damage_b": self.damage_dealt_by_b,
            "attack_delta": self.attack_delta,
            "defense_delta": self.defense_delta,
            "winner_reason": self.winner_reason,
            "panel_reason": self.panel_reason,
        }


@dataclass(frozen=True)
class CombatResult:
    """Outcome of a single resolved battle."""

    fighter_a: Fighter
    fighter_b: Fighter
    winner: Fighter
    loser: Fighter
    turns: int
    damage_dealt_by_a: int
    damage_dealt_by_b: int
    remaining_hp_a: int
    remaining_hp_b: int

    @property
    def winner_is_a(self) -> bool:
        return self.winner.id == self.fighter_a.id

    def stats(self, superior_attack_margin: int = 10) -> MatchStats:
        """Derive the recorded and displayed statistics for this battle."""
        if self.winner_is_a:
            attack_delta = self.damage_dealt_by_a - self.damage_dealt_by_b
            defense_delta = self.remaining_hp_a - self.remaining_hp_b
        else:
            attack_delta = self.damage_dealt_by_b - self.damage_dealt_by_a
            defense_delta = self.remaining_hp_b - self.remaining_hp_a

        return MatchStats(
            turns=self.turns,
            damage_dealt_by_a=self.damage_dealt_by_a,
            damage_dealt_by_b=self.damage_dealt_by_b,
            attack_delta=attack_delta,
            defense_delta=defense_delta,
            winner_reason=(
                "Superior attack"
                if self.damage_dealt_by_a > self.damage_dealt_by_b
                else "Balanced"
            ),
            panel_reason=(
                "Superior attack" if attack_delta > superior_attack_margin else "Balanced"
            ),
        )
