"""Canned DOOM quotes, used when no language model is around."""

import random

from .base import BaseNarrationProvider

DOOM_QUOTES = [
    "Rip and tear until it is done.",
    "They are huge, and they are fast.",
    "Shoot rockets, it's easier.",
    "In the first age, in the first battle, when the shadows first lengthened...",
    "That demon is tougher than a two-dollar steak.",
    "A chainsaw? Find something bigger.",
    "The only thing they fear is you.",
]


def to_one_liner(quote: str) -> str:
    """Keep the first sentence of a quote and make sure it ends with a period."""
    first = quote.split(".")[0].strip()
    if not first:
        return quote
    return first if first.endswith(".") else f"{first}."


class FallbackNarrator(BaseNarrationProvider):
    """Narrates every match with a random DOOM one-liner."""

    def __init__(self, quotes: list[str] | None = None, rng: random.Random | None = None):
        self.quotes = quotes or DOOM_QUOTES
        self._rng = rng or random.Random()

    @property
    def provider_name(self) -> str:
        return "fallback"

    async def narrate(self, winner_name: str, loser_name: str, round_number: int) -> str:
        return to_one_liner(self._rng.choice(self.quotes))
