"""Narration providers for match results."""

from .base import FALLBACK_NARRATION, BaseNarrationProvider, narrate_or_fallback
from .factory import create_narrator
from .fallback import DOOM_QUOTES, FallbackNarrator
from .ollama_narrator import OllamaNarrator

__all__ = [
    "BaseNarrationProvider",
    "DOOM_QUOTES",
    "FALLBACK_NARRATION",
    "FallbackNarrator",
    "OllamaNarrator",
    "create_narrator",
    "narrate_or_fallback",
]
