"""Base classes and the fallback guard for narration providers."""

import asyncio
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

# Shown when no provider can produce a line in time.
FALLBACK_NARRATION = "doom..."


class BaseNarrationProvider(ABC):
    """Abstract base class for narration providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        pass

    @abstractmethod
    async def narrate(self, winner_name: str, loser_name: str, round_number: int) -> str:
        """Produce a short line about a match result."""
        pass


async def narrate_or_fallback(
    provider: BaseNarrationProvider | None,
    winner_name: str,
    loser_name: str,
    round_number: int,
    timeout: float,
) -> str:
    """Ask the provider for a line, degrading to FALLBACK_NARRATION on any failure."""
    if provider is None:
        return FALLBACK_NARRATION

    try:
        text = await asyncio.wait_for(
            provider.narrate(winner_name, loser_name, round_number), timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.warning(
            f"Narration provider {provider.provider_name} timed out after {timeout}s"
        )
        return FALLBACK_NARRATION
    except Exception as e:
        logger.warning(f"Narration provider {provider.provider_name} failed: {e}")
        return FALLBACK_NARRATION

    if not isinstance(text, str):
        logger.warning(
            f"Narration provider {provider.provider_name} returned {type(text).__name__}, not text"
        )
        return FALLBACK_NARRATION

    return text.strip() or FALLBACK_NARRATION
