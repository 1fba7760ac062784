"""Factory for narration providers."""

import logging

from config.settings import NarrationConfig
from .base import BaseNarrationProvider
from .fallback import FallbackNarrator
from .ollama_narrator import OllamaNarrator

logger = logging.getLogger(__name__)


def create_narrator(narration_config: NarrationConfig) -> BaseNarrationProvider:
    """Create the narration provider named in the config."""
    if narration_config.provider == "ollama":
        logger.info(
            f"Creating Ollama narrator with model {narration_config.model} "
            f"at {narration_config.ollama_base_url}"
        )
        return OllamaNarrator(narration_config)

    logger.info("Creating fallback narrator with canned quotes")
    return FallbackNarrator()
