"""Narration through a local Ollama server."""

import logging
import random
from typing import TYPE_CHECKING

import httpx
from openai import AsyncOpenAI

from battle_engine.exceptions import ExternalCollaboratorFailure
from .base import BaseNarrationProvider
from .fallback import DOOM_QUOTES

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion
    from config.settings import NarrationConfig

logger = logging.getLogger(__name__)


class OllamaNarrator(BaseNarrationProvider):
    """Asks an Ollama model for a DOOM-flavoured line about each result."""

    def __init__(
        self,
        narration_config: "NarrationConfig",
        client: AsyncOpenAI | None = None,
        http_client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
    ):
        self.config = narration_config
        self._base_url = narration_config.ollama_base_url.rstrip("/")
        self._client = client or AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            api_key="ollama",  # Ollama doesn't require real API key
            timeout=narration_config.timeout,
        )
        self._http_client = http_client
        self._rng = rng or random.Random()

    @property
    def provider_name(self) -> str:
        return "ollama"

    async def is_running(self) -> bool:
        """Fast health check to see if Ollama server is running."""
        try:
            if self._http_client is not None:
                response = await self._http_client.get(f"{self._base_url}/api/tags")
            else:
                async with httpx.AsyncClient(timeout=1.0) as client:
                    response = await client.get(f"{self._base_url}/api/tags")
            response.raise_for_status()
            return True
        except Exception as e:
            logger.debug(f"Ollama health check failed: {e}")
            return False

    def build_prompt(self, winner_name: str, loser_name: str, round_number: int) -> str:
        inspiration = self._rng.choice(DOOM_QUOTES)
        return (
            "You are the Doom Slayer commenting on a creature tournament. "
            f"In round {round_number}, {winner_name} just defeated {loser_name}. "
            f'Write a hilarious one-liner inspired by this DOOM quote: "{inspiration}". '
            "Keep it under 30 words and reply with the line only."
        )

    async def narrate(self, winner_name: str, loser_name: str, round_number: int) -> str:
        if not await self.is_running():
            raise ExternalCollaboratorFailure("ollama", "server not available")

        try:
            response: "ChatCompletion" = await self._client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {
                        "role": "user",
                        "content": self.build_prompt(winner_name, loser_name, round_number),
                    }
                ],
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
            )
        except Exception as e:
            logger.error(f"Ollama narration failed for {self.config.model}: {e}")
            raise ExternalCollaboratorFailure("ollama", str(e)) from e

        content = response.choices[0].message.content or ""
        logger.debug(f"Generated {len(content)} chars from Ollama model {self.config.model}")
        return content.strip().strip('"')
