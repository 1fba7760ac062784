"""Tests for narration providers and the fallback guard."""

import asyncio
import random
from types import SimpleNamespace

import httpx
import pytest

from battle_engine.exceptions import ExternalCollaboratorFailure
from config.settings import NarrationConfig
from narration import create_narrator
from narration.base import FALLBACK_NARRATION, BaseNarrationProvider, narrate_or_fallback
from narration.fallback import DOOM_QUOTES, FallbackNarrator, to_one_liner
from narration.ollama_narrator import OllamaNarrator


class FakeCompletions:
    """Simplified AsyncOpenAI chat completions client."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=item))]
        )


def fake_client(*responses) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(*responses)))


def ollama_http(status_code: int = 200) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/tags"
        return httpx.Response(status_code, json={"models": []})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_to_one_liner_keeps_first_sentence() -> None:
    assert to_one_liner("Rip and tear until it is done.") == "Rip and tear until it is done."
    assert to_one_liner("They run. They hide.") == "They run."
    assert to_one_liner("In the first age...").endswith("age.")


def test_fallback_narrator_is_seedable() -> None:
    first = FallbackNarrator(rng=random.Random(7))
    second = FallbackNarrator(rng=random.Random(7))

    a = asyncio.run(first.narrate("Pikachu", "Eevee", 1))
    b = asyncio.run(second.narrate("Pikachu", "Eevee", 1))

    assert a == b
    assert a.rstrip(".") in {quote.split(".")[0] for quote in DOOM_QUOTES}


def test_ollama_narrator_returns_generated_line() -> None:
    client = fake_client('"Pikachu rips and tears."\n')
    narrator = OllamaNarrator(
        NarrationConfig(provider="ollama", model="mistral"),
        client=client,
        http_client=ollama_http(),
    )

    text = asyncio.run(narrator.narrate("Pikachu", "Eevee", 2))

    assert text == "Pikachu rips and tears."
    request = client.chat.completions.requests[0]
    assert request["model"] == "mistral"
    assert "round 2" in request["messages"][0]["content"]
    assert "Eevee" in request["messages"][0]["content"]


def test_ollama_narrator_requires_running_server() -> None:
    narrator = OllamaNarrator(
        NarrationConfig(provider="ollama"),
        client=fake_client("unused"),
        http_client=ollama_http(status_code=503),
    )

    with pytest.raises(ExternalCollaboratorFailure):
        asyncio.run(narrator.narrate("Pikachu", "Eevee", 1))


def test_ollama_generation_error_is_wrapped() -> None:
    narrator = OllamaNarrator(
        NarrationConfig(provider="ollama"),
        client=fake_client(TimeoutError("slow model")),
        http_client=ollama_http(),
    )

    with pytest.raises(ExternalCollaboratorFailure) as exc_info:
        asyncio.run(narrator.narrate("Pikachu", "Eevee", 1))

    assert exc_info.value.collaborator == "ollama"


def test_narrate_or_fallback_guards_every_failure() -> None:
    class Blank(BaseNarrationProvider):
        provider_name = "blank"

        async def narrate(self, winner_name, loser_name, round_number):
            return "   "

    class NotText(BaseNarrationProvider):
        provider_name = "not-text"

        async def narrate(self, winner_name, loser_name, round_number):
            return {"line": "rip and tear"}

    broken = OllamaNarrator(
        NarrationConfig(provider="ollama"),
        client=fake_client("unused"),
        http_client=ollama_http(status_code=500),
    )

    assert asyncio.run(narrate_or_fallback(None, "a", "b", 1, timeout=1)) == FALLBACK_NARRATION
    assert asyncio.run(narrate_or_fallback(Blank(), "a", "b", 1, timeout=1)) == FALLBACK_NARRATION
    assert asyncio.run(narrate_or_fallback(NotText(), "a", "b", 1, timeout=1)) == FALLBACK_NARRATION
    assert asyncio.run(narrate_or_fallback(broken, "a", "b", 1, timeout=1)) == FALLBACK_NARRATION


def test_create_narrator_follows_config() -> None:
    assert isinstance(create_narrator(NarrationConfig()), FallbackNarrator)
    assert isinstance(create_narrator(NarrationConfig(provider="ollama")), OllamaNarrator)
