"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest
from pydantic import SecretStr

from backend.app.llm.client import GenerationConfig
from backend.app.llm.credentials import CredentialPool
from backend.app.orchestration.generator import ItineraryGenerator

FIXED_NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class ScriptedProvider:
    """Provider double returning (or raising) one scripted outcome per call.

    Records the prompt and credential of every call.
    """

    def __init__(self, outcomes: list[str | BaseException]) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, str]] = []

    async def generate_content(
        self, prompt: str, credential: SecretStr, config: GenerationConfig
    ) -> str:
        self.calls.append((prompt, credential.get_secret_value()))
        outcome = self.outcomes[len(self.calls) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def credentials_used(self) -> list[str]:
        return [credential for _, credential in self.calls]


@pytest.fixture
def pool() -> CredentialPool:
    """Three-credential pool."""
    return CredentialPool.from_values(["key-1", "key-2", "key-3"])


@pytest.fixture
def make_generator(
    pool: CredentialPool,
) -> Callable[[list[str | BaseException]], tuple[ItineraryGenerator, ScriptedProvider]]:
    """Factory for a generator backed by a ScriptedProvider and a fixed clock."""

    def _make(
        outcomes: list[str | BaseException],
    ) -> tuple[ItineraryGenerator, ScriptedProvider]:
        provider = ScriptedProvider(outcomes)
        generator = ItineraryGenerator(
            pool=pool,
            provider=provider,
            model_name="gemini-2.5-pro",
            clock=lambda: FIXED_NOW,
        )
        return generator, provider

    return _make


@pytest.fixture
def trip_payload() -> dict[str, Any]:
    """Valid initial-generation payload in wire (camelCase) form."""
    return {
        "destination": "Lisbon",
        "dateRange": {"start": "2025-05-10", "end": "2025-05-14"},
        "travelers": {"adults": 2, "children": 1},
        "budget": "€2,500",
        "travelVibe": ["food", "history"],
        "mustVisitPlaces": ["Belém Tower", "Alfama"],
        "preferences": {"food": ["seafood", "pastries"], "stay": "boutique"},
    }


@pytest.fixture
def current_itinerary() -> dict[str, Any]:
    """Previously generated itinerary."""
    return {
        "summary": "Four days of food and history in Lisbon.",
        "destination": "Lisbon",
        "duration": "4 days",
        "itineraryTable": [
            {
                "day": 1,
                "theme": "Old town",
                "rows": [{"time": "9:00 AM", "activity": "Alfama walk"}],
                "meals": {"breakfast": "Pastéis de Belém", "lunch": "A Cevicheria", "dinner": "Taberna"},
                "accommodation": "Memmo Alfama",
                "dailyCost": "€180",
            }
        ],
        "localTips": ["Buy a Viva Viagem card"],
    }
