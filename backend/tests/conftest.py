from __future__ import annotations

import random
from typing import Dict, List, Optional

import pytest

from app.config import Settings


class ScriptedProvider:
    """Completion provider that replays a canned reply and records each call."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict] = []

    def complete(self, messages, temperature, max_tokens) -> str:
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.reply


class FixedDriftRandom(random.Random):
    def __init__(self, drift: int):
        super().__init__(0)
        self.drift = drift

    def randint(self, a: int, b: int) -> int:
        assert (a, b) == (-5, 4)
        return self.drift


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="test-key")


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def make_provider():
    return ScriptedProvider


@pytest.fixture
def drift_rng():
    return FixedDriftRandom
