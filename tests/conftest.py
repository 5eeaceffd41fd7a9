from __future__ import annotations

import os
import random

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from mecatron_api import WordBank


class FixedRandom(random.Random):
    """Random whose ``randrange`` replays a fixed list of values."""

    def __init__(self, values, seed: int = 0) -> None:
        super().__init__(seed)
        self.values = list(values)
        self.calls = []

    def randrange(self, start, stop=None, step=1):  # type: ignore[override]
        self.calls.append((start, stop))
        return self.values.pop(0)


@pytest.fixture
def bank() -> WordBank:
    return WordBank.default()


@pytest.fixture
def fixed_random():
    return FixedRandom
