"""Data model shared by every MecaTRON-3000 front end.

The module knows nothing about windows or timers. It holds the leveled word
bank, the player's score and level, the per-word typing record and the
gameplay knobs, so the matching rules can be exercised without a display.
"""
from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

MAX_SEED_VALUE = 2**32 - 1

DEFAULT_LEVELS: Tuple[Tuple[str, ...], ...] = (
    ("ju", "fr", "fv", "jm", "fu", "jr", "jv", "fm"),
    ("fre", "jui", "fui", "vie", "mi", "mery", "huy"),
    ("juan", "remo", "foca", "dedo", "cate"),
)


def load_json(path: Union[str, Path]):
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def resolve_seed(seed: Optional[int]) -> Tuple[int, random.Random]:
    """Return a normalized seed and a Random instance seeded with it.

    When ``seed`` is ``None`` a fresh seed is drawn from ``SystemRandom`` so the
    session is unpredictable but can still be replayed with ``--seed``.
    """

    if seed is None:
        seed = random.SystemRandom().randint(0, MAX_SEED_VALUE)
    else:
        seed = int(seed)
    return seed, random.Random(seed)


@dataclass
class GameConfig:
    spawn_interval_ms: int = 3000
    move_interval_ms: int = 300
    fall_step: int = 5
    floor: int = 760
    max_left_percent: int = 85
    level_up_score: int = 10
    start_level: int = 0
    legacy_selection: bool = False

    def validate(self) -> None:
        if self.spawn_interval_ms <= 0:
            raise ValueError("GameConfig.spawn_interval_ms must be a positive integer")
        if self.move_interval_ms <= 0:
            raise ValueError("GameConfig.move_interval_ms must be a positive integer")
        if self.fall_step <= 0:
            raise ValueError("GameConfig.fall_step must be a positive integer")
        if self.floor <= 0:
            raise ValueError("GameConfig.floor must be a positive integer")
        if not 0 < self.max_left_percent <= 100:
            raise ValueError("GameConfig.max_left_percent must be between 1 and 100")
        if self.level_up_score <= 0:
            raise ValueError("GameConfig.level_up_score must be a positive integer")
        if self.start_level < 0:
            raise ValueError("GameConfig.start_level cannot be negative")

    @property
    def ticks_to_floor(self) -> int:
        """Number of move ticks an untouched word survives."""

        return -(-self.floor // self.fall_step)


def _normalize_level(raw: object, index: int) -> Tuple[str, ...]:
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"Level {index} must be a list of words")
    words: List[str] = []
    for entry in raw:
        if not isinstance(entry, str):
            raise ValueError(f"Level {index} contains a non-string entry: {entry!r}")
        word = entry.strip().lower()
        if not word.isalpha():
            raise ValueError(f"Level {index} contains an invalid word: {entry!r}")
        words.append(word)
    if not words:
        raise ValueError(f"Level {index} has no words")
    return tuple(words)


@dataclass(frozen=True)
class WordBank:
    """Ordered levels, each an ordered list of candidate words."""

    levels: Tuple[Tuple[str, ...], ...]

    def __post_init__(self) -> None:
        if not self.levels:
            raise ValueError("A word bank needs at least one level")
        normalized = tuple(
            _normalize_level(level, index) for index, level in enumerate(self.levels)
        )
        object.__setattr__(self, "levels", normalized)

    @classmethod
    def default(cls) -> "WordBank":
        return cls(DEFAULT_LEVELS)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "WordBank":
        """Load a bank from a JSON list of word lists.

        An object with a ``"levels"`` key holding that list is accepted too.
        """

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Word bank file not found: {path}")
        raw = load_json(path)
        if isinstance(raw, dict):
            raw = raw.get("levels")
        if not isinstance(raw, list):
            raise ValueError(f"{path} must hold a list of levels")
        bank = cls(tuple(raw))
        logger.info(
            "Loaded %s levels (%s words) from %s",
            bank.level_count,
            sum(len(level) for level in bank.levels),
            path,
        )
        return bank

    @property
    def level_count(self) -> int:
        return len(self.levels)

    @property
    def max_level(self) -> int:
        return len(self.levels) - 1

    def words_for_level(self, level: int) -> Sequence[str]:
        if not 0 <= level < len(self.levels):
            raise IndexError(
                f"Level {level} is out of range (valid levels: 0-{self.max_level})"
            )
        return self.levels[level]


class WordModel:
    """Word bank plus the player's score and level."""

    def __init__(
        self,
        bank: WordBank,
        *,
        start_level: int = 0,
        legacy_selection: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        bank.words_for_level(start_level)
        if legacy_selection:
            short = [
                index for index, level in enumerate(bank.levels) if len(level) < bank.level_count
            ]
            if short:
                raise ValueError(
                    f"Legacy selection needs at least {bank.level_count} words per level; "
                    f"level(s) {', '.join(map(str, short))} have fewer"
                )
        self.bank = bank
        self.level = start_level
        self.score = 0
        self.legacy_selection = legacy_selection
        self.rng = rng or random.Random()

    def create_word(self) -> str:
        words = self.bank.words_for_level(self.level)
        if self.legacy_selection:
            # The first release bounded the draw by the number of levels.
            index = self.rng.randrange(self.bank.level_count)
            if index >= len(words):
                raise IndexError(
                    f"Word index {index} is out of range for level {self.level} "
                    f"({len(words)} words)"
                )
        else:
            index = self.rng.randrange(len(words))
        return words[index]

    def add_point(self) -> None:
        self.score += 1

    def level_up(self) -> bool:
        """Advance one level; returns ``False`` once the last level is reached."""

        if self.level >= self.bank.max_level:
            logger.info("Already at the last level (%s); staying there", self.level)
            return False
        self.level += 1
        logger.info("Level up! Now on level %s", self.level)
        return True


@dataclass(eq=False)
class FallingWord:
    """Typing progress and position of one on-screen word."""

    text: str
    left_percent: int
    top: int = 0
    typed: str = ""
    remaining: str = field(init=False)

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("A falling word needs at least one letter")
        self.remaining = self.text

    @property
    def next_letter(self) -> str:
        return self.remaining[:1]

    @property
    def is_complete(self) -> bool:
        return not self.remaining

    def type_letter(self, letter: str) -> bool:
        """Consume ``letter`` if it is the next expected one, else start over."""

        if self.remaining and letter == self.remaining[0]:
            self.typed += letter
            self.remaining = self.remaining[1:]
            return True
        self.reset()
        return False

    def reset(self) -> None:
        self.remaining = self.typed + self.remaining
        self.typed = ""

    def fall(self, step: int) -> int:
        self.top += step
        return self.top
