"""Display-free controller for the falling-words game.

``TypingGame`` owns the word model and the live ``FallingWord`` records. Front
ends call :meth:`TypingGame.spawn_word` and :meth:`TypingGame.advance_words`
from their timers and :meth:`TypingGame.press_key` from their keyboard
handler, then project the records onto the screen.

The module also hosts the command line shared by the pygame and tkinter
editions.
"""
from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from mecatron_api import FallingWord, GameConfig, WordBank, WordModel, resolve_seed

logger = logging.getLogger(__name__)


@dataclass
class KeyPressOutcome:
    key: str
    advanced: List[FallingWord] = field(default_factory=list)
    completed: List[FallingWord] = field(default_factory=list)
    reset: List[FallingWord] = field(default_factory=list)
    leveled_up: bool = False

    @property
    def score_changed(self) -> bool:
        return bool(self.completed)

    @property
    def changed(self) -> List[FallingWord]:
        """Words still on screen whose typed/remaining split moved."""

        return [word for word in self.advanced if word not in self.completed] + self.reset


def is_typing_key(char: str) -> bool:
    """Keys a browser would report as a key press: printable text, Enter and Tab."""

    return bool(char) and (char.isprintable() or char in ("\r", "\t"))


class TypingGame:
    """Spawn, fall and match loop for one play session."""

    def __init__(
        self,
        bank: WordBank,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.config.validate()
        self.rng = rng or random.Random()
        self.model = WordModel(
            bank,
            start_level=self.config.start_level,
            legacy_selection=self.config.legacy_selection,
            rng=self.rng,
        )
        self.words: List[FallingWord] = []
        self.words_spawned = 0
        self.words_completed = 0
        self.words_expired = 0

    @property
    def score(self) -> int:
        return self.model.score

    @property
    def level(self) -> int:
        return self.model.level

    def spawn_word(self) -> FallingWord:
        text = self.model.create_word()
        word = FallingWord(text, left_percent=self.rng.randrange(self.config.max_left_percent))
        self.words.append(word)
        self.words_spawned += 1
        logger.debug("Spawned %r at %s%%", text, word.left_percent)
        return word

    def advance_words(self) -> List[FallingWord]:
        """Move every word down one step; returns the words that hit the floor."""

        expired: List[FallingWord] = []
        for word in list(self.words):
            if word.fall(self.config.fall_step) >= self.config.floor:
                self.words.remove(word)
                expired.append(word)
        if expired:
            self.words_expired += len(expired)
            logger.debug("Expired: %s", ", ".join(word.text for word in expired))
        return expired

    def press_key(self, key: str) -> KeyPressOutcome:
        """Offer ``key`` to every live word at once."""

        outcome = KeyPressOutcome(key)
        for word in list(self.words):
            had_progress = bool(word.typed)
            if word.type_letter(key):
                outcome.advanced.append(word)
                if word.is_complete:
                    self.words.remove(word)
                    outcome.completed.append(word)
                    if self._register_completion():
                        outcome.leveled_up = True
            elif had_progress:
                outcome.reset.append(word)
        return outcome

    def _register_completion(self) -> bool:
        self.words_completed += 1
        self.model.add_point()
        if self.model.score == self.config.level_up_score:
            leveled = self.model.level_up()
            self.model.score = 0
            return leveled
        return False

    def summary(self) -> str:
        return (
            f"level {self.level}, score {self.score}, "
            f"{self.words_completed} typed, {self.words_expired} missed, "
            f"{self.words_spawned} spawned"
        )


# --- Command line -------------------------------------------------------------
def build_arg_parser(description: str) -> argparse.ArgumentParser:
    default_config = GameConfig()
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--words",
        type=str,
        default=None,
        help="JSON file with the leveled word lists (default=built-in words)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="RNG seed for reproducibility (default=None=randomized)",
    )
    parser.add_argument(
        "--start-level",
        type=int,
        default=default_config.start_level,
        help=f"Level to start on (default={default_config.start_level})",
    )
    parser.add_argument(
        "--spawn-interval",
        type=int,
        default=default_config.spawn_interval_ms,
        help=f"Milliseconds between new words (default={default_config.spawn_interval_ms})",
    )
    parser.add_argument(
        "--move-interval",
        type=int,
        default=default_config.move_interval_ms,
        help=f"Milliseconds between fall steps (default={default_config.move_interval_ms})",
    )
    parser.add_argument(
        "--legacy-selection",
        action="store_true",
        help="Bound the random word index by the number of levels, as the first release did",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every spawned, typed and missed word",
    )
    return parser


def game_from_args(args: argparse.Namespace) -> TypingGame:
    """Build a ``TypingGame`` from parsed arguments, exiting on bad input."""

    if args.spawn_interval <= 0:
        raise SystemExit("--spawn-interval must be a positive integer")
    if args.move_interval <= 0:
        raise SystemExit("--move-interval must be a positive integer")
    if args.start_level < 0:
        raise SystemExit("--start-level cannot be negative")

    try:
        bank = WordBank.from_json(args.words) if args.words else WordBank.default()
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    seed_used, rng = resolve_seed(args.seed)
    print(f"Using RNG seed: {seed_used}")

    config = GameConfig(
        spawn_interval_ms=args.spawn_interval,
        move_interval_ms=args.move_interval,
        start_level=args.start_level,
        legacy_selection=args.legacy_selection,
    )
    try:
        return TypingGame(bank, config, rng)
    except (IndexError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_game(description: str, argv: Optional[Sequence[str]] = None) -> TypingGame:
    args = build_arg_parser(description).parse_args(argv)
    configure_logging(args.verbose)
    return game_from_args(args)
