"""Pygame edition of MecaTRON-3000.

Words drop from the top of the window every few seconds. Type their letters
before they reach the bottom: every key is offered to all falling words at
once, a wrong key sends partially typed words back to the start and each
completed word is worth a point. Ten points take you to the next level.
"""
from __future__ import annotations

import logging
import math
from array import array
from typing import Dict, List, Optional, Sequence, Tuple

import pygame

from mecatron_api import FallingWord
from mecatron_game import KeyPressOutcome, TypingGame, is_typing_key, parse_game

logger = logging.getLogger(__name__)

SCREEN_WIDTH = 1000
SCREEN_HEIGHT = 860
SCORE_PANEL_HEIGHT = 56
FPS = 60
BACKGROUND_COLOR = (26, 30, 41)
PANEL_COLOR = (38, 45, 60)
TEXT_COLOR = (245, 245, 250)
TEXT_MUTED_COLOR = (200, 204, 214)
TYPED_COLOR = (255, 202, 61)
WORD_PADDING = 6
SPAWN_WORD_EVENT = pygame.USEREVENT + 1
MOVE_WORDS_EVENT = pygame.USEREVENT + 2

VERSION = "v. 1.0.0"


class WordLabel:
    """Rendered typed/remaining pair for one falling word."""

    def __init__(self, word: FallingWord, font: pygame.font.Font) -> None:
        self.state: Tuple[str, str] = (word.typed, word.remaining)
        self.typed_surface = font.render(word.typed, True, TYPED_COLOR)
        self.remaining_surface = font.render(word.remaining, True, TEXT_COLOR)

    @property
    def width(self) -> int:
        return self.typed_surface.get_width() + self.remaining_surface.get_width()


class WordRenderer:
    """Project ``FallingWord`` records onto the play area."""

    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self.surface = surface
        self.font = font
        self._labels: Dict[FallingWord, WordLabel] = {}

    def __len__(self) -> int:
        return len(self._labels)

    def render(self, word: FallingWord) -> None:
        self._labels[word] = WordLabel(word, self.font)

    def discard(self, words: Sequence[FallingWord]) -> None:
        for word in words:
            self._labels.pop(word, None)

    def label_for(self, word: FallingWord) -> WordLabel:
        label = self._labels.get(word)
        if label is None or label.state != (word.typed, word.remaining):
            label = WordLabel(word, self.font)
            self._labels[word] = label
        return label

    def position(self, word: FallingWord) -> Tuple[int, int]:
        x = self.surface.get_width() * word.left_percent // 100
        return x, SCORE_PANEL_HEIGHT + word.top

    def draw(self, words: Sequence[FallingWord]) -> None:
        for word in words:
            label = self.label_for(word)
            x, y = self.position(word)
            backdrop = pygame.Rect(
                x - WORD_PADDING,
                y - WORD_PADDING // 2,
                label.width + WORD_PADDING * 2,
                self.font.get_linesize() + WORD_PADDING,
            )
            pygame.draw.rect(self.surface, PANEL_COLOR, backdrop, border_radius=8)
            self.surface.blit(label.typed_surface, (x, y))
            self.surface.blit(label.remaining_surface, (x + label.typed_surface.get_width(), y))


class ScorePanel:
    """Single score readout; the text surface is rebuilt on every change."""

    def __init__(self, font: pygame.font.Font, small_font: pygame.font.Font) -> None:
        self.font = font
        self.small_font = small_font
        self.score_surface: Optional[pygame.Surface] = None
        self.level_surface: Optional[pygame.Surface] = None

    def show(self, score: int = 0, level: int = 0) -> None:
        self.update(score, level)

    def update(self, score: int, level: int) -> None:
        self.score_surface = self.font.render(str(score), True, TYPED_COLOR)
        self.level_surface = self.small_font.render(f"Level {level + 1}", True, TEXT_MUTED_COLOR)

    def draw(self, surface: pygame.Surface) -> None:
        panel = pygame.Rect(0, 0, surface.get_width(), SCORE_PANEL_HEIGHT)
        pygame.draw.rect(surface, PANEL_COLOR, panel)
        if self.score_surface is not None:
            surface.blit(self.score_surface, self.score_surface.get_rect(midleft=(24, panel.centery)))
        if self.level_surface is not None:
            rect = self.level_surface.get_rect(midright=(panel.right - 24, panel.centery))
            surface.blit(self.level_surface, rect)


class PygameTypingApp:
    """Own the window, the two timers and the keyboard listener."""

    def __init__(self, game: TypingGame) -> None:
        pygame.init()
        pygame.display.set_caption("MecaTRON-3000")
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        self.clock = pygame.time.Clock()

        self.font_word = pygame.font.SysFont("Consolas", 30, bold=True)
        self.font_score = pygame.font.SysFont("Segoe UI", 34, bold=True)
        self.font_small = pygame.font.SysFont("Segoe UI", 20)

        self.sounds_enabled = False
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            self.sounds_enabled = pygame.mixer.get_init() is not None
        except pygame.error:
            self.sounds_enabled = False

        self.success_sound = (
            self._build_tone(1020.0, 120, volume=0.35) if self.sounds_enabled else None
        )
        self.error_sound = (
            self._build_tone(220.0, 90, volume=0.25) if self.sounds_enabled else None
        )

        self.game = game
        self.renderer = WordRenderer(self.screen, self.font_word)
        self.score_panel = ScorePanel(self.font_score, self.font_small)
        self.timers_armed = False
        self.running = False

    # --- Lifecycle -----------------------------------------------------------
    def start(self) -> None:
        logger.info("Starting...")
        self.score_panel.show(self.game.score, self.game.level)
        config = self.game.config
        pygame.time.set_timer(SPAWN_WORD_EVENT, config.spawn_interval_ms)
        pygame.time.set_timer(MOVE_WORDS_EVENT, config.move_interval_ms)
        self.timers_armed = True
        self.running = True

    def stop(self) -> None:
        self.running = False
        if not self.timers_armed:
            return
        pygame.time.set_timer(SPAWN_WORD_EVENT, 0)
        pygame.time.set_timer(MOVE_WORDS_EVENT, 0)
        self.timers_armed = False
        logger.info("Stopped: %s", self.game.summary())

    def run(self) -> None:
        self.start()
        try:
            while self.running:
                self.clock.tick(FPS)
                for event in pygame.event.get():
                    self.handle_event(event)
                self._draw()
                pygame.display.flip()
        finally:
            self.stop()
            pygame.quit()

    # --- Event helpers -------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == SPAWN_WORD_EVENT:
            self._spawn_word()
        elif event.type == MOVE_WORDS_EVENT:
            self._move_words()
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
            elif is_typing_key(event.unicode):
                self._press_key(event.unicode)

    def _spawn_word(self) -> None:
        word = self.game.spawn_word()
        self.renderer.render(word)

    def _move_words(self) -> None:
        expired = self.game.advance_words()
        self.renderer.discard(expired)

    def _press_key(self, key: str) -> KeyPressOutcome:
        outcome = self.game.press_key(key)
        self.renderer.discard(outcome.completed)
        if outcome.score_changed:
            self._play_sound(self.success_sound)
            self.score_panel.update(self.game.score, self.game.level)
        elif outcome.reset:
            self._play_sound(self.error_sound)
        return outcome

    # --- Sound helpers -------------------------------------------------------
    def _build_tone(
        self,
        frequency: float,
        duration_ms: int,
        *,
        volume: float = 0.5,
    ) -> Optional[pygame.mixer.Sound]:
        init_info = pygame.mixer.get_init()
        if not init_info:
            return None
        sample_rate, sample_size, channels = init_info
        if abs(sample_size) != 16:
            return None

        total_samples = max(1, int(sample_rate * (duration_ms / 1000.0)))
        amplitude = (2**15) - 1
        waveform: List[int] = []
        for index in range(total_samples):
            fade = 1.0 - index / total_samples
            theta = 2.0 * math.pi * frequency * (index / sample_rate)
            sample_value = int(amplitude * fade * math.sin(theta))
            if sample_size > 0:
                sample_value += amplitude
            waveform.append(sample_value)

        samples = array("H" if sample_size > 0 else "h")
        for value in waveform:
            samples.extend([value] * channels)

        try:
            sound = pygame.mixer.Sound(buffer=samples.tobytes())
        except pygame.error:
            return None
        sound.set_volume(max(0.0, min(volume, 1.0)))
        return sound

    @staticmethod
    def _play_sound(sound: Optional[pygame.mixer.Sound]) -> None:
        if not sound:
            return
        try:
            sound.play()
        except pygame.error:
            logger.debug("Could not play sound", exc_info=True)

    # --- Drawing helpers -----------------------------------------------------
    def _draw(self) -> None:
        self.screen.fill(BACKGROUND_COLOR)
        self.renderer.draw(self.game.words)
        self.score_panel.draw(self.screen)
        self._draw_version()

    def _draw_version(self) -> None:
        version_surface = self.font_small.render(VERSION, True, TEXT_MUTED_COLOR)
        version_rect = version_surface.get_rect()
        version_rect.bottomright = (SCREEN_WIDTH - 24, SCREEN_HEIGHT - 12)
        self.screen.blit(version_surface, version_rect)


def main(argv: Optional[Sequence[str]] = None) -> None:
    game = parse_game("MecaTRON-3000 falling-words typing game (pygame)", argv)
    app = PygameTypingApp(game)
    app.run()


if __name__ == "__main__":
    main()
