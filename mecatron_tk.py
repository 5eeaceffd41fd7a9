"""Tkinter edition of MecaTRON-3000.

Shares its rules with :mod:`mecatron_pygame` through :class:`TypingGame`; each
falling word is a small frame holding two labels (typed so far, remaining)
placed on the play area, and both timers are ``after`` jobs that reschedule
themselves until :meth:`TkTypingApp.stop` cancels them.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

import tkinter as tk

from mecatron_api import FallingWord
from mecatron_game import KeyPressOutcome, TypingGame, is_typing_key, parse_game

logger = logging.getLogger(__name__)

APP_VERSION = "V1.0.0"
APP_WIDTH = 1000
PLAY_AREA_HEIGHT = 800
BACKGROUND = "#1a1e29"
PANEL_BACKGROUND = "#262d3c"
TEXT_FOREGROUND = "#f5f5fa"
TYPED_FOREGROUND = "#ffca3d"
WORD_FONT = ("Consolas", 20, "bold")
SCORE_FONT = ("Segoe UI", 22, "bold")


class WordWidget:
    """Frame with the typed and remaining labels of one falling word."""

    def __init__(self, parent: tk.Widget, word: FallingWord) -> None:
        self.frame = tk.Frame(parent, background=PANEL_BACKGROUND, padx=4, pady=2)
        self.typed_label = tk.Label(
            self.frame,
            text=word.typed,
            font=WORD_FONT,
            foreground=TYPED_FOREGROUND,
            background=PANEL_BACKGROUND,
            borderwidth=0,
            padx=0,
        )
        self.typed_label.pack(side=tk.LEFT)
        self.remaining_label = tk.Label(
            self.frame,
            text=word.remaining,
            font=WORD_FONT,
            foreground=TEXT_FOREGROUND,
            background=PANEL_BACKGROUND,
            borderwidth=0,
            padx=0,
        )
        self.remaining_label.pack(side=tk.LEFT)
        self.place(word)

    def place(self, word: FallingWord) -> None:
        self.frame.place(relx=word.left_percent / 100, y=word.top)

    def refresh(self, word: FallingWord) -> None:
        self.typed_label.config(text=word.typed)
        self.remaining_label.config(text=word.remaining)

    def destroy(self) -> None:
        self.frame.destroy()


class TkWordRenderer:
    """Keep one ``WordWidget`` per live ``FallingWord``."""

    def __init__(self, play_area: tk.Widget) -> None:
        self.play_area = play_area
        self.widgets: Dict[FallingWord, WordWidget] = {}

    def render(self, word: FallingWord) -> None:
        self.widgets[word] = WordWidget(self.play_area, word)

    def advance(self, words: Sequence[FallingWord]) -> None:
        for word in words:
            widget = self.widgets.get(word)
            if widget is not None:
                widget.place(word)

    def refresh(self, words: Sequence[FallingWord]) -> None:
        for word in words:
            widget = self.widgets.get(word)
            if widget is not None:
                widget.refresh(word)

    def discard(self, words: Sequence[FallingWord]) -> None:
        for word in words:
            widget = self.widgets.pop(word, None)
            if widget is not None:
                widget.destroy()


class TkScorePanel:
    """Score readout whose label is recreated on every update."""

    def __init__(self, parent: tk.Widget) -> None:
        self.parent = parent
        self.label: Optional[tk.Label] = None
        self.level_var = tk.StringVar(master=parent, value="")
        tk.Label(
            parent,
            textvariable=self.level_var,
            font=("Segoe UI", 12),
            foreground=TEXT_FOREGROUND,
            background=PANEL_BACKGROUND,
        ).pack(side=tk.RIGHT, padx=16)

    def show(self, score: int = 0, level: int = 0) -> None:
        self.update(score, level)

    def update(self, score: int, level: int) -> None:
        if self.label is not None:
            self.label.destroy()
        self.label = tk.Label(
            self.parent,
            text=str(score),
            font=SCORE_FONT,
            foreground=TYPED_FOREGROUND,
            background=PANEL_BACKGROUND,
        )
        self.label.pack(side=tk.LEFT, padx=16)
        self.level_var.set(f"Level {level + 1}")


class TkTypingApp:
    """Own the window, the two ``after`` timers and the key binding."""

    def __init__(self, root: tk.Tk, game: TypingGame) -> None:
        self.root = root
        self.root.title(f"MecaTRON-3000 {APP_VERSION}")
        self.root.resizable(False, False)
        self.game = game

        panel = tk.Frame(root, background=PANEL_BACKGROUND, height=48)
        panel.pack(side=tk.TOP, fill=tk.X)
        panel.pack_propagate(False)
        self.play_area = tk.Frame(
            root, width=APP_WIDTH, height=PLAY_AREA_HEIGHT, background=BACKGROUND
        )
        self.play_area.pack(side=tk.TOP)

        self.renderer = TkWordRenderer(self.play_area)
        self.score_panel = TkScorePanel(panel)
        self._spawn_job: Optional[str] = None
        self._move_job: Optional[str] = None
        self.root.protocol("WM_DELETE_WINDOW", self.close)

    # --- Lifecycle -----------------------------------------------------------
    def start(self) -> None:
        logger.info("Starting...")
        self.score_panel.show(self.game.score, self.game.level)
        config = self.game.config
        self._spawn_job = self.root.after(config.spawn_interval_ms, self._on_spawn_timer)
        self._move_job = self.root.after(config.move_interval_ms, self._on_move_timer)
        self.root.bind("<KeyPress>", self._on_key)

    def stop(self) -> None:
        if self._spawn_job is None and self._move_job is None:
            return
        for job in (self._spawn_job, self._move_job):
            if job is not None:
                self.root.after_cancel(job)
        self._spawn_job = None
        self._move_job = None
        self.root.unbind("<KeyPress>")
        logger.info("Stopped: %s", self.game.summary())

    def close(self) -> None:
        self.stop()
        self.root.destroy()

    # --- Timer and key handlers ------------------------------------------------
    def _on_spawn_timer(self) -> None:
        self._spawn_job = self.root.after(self.game.config.spawn_interval_ms, self._on_spawn_timer)
        word = self.game.spawn_word()
        self.renderer.render(word)

    def _on_move_timer(self) -> None:
        self._move_job = self.root.after(self.game.config.move_interval_ms, self._on_move_timer)
        expired = self.game.advance_words()
        self.renderer.discard(expired)
        self.renderer.advance(self.game.words)

    def _on_key(self, event: tk.Event[tk.Misc]) -> None:
        if event.keysym == "Escape":
            self.close()
        elif is_typing_key(event.char):
            self.press_key(event.char)

    def press_key(self, key: str) -> KeyPressOutcome:
        outcome = self.game.press_key(key)
        self.renderer.discard(outcome.completed)
        self.renderer.refresh(outcome.changed)
        if outcome.score_changed:
            self.score_panel.update(self.game.score, self.game.level)
        return outcome


def main(argv: Optional[Sequence[str]] = None) -> None:
    game = parse_game("MecaTRON-3000 falling-words typing game (tkinter)", argv)
    root = tk.Tk()
    app = TkTypingApp(root, game)
    app.start()
    try:
        root.mainloop()
    finally:
        app.stop()


if __name__ == "__main__":
    main()
