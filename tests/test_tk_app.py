from __future__ import annotations

import random
from types import SimpleNamespace
from unittest.mock import Mock, call

import pytest

tk = pytest.importorskip("tkinter")

from mecatron_api import FallingWord, GameConfig, WordBank
from mecatron_game import TypingGame
from mecatron_tk import TkScorePanel, TkTypingApp, TkWordRenderer, WordWidget


def make_headless_app(game: TypingGame) -> TkTypingApp:
    app = TkTypingApp.__new__(TkTypingApp)
    app.root = Mock()
    app.root.after.side_effect = ["after#spawn", "after#move"]
    app.game = game
    app.renderer = Mock()
    app.score_panel = Mock()
    app._spawn_job = None
    app._move_job = None
    return app


@pytest.fixture
def game(bank: WordBank) -> TypingGame:
    return TypingGame(bank, GameConfig(spawn_interval_ms=2000, move_interval_ms=250), random.Random(5))


def test_start_schedules_both_timers(game: TypingGame) -> None:
    app = make_headless_app(game)

    app.start()

    app.root.after.assert_has_calls(
        [call(2000, app._on_spawn_timer), call(250, app._on_move_timer)]
    )
    app.root.bind.assert_called_once_with("<KeyPress>", app._on_key)
    app.score_panel.show.assert_called_once_with(0, 0)


def test_stop_cancels_pending_jobs(game: TypingGame) -> None:
    app = make_headless_app(game)
    app.start()

    app.stop()
    app.stop()

    assert app.root.after_cancel.call_args_list == [call("after#spawn"), call("after#move")]
    app.root.unbind.assert_called_once_with("<KeyPress>")


def test_timers_reschedule_themselves(game: TypingGame) -> None:
    app = make_headless_app(game)
    app.root.after.side_effect = None
    app.root.after.return_value = "after#next"

    app._on_spawn_timer()
    app._on_move_timer()

    assert app._spawn_job == "after#next"
    assert app._move_job == "after#next"
    assert len(game.words) == 1
    assert game.words[0].top == game.config.fall_step
    app.renderer.render.assert_called_once()
    app.renderer.advance.assert_called_once_with(game.words)


def test_key_events_route_to_the_game(game: TypingGame) -> None:
    app = make_headless_app(game)
    remo = FallingWord("remo", left_percent=5)
    mi = FallingWord("mi", left_percent=60)
    game.words.extend([remo, mi])

    app._on_key(SimpleNamespace(keysym="r", char="r"))
    app.renderer.refresh.assert_called_with([remo])

    app._on_key(SimpleNamespace(keysym="m", char="m"))
    app.renderer.refresh.assert_called_with([mi, remo])

    app._on_key(SimpleNamespace(keysym="i", char="i"))
    app.renderer.discard.assert_called_with([mi])
    app.score_panel.update.assert_called_once_with(1, 0)


def test_escape_closes_the_window(game: TypingGame) -> None:
    app = make_headless_app(game)
    app.start()

    app._on_key(SimpleNamespace(keysym="Escape", char="\x1b"))

    app.root.after_cancel.assert_called()
    app.root.destroy.assert_called_once()


def test_word_renderer_tracks_widgets_per_record(monkeypatch) -> None:
    created = []

    def fake_widget(parent, word):
        widget = Mock()
        created.append(widget)
        return widget

    monkeypatch.setattr("mecatron_tk.WordWidget", fake_widget)
    renderer = TkWordRenderer(Mock())
    first = FallingWord("ju", left_percent=0)
    second = FallingWord("ju", left_percent=30)

    renderer.render(first)
    renderer.render(second)
    renderer.advance([first, second])
    renderer.discard([first])

    assert len(created) == 2
    created[0].destroy.assert_called_once()
    created[1].destroy.assert_not_called()
    assert list(renderer.widgets) == [second]


@pytest.mark.parametrize("char", ["\x08", "\x7f"])
def test_backspace_and_delete_are_ignored(game: TypingGame, char: str) -> None:
    app = make_headless_app(game)
    juan = FallingWord("juan", left_percent=5)
    game.words.append(juan)
    app._on_key(SimpleNamespace(keysym="j", char="j"))
    app.renderer.reset_mock()

    app._on_key(SimpleNamespace(keysym="BackSpace", char=char))

    assert juan.typed == "j"
    app.renderer.refresh.assert_not_called()


@pytest.fixture
def root():
    try:
        window = tk.Tk()
    except tk.TclError as exc:
        pytest.skip(f"No display available: {exc}")
    window.withdraw()
    yield window
    window.destroy()


def test_score_panel_recreates_its_label(root) -> None:
    panel = TkScorePanel(tk.Frame(root))
    panel.show()
    first = panel.label
    assert first.cget("text") == "0"

    panel.update(4, 1)

    assert panel.label is not first
    assert not first.winfo_exists()
    assert panel.label.cget("text") == "4"
    assert panel.level_var.get() == "Level 2"


def test_word_widget_refresh_splits_typed_and_remaining(root) -> None:
    word = FallingWord("dedo", left_percent=40)
    widget = WordWidget(tk.Frame(root), word)
    assert (widget.typed_label.cget("text"), widget.remaining_label.cget("text")) == ("", "dedo")

    word.type_letter("d")
    word.type_letter("e")
    widget.refresh(word)

    assert widget.typed_label.cget("text") == "de"
    assert widget.remaining_label.cget("text") == "do"

    widget.destroy()
    assert not widget.typed_label.winfo_exists()
