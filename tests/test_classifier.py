from __future__ import annotations

import pytest

from parkranger.classifier import RULES, bottom_lines, classify_pane_output
from parkranger.models import AgentStatus


def _pad(*tail: str, filler: int = 20) -> str:
    """Pane text with `filler` lines of scrollback above the tail."""
    lines = [f"output line {i}" for i in range(filler)]
    lines.extend(tail)
    return "\n".join(lines)


def test_bottom_lines():
    assert bottom_lines(["a", "b"], 5) == ["a", "b"]
    assert bottom_lines(["a", "b", "c"], 2) == ["b", "c"]


def test_rule_order():
    assert [r.name for r in RULES] == [
        "search-overlay",
        "history-search",
        "waiting",
        "busy",
        "idle",
    ]


@pytest.mark.parametrize("output", ["", "\n\n\n", "   \n  \n"])
def test_blank_is_unknown(output):
    assert classify_pane_output(output) == (AgentStatus.UNKNOWN, False)


def test_search_overlay():
    output = "some stuff\n⌕ Search…\nmore stuff"
    assert classify_pane_output(output) == (AgentStatus.IDLE, False)


def test_search_overlay_beats_everything():
    output = "⌕ Search\nDo you want to proceed?\nesc to interrupt\n✢ Working"
    assert classify_pane_output(output) == (AgentStatus.IDLE, False)


def test_search_overlay_anywhere_in_scrollback():
    output = "⌕ old search\n" + _pad("Claude Code", "❯ ", "? for /help")
    assert classify_pane_output(output) == (AgentStatus.IDLE, False)


def test_history_search():
    output = "bck-search: something\nctrl+r to toggle"
    assert classify_pane_output(output) == (AgentStatus.UNKNOWN, False)


def test_history_search_beats_waiting():
    output = "Do you want to proceed?\nCtrl+R to toggle"
    assert classify_pane_output(output) == (AgentStatus.UNKNOWN, False)


def test_history_search_above_window_ignored():
    output = "ctrl+r to toggle\n" + _pad("Working...", "esc to interrupt", filler=12)
    assert classify_pane_output(output) == (AgentStatus.BUSY, True)


@pytest.mark.parametrize(
    "output",
    [
        "Do you want to proceed?\n❯ Yes",
        "Press esc to cancel",
        "No, and tell Claude what to do differently",
        "Would you like me to continue?",
        "DO YOU WANT to make this edit?",
    ],
)
def test_waiting(output):
    assert classify_pane_output(output) == (AgentStatus.WAITING, True)


def test_waiting_after_busy_wins():
    output = "✢ Thinking…\nesc to interrupt\nDo you want to proceed?\n1. Yes"
    assert classify_pane_output(output) == (AgentStatus.WAITING, True)


def test_stale_question_above_bottom_five():
    output = _pad("Do you want to proceed?", "a", "b", "c", "d", "esc to interrupt")
    assert classify_pane_output(output) == (AgentStatus.BUSY, True)


def test_negative_option_within_bottom_ten():
    output = _pad(
        "No, and tell Claude what to do differently", "1", "2", "3", "4", "5", "6"
    )
    assert classify_pane_output(output) == (AgentStatus.WAITING, True)


def test_negative_option_above_bottom_ten():
    output = _pad("No, and tell Claude what to do differently", *"abcdefghij")
    assert classify_pane_output(output) == (AgentStatus.UNKNOWN, False)


@pytest.mark.parametrize(
    "output",
    [
        "Working on it...\nesc to interrupt",
        "Processing...\nctrl+c to interrupt",
        "✢ Compacting conversation",
        "↓ 20.1k tokens · thought for 288s",
        "Reading files\n1200 tokens · thinking",
    ],
)
def test_busy(output):
    assert classify_pane_output(output) == (AgentStatus.BUSY, True)


def test_spinner_window_is_fifteen_lines():
    inside = _pad("✢ Working", *[f"l{i}" for i in range(14)])
    outside = _pad("✢ Working", *[f"l{i}" for i in range(15)])
    assert classify_pane_output(inside) == (AgentStatus.BUSY, True)
    assert classify_pane_output(outside) == (AgentStatus.UNKNOWN, False)


def test_stale_interrupt_hint_ignored():
    output = _pad("esc to interrupt", "a", "b", "c", "d", "e")
    assert classify_pane_output(output) == (AgentStatus.UNKNOWN, False)


def test_trailing_blank_lines_stripped():
    output = "Working...\nesc to interrupt" + "\n" * 10
    assert classify_pane_output(output) == (AgentStatus.BUSY, True)


def test_idle_with_branding():
    output = "Claude Code v1.0.0\n❯ type a message\n/help for commands"
    assert classify_pane_output(output) == (AgentStatus.IDLE, True)


def test_idle_prompt_and_hints_without_branding():
    output = _pad("❯ ", "? for shortcuts · shift+tab to cycle")
    assert classify_pane_output(output) == (AgentStatus.IDLE, True)


def test_idle_model_bar_and_prompt():
    output = _pad("❯ ", "Opus 4 · ctx: 12%")
    assert classify_pane_output(output) == (AgentStatus.IDLE, True)


def test_prompt_glyph_is_not_enough():
    assert classify_pane_output(_pad("❯ ")) == (AgentStatus.UNKNOWN, False)


def test_shell_output_is_unknown():
    output = "$ ls\nfile1.go  file2.go"
    assert classify_pane_output(output) == (AgentStatus.UNKNOWN, False)
