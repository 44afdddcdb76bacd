"""Classify an agent's state from captured terminal text.

Status indicators in the agent UI are drawn at the bottom of the pane, so
each rule only looks at a trailing window of lines. Scrollback above that
window may still hold stale prompts or spinners and is never trusted.

Rules are evaluated in order and the first match wins:

1. search overlay glyph anywhere         -> idle, not an agent
2. history search toggle hint (bottom 10) -> unknown, not an agent
3. permission / question prompts          -> waiting
4. spinner, activity stats, interrupt hint -> busy
5. agent UI chrome (prompt, hints, model)  -> idle
6. anything else                           -> unknown
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple

from parkranger.models import AgentStatus

logger = logging.getLogger(__name__)

SEARCH_GLYPH = "\u2315"  # ⌕
SPINNER_GLYPH = "\u2722"  # ✢
PROMPT_GLYPH = "\u276f"  # ❯

# e.g. "↓ 20.1k tokens · thought for 288s" or "tokens · thinking"
BUSY_ACTIVITY_RE = re.compile(r"\d+\.?\d*k?\s+tokens?\s*·\s*(?:thinking|thought)")


def bottom_lines(lines: list[str], n: int) -> list[str]:
    """Return the last n lines (all of them if there are fewer)."""
    if len(lines) <= n:
        return lines
    return lines[-n:]


@dataclass(frozen=True)
class PaneText:
    """Captured pane text sliced into the trailing windows the rules use.

    ``bot*`` fields are lowercased for phrase matching; ``raw*`` fields keep
    the original text for glyph checks.
    """

    raw: str
    lower: str
    bot5: str
    bot10: str
    raw5: str
    raw15: str

    @classmethod
    def from_output(cls, output: str) -> PaneText | None:
        lines = output.split("\n")
        # tmux capture-pane pads with trailing blank lines
        while lines and not lines[-1].strip():
            lines.pop()
        if not lines:
            return None

        b5 = "\n".join(bottom_lines(lines, 5))
        b10 = "\n".join(bottom_lines(lines, 10))
        return cls(
            raw=output,
            lower=output.lower(),
            bot5=b5.lower(),
            bot10=b10.lower(),
            raw5=b5,
            raw15="\n".join(bottom_lines(lines, 15)),
        )


def _search_overlay(p: PaneText) -> bool:
    return SEARCH_GLYPH in p.raw


def _history_search(p: PaneText) -> bool:
    return "ctrl+r to toggle" in p.bot10


def _waiting(p: PaneText) -> bool:
    # "esc to cancel" and question text belong to an active dialog (bottom 5).
    # The negative option only renders while the selection is open (bottom 10).
    return (
        "esc to cancel" in p.bot5
        or "no, and tell claude what to do differently" in p.bot10
        or "do you want" in p.bot5
        or "would you like" in p.bot5
    )


def _busy(p: PaneText) -> bool:
    if SPINNER_GLYPH in p.raw15:
        return True
    if BUSY_ACTIVITY_RE.search(p.bot10):
        return True
    return "esc to interrupt" in p.bot5 or "ctrl+c to interrupt" in p.bot5


def _has_prompt(p: PaneText) -> bool:
    return (
        PROMPT_GLYPH in p.raw5
        or "type a message" in p.bot10
        or "type your message" in p.bot10
    )


def _has_hints(p: PaneText) -> bool:
    return "/help" in p.bot10 or "shift+" in p.bot10


def _has_model_bar(p: PaneText) -> bool:
    return any(marker in p.bot5 for marker in ("ctx:", "opus", "sonnet", "haiku"))


def _idle(p: PaneText) -> bool:
    prompt = _has_prompt(p)
    hints = _has_hints(p)
    if "claude" in p.lower and (prompt or hints):
        return True
    # Header scrolled off but the input area is still on screen
    if prompt and hints:
        return True
    return _has_model_bar(p) and prompt


class Rule(NamedTuple):
    name: str
    matches: Callable[[PaneText], bool]
    status: AgentStatus
    is_agent: bool


RULES: tuple[Rule, ...] = (
    Rule("search-overlay", _search_overlay, AgentStatus.IDLE, False),
    Rule("history-search", _history_search, AgentStatus.UNKNOWN, False),
    Rule("waiting", _waiting, AgentStatus.WAITING, True),
    Rule("busy", _busy, AgentStatus.BUSY, True),
    Rule("idle", _idle, AgentStatus.IDLE, True),
)


def classify_pane_output(output: str) -> tuple[AgentStatus, bool]:
    """Return (status, is_agent_ui) for captured pane text."""
    pane = PaneText.from_output(output)
    if pane is None:
        return AgentStatus.UNKNOWN, False

    for rule in RULES:
        if rule.matches(pane):
            logger.debug("pane matched rule %s", rule.name)
            return rule.status, rule.is_agent

    return AgentStatus.UNKNOWN, False
