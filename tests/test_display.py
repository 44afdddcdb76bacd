from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from parkranger.display import (
    format_age,
    format_live,
    format_session_info,
    format_status,
    session_header,
    session_label,
    session_preview_body,
)
from parkranger.models import AgentStatus, LiveInfo, Session, Worktree

NOW = datetime(2026, 3, 1, 12, 0, 0)


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=10), "just now"),
        (timedelta(minutes=5), "5m ago"),
        (timedelta(minutes=59, seconds=59), "59m ago"),
        (timedelta(hours=3), "3h ago"),
        (timedelta(hours=30), "yesterday"),
        (timedelta(days=4), "4d ago"),
    ],
)
def test_format_age(delta, expected):
    assert format_age(NOW - delta, NOW) == expected


def test_format_live():
    assert format_live(LiveInfo()) == ""
    assert format_live(LiveInfo(exists=True)) == "● live"
    live = LiveInfo(exists=True, has_agent=True, status=AgentStatus.IDLE)
    assert format_live(live) == "● idle"


def test_format_session_info():
    busy = LiveInfo(exists=True, has_agent=True, status=AgentStatus.BUSY)
    assert format_session_info(busy, 3) == "● busy, 3 sessions"
    assert format_session_info(LiveInfo(), 1) == "1 session"
    assert format_session_info(LiveInfo(exists=True), 0) == "● live"
    assert format_session_info(LiveInfo(), 0) == ""


def test_format_status():
    assert format_status(Worktree("feat", "/p", "feat")) == ""
    wt = Worktree("feat-x", "/p", "feat/x", ahead=2, behind=1, dirty=True)
    assert format_status(wt) == "(feat/x, 2 ahead, 1 behind, dirty)"


def test_session_rendering():
    s = Session(
        id="0123456789abcdef",
        cwd="/p",
        first_prompt="fix the login bug",
        full_prompt="fix the login bug\nin auth.py",
        mtime=NOW - timedelta(hours=2),
        git_branch="feat/login",
    )
    assert session_label(s, NOW).startswith("01234567  fix the login bug")
    assert session_label(s, NOW).endswith("2h ago")
    assert session_header(s, NOW) == "01234567 · feat/login · 2h ago"
    assert session_preview_body(s) == "fix the login bug\nin auth.py"


def test_session_without_prompt():
    s = Session("abcdef0123", "/p", "", "", NOW)
    assert session_label(s, NOW).startswith("abcdef01  abcdef01")
    assert session_header(s, NOW) == "abcdef01 · just now"
    assert session_preview_body(s) == "(no prompt)"
