from __future__ import annotations

from datetime import datetime

from parkranger.models import LiveInfo, Session, Worktree


def format_age(t: datetime, now: datetime | None = None) -> str:
    """Return a human-readable age like '5m ago' or 'yesterday'."""
    if now is None:
        now = datetime.now()
    seconds = (now - t).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    if seconds < 2 * 86400:
        return "yesterday"
    return f"{int(seconds // 86400)}d ago"


def plural_sessions(count: int) -> str:
    return f"{count} session" if count == 1 else f"{count} sessions"


def format_live(live: LiveInfo) -> str:
    """'● busy' when the agent is recognised, '● live' for a bare window."""
    if live.has_agent:
        return f"● {live.status}"
    if live.exists:
        return "● live"
    return ""


def format_session_info(live: LiveInfo, session_count: int) -> str:
    """E.g. '● idle, 3 sessions' or '1 session'."""
    parts = []
    live_text = format_live(live)
    if live_text:
        parts.append(live_text)
    if session_count > 0:
        parts.append(plural_sessions(session_count))
    return ", ".join(parts)


def format_status(wt: Worktree) -> str:
    """E.g. '(feat/x, 2 ahead, dirty)'; empty when there is nothing to say."""
    parts = []
    if wt.branch and wt.branch != wt.name:
        parts.append(wt.branch)
    if wt.ahead > 0:
        parts.append(f"{wt.ahead} ahead")
    if wt.behind > 0:
        parts.append(f"{wt.behind} behind")
    if wt.dirty:
        parts.append("dirty")
    if not parts:
        return ""
    return "(" + ", ".join(parts) + ")"


def short_id(session: Session) -> str:
    return session.id[:8]


def session_label(session: Session, now: datetime | None = None) -> str:
    prompt = session.first_prompt or short_id(session)
    return f"{short_id(session)}  {prompt:<40}  {format_age(session.mtime, now)}"


def session_header(session: Session, now: datetime | None = None) -> str:
    header = short_id(session)
    if session.git_branch:
        header += f" · {session.git_branch}"
    return header + f" · {format_age(session.mtime, now)}"


def session_preview_body(session: Session) -> str:
    return session.full_prompt or session.first_prompt or "(no prompt)"
