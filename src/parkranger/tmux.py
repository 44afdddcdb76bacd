from __future__ import annotations

import logging
import os
import re
import subprocess

logger = logging.getLogger(__name__)

DASHBOARD_WINDOW = "dashboard"
EDITOR_PANE = 0
AGENT_PANE = 1


class TmuxError(Exception):
    """Raised when a tmux command fails."""

    def __init__(self, args: list[str], stderr: str) -> None:
        self.args_list = args
        self.stderr = stderr
        msg = " ".join(args)
        if stderr:
            msg += f": {stderr}"
        super().__init__(msg)


def _run(args: list[str], check: bool = True) -> subprocess.CompletedProcess[str]:
    logger.debug("running %s", " ".join(args))
    result = subprocess.run(args, capture_output=True, text=True)
    if check and result.returncode != 0:
        raise TmuxError(args, result.stderr.strip())
    return result


def sanitize_name(name: str) -> str:
    """Replace characters tmux treats as target separators (dots and colons)."""
    return re.sub(r"[.:]", "-", name)


def session_name(repo: str, prefix: str = "pr") -> str:
    """Name of the tmux session holding every window for a repo."""
    return sanitize_name(f"{prefix}-{repo}")


def window_name(worktree: str) -> str:
    return sanitize_name(worktree)


def window_target(session: str, window: str) -> str:
    return f"{session}:{window}"


def pane_target(session: str, window: str, pane: int) -> str:
    return f"{window_target(session, window)}.{pane}"


def session_exists(name: str) -> bool:
    """Check if a tmux session exists (False when no server is running)."""
    try:
        result = _run(["tmux", "has-session", "-t", name], check=False)
    except FileNotFoundError:
        return False
    return result.returncode == 0


def window_exists(session: str, window: str) -> bool:
    """Check if a named window exists in a session."""
    try:
        result = _run(
            ["tmux", "list-windows", "-t", session, "-F", "#{window_name}"],
            check=False,
        )
    except FileNotFoundError:
        return False
    if result.returncode != 0:
        return False
    return window in result.stdout.splitlines()


def create_session(name: str, working_dir: str, first_window: str) -> None:
    """Create a detached tmux session whose first window is first_window."""
    _run(
        [
            "tmux",
            "new-session",
            "-d",
            "-s",
            name,
            "-n",
            first_window,
            "-c",
            working_dir,
        ]
    )


def ensure_session(name: str, working_dir: str) -> bool:
    """Create the repo session with its dashboard window if missing.

    Returns True if the session was created by this call.
    """
    if session_exists(name):
        return False
    create_session(name, working_dir, DASHBOARD_WINDOW)
    return True


def create_window(session: str, window: str, working_dir: str) -> None:
    """Create a detached window in an existing session."""
    _run(
        [
            "tmux",
            "new-window",
            "-d",
            "-t",
            f"{session}:",
            "-n",
            window,
            "-c",
            working_dir,
        ]
    )


def kill_window(session: str, window: str) -> None:
    _run(["tmux", "kill-window", "-t", window_target(session, window)], check=False)


def split_pane(target: str, working_dir: str) -> None:
    """Split a window side by side; the new pane gets the next index."""
    _run(["tmux", "split-window", "-h", "-t", target, "-c", working_dir])


def send_keys(target: str, keys: str) -> None:
    """Send keys to a tmux target (session:window.pane) followed by Enter."""
    _run(["tmux", "send-keys", "-t", target, keys, "Enter"])


def capture_pane_bottom(target: str, lines: int) -> str:
    """Capture the last `lines` non-padding lines of a pane.

    Blank rows below the cursor are dropped before counting. Returns ""
    (not an error) if the pane or session doesn't exist.
    """
    try:
        result = _run(["tmux", "capture-pane", "-p", "-J", "-t", target], check=False)
    except FileNotFoundError:
        return ""
    if result.returncode != 0:
        return ""
    captured = result.stdout.rstrip().split("\n")
    return "\n".join(captured[-lines:])


def is_inside_tmux() -> bool:
    return bool(os.environ.get("TMUX"))


def attach(target: str, replace_process: bool = False) -> None:
    """Attach or switch to a tmux target.

    Inside tmux this switches the current client and returns. Outside tmux,
    replace_process execs `tmux attach-session` in place of this process;
    otherwise it runs attach-session and waits for the client to detach.
    """
    if is_inside_tmux():
        _run(["tmux", "switch-client", "-t", target])
    elif replace_process:
        os.execvp("tmux", ["tmux", "attach-session", "-t", target])
    else:
        subprocess.run(["tmux", "attach-session", "-t", target])


def is_available() -> bool:
    """Check if tmux is installed."""
    try:
        _run(["tmux", "-V"])
        return True
    except (FileNotFoundError, TmuxError):
        return False
