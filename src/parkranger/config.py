from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "parkranger"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_PROJECTS_DIR = Path.home() / ".claude" / "projects"

DEFAULT_CONFIG = """\
[tmux]
# Repo sessions are named "<prefix>-<repo>", one window per worktree.
session_prefix = "pr"
# Number of trailing pane lines captured for agent status detection.
capture_lines = 30
# Command launched in the "dashboard" window when the repo session is created.
dashboard_command = "parkranger"

[agent]
command = "claude"
# Extra args passed to the agent when launching in a worktree pane.
# e.g. "--dangerously-skip-permissions" to skip the trust-folder prompt.
# args = "--dangerously-skip-permissions"

[editor]
# Defaults to $EDITOR, then nvim.
# command = "nvim"

[sessions]
# Where the agent stores its per-directory conversation logs.
# projects_dir = "~/.claude/projects"

[worktrees]
# Defaults to <repo parent>/.worktrees/<repo>/<name>
# base_dir = "~/worktrees"
"""


@dataclass
class Config:
    session_prefix: str
    capture_lines: int
    dashboard_command: str
    agent_command: str  # binary used to start the agent
    agent_args: str  # extra CLI args for the agent
    editor: str
    projects_dir: Path
    worktree_base_dir: Path | None = None

    @classmethod
    def load(cls) -> Config:
        if CONFIG_FILE.exists():
            with open(CONFIG_FILE, "rb") as f:
                data = tomllib.load(f)
        else:
            data = {}

        tmux = data.get("tmux", {})
        agent = data.get("agent", {})
        editor = data.get("editor", {})
        sessions = data.get("sessions", {})
        worktrees = data.get("worktrees", {})

        base_dir = worktrees.get("base_dir")

        capture_lines = int(tmux.get("capture_lines", 30))
        if capture_lines < 1:
            raise ValueError(
                f"tmux.capture_lines must be at least 1, got {capture_lines}."
            )

        return cls(
            session_prefix=tmux.get("session_prefix", "pr"),
            capture_lines=capture_lines,
            dashboard_command=tmux.get("dashboard_command", "parkranger"),
            agent_command=agent.get("command", "claude"),
            agent_args=agent.get("args", ""),
            editor=editor.get("command") or os.environ.get("EDITOR") or "nvim",
            projects_dir=Path(
                sessions.get("projects_dir", str(DEFAULT_PROJECTS_DIR))
            ).expanduser(),
            worktree_base_dir=Path(base_dir).expanduser() if base_dir else None,
        )

    def agent_launch_command(self, resume_id: str | None = None) -> str:
        """Shell command that starts the agent, optionally resuming a session."""
        cmd = self.agent_command
        if self.agent_args:
            cmd += f" {self.agent_args}"
        if resume_id:
            cmd += f" --resume {resume_id}"
        return cmd


def get_config() -> Config:
    return Config.load()


def ensure_config() -> Path:
    """Create default config file if it doesn't exist. Returns config path."""
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        CONFIG_FILE.write_text(DEFAULT_CONFIG)
    return CONFIG_FILE
