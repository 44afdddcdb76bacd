from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AgentStatus(Enum):
    UNKNOWN = "unknown"
    IDLE = "idle"
    BUSY = "busy"
    WAITING = "waiting"

    def __str__(self) -> str:
        return self.value


@dataclass
class Worktree:
    name: str  # basename of path
    path: str  # absolute path
    branch: str  # empty when detached
    is_main: bool = False  # first entry of `git worktree list`
    ahead: int = 0
    behind: int = 0
    dirty: bool = False


@dataclass(frozen=True)
class Session:
    """A persisted agent conversation log belonging to one worktree."""

    id: str
    cwd: str
    first_prompt: str  # short excerpt for list labels
    full_prompt: str  # long excerpt for previews
    mtime: datetime
    git_branch: str = ""


@dataclass
class LiveInfo:
    exists: bool = False  # tmux window exists
    has_agent: bool = False  # agent UI detected in the pane
    status: AgentStatus = AgentStatus.UNKNOWN
    pane_content: str = ""  # raw capture, for previews
