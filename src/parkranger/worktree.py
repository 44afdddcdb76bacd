from __future__ import annotations

import logging
import re
from pathlib import Path

from parkranger import git
from parkranger.models import Worktree

logger = logging.getLogger(__name__)


class WorktreeNotFoundError(LookupError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"worktree '{name}' not found")


def parse_worktree_list(output: str) -> list[Worktree]:
    """Parse `git worktree list --porcelain` output, in listing order."""
    worktrees: list[Worktree] = []
    current: Worktree | None = None

    for line in output.splitlines():
        line = line.strip()
        if line.startswith("worktree "):
            path = line.removeprefix("worktree ")
            current = Worktree(name=Path(path).name, path=path, branch="")
        elif line.startswith("branch ") and current is not None:
            # branch refs/heads/feat/x -> feat/x
            current.branch = line.removeprefix("branch ").removeprefix("refs/heads/")
        elif not line and current is not None:
            worktrees.append(current)
            current = None

    # No trailing blank line after the last entry
    if current is not None:
        worktrees.append(current)

    return worktrees


def list_worktrees(repo_root: str) -> list[Worktree]:
    """List all worktrees of a repo, enriched with ahead/behind/dirty status.

    The first entry is the main checkout. A failing status query on one
    worktree leaves that entry at its defaults.
    """
    output = git._run(repo_root, "worktree", "list", "--porcelain")
    worktrees = parse_worktree_list(output)

    for i, wt in enumerate(worktrees):
        wt.is_main = i == 0
        try:
            wt.ahead, wt.behind = git.branch_status(wt.path)
        except (git.GitError, OSError) as e:
            logger.debug("branch status failed for %s: %s", wt.path, e)
        try:
            wt.dirty = git.is_dirty(wt.path)
        except (git.GitError, OSError) as e:
            logger.debug("dirty check failed for %s: %s", wt.path, e)

    return worktrees


def sanitize_branch_name(branch: str) -> str:
    """Directory name for a branch: "feat/x" -> "feat-x"."""
    name = branch.replace("/", "-")
    name = re.sub(r"[^\w\-.]", "", name)
    name = name.strip("-.")
    return name or "worktree"


def default_path(repo_root: str, name: str, base_dir: Path | None = None) -> Path:
    """Where a new worktree lives: <base>/<repo>/<name>, outside the repo.

    The base defaults to <repo parent>/.worktrees.
    """
    root = Path(repo_root)
    base = base_dir if base_dir is not None else root.parent / ".worktrees"
    return base / root.name / name


def add_worktree(
    repo_root: str, branch: str, base_ref: str, base_dir: Path | None = None
) -> Worktree:
    """Create a worktree on a new branch starting at base_ref.

    The directory is named after the sanitized branch, and the returned
    name is that directory name, as `list_worktrees` reports it.
    """
    path = default_path(repo_root, sanitize_branch_name(branch), base_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    git._run(repo_root, "worktree", "add", "-b", branch, str(path), base_ref)

    return Worktree(name=path.name, path=str(path), branch=branch)


def remove_worktree(repo_root: str, path: str, force: bool = False) -> None:
    """Remove a worktree. Without force git refuses dirty worktrees."""
    args = ["worktree", "remove", path]
    if force:
        args.append("--force")
    git._run(repo_root, *args)


def find_by_name(worktrees: list[Worktree], name: str) -> Worktree:
    for wt in worktrees:
        if wt.name == name:
            return wt
    raise WorktreeNotFoundError(name)
