"""Thin stateless wrappers around the git CLI. Every call takes a directory."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when a git command fails. Carries git's stderr."""

    def __init__(self, args: list[str], stderr: str) -> None:
        self.git_args = args
        self.stderr = stderr
        msg = "git " + " ".join(args)
        if stderr:
            msg += f": {stderr}"
        super().__init__(msg)


class MergeConflictError(GitError):
    """Raised when a merge failed; the merge has already been aborted."""


def _run(cwd: str | Path, *args: str) -> str:
    """Run git in cwd, returning trimmed stdout."""
    logger.debug("git %s (in %s)", " ".join(args), cwd)
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True
    )
    if result.returncode != 0:
        raise GitError(list(args), result.stderr.strip())
    return result.stdout.strip()


def repo_root(path: str | Path) -> str:
    """Return the top-level directory of the checkout containing path."""
    return _run(path, "rev-parse", "--show-toplevel")


def main_repo_root(path: str | Path) -> str:
    """Resolve the main repository root, even from inside a linked worktree.

    A linked worktree has a `.git` file ("gitdir: <repo>/.git/worktrees/<name>")
    instead of a directory.
    """
    root = Path(repo_root(path))
    git_path = root / ".git"

    if git_path.is_dir():
        return str(root)

    try:
        line = git_path.read_text().strip()
    except OSError as e:
        raise GitError(["rev-parse", "--show-toplevel"], str(e)) from e
    if not line.startswith("gitdir: "):
        raise GitError([], f"unexpected .git file content: {line}")

    gitdir = Path(line.removeprefix("gitdir: "))
    if not gitdir.is_absolute():
        gitdir = root / gitdir

    # <repo>/.git/worktrees/<name> -> <repo>
    main_root = gitdir.parent.parent.parent
    if not (main_root / ".git").exists():
        raise GitError([], f"resolved main root {main_root} is not a git repo")
    return str(main_root)


def repo_name(root: str) -> str:
    return Path(root).name


def current_branch(path: str | Path) -> str:
    """Current branch name, or "" when HEAD is detached."""
    return _run(path, "branch", "--show-current")


def branch_status(path: str | Path) -> tuple[int, int]:
    """Return (ahead, behind) against the upstream. (0, 0) without upstream."""
    try:
        out = _run(path, "rev-list", "--left-right", "--count", "HEAD...@{upstream}")
    except GitError as e:
        stderr = e.stderr.lower()
        if "no upstream" in stderr or "unknown revision" in stderr:
            return 0, 0
        raise

    parts = out.split()
    if len(parts) != 2:
        raise GitError(["rev-list"], f"unexpected rev-list output: {out!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as e:
        raise GitError(["rev-list"], f"unexpected rev-list output: {out!r}") from e


def is_dirty(path: str | Path) -> bool:
    """Check if a working tree has uncommitted changes."""
    return _run(path, "status", "--porcelain") != ""


def default_branch(root: str | Path) -> str:
    """Return the default branch name (origin's HEAD, then main or master)."""
    try:
        # refs/remotes/origin/main -> main
        ref = _run(root, "symbolic-ref", "refs/remotes/origin/HEAD")
        return ref.removeprefix("refs/remotes/origin/")
    except GitError:
        pass

    for branch in ("main", "master"):
        try:
            _run(root, "rev-parse", "--verify", f"refs/heads/{branch}")
            return branch
        except GitError:
            continue

    raise GitError(["symbolic-ref"], "cannot determine default branch")


def list_remote_branches(root: str | Path) -> list[str]:
    """Branch names on origin, without the "origin/" prefix or HEAD."""
    out = _run(root, "branch", "-r", "--format=%(refname:short)")
    branches = []
    for line in out.splitlines():
        name = line.strip()
        if not name.startswith("origin/"):
            continue
        name = name.removeprefix("origin/")
        if name and name != "HEAD":
            branches.append(name)
    return branches


def merge_branch(root: str | Path, source: str, target: str) -> None:
    """Merge source into target in the main checkout.

    Raises MergeConflictError after aborting the merge if it fails.
    """
    _run(root, "checkout", target)
    try:
        _run(root, "merge", source)
    except GitError as e:
        try:
            _run(root, "merge", "--abort")
        except GitError:
            logger.debug("merge --abort failed in %s", root)
        raise MergeConflictError(e.git_args, e.stderr) from e


def delete_branch(root: str | Path, branch: str, force: bool = False) -> None:
    """Delete a branch. Without force git refuses unmerged branches."""
    _run(root, "branch", "-D" if force else "-d", branch)
