from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import click

from parkranger import git, tmux
from parkranger.config import Config, get_config
from parkranger.models import Worktree
from parkranger.orchestrator import OpenResult, SessionOrchestrator
from parkranger.worktree import WorktreeNotFoundError, find_by_name, list_worktrees


@dataclass
class RepoContext:
    main_root: str
    repo_name: str
    worktrees: list[Worktree]
    config: Config

    def orchestrator(self) -> SessionOrchestrator:
        return SessionOrchestrator(self.repo_name, self.main_root, self.config)

    def find(self, name: str) -> Worktree:
        return find_by_name(self.worktrees, name)


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Turn adapter errors into ClickExceptions (stderr, exit code 1)."""
    try:
        yield
    except (git.GitError, tmux.TmuxError, WorktreeNotFoundError) as e:
        raise click.ClickException(str(e)) from e


def _resolve_repo() -> RepoContext:
    """Detect the repo from the cwd. Worktrees resolve to the main checkout."""
    try:
        root = git.repo_root(os.getcwd())
    except (git.GitError, FileNotFoundError) as e:
        raise click.ClickException("Not inside a git repository.") from e

    try:
        config = get_config()
    except ValueError as e:
        raise click.ClickException(f"Invalid config: {e}") from e

    with _reported_errors():
        main_root = git.main_repo_root(root)
        worktrees = list_worktrees(main_root)

    return RepoContext(
        main_root=main_root,
        repo_name=git.repo_name(main_root),
        worktrees=worktrees,
        config=config,
    )


def _require_tmux() -> None:
    if not tmux.is_available():
        raise click.ClickException("tmux is not installed.")


def _finish_open(result: OpenResult) -> None:
    """Report the outcome of an open and perform the attach.

    Outside tmux the attach replaces this process and does not return.
    """
    if result.cancelled:
        click.echo("Cancelled.")
        return
    assert result.attach is not None
    if result.created_window:
        click.echo(f"Created window {result.attach.target}")
    else:
        click.echo(f"Attaching to {result.attach.target}")
    with _reported_errors():
        tmux.attach(result.attach.target, replace_process=result.attach.replace_process)


def _pick_worktree(worktrees: list[Worktree], title: str) -> str | None:
    """Prompt for a non-main worktree name. None when there is nothing to pick."""
    names = [wt.name for wt in worktrees if not wt.is_main]
    if not names:
        click.echo("No worktrees to select (only main).")
        return None
    return click.prompt(title, type=click.Choice(names))


def _pick_base_branch(main_root: str) -> str:
    """Choose the origin branch to start from, default branch first."""
    try:
        branches = git.list_remote_branches(main_root)
    except git.GitError:
        branches = []

    if not branches:
        with _reported_errors():
            return git.default_branch(main_root)

    try:
        default = git.default_branch(main_root)
    except git.GitError:
        default = ""
    if default in branches:
        branches.remove(default)
        branches.insert(0, default)

    if len(branches) == 1:
        return branches[0]
    return click.prompt(
        "Base branch (origin)", type=click.Choice(branches), default=branches[0]
    )
