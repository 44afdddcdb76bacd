from __future__ import annotations

import click

from parkranger.cli.info import _open_worktree
from parkranger.cli.items import create_and_open, delete_worktree, merge_worktree
from parkranger.cli.utils import (
    RepoContext,
    _pick_worktree,
    _reported_errors,
    _resolve_repo,
)
from parkranger.live import Detector
from parkranger.sessions import list_sessions
from parkranger.tui import MenuChoice, MenuItem, WorktreeMenuApp


def _menu_items(ctx: RepoContext, detectors: dict[str, Detector]) -> list[MenuItem]:
    """Fresh status for every worktree; detectors persist across iterations."""
    orch = ctx.orchestrator()
    items = []
    for wt in ctx.worktrees:
        detector = detectors.get(wt.path)
        if detector is None:
            detector = detectors[wt.path] = orch.detector_for(wt)
        sessions = list_sessions(wt.path, ctx.config.projects_dir)
        items.append(MenuItem(wt, detector.detect(), len(sessions)))
    return items


def _dispatch(
    ctx: RepoContext, choice: MenuChoice, detectors: dict[str, Detector]
) -> None:
    if choice.action == "open" and choice.name:
        with _reported_errors():
            wt = ctx.find(choice.name)
        _open_worktree(ctx, wt, detectors.get(wt.path))
    elif choice.action == "new":
        name = click.prompt("Branch name", default="", show_default=False).strip()
        if name:
            create_and_open(ctx, name)
    elif choice.action == "merge":
        name = _pick_worktree(ctx.worktrees, "Merge which worktree?")
        if name:
            merge_worktree(ctx, name)
    elif choice.action == "delete":
        name = _pick_worktree(ctx.worktrees, "Delete which worktree?")
        if name:
            delete_worktree(ctx, name)


def run_interactive() -> None:
    """Show the worktree menu until the user quits.

    Everything is re-read on each pass since windows, sessions and git state
    change while the user is away. An open from outside tmux replaces this
    process, which ends the loop.
    """
    detectors: dict[str, Detector] = {}
    while True:
        ctx = _resolve_repo()
        choice = WorktreeMenuApp(ctx.repo_name, _menu_items(ctx, detectors)).run()
        if choice is None:
            return
        try:
            _dispatch(ctx, choice, detectors)
        except click.ClickException as e:
            click.echo(f"Error: {e.format_message()}", err=True)
        except click.Abort:
            continue
