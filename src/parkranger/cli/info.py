from __future__ import annotations

import click

from parkranger.cli.utils import (
    RepoContext,
    _finish_open,
    _reported_errors,
    _require_tmux,
    _resolve_repo,
)
from parkranger.display import format_age, format_session_info, format_status
from parkranger.live import Detector
from parkranger.models import Worktree
from parkranger.sessions import list_sessions


def _open_worktree(
    ctx: RepoContext, wt: Worktree, detector: Detector | None = None
) -> None:
    from parkranger.tui import pick_session

    _require_tmux()
    with _reported_errors():
        result = ctx.orchestrator().open(wt, pick_session, detector)
    _finish_open(result)


@click.command("ls")
def list_cmd() -> None:
    """List worktrees with agent and git status."""
    ctx = _resolve_repo()
    orch = ctx.orchestrator()

    click.echo(f" {ctx.repo_name}\n")
    for wt in ctx.worktrees:
        query = orch.query(wt)
        info = format_session_info(query.live, len(query.sessions))
        status = format_status(wt)
        marker = "* " if wt.is_main else "  "

        line = f" {marker}{wt.name:<24}"
        if info:
            line += f"  {info}"
        if status:
            line += f"  {status}"
        click.echo(line)


@click.command("open")
@click.argument("name")
def open_cmd(name: str) -> None:
    """Open or attach the tmux window for worktree NAME."""
    ctx = _resolve_repo()
    with _reported_errors():
        wt = ctx.find(name)
    _open_worktree(ctx, wt)


@click.command("sessions")
@click.argument("name")
def sessions_cmd(name: str) -> None:
    """List past agent sessions recorded in worktree NAME."""
    ctx = _resolve_repo()
    with _reported_errors():
        wt = ctx.find(name)

    sessions = list_sessions(wt.path, ctx.config.projects_dir)
    if not sessions:
        click.echo("No sessions found.")
        return

    for s in sessions:
        branch = s.git_branch or "-"
        click.echo(
            f"{s.id:<36}  {branch:<20}  {format_age(s.mtime):<10}  {s.first_prompt}"
        )
