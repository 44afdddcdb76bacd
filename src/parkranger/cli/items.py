from __future__ import annotations

import click

from parkranger import git, tmux
from parkranger.cli.info import _open_worktree
from parkranger.cli.utils import (
    RepoContext,
    _pick_base_branch,
    _reported_errors,
    _resolve_repo,
)
from parkranger.worktree import add_worktree, remove_worktree


def _kill_window(ctx: RepoContext, worktree_name: str) -> None:
    session = tmux.session_name(ctx.repo_name, ctx.config.session_prefix)
    window = tmux.window_name(worktree_name)
    if tmux.window_exists(session, window):
        click.echo(f"Killing window {tmux.window_target(session, window)}")
        tmux.kill_window(session, window)


def create_and_open(ctx: RepoContext, name: str, base: str | None = None) -> None:
    if base is None:
        base = _pick_base_branch(ctx.main_root)

    click.echo(f"Creating worktree '{name}' from origin/{base}")
    with _reported_errors():
        wt = add_worktree(
            ctx.main_root, name, f"origin/{base}", ctx.config.worktree_base_dir
        )
    _open_worktree(ctx, wt)


def merge_worktree(ctx: RepoContext, name: str) -> None:
    with _reported_errors():
        wt = ctx.find(name)
        if wt.is_main:
            raise click.ClickException("Cannot merge the main worktree.")
        target = git.default_branch(ctx.main_root)

        if not click.confirm(f"Merge {wt.branch} into {target}?"):
            click.echo("Aborted.")
            return

        click.echo(f"Merging {wt.branch} into {target}")
        git.merge_branch(ctx.main_root, wt.branch, target)

        if not click.confirm("Delete worktree and branch?"):
            click.echo("Merge complete. Worktree kept.")
            return

        _kill_window(ctx, wt.name)
        remove_worktree(ctx.main_root, wt.path)
        git.delete_branch(ctx.main_root, wt.branch)

    click.echo("Merge complete. Worktree and branch deleted.")


def delete_worktree(ctx: RepoContext, name: str) -> None:
    with _reported_errors():
        wt = ctx.find(name)
        if wt.is_main:
            raise click.ClickException("Cannot delete the main worktree.")

        if not click.confirm(f"Delete worktree '{name}' and kill its tmux window?"):
            click.echo("Aborted.")
            return

        _kill_window(ctx, wt.name)
        click.echo(f"Removing worktree {wt.path}")
        remove_worktree(ctx.main_root, wt.path)

    try:
        git.delete_branch(ctx.main_root, wt.branch)
    except git.GitError as e:
        click.echo(f"Warning: could not delete branch {wt.branch}: {e.stderr}")
    else:
        click.echo(f"Deleted branch {wt.branch}")


@click.command()
@click.argument("name")
@click.option("--base", default=None, help="Origin branch to start from.")
def new(name: str, base: str | None) -> None:
    """Create a worktree for new branch NAME and open it."""
    create_and_open(_resolve_repo(), name, base)


@click.command()
@click.argument("name")
def merge(name: str) -> None:
    """Merge worktree NAME's branch into the default branch."""
    merge_worktree(_resolve_repo(), name)


@click.command()
@click.argument("name")
def delete(name: str) -> None:
    """Kill the tmux window and remove worktree NAME."""
    delete_worktree(_resolve_repo(), name)
