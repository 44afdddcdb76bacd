from __future__ import annotations

import logging

import click

from parkranger.cli.admin import config
from parkranger.cli.info import list_cmd, open_cmd, sessions_cmd
from parkranger.cli.interactive import run_interactive
from parkranger.cli.items import delete, merge, new


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """parkranger: parallel git worktrees, each with a tmux window and an agent.

    Run without a command for the interactive worktree menu.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        run_interactive()


# Register worktree commands
cli.add_command(new)
cli.add_command(merge)
cli.add_command(delete)

# Register info commands
cli.add_command(list_cmd)
cli.add_command(open_cmd)
cli.add_command(sessions_cmd)

cli.add_command(config)

__all__ = ["cli"]
