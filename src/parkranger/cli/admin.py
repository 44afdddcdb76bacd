from __future__ import annotations

import os
import subprocess

import click

from parkranger.config import ensure_config, get_config


def _editor() -> str:
    # A config that fails to load must still be editable
    try:
        return get_config().editor
    except ValueError:
        return os.environ.get("EDITOR") or "nvim"


@click.command()
@click.option("--edit", is_flag=True, help="Open the config file in the editor.")
@click.option("--path", "show_path", is_flag=True, help="Print the config file path.")
def config(edit: bool, show_path: bool) -> None:
    """Show the config file, creating it with defaults on first use."""
    config_path = ensure_config()

    if show_path:
        click.echo(str(config_path))
    elif edit:
        subprocess.run([_editor(), str(config_path)])
    else:
        click.echo(config_path.read_text())
