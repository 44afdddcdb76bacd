from __future__ import annotations

from unittest.mock import MagicMock, patch

import click
import pytest

from parkranger.cli.interactive import _dispatch, _menu_items, run_interactive
from parkranger.cli.utils import RepoContext
from parkranger.config import Config
from parkranger.models import AgentStatus, Worktree
from parkranger.tui import MenuChoice


@pytest.fixture
def ctx(tmp_path):
    config = Config(
        session_prefix="pr",
        capture_lines=30,
        dashboard_command="parkranger",
        agent_command="claude",
        agent_args="",
        editor="nvim",
        projects_dir=tmp_path / "projects",
    )
    return RepoContext(
        main_root="/src/myrepo",
        repo_name="myrepo",
        worktrees=[
            Worktree("myrepo", "/src/myrepo", "main", is_main=True),
            Worktree("feat", "/wt/feat", "feat"),
        ],
        config=config,
    )


def test_menu_items_keep_detectors(ctx):
    detectors = {}
    with patch("parkranger.tmux.window_exists", return_value=True), \
         patch("parkranger.tmux.capture_pane_bottom", side_effect=["a", "x", "b", "x"]):
        first = _menu_items(ctx, detectors)
        second = _menu_items(ctx, detectors)

    assert set(detectors) == {"/src/myrepo", "/wt/feat"}
    assert [i.live.status for i in first] == [AgentStatus.UNKNOWN, AgentStatus.UNKNOWN]
    # main pane changed between polls, feat pane did not
    assert second[0].live.status == AgentStatus.BUSY
    assert second[1].live.status == AgentStatus.UNKNOWN
    assert detectors["/wt/feat"].window == "feat"


def test_dispatch_open_passes_detector(ctx):
    detector = MagicMock()
    with patch("parkranger.cli.interactive._open_worktree") as mock_open:
        _dispatch(ctx, MenuChoice("open", "feat"), {"/wt/feat": detector})
    mock_open.assert_called_once_with(ctx, ctx.worktrees[1], detector)


def test_dispatch_open_unknown(ctx):
    with pytest.raises(click.ClickException, match="'gone' not found"):
        _dispatch(ctx, MenuChoice("open", "gone"), {})


def test_dispatch_new(ctx):
    with patch("click.prompt", return_value=" feat-z "), \
         patch("parkranger.cli.interactive.create_and_open") as mock_create:
        _dispatch(ctx, MenuChoice("new"), {})
    mock_create.assert_called_once_with(ctx, "feat-z")


def test_dispatch_new_empty_name(ctx):
    with patch("click.prompt", return_value=""), \
         patch("parkranger.cli.interactive.create_and_open") as mock_create:
        _dispatch(ctx, MenuChoice("new"), {})
    mock_create.assert_not_called()


def test_dispatch_delete_picks_worktree(ctx):
    with patch("parkranger.cli.interactive._pick_worktree", return_value="feat"), \
         patch("parkranger.cli.interactive.delete_worktree") as mock_delete:
        _dispatch(ctx, MenuChoice("delete"), {})
    mock_delete.assert_called_once_with(ctx, "feat")


def test_run_interactive_loops_until_quit(ctx, capsys):
    choices = [MenuChoice("merge"), MenuChoice("delete"), None]
    app = MagicMock()
    app.run.side_effect = choices

    with patch("parkranger.cli.interactive._resolve_repo", return_value=ctx), \
         patch("parkranger.cli.interactive._menu_items", return_value=[]), \
         patch("parkranger.cli.interactive.WorktreeMenuApp", return_value=app), \
         patch(
             "parkranger.cli.interactive._dispatch",
             side_effect=[click.ClickException("merge failed"), click.Abort(), None],
         ) as mock_dispatch:
        run_interactive()

    assert mock_dispatch.call_count == 2
    assert "Error: merge failed" in capsys.readouterr().err
