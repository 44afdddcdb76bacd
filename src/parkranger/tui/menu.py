from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Label, OptionList, Static
from textual.widgets.option_list import Option

from parkranger.display import plural_sessions
from parkranger.models import AgentStatus, LiveInfo, Worktree

STATUS_COLORS = {
    AgentStatus.IDLE: "green",
    AgentStatus.BUSY: "blue",
    AgentStatus.WAITING: "yellow",
    AgentStatus.UNKNOWN: "bright_black",
}


@dataclass
class MenuItem:
    worktree: Worktree
    live: LiveInfo
    session_count: int


@dataclass(frozen=True)
class MenuChoice:
    action: str  # open, new, merge, delete
    name: str | None = None  # worktree name, for open


def render_row(item: MenuItem, name_width: int) -> Text:
    """One menu row: name, live status, session count and git badges."""
    row = Text(f"{item.worktree.name:<{name_width}}  ")

    status_width = 10
    if item.live.has_agent:
        label = str(item.live.status)
        row.append(f"● {label}", style=STATUS_COLORS[item.live.status])
        row.append(" " * max(status_width - 2 - len(label), 0))
    elif item.live.exists:
        row.append("● live", style="dim")
        row.append(" " * (status_width - 6))
    else:
        row.append(" " * status_width)
    row.append("  ")

    sessions = plural_sessions(item.session_count) if item.session_count else ""
    row.append(f"{sessions:<12}", style="dim")

    badges = Text()
    if item.worktree.ahead:
        badges.append(f"↑{item.worktree.ahead} ", style="dim")
    if item.worktree.behind:
        badges.append(f"↓{item.worktree.behind} ", style="dim")
    if item.worktree.dirty:
        badges.append("✱", style="yellow")
    row.append_text(badges)
    return row


class WorktreeMenuApp(App[MenuChoice | None]):
    """Overview of every worktree of a repo."""

    CSS = """
    #menu {
        padding: 1 2;
        border: round $panel-lighten-2;
        height: auto;
    }

    #title {
        text-style: bold;
        margin: 0 0 1 0;
    }

    #rows {
        height: auto;
        border: none;
    }

    #hints {
        margin: 1 0 0 0;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q,escape", "quit_menu", "Quit"),
        Binding("n", "choose('new')", "New"),
        Binding("m", "choose('merge')", "Merge"),
        Binding("d", "choose('delete')", "Delete"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    def __init__(self, repo_name: str, items: list[MenuItem], **kwargs) -> None:
        super().__init__(**kwargs)
        self.repo_name = repo_name
        self.items = items

    def compose(self) -> ComposeResult:
        name_width = max([12, *(len(i.worktree.name) for i in self.items)])
        with Vertical(id="menu"):
            yield Label(f"parkranger · {self.repo_name}", id="title")
            yield OptionList(
                *[
                    Option(render_row(item, name_width), id=item.worktree.name)
                    for item in self.items
                ],
                id="rows",
            )
            yield Static("n new   m merge   d delete   q quit", id="hints")

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.exit(MenuChoice("open", self.items[event.option_index].worktree.name))

    def action_choose(self, action: str) -> None:
        self.exit(MenuChoice(action))

    def action_cursor_down(self) -> None:
        self.query_one("#rows", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#rows", OptionList).action_cursor_up()

    def action_quit_menu(self) -> None:
        self.exit(None)
