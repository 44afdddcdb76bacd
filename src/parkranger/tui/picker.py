from __future__ import annotations

import textwrap

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Label, OptionList, Static
from textual.widgets.option_list import Option

from parkranger.display import session_header, session_preview_body
from parkranger.orchestrator import PickerOption, Selection, SessionQuery

PREVIEW_SEPARATOR = "  \u00b7\u00b7\u00b7"
MIN_PREVIEW_WIDTH = 20
MIN_BODY_LINES = 3


def wrap_lines(body: str, width: int) -> list[str]:
    """Word-wrap each line of body to width, keeping blank lines."""
    lines: list[str] = []
    for line in body.split("\n"):
        lines.extend(textwrap.wrap(line, width) or [""])
    return lines


def elide_middle(lines: list[str], max_lines: int) -> tuple[list[str], list[str]]:
    """Split lines that don't fit into (head, tail) around a separator line.

    The tail is empty when everything fits. The separator takes one line and
    the head gets the smaller half of the rest.
    """
    if len(lines) <= max_lines:
        return lines, []
    top = max((max_lines - 1) // 2, 1)
    bottom = max(max_lines - 1 - top, 1)
    return lines[:top], lines[-bottom:]


def render_preview(
    option: PickerOption, width: int | None = None, height: int | None = None
) -> Text:
    """Preview text for the highlighted option.

    With a panel size the session excerpt is wrapped to width, and when it is
    taller than the panel its start and end are shown around a separator.
    """
    if option.live is not None:
        status = "Session running"
        if option.live.has_agent:
            status = f"Agent is {option.live.status}"
        text = Text("● LIVE", style="dim")
        text.append(f"\n\n{status}")
        return text

    if option.session is None:
        text = Text("[n] New session", style="dim")
        text.append("\n\nStart a fresh agent session")
        return text

    text = Text(session_header(option.session), style="dim")
    text.append("\n\n")
    body = session_preview_body(option.session)
    if width is None or height is None:
        text.append(body)
        return text

    lines = wrap_lines(body, max(width, MIN_PREVIEW_WIDTH))
    # header and blank line take two rows
    head, tail = elide_middle(lines, max(height - 2, MIN_BODY_LINES))
    text.append("\n".join(head))
    if tail:
        text.append("\n")
        text.append(PREVIEW_SEPARATOR, style="dim")
        text.append("\n" + "\n".join(tail))
    return text


class PreviewPanel(Static):
    """Preview of one picker option, fitted to the panel size."""

    def __init__(self, option: PickerOption, **kwargs) -> None:
        super().__init__(render_preview(option), **kwargs)
        self.option = option

    def show(self, option: PickerOption) -> None:
        self.option = option
        self._fit()

    def on_resize(self) -> None:
        self._fit()

    def _fit(self) -> None:
        width, height = self.content_size
        if width and height:
            self.update(render_preview(self.option, width, height))
        else:
            self.update(render_preview(self.option))


class SessionPickerApp(App[Selection | None]):
    """Choose between the live window, a past session, or a new one."""

    CSS = """
    #picker {
        padding: 0 1;
    }

    #title {
        text-style: bold;
        margin: 0 0 1 0;
    }

    #options {
        height: auto;
        max-height: 50%;
    }

    #preview {
        height: 1fr;
        border: round $panel-lighten-2;
        padding: 0 1;
        margin: 1 0 0 0;
    }
    """

    BINDINGS = [
        Binding("q,escape", "cancel", "Cancel"),
        Binding("n", "new", "New session"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    def __init__(self, query: SessionQuery, **kwargs) -> None:
        super().__init__(**kwargs)
        self.session_query = query
        self.picker_options = query.options()

    def compose(self) -> ComposeResult:
        with Vertical(id="picker"):
            yield Label(self.session_query.title, id="title")
            yield OptionList(
                *[Option(o.label, id=str(i)) for i, o in enumerate(self.picker_options)],
                id="options",
            )
            yield PreviewPanel(self.picker_options[0], id="preview")

    def on_option_list_option_highlighted(
        self, event: OptionList.OptionHighlighted
    ) -> None:
        option = self.picker_options[event.option_index]
        self.query_one("#preview", PreviewPanel).show(option)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.exit(self.picker_options[event.option_index].selection)

    def action_cursor_down(self) -> None:
        self.query_one("#options", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#options", OptionList).action_cursor_up()

    def action_new(self) -> None:
        self.exit(Selection.fresh())

    def action_cancel(self) -> None:
        self.exit(None)


def pick_session(query: SessionQuery) -> Selection | None:
    """Run the picker; None when the user backs out."""
    return SessionPickerApp(query).run()
