"""Decide how to open a worktree's agent window, and make it so.

For a requested worktree the orchestrator gathers the live window state and
the session catalog, decides whether a choice is needed, and then either
attaches to the running window, relaunches the agent inside it, or builds a
new window (editor pane + agent pane). Attaching itself is left to the
caller: outside tmux it replaces the current process.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from parkranger import tmux
from parkranger.config import Config, get_config
from parkranger.display import format_live, session_label
from parkranger.live import Detector, detect_live
from parkranger.models import LiveInfo, Session, Worktree
from parkranger.sessions import list_sessions

logger = logging.getLogger(__name__)

LIVE = "live"
RESUME = "resume"
FRESH = "fresh"


@dataclass(frozen=True)
class Selection:
    kind: str  # live | resume | fresh
    session_id: str | None = None

    @classmethod
    def live(cls) -> Selection:
        return cls(LIVE)

    @classmethod
    def resume(cls, session_id: str) -> Selection:
        return cls(RESUME, session_id)

    @classmethod
    def fresh(cls) -> Selection:
        return cls(FRESH)


@dataclass
class PickerOption:
    label: str
    selection: Selection
    session: Session | None = None
    live: LiveInfo | None = None


@dataclass
class SessionQuery:
    """Everything known about a worktree at the time of the request."""

    repo_name: str
    worktree: Worktree
    session_name: str
    window_name: str
    live: LiveInfo
    sessions: list[Session] = field(default_factory=list)

    @property
    def title(self) -> str:
        return f"{self.repo_name} / {self.worktree.name}"

    def immediate_selection(self) -> Selection | None:
        """The decision when there is nothing to choose between."""
        if not self.live.exists and not self.sessions:
            return Selection.fresh()
        if self.live.exists and not self.sessions:
            return Selection.live()
        return None

    def options(self) -> list[PickerOption]:
        """Live window (if any), catalog sessions newest first, then new."""
        opts: list[PickerOption] = []
        if self.live.exists:
            label = "● LIVE"
            if self.live.has_agent:
                label += f" ({self.live.status})"
            opts.append(PickerOption(label, Selection.live(), live=self.live))
        for s in self.sessions:
            opts.append(
                PickerOption(session_label(s), Selection.resume(s.id), session=s)
            )
        opts.append(PickerOption("[n] New session", Selection.fresh()))
        return opts


@dataclass(frozen=True)
class AttachAction:
    target: str
    # True outside tmux: attaching hands this process over to tmux for good.
    replace_process: bool


@dataclass
class OpenResult:
    cancelled: bool = False
    selection: Selection | None = None
    attach: AttachAction | None = None
    created_window: bool = False


Picker = Callable[[SessionQuery], Selection | None]


class SessionOrchestrator:
    def __init__(
        self, repo_name: str, main_root: str, config: Config | None = None
    ) -> None:
        self.repo_name = repo_name
        self.main_root = main_root
        self.config = config if config is not None else get_config()
        self.session_name = tmux.session_name(repo_name, self.config.session_prefix)

    def window_for(self, worktree: Worktree) -> str:
        return tmux.window_name(worktree.name)

    def detector_for(self, worktree: Worktree) -> Detector:
        return Detector(
            self.session_name, self.window_for(worktree), self.config.capture_lines
        )

    def query(
        self, worktree: Worktree, detector: Detector | None = None
    ) -> SessionQuery:
        window = self.window_for(worktree)
        if detector is not None:
            live = detector.detect()
        else:
            live = detect_live(self.session_name, window, self.config.capture_lines)
        sessions = list_sessions(worktree.path, self.config.projects_dir)
        logger.debug(
            "%s: %s, %d sessions",
            worktree.name,
            format_live(live) or "no window",
            len(sessions),
        )
        return SessionQuery(
            repo_name=self.repo_name,
            worktree=worktree,
            session_name=self.session_name,
            window_name=window,
            live=live,
            sessions=sessions,
        )

    def resolve(self, query: SessionQuery, selection: Selection) -> OpenResult:
        """Carry out a selection and return the attach the caller must perform."""
        session, window = query.session_name, query.window_name
        wt = query.worktree
        action = AttachAction(
            target=tmux.window_target(session, window),
            replace_process=not tmux.is_inside_tmux(),
        )
        agent_pane = tmux.pane_target(session, window, tmux.AGENT_PANE)

        if selection.kind == LIVE:
            return OpenResult(selection=selection, attach=action)

        launch = self.config.agent_launch_command(selection.session_id)

        if tmux.window_exists(session, window):
            tmux.send_keys(agent_pane, launch)
            return OpenResult(selection=selection, attach=action)

        if tmux.ensure_session(session, self.main_root):
            self._start_dashboard(session)

        logger.info("creating window %s in %s", action.target, wt.path)
        tmux.create_window(session, window, wt.path)
        tmux.send_keys(
            tmux.pane_target(session, window, tmux.EDITOR_PANE),
            f"{self.config.editor} .",
        )
        tmux.split_pane(action.target, wt.path)
        tmux.send_keys(agent_pane, launch)
        return OpenResult(selection=selection, attach=action, created_window=True)

    def _start_dashboard(self, session: str) -> None:
        if not self.config.dashboard_command:
            return
        try:
            tmux.send_keys(
                tmux.window_target(session, tmux.DASHBOARD_WINDOW),
                self.config.dashboard_command,
            )
        except tmux.TmuxError as e:
            logger.warning("could not start dashboard: %s", e)

    def open(
        self, worktree: Worktree, pick: Picker, detector: Detector | None = None
    ) -> OpenResult:
        """Query, ask `pick` when a choice is needed, then resolve.

        `pick` returning None means the user backed out; nothing is changed.
        """
        query = self.query(worktree, detector)
        selection = query.immediate_selection()
        if selection is None:
            selection = pick(query)
            if selection is None:
                return OpenResult(cancelled=True)
        return self.resolve(query, selection)
