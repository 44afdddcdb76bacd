from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

from parkranger import tmux
from parkranger.classifier import classify_pane_output
from parkranger.models import AgentStatus, LiveInfo

logger = logging.getLogger(__name__)

CAPTURE_LINES = 30


def _capture_agent_pane(session: str, window: str, lines: int) -> str | None:
    """Return the agent pane capture, or None if the window doesn't exist."""
    if not tmux.window_exists(session, window):
        return None
    target = tmux.pane_target(session, window, tmux.AGENT_PANE)
    return tmux.capture_pane_bottom(target, lines)


def detect_live(session: str, window: str, lines: int = CAPTURE_LINES) -> LiveInfo:
    """One-shot liveness snapshot of a worktree window.

    Without change tracking, a streaming agent whose output matches no
    pattern reports UNKNOWN. Use a Detector when polling repeatedly.
    """
    output = _capture_agent_pane(session, window, lines)
    if output is None:
        return LiveInfo()
    if not output:
        return LiveInfo(exists=True)

    status, has_agent = classify_pane_output(output)
    return LiveInfo(
        exists=True, has_agent=has_agent, status=status, pane_content=output
    )


@dataclass
class Detector:
    """Liveness detection with content-hash change tracking.

    Create one per worktree and reuse it across polls. Never share an
    instance between worktrees.
    """

    session: str
    window: str
    lines: int = CAPTURE_LINES
    prev_hash: bytes | None = None
    prev_status: AgentStatus = AgentStatus.UNKNOWN

    @property
    def has_history(self) -> bool:
        return self.prev_hash is not None

    def detect(self) -> LiveInfo:
        output = _capture_agent_pane(self.session, self.window, self.lines)
        if output is None:
            return LiveInfo()
        if not output:
            return LiveInfo(exists=True)

        status, has_agent = classify_pane_output(output)

        # Inconclusive patterns but changing content: the agent is streaming.
        digest = hashlib.sha256(output.encode()).digest()
        if (
            status is AgentStatus.UNKNOWN
            and self.has_history
            and digest != self.prev_hash
        ):
            logger.debug(
                "%s:%s content changed, assuming busy", self.session, self.window
            )
            status = AgentStatus.BUSY
            has_agent = True

        self.prev_hash = digest
        self.prev_status = status

        return LiveInfo(
            exists=True, has_agent=has_agent, status=status, pane_content=output
        )
