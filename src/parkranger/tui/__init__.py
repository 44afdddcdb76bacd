"""Textual front ends: the worktree menu and the session picker."""

from parkranger.tui.menu import MenuChoice, MenuItem, WorktreeMenuApp
from parkranger.tui.picker import SessionPickerApp, pick_session

__all__ = [
    "MenuChoice",
    "MenuItem",
    "SessionPickerApp",
    "WorktreeMenuApp",
    "pick_session",
]
