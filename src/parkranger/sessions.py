"""Discover agent conversation logs that belong to a worktree.

The agent keeps one JSONL file per conversation under
``<projects_dir>/<encoded cwd>/<session id>.jsonl``. The directory name is a
lossy encoding of the working directory, so two different paths can share a
directory; every log is verified against its recorded ``cwd`` before it is
listed.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from itertools import islice
from pathlib import Path
from typing import Any

from parkranger.config import DEFAULT_PROJECTS_DIR
from parkranger.models import Session

logger = logging.getLogger(__name__)

HEAD_RECORDS = 20
SHORT_PROMPT_LEN = 80
FULL_PROMPT_LEN = 500

BOILERPLATE_PREFIXES = ("[request interrupted", "resume")


@dataclass
class SessionMeta:
    """Metadata from the leading records of a conversation log."""

    id: str
    cwd: str = ""
    first_prompt: str = ""
    full_prompt: str = ""
    git_branch: str = ""


def encode_path(abs_path: str) -> str:
    """Encode a path the way the agent names its project directories.

    Both "/" and "." become "-". This is an external contract: changing it
    would hide every pre-existing log.
    """
    return abs_path.replace("/", "-").replace(".", "-")


def project_dir(worktree_path: str, projects_dir: Path | None = None) -> Path:
    """Return the log directory for a worktree path."""
    root = projects_dir if projects_dir is not None else DEFAULT_PROJECTS_DIR
    return root / encode_path(os.path.normpath(worktree_path))


def paths_match(a: str, b: str) -> bool:
    """Compare two paths after normalization (trailing slashes, `..`, `//`)."""
    return os.path.normpath(a) == os.path.normpath(b)


def truncate(text: str, max_len: int) -> str:
    """Collapse newlines to spaces and cut to max_len chars with an ellipsis."""
    text = text.replace("\n", " ").strip()
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def truncate_preview(text: str, max_len: int) -> str:
    """Cut to max_len chars with an ellipsis, keeping newlines."""
    text = text.strip()
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def is_boilerplate(text: str) -> bool:
    """True for messages that say nothing about what the session was for."""
    return text.strip().lower().startswith(BOILERPLATE_PREFIXES)


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for block in content:
            if (
                isinstance(block, dict)
                and block.get("type") == "text"
                and isinstance(block.get("text"), str)
                and block["text"]
            ):
                return block["text"]
    return ""


def extract_message_text(message: Any) -> tuple[str, str]:
    """Return (short, full) excerpts of a ``{role, content}`` message.

    Content is either a plain string or a list of typed blocks, in which case
    the first text block is used. Both excerpts come from the same text.
    """
    if not isinstance(message, dict):
        return "", ""
    text = _content_text(message.get("content"))
    if not text:
        return "", ""
    return truncate(text, SHORT_PROMPT_LEN), truncate_preview(text, FULL_PROMPT_LEN)


def parse_session_meta(file_path: Path, worktree_path: str) -> SessionMeta | None:
    """Read the head of a log and return its metadata.

    Returns None when the log has no recorded cwd or its cwd is a different
    directory than worktree_path. Raises OSError if the file can't be read.
    """
    meta = SessionMeta(id=file_path.stem)

    with open(file_path, encoding="utf-8", errors="replace") as f:
        for line in islice(f, HEAD_RECORDS):
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(entry, dict):
                continue

            cwd = entry.get("cwd")
            if cwd and isinstance(cwd, str) and not meta.cwd:
                meta.cwd = cwd

            branch = entry.get("gitBranch")
            if branch and isinstance(branch, str) and not meta.git_branch:
                meta.git_branch = branch

            if entry.get("type") == "user" and not meta.first_prompt:
                short, full = extract_message_text(entry.get("message"))
                if short and not is_boilerplate(short):
                    meta.first_prompt = short
                    meta.full_prompt = full

    if not meta.cwd:
        logger.debug("skipping %s: no cwd recorded", file_path)
        return None
    if not paths_match(meta.cwd, worktree_path):
        logger.debug("skipping %s: cwd %s is another directory", file_path, meta.cwd)
        return None
    return meta


def list_sessions(
    worktree_path: str, projects_dir: Path | None = None
) -> list[Session]:
    """List conversation logs recorded in worktree_path, newest first.

    A missing log directory yields an empty list. Logs that can't be read
    or whose cwd doesn't match are skipped.
    """
    directory = project_dir(worktree_path, projects_dir)
    if not directory.is_dir():
        return []

    sessions: list[Session] = []
    for path in directory.iterdir():
        if path.suffix != ".jsonl" or not path.is_file():
            continue
        try:
            meta = parse_session_meta(path, worktree_path)
            mtime = path.stat().st_mtime
        except OSError as e:
            logger.debug("skipping %s: %s", path, e)
            continue
        if meta is None:
            continue

        sessions.append(
            Session(
                id=meta.id,
                cwd=meta.cwd,
                first_prompt=meta.first_prompt,
                full_prompt=meta.full_prompt,
                mtime=datetime.fromtimestamp(mtime),
                git_branch=meta.git_branch,
            )
        )

    sessions.sort(key=lambda s: (-s.mtime.timestamp(), s.id))
    return sessions
