"""Parsing for `git status --porcelain=v2 --branch`."""

from __future__ import annotations

import logging

from githistory_core.models import RepoStatus

logger = logging.getLogger(__name__)

STATUS_ARGS = ["status", "--porcelain=v2", "--branch", "--untracked-files=normal"]

# Number of space-separated fields before the path, per entry type.
_FIELDS_BEFORE_PATH = {"1": 8, "2": 9, "u": 10}


def _entry_path(kind: str, line: str) -> str | None:
    parts = line.split(" ", _FIELDS_BEFORE_PATH[kind])
    if len(parts) != _FIELDS_BEFORE_PATH[kind] + 1:
        return None
    path = parts[-1]
    if kind == "2":
        # "<path>\t<origPath>" for renames and copies
        path = path.split("\t", 1)[0]
    return path


def parse_status(text: str) -> RepoStatus:
    status = RepoStatus(branch=None, is_clean=True)
    entries = 0

    for line in text.splitlines():
        if line.startswith("# branch.head "):
            head = line[len("# branch.head ") :]
            status.branch = None if head == "(detached)" else head
        elif line.startswith("# branch.ab "):
            try:
                ahead, behind = line[len("# branch.ab ") :].split()
                status.ahead = int(ahead.lstrip("+"))
                status.behind = abs(int(behind))
            except ValueError:
                logger.debug("Ignoring malformed ahead/behind line %r", line)
        elif line.startswith("? "):
            status.untracked.append(line[2:])
            entries += 1
        elif line[:2] in ("1 ", "2 ", "u "):
            kind = line[0]
            path = _entry_path(kind, line)
            if path is None:
                logger.debug("Ignoring malformed status entry %r", line)
                continue
            entries += 1
            index_state, worktree_state = line[2], line[3]
            if kind == "u":
                status.modified.append(path)
                continue
            if index_state != ".":
                status.staged.append(path)
            if worktree_state != ".":
                status.modified.append(path)

    status.is_clean = entries == 0
    return status
