"""State machine over `git log --numstat` output.

The log is requested with NUMSTAT_HEADER_FORMAT, so the stream interleaves one
header line per commit with the stat lines git emits for it:

    <hash> US <author name> US <email> US <epoch>
    <added>\\t<deleted>\\t<path>
    ...

States:
    BEFORE_FIRST_COMMIT  stat lines have no author yet and are skipped
    IN_COMMIT            stat lines are attributed to the current author

Inputs: HEADER, STAT, BLANK, MALFORMED. A HEADER moves the machine to
IN_COMMIT and replaces the current author; nothing else changes the state.
Binary stats ("-\\t-\\tpath") and malformed lines are skipped without aborting.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto

from githistory_core.errors import ParseAnomaly
from githistory_core.models import BranchDiffSummary, DiffTotals, FileDiffStat
from githistory_core.parsers.log import FIELD_SEP

logger = logging.getLogger(__name__)

NUMSTAT_HEADER_FORMAT = f"--format=%H{FIELD_SEP}%an{FIELD_SEP}%ae{FIELD_SEP}%at"

_HASH_RE = re.compile(r"^[0-9a-f]{40}$")
# A 40-hex hash followed by a separator (or nothing) opens a new commit.
_BOUNDARY_RE = re.compile(r"^[0-9a-f]{40}(?:\x1f|\s|$)")

# (name, email)
AuthorKey = tuple[str, str]


class NumstatState(Enum):
    BEFORE_FIRST_COMMIT = auto()
    IN_COMMIT = auto()


class NumstatInput(Enum):
    HEADER = auto()
    STAT = auto()
    BLANK = auto()
    MALFORMED = auto()


@dataclass(frozen=True)
class CommitHeader:
    hash: str
    author_name: str
    author_email: str
    timestamp: int


@dataclass(frozen=True)
class StatLine:
    added: int
    deleted: int
    path: str
    is_binary: bool = False


@dataclass
class AuthorChurn:
    commits: int = 0
    additions: int = 0
    deletions: int = 0

    @property
    def lines_changed(self) -> int:
        return self.additions + self.deletions


def parse_header(line: str) -> CommitHeader:
    """Decode "<hash> US <name> US <email> US <epoch>"; name and email may be empty."""
    parts = line.split(FIELD_SEP)
    if len(parts) != 4 or not _HASH_RE.match(parts[0]):
        raise ParseAnomaly("numstat", line, "not a commit header")
    try:
        timestamp = int(parts[3].strip())
    except ValueError:
        raise ParseAnomaly("numstat", line, "header timestamp is not an integer")
    return CommitHeader(parts[0], parts[1], parts[2], timestamp)


def parse_stat_line(line: str) -> StatLine:
    """Decode "<added> <deleted> <path>"; "-" counts mark a binary file."""
    parts = line.split(None, 2)
    if len(parts) != 3:
        raise ParseAnomaly("numstat", line, "expected added, deleted and path")
    added, deleted, path = parts
    if added == "-" and deleted == "-":
        return StatLine(0, 0, path, is_binary=True)
    try:
        return StatLine(int(added), int(deleted), path)
    except ValueError:
        raise ParseAnomaly("numstat", line, "non-numeric line counts")


def classify(line: str) -> tuple[NumstatInput, CommitHeader | StatLine | None]:
    """Return the transition input for a line and its decoded payload.

    Any line opening with a commit hash is a commit boundary. When the rest of
    it cannot be decoded the commit is attributed to an unknown ("", "")
    identity, never to the previous author.
    """
    if not line.strip():
        return NumstatInput.BLANK, None
    if _BOUNDARY_RE.match(line):
        try:
            return NumstatInput.HEADER, parse_header(line)
        except ParseAnomaly as e:
            logger.debug("Unreadable commit header, attributing to unknown author: %s", e)
            return NumstatInput.HEADER, CommitHeader(line[:40], "", "", 0)
    try:
        return NumstatInput.STAT, parse_stat_line(line)
    except ParseAnomaly as e:
        logger.debug("Skipping numstat line: %s", e)
        return NumstatInput.MALFORMED, None


@dataclass
class NumstatParser:
    """Accumulates per-author churn; feed() one line at a time."""

    state: NumstatState = NumstatState.BEFORE_FIRST_COMMIT
    current: AuthorKey | None = None
    authors: dict[AuthorKey, AuthorChurn] = field(default_factory=dict)

    def feed(self, line: str) -> None:
        kind, payload = classify(line)

        if kind is NumstatInput.HEADER:
            self.current = (payload.author_name, payload.author_email)
            self.authors.setdefault(self.current, AuthorChurn()).commits += 1
            self.state = NumstatState.IN_COMMIT
        elif kind is NumstatInput.STAT:
            if self.state is NumstatState.BEFORE_FIRST_COMMIT:
                logger.debug("Skipping stat line before any commit header: %r", line)
                return
            if payload.is_binary:
                return
            churn = self.authors[self.current]
            churn.additions += payload.added
            churn.deletions += payload.deleted


def parse_author_churn(text: str) -> dict[AuthorKey, AuthorChurn]:
    """Map each (name, email) to its commit count and added/deleted lines."""
    parser = NumstatParser()
    for line in text.splitlines():
        parser.feed(line)
    return parser.authors


def parse_diff_numstat(text: str) -> BranchDiffSummary:
    """Summarise header-less `git diff --numstat` output, keeping binary files."""
    summary = BranchDiffSummary(totals=DiffTotals())
    for line in text.splitlines():
        kind, payload = classify(line)
        if kind is not NumstatInput.STAT:
            continue
        summary.files.append(
            FileDiffStat(
                path=payload.path,
                changes=payload.added + payload.deleted,
                insertions=payload.added,
                deletions=payload.deleted,
                is_binary=payload.is_binary,
            )
        )
        summary.totals.changed += 1
        summary.totals.insertions += payload.added
        summary.totals.deletions += payload.deleted
    return summary
