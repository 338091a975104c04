"""State machine over `git blame --line-porcelain` output.

Each input line is classified into a BlameInput and fed to the machine, which
moves between two named states:

    EXPECT_HEADER --HEADER--> IN_ENTRY --CONTENT (emit)--> EXPECT_HEADER

AUTHOR and AUTHOR_TIME update the current attribution in either state, OTHER
(committer, summary, filename, boundary, ...) is ignored.

Malformed input never fails the parse. A CONTENT line that arrives before any
header is still emitted, carrying empty attribution ("", "", None). Line
numbers are assigned on emission, so the output is always numbered 1..N for N
content lines.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto

from githistory_core.models import BlameLine

logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"^([0-9a-f]{40}) \d+ \d+")
_CONTENT_MARKER = "\t"


class BlameState(Enum):
    EXPECT_HEADER = auto()
    IN_ENTRY = auto()


class BlameInput(Enum):
    HEADER = auto()
    AUTHOR = auto()
    AUTHOR_TIME = auto()
    CONTENT = auto()
    OTHER = auto()


def classify(line: str) -> tuple[BlameInput, str]:
    """Return the transition input for a line and its payload."""
    if line.startswith(_CONTENT_MARKER):
        return BlameInput.CONTENT, line[1:]
    match = _HEADER_RE.match(line)
    if match:
        return BlameInput.HEADER, match.group(1)
    if line.startswith("author-time "):
        return BlameInput.AUTHOR_TIME, line[len("author-time ") :]
    if line.startswith("author "):
        return BlameInput.AUTHOR, line[len("author ") :]
    return BlameInput.OTHER, line


@dataclass
class BlameParser:
    """Incremental blame parser: feed() one line at a time, read .lines."""

    state: BlameState = BlameState.EXPECT_HEADER
    commit_hash: str = ""
    author_name: str = ""
    timestamp: datetime | None = None
    line_count: int = 0

    def __post_init__(self):
        self.lines: list[BlameLine] = []

    def feed(self, line: str) -> None:
        kind, payload = classify(line)

        if kind is BlameInput.HEADER:
            self.commit_hash = payload
            self.state = BlameState.IN_ENTRY
        elif kind is BlameInput.AUTHOR:
            self.author_name = payload
        elif kind is BlameInput.AUTHOR_TIME:
            self.timestamp = _epoch_to_datetime(payload)
        elif kind is BlameInput.CONTENT:
            if not self.commit_hash:
                logger.debug("Blame content line before any header; emitting without attribution")
            self.line_count += 1
            self.lines.append(
                BlameLine(
                    commit_hash=self.commit_hash,
                    author_name=self.author_name,
                    timestamp=self.timestamp,
                    line_number=self.line_count,
                    content=payload,
                )
            )
            self.state = BlameState.EXPECT_HEADER


def _epoch_to_datetime(value: str) -> datetime | None:
    try:
        return datetime.fromtimestamp(int(value.strip()), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.debug("Ignoring unparsable author-time %r", value)
        return None


def parse_blame(text: str) -> list[BlameLine]:
    parser = BlameParser()
    for line in text.split("\n"):
        parser.feed(line)
    return parser.lines
