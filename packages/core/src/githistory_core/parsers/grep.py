"""Parsing for `git grep -n` output ("path:line:content").

Every line is classified on its own: MATCH lines become GrepMatch records,
SEPARATOR lines ("--" between context groups) and MALFORMED lines are
rejected. Only the first two colons delimit fields, so content keeps any
colons of its own.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from githistory_core.errors import ParseAnomaly
from githistory_core.models import GrepMatch

logger = logging.getLogger(__name__)


class GrepInput(Enum):
    MATCH = auto()
    SEPARATOR = auto()
    MALFORMED = auto()


def parse_grep_line(line: str) -> GrepMatch:
    path, sep, rest = line.partition(":")
    if not sep or not path:
        raise ParseAnomaly("grep", line, "missing path separator")
    number, sep, content = rest.partition(":")
    if not sep:
        raise ParseAnomaly("grep", line, "missing line number separator")
    if not number.isdigit():
        raise ParseAnomaly("grep", line, "line number is not an integer")
    return GrepMatch(file=path, line=int(number), content=content)


def classify(line: str) -> tuple[GrepInput, GrepMatch | None]:
    if line == "--":
        return GrepInput.SEPARATOR, None
    try:
        return GrepInput.MATCH, parse_grep_line(line)
    except ParseAnomaly as e:
        logger.debug("Rejecting grep line: %s", e)
        return GrepInput.MALFORMED, None


def parse_grep(text: str) -> list[GrepMatch]:
    matches = []
    for line in text.splitlines():
        if not line:
            continue
        kind, match = classify(line)
        if kind is GrepInput.MATCH:
            matches.append(match)
    return matches
