"""Parsing for the local branch listing produced by `git for-each-ref`."""

from __future__ import annotations

import logging

from githistory_core.models import BranchInfo

logger = logging.getLogger(__name__)

# %09 is a tab; %(HEAD) prints "*" for the checked-out branch and a space otherwise.
BRANCH_ARGS = ["for-each-ref", "--format=%(HEAD)%09%(refname:short)%09%(upstream:short)", "refs/heads"]


def parse_branches(text: str) -> list[BranchInfo]:
    branches = []
    for line in text.splitlines():
        parts = line.split("\t")
        if len(parts) != 3 or not parts[1]:
            logger.debug("Ignoring malformed branch line %r", line)
            continue
        marker, name, upstream = parts
        branches.append(BranchInfo(name=name, current=marker == "*", upstream=upstream or None))
    return branches
