"""Structured `git log` parsing.

Commits are requested with a fixed field order and ASCII control characters
as delimiters, so subjects and author names can contain any printable text
without confusing the split:

    %H <US> %aI <US> %s <US> %an <US> %ae <RS>

US (\\x1f) separates fields and RS (\\x1e) terminates a record.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from githistory_core.errors import ParseAnomaly
from githistory_core.models import CommitRecord, FileChange

logger = logging.getLogger(__name__)

FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"

LOG_FORMAT = f"--format=%H{FIELD_SEP}%aI{FIELD_SEP}%s{FIELD_SEP}%an{FIELD_SEP}%ae{RECORD_SEP}"

# For `git log -p`: the record separator comes first and every header field is
# terminated, so whatever follows the fifth separator is the patch text.
PATCH_LOG_FORMAT = f"--format={RECORD_SEP}%H{FIELD_SEP}%aI{FIELD_SEP}%s{FIELD_SEP}%an{FIELD_SEP}%ae{FIELD_SEP}"

_FIELD_COUNT = 5
_HASH_RE = re.compile(r"^[0-9a-f]{40}$")


def parse_timestamp(value: str) -> datetime:
    """Parse git's strict ISO-8601 date (%aI / %cI)."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _build_commit(fields: list[str]) -> CommitRecord:
    commit_hash, date, subject, name, email = (f.strip("\n") for f in fields)
    commit_hash = commit_hash.strip()
    if not _HASH_RE.match(commit_hash):
        raise ParseAnomaly("log", commit_hash, "invalid commit hash")
    try:
        timestamp = parse_timestamp(date)
    except ValueError:
        raise ParseAnomaly("log", date, "unparsable timestamp")
    return CommitRecord(
        hash=commit_hash,
        timestamp=timestamp,
        message=subject,
        author_name=name,
        author_email=email,
    )


def parse_log(text: str) -> list[CommitRecord]:
    """Turn LOG_FORMAT output into commits, preserving git's (newest-first) order."""
    commits: list[CommitRecord] = []
    for record in text.split(RECORD_SEP):
        if not record.strip():
            continue
        fields = record.lstrip("\n").split(FIELD_SEP)
        try:
            if len(fields) != _FIELD_COUNT:
                raise ParseAnomaly("log", record, f"expected {_FIELD_COUNT} fields, got {len(fields)}")
            commits.append(_build_commit(fields))
        except ParseAnomaly as e:
            logger.debug("Dropping log record: %s", e)
    return commits


def parse_patch_log(text: str) -> list[FileChange]:
    """Turn PATCH_LOG_FORMAT output from `git log -p` into commit + patch pairs."""
    changes: list[FileChange] = []
    for record in text.split(RECORD_SEP):
        if not record.strip():
            continue
        fields = record.split(FIELD_SEP, _FIELD_COUNT)
        try:
            if len(fields) != _FIELD_COUNT + 1:
                raise ParseAnomaly("patch-log", record, "truncated commit header")
            commit = _build_commit(fields[:_FIELD_COUNT])
        except ParseAnomaly as e:
            logger.debug("Dropping patch record: %s", e)
            continue
        changes.append(FileChange(commit=commit, diff=fields[_FIELD_COUNT].strip("\n")))
    return changes
