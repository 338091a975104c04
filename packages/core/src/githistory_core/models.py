"""Typed records produced by the history engine.

Every record is built fresh from git output for a single call. Nothing here
is persisted or cached; the repository on disk is the only source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class CommitRecord:
    """One commit as reported by `git log`."""

    hash: str  # full 40-hex object name, unique within a repository
    timestamp: datetime  # author date, timezone-aware
    message: str  # subject line only
    author_name: str
    author_email: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass
class FileHistory:
    path: str
    commits: list[CommitRecord] = field(default_factory=list)  # newest first
    total_count: int = 0  # every commit touching path, not just the ones listed


@dataclass(frozen=True)
class BlameLine:
    """Attribution of one line of the file's current content."""

    commit_hash: str
    author_name: str
    timestamp: datetime | None
    line_number: int  # 1-based position in the current file
    content: str


@dataclass
class CoChangeEntry:
    path: str
    shared_commit_count: int
    last_shared_at: datetime | None = None


@dataclass
class OwnershipEntry:
    author_name: str
    author_email: str
    lines_changed: int
    share_percent: int


@dataclass
class Contributor:
    author_name: str
    author_email: str
    commits: int = 0
    additions: int = 0
    deletions: int = 0

    @property
    def impact(self) -> int:
        return self.additions + self.deletions


class ActivityLabel(str, Enum):
    """Qualitative activity tiers, strongest first."""

    VERY_ACTIVE = "very active"
    ACTIVE = "active"
    MODERATELY_ACTIVE = "moderately active"
    OCCASIONALLY_MODIFIED = "occasionally modified"
    RARELY_MODIFIED = "rarely modified"
    INACTIVE = "inactive"

    @property
    def rank(self) -> int:
        """0 for the most active tier, increasing as activity drops."""
        return list(ActivityLabel).index(self)


@dataclass
class LifecycleSummary:
    created_at: datetime | None
    activity: ActivityLabel
    hotspots: list[CommitRecord] = field(default_factory=list)


@dataclass
class FileDiffStat:
    path: str
    changes: int  # insertions + deletions; 0 for binary files
    insertions: int
    deletions: int
    is_binary: bool = False


@dataclass
class DiffTotals:
    changed: int = 0  # number of files that differ
    insertions: int = 0
    deletions: int = 0


@dataclass
class BranchDiffSummary:
    files: list[FileDiffStat] = field(default_factory=list)
    totals: DiffTotals = field(default_factory=DiffTotals)


@dataclass(frozen=True)
class GrepMatch:
    file: str
    line: int
    content: str


@dataclass
class RepoStatus:
    branch: str | None  # None when HEAD is detached
    is_clean: bool
    staged: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)
    ahead: int = 0
    behind: int = 0


@dataclass
class FileChange:
    """A commit touching a file together with that file's patch."""

    commit: CommitRecord
    diff: str


@dataclass
class FileChangeSummary:
    path: str
    commit_count: int
    last_modified: datetime | None
    authors: list[str] = field(default_factory=list)


@dataclass
class BranchInfo:
    name: str
    current: bool = False
    upstream: str | None = None
    # None when the per-branch lookup failed; the branch itself is still listed.
    last_commit: CommitRecord | None = None


@dataclass
class BranchListing:
    branches: list[BranchInfo] = field(default_factory=list)
    current: str = ""
    all: list[str] = field(default_factory=list)


@dataclass
class ContributorCount:
    name: str
    email: str
    commits: int


@dataclass
class RepoStatistics:
    total_commits: int = 0
    total_files: int = 0
    contributors: list[ContributorCount] = field(default_factory=list)
    active_days: int = 0
    first_commit_at: datetime | None = None
    last_commit_at: datetime | None = None

    @property
    def age(self) -> str:
        """Human-readable span between the first and last commit."""
        if self.first_commit_at is None or self.last_commit_at is None:
            return "0 days"
        delta = abs(self.last_commit_at - self.first_commit_at)
        # Partial days count as a full day.
        days = delta.days + (1 if delta.seconds or delta.microseconds else 0)
        if days < 30:
            return f"{days} days"
        if days < 365:
            return f"{days // 30} months"
        return f"{days // 365} years, {(days % 365) // 30} months"
