"""Lifecycle classification: how alive a file is, and which commits shaped it."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from githistory_core.models import ActivityLabel, CommitRecord, LifecycleSummary

# Commit subjects that usually mark a structural change rather than upkeep.
SIGNIFICANT_PREFIXES = ("add", "fix", "feature", "refactor", "rewrite", "implement")
MAX_HOTSPOTS = 5

# Evaluated top to bottom; the first rule whose window holds more than
# `threshold` commits wins.
_ACTIVITY_RULES: list[tuple[int, int, ActivityLabel]] = [
    (30, 10, ActivityLabel.VERY_ACTIVE),
    (30, 5, ActivityLabel.ACTIVE),
    (90, 10, ActivityLabel.MODERATELY_ACTIVE),
    (365, 10, ActivityLabel.OCCASIONALLY_MODIFIED),
    (365, 0, ActivityLabel.RARELY_MODIFIED),
]


def count_in_window(commits: list[CommitRecord], days: int, now: datetime) -> int:
    cutoff = now - timedelta(days=days)
    return sum(1 for c in commits if c.timestamp > cutoff)


def classify_activity(commits: list[CommitRecord], now: datetime | None = None) -> ActivityLabel:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    windows = {days: count_in_window(commits, days, now) for days in {rule[0] for rule in _ACTIVITY_RULES}}
    for days, threshold, label in _ACTIVITY_RULES:
        if windows[days] > threshold:
            return label
    return ActivityLabel.INACTIVE


def is_significant(commit: CommitRecord) -> bool:
    return commit.message.lower().startswith(SIGNIFICANT_PREFIXES)


def find_hotspots(commits: list[CommitRecord], limit: int = MAX_HOTSPOTS) -> list[CommitRecord]:
    """First `limit` significant commits, keeping the newest-first order."""
    return [c for c in commits if is_significant(c)][:limit]


def summarize_lifecycle(commits: list[CommitRecord], now: datetime | None = None) -> LifecycleSummary:
    """Build a LifecycleSummary from a file's complete newest-first history."""
    return LifecycleSummary(
        created_at=commits[-1].timestamp if commits else None,
        activity=classify_activity(commits, now),
        hotspots=find_hotspots(commits),
    )
