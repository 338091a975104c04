"""Ownership shares and contributor rows derived from per-author churn."""

from __future__ import annotations

from githistory_core.models import Contributor, OwnershipEntry
from githistory_core.parsers.numstat import AuthorChurn, AuthorKey


def compute_ownership(churn: dict[AuthorKey, AuthorChurn]) -> list[OwnershipEntry]:
    """Turn added+deleted line counts into integer percentage shares.

    Shares are rounded independently, so they sum to 100 give or take one per
    author. When nobody changed any line every share is 0.
    """
    total = sum(c.lines_changed for c in churn.values())
    entries = [
        OwnershipEntry(
            author_name=name,
            author_email=email,
            lines_changed=c.lines_changed,
            share_percent=round(c.lines_changed / total * 100) if total else 0,
        )
        for (name, email), c in churn.items()
    ]
    entries.sort(key=lambda e: (-e.lines_changed, e.author_name))
    return entries


def build_contributors(churn: dict[AuthorKey, AuthorChurn]) -> list[Contributor]:
    """One row per author, most commits first, then largest impact."""
    contributors = [
        Contributor(
            author_name=name,
            author_email=email,
            commits=c.commits,
            additions=c.additions,
            deletions=c.deletions,
        )
        for (name, email), c in churn.items()
    ]
    contributors.sort(key=lambda c: (-c.commits, -c.impact, c.author_name))
    return contributors
