"""Tests for derived properties on the record types."""

from datetime import datetime, timedelta, timezone

import pytest

from githistory_core.models import Contributor, RepoStatistics

START = datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(0), "0 days"),
        (timedelta(days=3), "3 days"),
        (timedelta(days=2, hours=1), "3 days"),
        (timedelta(days=95), "3 months"),
        (timedelta(days=365 + 65), "1 years, 2 months"),
    ],
)
def test_repository_age(delta, expected):
    stats = RepoStatistics(first_commit_at=START, last_commit_at=START + delta)
    assert stats.age == expected


def test_age_without_commits():
    assert RepoStatistics().age == "0 days"


def test_contributor_impact():
    assert Contributor("Ann", "ann@x.io", commits=1, additions=7, deletions=3).impact == 10
