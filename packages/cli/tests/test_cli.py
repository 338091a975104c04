"""Tests for the CLI entry point."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from click.testing import CliRunner

from githistory_cli.cli import main, setup_logging
from githistory_core.config import DEFAULT_CONFIG
from githistory_core.errors import CommandTimedOut, InvalidArgument, NotARepository
from githistory_core.gateway import Repository
from githistory_core.models import (
    ActivityLabel,
    BlameLine,
    BranchDiffSummary,
    BranchInfo,
    BranchListing,
    CoChangeEntry,
    CommitRecord,
    ContributorCount,
    DiffTotals,
    FileDiffStat,
    FileHistory,
    GrepMatch,
    LifecycleSummary,
    OwnershipEntry,
    RepoStatistics,
    RepoStatus,
)

WHEN = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def _make_config(**overrides):
    return {**DEFAULT_CONFIG, **overrides}


def _make_commit(commit_hash="abcdef1234" + "0" * 30, message="Fix parser", author="Ann"):
    return CommitRecord(
        hash=commit_hash,
        timestamp=WHEN,
        message=message,
        author_name=author,
        author_email=f"{author.lower()}@x.io",
    )


def _patch_common(mocker, config=None):
    """Patch config loading and repository resolution for most tests."""
    cfg = config or _make_config()
    mocker.patch("githistory_core.config.load_config", return_value=cfg)
    open_repo = mocker.patch(
        "githistory_cli.runner.open_repository",
        new=mocker.AsyncMock(return_value=Repository(root=Path("/repo"))),
    )
    return cfg, open_repo


def _patch_query(mocker, name, result):
    return mocker.patch(f"githistory_core.history.{name}", new=mocker.AsyncMock(return_value=result))


class TestCLIValidation:
    def test_invalid_config(self, mocker):
        mocker.patch("githistory_core.config.load_config", side_effect=InvalidArgument("bad candidate_cap"))

        result = CliRunner().invoke(main, ["commits"])
        assert result.exit_code == 2
        assert "bad candidate_cap" in result.output

    def test_not_a_repository(self, mocker):
        _patch_common(mocker)
        mocker.patch(
            "githistory_cli.runner.open_repository",
            new=mocker.AsyncMock(side_effect=NotARepository("/tmp/plain")),
        )

        result = CliRunner().invoke(main, ["status"])
        assert result.exit_code == 1
        assert "Not a git repository" in result.output

    def test_invalid_argument_is_usage_error(self, mocker):
        _patch_common(mocker)
        mocker.patch(
            "githistory_core.history.get_recent_commits",
            new=mocker.AsyncMock(side_effect=InvalidArgument("Parameter 'limit' must be a positive integer")),
        )

        result = CliRunner().invoke(main, ["commits", "--limit", "0"])
        assert result.exit_code == 2
        assert "positive integer" in result.output

    def test_timeout_reported(self, mocker):
        _patch_common(mocker)
        mocker.patch(
            "githistory_core.history.get_file_blame",
            new=mocker.AsyncMock(side_effect=CommandTimedOut(["blame", "--", "big.py"], 2)),
        )

        result = CliRunner().invoke(main, ["blame", "big.py"])
        assert result.exit_code == 1
        assert "timed out" in result.output

    def test_repo_option_passed_to_open_repository(self, mocker):
        cfg, open_repo = _patch_common(mocker)
        _patch_query(mocker, "get_recent_commits", [])

        CliRunner().invoke(main, ["--repo", "/work/project", "commits"])

        open_repo.assert_awaited_once_with("/work/project", cfg)

    def test_timeout_option_forwarded_to_config(self, mocker):
        load = mocker.patch("githistory_core.config.load_config", return_value=_make_config())
        mocker.patch("githistory_cli.runner.open_repository", new=mocker.AsyncMock(return_value=Repository(root=Path("."))))
        _patch_query(mocker, "get_recent_commits", [])

        CliRunner().invoke(main, ["--timeout", "1.5", "commits"])

        assert load.call_args.kwargs["cli_overrides"] == {"timeout": 1.5}


class TestRepositoryCommands:
    def test_commits_uses_configured_limit(self, mocker):
        _patch_common(mocker, config=_make_config(commit_limit=7))
        query = _patch_query(mocker, "get_recent_commits", [_make_commit()])

        result = CliRunner().invoke(main, ["commits"])

        assert result.exit_code == 0
        assert query.await_args.args[1] == 7
        assert "abcdef1" in result.output

    def test_commits_explicit_limit(self, mocker):
        _patch_common(mocker)
        query = _patch_query(mocker, "get_recent_commits", [])

        result = CliRunner().invoke(main, ["commits", "--limit", "3"])

        assert query.await_args.args[1] == 3
        assert "No commits yet" in result.output

    def test_status_clean(self, mocker):
        _patch_common(mocker)
        _patch_query(mocker, "get_status", RepoStatus(branch="main", is_clean=True))

        result = CliRunner().invoke(main, ["status"])
        assert "main" in result.output
        assert "Working tree clean" in result.output

    def test_status_dirty_detached(self, mocker):
        _patch_common(mocker)
        status = RepoStatus(branch=None, is_clean=False, modified=["app.py"], untracked=["notes.txt"])
        _patch_query(mocker, "get_status", status)

        result = CliRunner().invoke(main, ["status"])
        assert "detached" in result.output
        assert "app.py" in result.output
        assert "notes.txt" in result.output

    def test_branches(self, mocker):
        _patch_common(mocker)
        listing = BranchListing(
            branches=[
                BranchInfo(name="main", current=True, last_commit=_make_commit()),
                BranchInfo(name="stale", last_commit=None),
            ],
            current="main",
            all=["main", "stale"],
        )
        _patch_query(mocker, "get_branches", listing)

        result = CliRunner().invoke(main, ["branches"])
        assert result.exit_code == 0
        assert "stale" in result.output
        assert "abcdef1" in result.output

    def test_compare(self, mocker):
        _patch_common(mocker)
        summary = BranchDiffSummary(
            files=[
                FileDiffStat(path="a.py", changes=4, insertions=3, deletions=1),
                FileDiffStat(path="logo.png", changes=0, insertions=0, deletions=0, is_binary=True),
            ],
            totals=DiffTotals(changed=2, insertions=3, deletions=1),
        )
        query = _patch_query(mocker, "compare_branches", summary)

        result = CliRunner().invoke(main, ["compare", "v1.0"])

        assert query.await_args.args[1:] == ("v1.0", "HEAD")
        assert "2 files changed" in result.output
        assert "binary" in result.output

    def test_stats(self, mocker):
        _patch_common(mocker)
        stats = RepoStatistics(
            total_commits=4,
            total_files=3,
            contributors=[ContributorCount(name="Ann", email="ann@x.io", commits=4)],
            active_days=2,
            first_commit_at=WHEN,
            last_commit_at=WHEN,
        )
        _patch_query(mocker, "get_repository_statistics", stats)

        result = CliRunner().invoke(main, ["stats"])
        assert "Total commits:  4" in result.output
        assert "100.0%" in result.output

    def test_search(self, mocker):
        _patch_common(mocker)
        query = _patch_query(mocker, "search_repository", [GrepMatch(file="a.py", line=3, content="items[i] = x")])

        result = CliRunner().invoke(main, ["search", "items", "--path", "src"])

        assert query.await_args.args[1:] == ("items", "src")
        assert "items[i]" in result.output
        assert "1 matching lines" in result.output


class TestFileCommands:
    def test_history(self, mocker):
        _patch_common(mocker)
        _patch_query(mocker, "get_file_history", FileHistory(path="a.py", commits=[_make_commit()], total_count=12))

        result = CliRunner().invoke(main, ["history", "a.py"])
        assert "showing 1 of 12 commits" in result.output

    def test_blame(self, mocker):
        _patch_common(mocker)
        lines = [BlameLine(commit_hash="f" * 40, author_name="Ann", timestamp=WHEN, line_number=1, content="x = 1")]
        _patch_query(mocker, "get_file_blame", lines)

        result = CliRunner().invoke(main, ["blame", "a.py"])
        assert "fffffff" in result.output
        assert "x = 1" in result.output

    def test_related_uses_configured_limit(self, mocker):
        _patch_common(mocker, config=_make_config(related_limit=2))
        query = _patch_query(
            mocker, "get_related_files", [CoChangeEntry(path="b.py", shared_commit_count=3, last_shared_at=WHEN)]
        )

        result = CliRunner().invoke(main, ["related", "a.py"])

        assert query.await_args.args[1:] == ("a.py", 2)
        assert "b.py" in result.output

    def test_ownership(self, mocker):
        _patch_common(mocker)
        entries = [OwnershipEntry(author_name="Ann", author_email="ann@x.io", lines_changed=30, share_percent=75)]
        _patch_query(mocker, "get_code_ownership", entries)

        result = CliRunner().invoke(main, ["ownership", "src"])
        assert "75%" in result.output

    def test_empty_results(self, mocker):
        _patch_common(mocker)
        _patch_query(mocker, "get_file_contributors", [])

        result = CliRunner().invoke(main, ["contributors", "a.py"])
        assert result.exit_code == 0
        assert "No history" in result.output

    def test_lifecycle(self, mocker):
        _patch_common(mocker)
        summary = LifecycleSummary(
            created_at=WHEN,
            activity=ActivityLabel.MODERATELY_ACTIVE,
            hotspots=[_make_commit(message="Refactor loader")],
        )
        _patch_query(mocker, "get_file_lifecycle", summary)

        result = CliRunner().invoke(main, ["lifecycle", "a.py"])
        assert "moderately active" in result.output
        assert "2024-05-01" in result.output


def test_verbose_enables_debug_logging():
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, root.handlers[:]
    try:
        setup_logging(verbose=True)
        assert root.level == logging.DEBUG
        setup_logging(verbose=False)
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
