"""History and authorship queries over a local git repository.

Every function takes the Repository returned by open_repository() as its
first argument and returns freshly parsed records. Gateway failures propagate
as githistory_core.errors types; malformed lines in git's output are dropped
by the parsers rather than failing the query.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import datetime

from githistory_core.analysis.cochange import correlate
from githistory_core.analysis.lifecycle import summarize_lifecycle
from githistory_core.analysis.ownership import build_contributors, compute_ownership
from githistory_core.errors import InvalidArgument
from githistory_core.fanout import fan_out, successful
from githistory_core.gateway import Repository, run_git
from githistory_core.models import (
    BlameLine,
    BranchDiffSummary,
    BranchListing,
    CoChangeEntry,
    CommitRecord,
    Contributor,
    ContributorCount,
    FileChange,
    FileChangeSummary,
    FileHistory,
    GrepMatch,
    LifecycleSummary,
    OwnershipEntry,
    RepoStatistics,
    RepoStatus,
)
from githistory_core.parsers.blame import parse_blame
from githistory_core.parsers.branches import BRANCH_ARGS, parse_branches
from githistory_core.parsers.grep import parse_grep
from githistory_core.parsers.log import (
    FIELD_SEP,
    LOG_FORMAT,
    PATCH_LOG_FORMAT,
    parse_log,
    parse_patch_log,
    parse_timestamp,
)
from githistory_core.parsers.numstat import (
    NUMSTAT_HEADER_FORMAT,
    AuthorChurn,
    AuthorKey,
    parse_author_churn,
    parse_diff_numstat,
)
from githistory_core.parsers.status import STATUS_ARGS, parse_status

logger = logging.getLogger(__name__)

_CONTRIBUTOR_FORMAT = f"--format=%aI{FIELD_SEP}%an{FIELD_SEP}%ae"


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------


def _require_path(path: str | None, name: str = "path") -> str:
    if path is None or not str(path).strip():
        raise InvalidArgument(f"Missing required parameter: {name}")
    return str(path)


def _require_limit(limit: int, name: str = "limit") -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InvalidArgument(f"Parameter {name!r} must be a positive integer, got {limit!r}")
    return limit


# ---------------------------------------------------------------------------
# Shared lookups
# ---------------------------------------------------------------------------


async def has_commits(repo: Repository) -> bool:
    """False for a freshly initialised repository whose HEAD points nowhere."""
    out = await run_git(repo, ["rev-parse", "--verify", "--quiet", "HEAD"], ok_codes=(0, 1))
    return bool(out.strip())


async def list_tracked_files(repo: Repository) -> list[str]:
    out = await run_git(repo, ["ls-files"])
    return [line for line in out.splitlines() if line]


async def _path_log(repo: Repository, path: str, limit: int | None = None) -> list[CommitRecord]:
    args = ["log", LOG_FORMAT]
    if limit is not None:
        args.append(f"--max-count={limit}")
    return parse_log(await run_git(repo, [*args, "--", path]))


async def _commit_hashes(repo: Repository, path: str) -> set[str]:
    out = await run_git(repo, ["log", "--format=%H", "--", path])
    return {line.strip() for line in out.splitlines() if line.strip()}


async def _author_churn(repo: Repository, path: str) -> dict[AuthorKey, AuthorChurn]:
    out = await run_git(repo, ["log", "--numstat", NUMSTAT_HEADER_FORMAT, "--", path])
    return parse_author_churn(out)


# ---------------------------------------------------------------------------
# Repository-level queries
# ---------------------------------------------------------------------------


async def get_status(repo: Repository) -> RepoStatus:
    return parse_status(await run_git(repo, STATUS_ARGS))


async def get_recent_commits(repo: Repository, limit: int = 10) -> list[CommitRecord]:
    """The `limit` most recent commits reachable from HEAD, newest first."""
    _require_limit(limit)
    if not await has_commits(repo):
        return []
    out = await run_git(repo, ["log", LOG_FORMAT, f"--max-count={limit}"])
    return parse_log(out)[:limit]


async def get_repository_change_summary(repo: Repository, limit: int = 10) -> list[FileChangeSummary]:
    """The most frequently committed tracked files.

    Scans at most repo.candidate_cap tracked files, one history lookup per
    file through the bounded fan-out. Files whose lookup fails are left out.
    """
    _require_limit(limit)
    if not await has_commits(repo):
        return []
    candidates = (await list_tracked_files(repo))[: repo.candidate_cap]

    async def summarise(path: str) -> FileChangeSummary:
        out = await run_git(repo, ["log", f"--format=%aI{FIELD_SEP}%an", "--", path])
        dates: list[datetime] = []
        authors: list[str] = []
        for line in out.splitlines():
            date, sep, author = line.partition(FIELD_SEP)
            if not sep:
                continue
            try:
                dates.append(parse_timestamp(date))
            except ValueError:
                logger.debug("Skipping unparsable date %r for %s", date, path)
                continue
            if author not in authors:
                authors.append(author)
        return FileChangeSummary(
            path=path,
            commit_count=len(dates),
            last_modified=dates[0] if dates else None,
            authors=authors,
        )

    outcomes = await fan_out(candidates, summarise, limit=repo.max_concurrency)
    summaries = list(successful(outcomes).values())
    summaries.sort(key=lambda s: (-s.commit_count, s.path))
    return summaries[:limit]


async def search_repository(repo: Repository, pattern: str, path: str | None = None) -> list[GrepMatch]:
    """Search tracked files with `git grep`; no matches is an empty list."""
    pattern = _require_path(pattern, "pattern")
    args = ["grep", "-n", "-I", "--full-name", "-e", pattern]
    if path:
        args += ["--", path]
    out = await run_git(repo, args, ok_codes=(0, 1))
    return parse_grep(out)


async def get_branches(repo: Repository) -> BranchListing:
    """Local branches with their tip commit.

    The tip lookups run through the bounded fan-out. When one fails, that
    branch is still listed with last_commit=None.
    """
    branches = parse_branches(await run_git(repo, BRANCH_ARGS))

    async def tip(name: str) -> CommitRecord | None:
        commits = parse_log(await run_git(repo, ["log", LOG_FORMAT, "--max-count=1", f"refs/heads/{name}", "--"]))
        return commits[0] if commits else None

    outcomes = await fan_out([b.name for b in branches], tip, limit=repo.max_concurrency)
    for branch, outcome in zip(branches, outcomes):
        branch.last_commit = outcome.value if outcome.ok else None

    current = next((b.name for b in branches if b.current), "")
    return BranchListing(branches=branches, current=current, all=[b.name for b in branches])


async def compare_branches(repo: Repository, from_ref: str, to_ref: str = "HEAD") -> BranchDiffSummary:
    from_ref = _require_path(from_ref, "from")
    to_ref = to_ref or "HEAD"
    for ref in (from_ref, to_ref):
        if ref.startswith("-"):
            raise InvalidArgument(f"Invalid revision: {ref!r}")
    out = await run_git(repo, ["diff", "--numstat", from_ref, to_ref, "--"])
    return parse_diff_numstat(out)


async def get_repository_statistics(repo: Repository) -> RepoStatistics:
    if not await has_commits(repo):
        return RepoStatistics(total_files=len(await list_tracked_files(repo)))

    count_out, files, log_out = await asyncio.gather(
        run_git(repo, ["rev-list", "--count", "HEAD"]),
        list_tracked_files(repo),
        run_git(repo, ["log", _CONTRIBUTOR_FORMAT]),
    )

    commits_by_author: Counter[tuple[str, str]] = Counter()
    dates: list[datetime] = []
    for line in log_out.splitlines():
        parts = line.split(FIELD_SEP)
        if len(parts) != 3:
            continue
        try:
            dates.append(parse_timestamp(parts[0]))
        except ValueError:
            logger.debug("Skipping unparsable date %r", parts[0])
            continue
        commits_by_author[(parts[1], parts[2])] += 1

    contributors = [ContributorCount(name=n, email=e, commits=c) for (n, e), c in commits_by_author.items()]
    contributors.sort(key=lambda c: (-c.commits, c.name))

    return RepoStatistics(
        total_commits=int(count_out.strip() or 0),
        total_files=len(files),
        contributors=contributors,
        active_days=len({d.date() for d in dates}),
        first_commit_at=dates[-1] if dates else None,
        last_commit_at=dates[0] if dates else None,
    )


# ---------------------------------------------------------------------------
# File-level queries
# ---------------------------------------------------------------------------


async def get_file_history(repo: Repository, path: str, limit: int = 10) -> FileHistory:
    path = _require_path(path)
    _require_limit(limit)
    if not await has_commits(repo):
        return FileHistory(path=path)
    commits, count_out = await asyncio.gather(
        _path_log(repo, path, limit),
        run_git(repo, ["rev-list", "--count", "HEAD", "--", path]),
    )
    return FileHistory(path=path, commits=commits[:limit], total_count=int(count_out.strip() or 0))


async def get_file_blame(repo: Repository, path: str) -> list[BlameLine]:
    path = _require_path(path)
    out = await run_git(repo, ["blame", "--line-porcelain", "--", path])
    return parse_blame(out)


async def get_file_changes(repo: Repository, path: str, limit: int = 5) -> list[FileChange]:
    """The `limit` most recent commits touching path, each with its patch for path."""
    path = _require_path(path)
    _require_limit(limit)
    if not await has_commits(repo):
        return []
    out = await run_git(repo, ["log", "-p", "--no-color", PATCH_LOG_FORMAT, f"--max-count={limit}", "--", path])
    return parse_patch_log(out)[:limit]


async def get_related_files(repo: Repository, path: str, limit: int = 5) -> list[CoChangeEntry]:
    """Files most often committed together with path.

    Candidates are the first repo.candidate_cap tracked files other than
    path. Each candidate's commit hashes are fetched through the bounded
    fan-out; candidates whose lookup fails are dropped.
    """
    path = _require_path(path)
    _require_limit(limit)
    if not await has_commits(repo):
        return []

    target_history, tracked = await asyncio.gather(_path_log(repo, path), list_tracked_files(repo))
    if not target_history:
        return []

    candidates = [f for f in tracked if f != path][: repo.candidate_cap]
    outcomes = await fan_out(candidates, lambda f: _commit_hashes(repo, f), limit=repo.max_concurrency)
    return correlate(target_history, successful(outcomes), limit)


async def get_code_ownership(repo: Repository, path: str) -> list[OwnershipEntry]:
    """Per-author share of lines added and deleted under path (file or directory)."""
    path = _require_path(path)
    if not await has_commits(repo):
        return []
    return compute_ownership(await _author_churn(repo, path))


async def get_file_contributors(repo: Repository, path: str) -> list[Contributor]:
    path = _require_path(path)
    if not await has_commits(repo):
        return []
    return build_contributors(await _author_churn(repo, path))


async def get_file_lifecycle(repo: Repository, path: str, now: datetime | None = None) -> LifecycleSummary:
    path = _require_path(path)
    commits = await _path_log(repo, path) if await has_commits(repo) else []
    return summarize_lifecycle(commits, now)
