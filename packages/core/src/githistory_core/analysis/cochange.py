"""Co-change correlation: which files are committed together with a target.

Two files that keep changing in the same commits are coupled, whether or not
that coupling shows up in imports: a handler and its middleware, a model and
its migration, a module and its test. The signal here is a plain set
intersection of commit hashes, computed per candidate file.
"""

from __future__ import annotations

from typing import Mapping

from githistory_core.models import CoChangeEntry, CommitRecord


def shared_commit_count(hashes_a: set[str], hashes_b: set[str]) -> int:
    return len(hashes_a & hashes_b)


def correlate(
    target_history: list[CommitRecord],
    candidate_hashes: Mapping[str, set[str]],
    limit: int = 5,
) -> list[CoChangeEntry]:
    """Rank candidates by the number of commits they share with the target.

    target_history must be newest first. The most recent shared commit is the
    first entry of the target's own history whose hash is shared, so ties are
    resolved on the target's timeline rather than the candidate's.

    Candidates sharing nothing are dropped. The result is sorted by shared
    count (descending, then path) and truncated to `limit`.
    """
    target_hashes = {c.hash for c in target_history}
    entries: list[CoChangeEntry] = []

    for path, hashes in candidate_hashes.items():
        shared = target_hashes & hashes
        if not shared:
            continue
        last_shared = next((c.timestamp for c in target_history if c.hash in shared), None)
        entries.append(CoChangeEntry(path=path, shared_commit_count=len(shared), last_shared_at=last_shared))

    entries.sort(key=lambda e: (-e.shared_commit_count, e.path))
    return entries[:limit]
