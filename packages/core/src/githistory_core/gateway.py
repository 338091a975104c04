"""Command gateway: the only place that spawns git.

A Repository is an immutable value resolved once by open_repository() and
passed explicitly into every operation. Nothing here is process-wide, so one
event loop can serve several repositories at the same time.

The gateway is read-only by convention: run_git() only accepts subcommands
from _READ_ONLY_COMMANDS. Mutating commands are rejected before a process is
spawned.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from githistory_core.config import DEFAULT_CONFIG, validate_config
from githistory_core.errors import CommandFailed, CommandTimedOut, InvalidArgument, NotARepository, ToolUnavailable

logger = logging.getLogger(__name__)

_READ_ONLY_COMMANDS = frozenset(
    {
        "blame",
        "diff",
        "for-each-ref",
        "grep",
        "log",
        "ls-files",
        "rev-list",
        "rev-parse",
        "status",
    }
)

# Prepended to every invocation. --no-optional-locks keeps `git status` from
# refreshing the index; core.quotepath=off returns non-ASCII paths verbatim.
_GLOBAL_OPTIONS = ("--no-optional-locks", "-c", "core.quotepath=off")

_NOT_A_REPO_MARKERS = ("not a git repository", "not a git repo")


@dataclass(frozen=True)
class Repository:
    """A resolved repository root plus the settings every git call needs."""

    root: Path
    git: str = "git"
    timeout: float | None = None
    max_concurrency: int = 100
    candidate_cap: int = 100


async def _exec(git: str, args: list[str], cwd: Path, timeout: float | None) -> tuple[int, str, str]:
    """Spawn one git process and return (exit_code, stdout, stderr)."""
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        process = await asyncio.create_subprocess_exec(
            git,
            *_GLOBAL_OPTIONS,
            *args,
            cwd=cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        if not cwd.is_dir():
            raise NotARepository(str(cwd)) from e
        raise ToolUnavailable(git, str(e)) from e
    except OSError as e:
        raise ToolUnavailable(git, str(e)) from e

    try:
        if timeout is None:
            stdout, stderr = await process.communicate()
        else:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise CommandTimedOut(args, timeout)

    return (
        process.returncode,
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )


def _is_not_a_repository(stderr: str) -> bool:
    lowered = stderr.lower()
    return any(marker in lowered for marker in _NOT_A_REPO_MARKERS)


async def open_repository(path: str | Path = ".", config: dict | None = None) -> Repository:
    """Resolve the top-level directory of the repository containing path.

    Raises NotARepository if path does not exist or is not inside a git
    working tree, and ToolUnavailable if git itself cannot be run.
    """
    settings = {**DEFAULT_CONFIG, **(config or {})}
    validate_config(settings)

    target = Path(path).expanduser().resolve()
    if not target.exists():
        raise NotARepository(str(target))
    cwd = target if target.is_dir() else target.parent

    args = ["rev-parse", "--show-toplevel"]
    code, stdout, stderr = await _exec(settings["git"], args, cwd, settings["timeout"])
    if code != 0:
        if _is_not_a_repository(stderr):
            raise NotARepository(str(target))
        raise CommandFailed(args, code, stderr)

    root = stdout.strip()
    if not root:
        # Inside a .git directory or a bare repository: no working tree to analyse.
        raise NotARepository(str(target))

    repo = Repository(
        root=Path(root),
        git=settings["git"],
        timeout=settings["timeout"],
        max_concurrency=settings["max_concurrency"],
        candidate_cap=settings["candidate_cap"],
    )
    logger.debug("Resolved repository root %s", repo.root)
    return repo


async def run_git(repo: Repository, args: list[str], *, ok_codes: tuple[int, ...] = (0,)) -> str:
    """Run a read-only git subcommand in repo.root and return its stdout.

    ok_codes lists the exit statuses that count as success; `git grep` for
    example exits 1 when nothing matches.
    """
    if not args or args[0] not in _READ_ONLY_COMMANDS:
        raise InvalidArgument(f"Refusing to run git subcommand {args[0] if args else ''!r}: not a read-only command.")

    code, stdout, stderr = await _exec(repo.git, list(args), repo.root, repo.timeout)
    if code not in ok_codes:
        if _is_not_a_repository(stderr):
            raise NotARepository(str(repo.root))
        raise CommandFailed(args, code, stderr)
    return stdout
