"""Exception taxonomy for the history engine.

Gateway failures propagate to callers as one of these types. Parsers never
raise: malformed records are logged as parse anomalies and dropped.
"""

from __future__ import annotations


class GitHistoryError(Exception):
    """Base class for every failure surfaced by githistory_core."""


class NotARepository(GitHistoryError):
    """The target path has no recognised git metadata."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class ToolUnavailable(GitHistoryError):
    """The git executable could not be spawned."""

    def __init__(self, executable: str, reason: str = ""):
        self.executable = executable
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Could not run '{executable}'{detail}. Is git installed and on PATH?")


class CommandFailed(GitHistoryError):
    """git ran but exited with a failure status."""

    def __init__(self, args: list[str], exit_code: int | None, stderr: str):
        self.args_list = list(args)
        self.exit_code = exit_code
        self.stderr = stderr.strip()
        message = f"git {' '.join(self.args_list)} failed with exit code {exit_code}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


class CommandTimedOut(CommandFailed):
    """git did not finish within the configured per-invocation timeout."""

    def __init__(self, args: list[str], timeout: float):
        self.timeout = timeout
        super().__init__(args, None, f"timed out after {timeout:g}s")


class ParseAnomaly(GitHistoryError):
    """A line of tool output did not match the format its parser expects.

    Raised internally by line-level decoders and caught by the parser that
    called them; the offending record is dropped, the parse continues.
    """

    def __init__(self, parser: str, line: str, reason: str):
        self.parser = parser
        self.line = line
        self.reason = reason
        super().__init__(f"{parser}: {reason}: {line[:120]!r}")


class InvalidArgument(GitHistoryError, ValueError):
    """A caller-supplied path, pattern or limit is missing or malformed."""
