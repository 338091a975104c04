"""Bridge between synchronous click commands and the async history engine.

Each command resolves the repository and runs exactly one query inside a
fresh event loop. Every engine failure is turned into a click error here, so
commands never see a traceback from githistory_core.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import click

from githistory_core.errors import GitHistoryError, InvalidArgument
from githistory_core.gateway import Repository, open_repository


def run_query(ctx: click.Context, query: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
    """Open the configured repository and await query(repo, *args, **kwargs)."""
    obj = ctx.obj or {}
    config = obj.get("config")
    repo_path = obj.get("repo_path", ".")

    async def _run() -> Any:
        repo: Repository = await open_repository(repo_path, config)
        return await query(repo, *args, **kwargs)

    try:
        return asyncio.run(_run())
    except InvalidArgument as e:
        raise click.UsageError(str(e))
    except GitHistoryError as e:
        raise click.ClickException(f"Error reading git information: {e}")


def config_limit(ctx: click.Context, value: int | None, key: str) -> int:
    """An explicit --limit wins; otherwise use the configured default."""
    if value is not None:
        return value
    return (ctx.obj or {}).get("config", {}).get(key, 10)
