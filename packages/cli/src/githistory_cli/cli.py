"""CLI entry point for githistory.

Commands:
  status        branch, cleanliness and pending changes
  commits       recent commits on HEAD
  summary       most frequently changed files
  branches      local branches with their tip commit
  compare       line counts changed between two revisions
  stats         repository-wide statistics and top contributors
  search        git grep across tracked files
  history       commits touching one file
  blame         line-by-line attribution of one file
  changes       recent patches to one file
  related       files most often committed together with one file
  ownership     share of changed lines per author for a file or directory
  contributors  per-author commits and line counts for one file
  lifecycle     creation date, activity tier and significant commits of one file
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from githistory_cli.commands.file import (
    blame_cmd,
    changes_cmd,
    contributors_cmd,
    history_cmd,
    lifecycle_cmd,
    ownership_cmd,
    related_cmd,
)
from githistory_cli.commands.repo import (
    branches_cmd,
    commits_cmd,
    compare_cmd,
    search_cmd,
    stats_cmd,
    status_cmd,
    summary_cmd,
)


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG shows every git invocation."""
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(RichHandler(level=level, console=Console(stderr=True), show_path=verbose))


@click.group()
@click.version_option(
    version=importlib.metadata.version("githistory"),
    prog_name="githistory",
)
@click.option(
    "--repo",
    "repo_path",
    default=".",
    show_default=True,
    help="Path inside the git repository to analyse.",
    envvar="GITHISTORY_REPO",
)
@click.option(
    "--config",
    "config_path",
    default=".githistory.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="GITHISTORY_CONFIG",
)
@click.option("--timeout", type=float, default=None, help="Seconds to wait for each git command. Overrides config.")
@click.option("--verbose", "-v", is_flag=True, help="Log every git invocation.")
@click.pass_context
def main(ctx: click.Context, repo_path: str, config_path: str, timeout: float | None, verbose: bool):
    """Commit history, authorship and co-change analytics for a git repository."""
    from githistory_core.config import load_config
    from githistory_core.errors import InvalidArgument

    setup_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path, cli_overrides={"timeout": timeout})
    except InvalidArgument as e:
        raise click.UsageError(str(e))

    ctx.obj["config"] = config
    ctx.obj["repo_path"] = repo_path


for _command in (
    status_cmd,
    commits_cmd,
    summary_cmd,
    branches_cmd,
    compare_cmd,
    stats_cmd,
    search_cmd,
    history_cmd,
    blame_cmd,
    changes_cmd,
    related_cmd,
    ownership_cmd,
    contributors_cmd,
    lifecycle_cmd,
):
    main.add_command(_command)
