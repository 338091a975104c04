"""Repository-wide commands: status, commits, summary, branches, compare, stats, search."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from githistory_cli.render import add_commit_row, commit_table, fmt_time, truncate
from githistory_cli.runner import config_limit, run_query

console = Console()


@click.command("status")
@click.pass_context
def status_cmd(ctx):
    """Show the current branch and any uncommitted changes."""
    from githistory_core.history import get_status

    status = run_query(ctx, get_status)

    branch = status.branch or "[yellow](detached HEAD)[/yellow]"
    console.print(f"\n[bold]Branch:[/bold] {branch}")
    if status.ahead or status.behind:
        console.print(f"  ahead {status.ahead}, behind {status.behind}")

    if status.is_clean:
        console.print("[green]Working tree clean.[/green]")
        return

    for label, style, paths in (
        ("Staged", "green", status.staged),
        ("Modified", "yellow", status.modified),
        ("Untracked", "red", status.untracked),
    ):
        if not paths:
            continue
        console.print(f"[bold]{label}[/bold] ({len(paths)})")
        for p in paths:
            console.print(f"  [{style}]{p}[/{style}]")


@click.command("commits")
@click.option("--limit", type=int, default=None, help="Maximum number of commits to show.  [default: from config]")
@click.pass_context
def commits_cmd(ctx, limit: int | None):
    """List the most recent commits on HEAD."""
    from githistory_core.history import get_recent_commits

    commits = run_query(ctx, get_recent_commits, config_limit(ctx, limit, "commit_limit"))
    if not commits:
        console.print("[yellow]No commits yet.[/yellow]")
        return

    table = commit_table("Recent Commits")
    for c in commits:
        add_commit_row(table, c)
    console.print(table)


@click.command("summary")
@click.option("--limit", type=int, default=None, help="Number of files to show.  [default: from config]")
@click.pass_context
def summary_cmd(ctx, limit: int | None):
    """Show the files that change most often.

    At most `candidate_cap` tracked files are examined, so on large
    repositories this is a sample rather than a full ranking.
    """
    from githistory_core.history import get_repository_change_summary

    summaries = run_query(ctx, get_repository_change_summary, config_limit(ctx, limit, "summary_limit"))
    if not summaries:
        console.print("[yellow]No file history found.[/yellow]")
        return

    table = Table(title="Most Changed Files", show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Commits", justify="right", width=8)
    table.add_column("Last Modified", width=16)
    table.add_column("Authors", max_width=40)
    for s in summaries:
        table.add_row(s.path, str(s.commit_count), fmt_time(s.last_modified), truncate(", ".join(s.authors), 40))
    console.print(table)


@click.command("branches")
@click.pass_context
def branches_cmd(ctx):
    """List local branches with their upstream and latest commit."""
    from githistory_core.history import get_branches

    listing = run_query(ctx, get_branches)
    if not listing.branches:
        console.print("[yellow]No branches found.[/yellow]")
        return

    table = Table(title="Branches", show_header=True, header_style="bold cyan")
    table.add_column("", width=1)
    table.add_column("Branch", style="bold")
    table.add_column("Upstream")
    table.add_column("Commit", style="yellow", width=8)
    table.add_column("Date", width=16)
    table.add_column("Message", max_width=50)
    for b in listing.branches:
        c = b.last_commit
        table.add_row(
            "[green]*[/green]" if b.current else "",
            b.name,
            b.upstream or "",
            c.short_hash if c else "-",
            fmt_time(c.timestamp) if c else "-",
            truncate(c.message, 50) if c else "",
        )
    console.print(table)


@click.command("compare")
@click.argument("from_ref")
@click.argument("to_ref", default="HEAD")
@click.pass_context
def compare_cmd(ctx, from_ref: str, to_ref: str):
    """Show per-file line counts changed between FROM_REF and TO_REF (default HEAD)."""
    from githistory_core.history import compare_branches

    summary = run_query(ctx, compare_branches, from_ref, to_ref)
    if not summary.files:
        console.print(f"[green]No differences between {from_ref} and {to_ref}.[/green]")
        return

    table = Table(title=f"{from_ref}..{to_ref}", show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")
    table.add_column("Changes", justify="right")
    for f in summary.files:
        if f.is_binary:
            table.add_row(f.path, "-", "-", "[dim]binary[/dim]")
        else:
            table.add_row(f.path, str(f.insertions), str(f.deletions), str(f.changes))
    console.print(table)

    t = summary.totals
    console.print(f"  {t.changed} files changed, [green]{t.insertions} insertions(+)[/green], [red]{t.deletions} deletions(-)[/red]")


@click.command("stats")
@click.option("--top", default=10, show_default=True, help="Number of contributors to show.")
@click.pass_context
def stats_cmd(ctx, top: int):
    """Show repository-wide statistics and the most active contributors."""
    from githistory_core.history import get_repository_statistics

    stats = run_query(ctx, get_repository_statistics)

    # --- Summary ---
    console.print("\n[bold]Repository statistics[/bold]")
    console.print(f"  Total commits:  {stats.total_commits}")
    console.print(f"  Tracked files:  {stats.total_files}")
    console.print(f"  Contributors:   {len(stats.contributors)}")
    console.print(f"  Active days:    {stats.active_days}")
    console.print(f"  First commit:   {fmt_time(stats.first_commit_at)}")
    console.print(f"  Last commit:    {fmt_time(stats.last_commit_at)}")
    console.print(f"  Age:            {stats.age}")

    # --- Top contributors ---
    if stats.contributors:
        table = Table(title=f"Top {top} Contributors", show_header=True)
        table.add_column("Author", style="bold")
        table.add_column("Email")
        table.add_column("Commits", justify="right")
        table.add_column("% of total", justify="right")
        for c in stats.contributors[:top]:
            pct = f"{c.commits / stats.total_commits * 100:.1f}%" if stats.total_commits else "0%"
            table.add_row(c.name, c.email, str(c.commits), pct)
        console.print(table)


@click.command("search")
@click.argument("pattern")
@click.option("--path", default=None, help="Limit the search to this path.")
@click.pass_context
def search_cmd(ctx, pattern: str, path: str | None):
    """Search tracked files for PATTERN with git grep."""
    from githistory_core.history import search_repository

    matches = run_query(ctx, search_repository, pattern, path)
    if not matches:
        console.print("[yellow]No matches.[/yellow]")
        return

    table = Table(title=escape(f"Matches for {pattern!r}"), show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Line", justify="right", width=6)
    table.add_column("Content", max_width=80)
    for m in matches:
        table.add_row(escape(m.file), str(m.line), escape(truncate(m.content.strip(), 80)))
    console.print(table)
    console.print(f"  {len(matches)} matching lines")
