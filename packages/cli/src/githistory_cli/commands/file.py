"""Per-file commands: history, blame, changes, related, ownership, contributors, lifecycle."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from githistory_cli.render import add_commit_row, commit_table, fmt_time
from githistory_cli.runner import config_limit, run_query

console = Console()

_ACTIVITY_STYLE = {
    "very active": "bold green",
    "active": "green",
    "moderately active": "yellow",
    "occasionally modified": "yellow",
    "rarely modified": "dim",
    "inactive": "dim",
}


@click.command("history")
@click.argument("path")
@click.option("--limit", type=int, default=None, help="Maximum number of commits to show.  [default: from config]")
@click.pass_context
def history_cmd(ctx, path: str, limit: int | None):
    """Show the commits that touched PATH, newest first."""
    from githistory_core.history import get_file_history

    history = run_query(ctx, get_file_history, path, config_limit(ctx, limit, "commit_limit"))
    if not history.commits:
        console.print(f"[yellow]No commits touch {escape(path)}.[/yellow]")
        return

    table = commit_table(f"History of {escape(path)}")
    for c in history.commits:
        add_commit_row(table, c)
    console.print(table)
    console.print(f"  showing {len(history.commits)} of {history.total_count} commits")


@click.command("blame")
@click.argument("path")
@click.pass_context
def blame_cmd(ctx, path: str):
    """Show who last changed each line of PATH."""
    from githistory_core.history import get_file_blame

    lines = run_query(ctx, get_file_blame, path)
    if not lines:
        console.print(f"[yellow]{escape(path)} is empty.[/yellow]")
        return

    table = Table(title=f"Blame: {escape(path)}", show_header=True, header_style="bold cyan")
    table.add_column("Line", justify="right", width=6)
    table.add_column("Commit", style="yellow", width=8)
    table.add_column("Author", max_width=20)
    table.add_column("Date", width=10)
    table.add_column("Content", no_wrap=True)
    for b in lines:
        table.add_row(
            str(b.line_number),
            b.commit_hash[:7],
            b.author_name,
            b.timestamp.strftime("%Y-%m-%d") if b.timestamp else "-",
            escape(b.content),
        )
    console.print(table)


@click.command("changes")
@click.argument("path")
@click.option("--limit", type=int, default=None, help="Number of recent commits to show.  [default: from config]")
@click.pass_context
def changes_cmd(ctx, path: str, limit: int | None):
    """Show the most recent patches applied to PATH."""
    from githistory_core.history import get_file_changes

    changes = run_query(ctx, get_file_changes, path, config_limit(ctx, limit, "change_limit"))
    if not changes:
        console.print(f"[yellow]No commits touch {escape(path)}.[/yellow]")
        return

    for change in changes:
        c = change.commit
        console.print(
            f"\n[yellow]{c.short_hash}[/yellow] [bold]{escape(c.message)}[/bold] "
            f"[dim]{escape(c.author_name)}, {fmt_time(c.timestamp)}[/dim]"
        )
        if change.diff:
            console.print(Syntax(change.diff, "diff", background_color="default"))


@click.command("related")
@click.argument("path")
@click.option("--limit", type=int, default=None, help="Number of related files to show.  [default: from config]")
@click.pass_context
def related_cmd(ctx, path: str, limit: int | None):
    """Show files most often committed together with PATH."""
    from githistory_core.history import get_related_files

    related = run_query(ctx, get_related_files, path, config_limit(ctx, limit, "related_limit"))
    if not related:
        console.print(f"[yellow]No files change together with {escape(path)}.[/yellow]")
        return

    table = Table(title=f"Files changed with {escape(path)}", show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Shared Commits", justify="right")
    table.add_column("Last Shared", width=16)
    for r in related:
        table.add_row(escape(r.path), str(r.shared_commit_count), fmt_time(r.last_shared_at))
    console.print(table)


@click.command("ownership")
@click.argument("path")
@click.pass_context
def ownership_cmd(ctx, path: str):
    """Show each author's share of lines changed under PATH (file or directory)."""
    from githistory_core.history import get_code_ownership

    entries = run_query(ctx, get_code_ownership, path)
    if not entries:
        console.print(f"[yellow]No history for {escape(path)}.[/yellow]")
        return

    table = Table(title=f"Ownership of {escape(path)}", show_header=True, header_style="bold cyan")
    table.add_column("Author", style="bold")
    table.add_column("Email")
    table.add_column("Lines Changed", justify="right")
    table.add_column("Share", justify="right")
    for e in entries:
        table.add_row(e.author_name, e.author_email, str(e.lines_changed), f"{e.share_percent}%")
    console.print(table)


@click.command("contributors")
@click.argument("path")
@click.pass_context
def contributors_cmd(ctx, path: str):
    """Show commits and line counts per author for PATH."""
    from githistory_core.history import get_file_contributors

    contributors = run_query(ctx, get_file_contributors, path)
    if not contributors:
        console.print(f"[yellow]No history for {escape(path)}.[/yellow]")
        return

    table = Table(title=f"Contributors to {escape(path)}", show_header=True, header_style="bold cyan")
    table.add_column("Author", style="bold")
    table.add_column("Email")
    table.add_column("Commits", justify="right")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")
    for c in contributors:
        table.add_row(c.author_name, c.author_email, str(c.commits), str(c.additions), str(c.deletions))
    console.print(table)


@click.command("lifecycle")
@click.argument("path")
@click.pass_context
def lifecycle_cmd(ctx, path: str):
    """Show when PATH was created, how active it is, and its significant commits."""
    from githistory_core.history import get_file_lifecycle

    summary = run_query(ctx, get_file_lifecycle, path)
    style = _ACTIVITY_STYLE.get(summary.activity.value, "white")

    console.print(f"\n[bold]Lifecycle of [cyan]{escape(path)}[/cyan][/bold]")
    console.print(f"  Created:  {fmt_time(summary.created_at)}")
    console.print(f"  Activity: [{style}]{summary.activity.value}[/{style}]")

    if summary.hotspots:
        table = commit_table("Significant Commits")
        for c in summary.hotspots:
            add_commit_row(table, c)
        console.print(table)
    else:
        console.print("  [dim]No significant commits.[/dim]")
