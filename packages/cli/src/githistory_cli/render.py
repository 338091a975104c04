"""Small formatting helpers shared by the command modules."""

from __future__ import annotations

from datetime import datetime

from rich.table import Table


def fmt_time(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


def commit_table(title: str) -> Table:
    """Column layout used wherever a list of commits is shown."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Commit", style="yellow", width=8)
    table.add_column("Date", width=16)
    table.add_column("Author", max_width=24)
    table.add_column("Message", max_width=60)
    return table


def add_commit_row(table: Table, commit) -> None:
    table.add_row(commit.short_hash, fmt_time(commit.timestamp), commit.author_name, truncate(commit.message, 60))
