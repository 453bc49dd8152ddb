"""Shared output handlers for CLI commands."""

import csv
import io
import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from userlist.core.constants import DisplayMessages, FormattingConstants
from userlist.core.pagination import PageView
from userlist.models.user import User

console = Console()

USER_FIELDS = ["id", "name", "username", "email"]


def to_user(record: Any) -> User:
    """Coerce a cached record into a User for display."""
    if isinstance(record, User):
        return record
    return User.model_validate(record)


def _write(content: str, output_path: Path | None) -> None:
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        console.print(f"[bold green]✓ Saved to:[/bold green] {output_path}")
    else:
        print(content)


def handle_table_output(view: PageView) -> None:
    """Print one page of users as a rich table."""
    table = Table(title=DisplayMessages.TITLE, show_lines=True, expand=True)
    table.add_column("Name", style="bold")
    table.add_column("Username", style="cyan")
    table.add_column("Email", style="green")

    for record in view.items:
        table.add_row(*to_user(record).to_row())

    console.print(table)
    console.print(f"\n[bold]Page:[/bold] {view.current_page} / {view.total_pages}")


def handle_json_output(view: PageView, output_path: Path | None) -> None:
    """Handle JSON format output.

    Args:
        view: Page to serialize
        output_path: Optional file path to save output
    """
    output_data = {
        "page": view.current_page,
        "total_pages": view.total_pages,
        "users": [to_user(record).model_dump() for record in view.items],
    }
    _write(json.dumps(output_data, indent=FormattingConstants.JSON_INDENT, default=str), output_path)


def handle_csv_output(view: PageView, output_path: Path | None) -> None:
    """Handle CSV format output.

    Only the known user fields are written; extra endpoint fields are dropped.
    """
    string_buffer = io.StringIO()
    writer = csv.DictWriter(string_buffer, fieldnames=USER_FIELDS, extrasaction="ignore")
    writer.writeheader()
    for record in view.items:
        row = to_user(record).model_dump(include=set(USER_FIELDS))
        writer.writerow({key: "" if value is None else str(value) for key, value in row.items()})

    _write(string_buffer.getvalue(), output_path)
