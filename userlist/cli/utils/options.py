"""Shared CLI options and enums."""

from enum import StrEnum
from typing import Annotated

import typer


class OutputFormat(StrEnum):
    """Available output formats for the list command."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


URL_OPTION = Annotated[
    str | None,
    typer.Option(
        "--url",
        "-u",
        help="Users endpoint URL (defaults to USERLIST_API_URL or the public demo API)",
    ),
]

PAGE_SIZE_OPTION = Annotated[
    int | None,
    typer.Option(
        "--page-size",
        "-s",
        min=1,
        help="Users per page (defaults to USERLIST_PAGE_SIZE)",
    ),
]
