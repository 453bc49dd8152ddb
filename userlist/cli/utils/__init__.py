"""CLI utilities module."""

from userlist.cli.utils.options import PAGE_SIZE_OPTION, URL_OPTION, OutputFormat
from userlist.cli.utils.output import handle_csv_output, handle_json_output, handle_table_output, to_user

__all__ = [
    "PAGE_SIZE_OPTION",
    "URL_OPTION",
    "OutputFormat",
    "handle_csv_output",
    "handle_json_output",
    "handle_table_output",
    "to_user",
]
