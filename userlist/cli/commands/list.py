"""List users command implementation."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from userlist.api.client import UsersAPIClient
from userlist.cache import FetchCache
from userlist.cache.base import Fetcher
from userlist.cli.utils import (
    PAGE_SIZE_OPTION,
    URL_OPTION,
    OutputFormat,
    handle_csv_output,
    handle_json_output,
    handle_table_output,
)
from userlist.config import Config
from userlist.core.constants import DisplayMessages
from userlist.core.pagination import PageController, PageView
from userlist.models.cache import CacheEntry

console = Console()
logger = logging.getLogger(__name__)


async def load_page(
    url: str,
    fetcher: Fetcher,
    page: int,
    page_size: int,
    revalidate_on_mount: bool = True,
) -> tuple[CacheEntry, PageView]:
    """Fetch ``url`` once through a fetch cache and window the requested page.

    Args:
        url: Resource key to fetch
        fetcher: Coroutine fetcher for the key
        page: Requested 1-based page, clamped to the available pages
        page_size: Records per page
        revalidate_on_mount: Passed to the fetch cache

    Returns:
        The settled cache entry and the page view derived from it
    """
    cache = FetchCache(revalidate_on_mount=revalidate_on_mount)
    try:
        with cache.subscribe(url, fetcher) as handle:
            controller = PageController(page_size, source=handle)
            # Attaches to the mount fetch when there is one.
            task = handle.revalidate()
            if task is not None:
                await task
            controller.go_to(page)
            return handle.snapshot(), controller.view()
    finally:
        await cache.aclose()


def list_users(
    ctx: typer.Context,
    url: URL_OPTION = None,
    page: Annotated[
        int,
        typer.Option(
            "--page",
            "-p",
            min=1,
            help="Page to show (clamped to the last page)",
        ),
    ] = 1,
    page_size: PAGE_SIZE_OPTION = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file path for json/csv formats (prints to stdout when omitted)",
        ),
    ] = None,
) -> None:
    """Fetch the users list and print one page of it."""
    config: Config = ctx.obj
    url = url or config.api_url
    page_size = page_size or config.page_size

    start_time = time.time()
    with UsersAPIClient(timeout=config.request_timeout, retry_on_error=config.retry_on_error) as client:
        entry, view = asyncio.run(
            load_page(url, client.as_fetcher(), page, page_size, config.revalidate_on_mount)
        )
    logger.debug(f"Loaded {url} in {time.time() - start_time:.1f}s")

    if entry.error is not None:
        console.print(f"[red]{DisplayMessages.FETCH_ERROR}[/red]")
        console.print(f"[dim]{entry.error}[/dim]")
        raise typer.Exit(1)

    if not entry.data:
        console.print(f"[yellow]{DisplayMessages.EMPTY}[/yellow]")
        return

    if output_format == OutputFormat.TABLE:
        handle_table_output(view)
    elif output_format == OutputFormat.JSON:
        handle_json_output(view, output)
    elif output_format == OutputFormat.CSV:
        handle_csv_output(view, output)
