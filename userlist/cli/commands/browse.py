"""TUI mode for browsing users page by page."""

import logging
from typing import ClassVar

import typer
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.widgets import DataTable, Footer, Header, Static

from userlist.api.client import UsersAPIClient
from userlist.cache import FetchCache, SubscriptionHandle
from userlist.cache.base import Fetcher
from userlist.cli.utils import PAGE_SIZE_OPTION, URL_OPTION, to_user
from userlist.config import Config
from userlist.core.constants import DisplayMessages
from userlist.core.pagination import PageController
from userlist.models.cache import CacheEntry

logger = logging.getLogger(__name__)


class UserListApp(App[None]):
    """Scrollable users table with refresh and prev/next paging."""

    CSS = """
    #title {
        padding: 1;
        text-style: bold;
    }

    #users {
        height: 1fr;
    }

    #status {
        padding: 0 1;
        color: $warning;
    }

    #pager {
        content-align: center middle;
        height: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("r", "refresh", "Refresh", show=True),
        Binding("p", "prev_page", "Prev", show=True),
        Binding("n", "next_page", "Next", show=True),
        Binding("left", "prev_page", "Prev", show=False),
        Binding("right", "next_page", "Next", show=False),
        Binding("q", "quit", "Quit", show=True),
        Binding("escape", "quit", "Quit", show=False),
    ]

    def __init__(self, url: str, fetcher: Fetcher, page_size: int, revalidate_on_mount: bool = True) -> None:
        super().__init__()
        self.url = url
        self.fetcher = fetcher
        self.cache = FetchCache(revalidate_on_mount=revalidate_on_mount)
        self.controller = PageController(page_size)
        self.handle: SubscriptionHandle | None = None
        self.status_message = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(DisplayMessages.TITLE, id="title")
        yield DataTable(id="users")
        yield Static("", id="status")
        yield Static("", id="pager")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#users", DataTable)
        table.add_columns("Name", "Username", "Email")
        table.cursor_type = "row"

        self.handle = self.cache.subscribe(self.url, self.fetcher)
        # The controller clamps first so the render below sees the final page.
        self.controller.bind(self.handle)
        self.handle.add_listener(self._on_entry_changed)
        self.render_page()

    async def on_unmount(self) -> None:
        if self.handle is not None:
            self.controller.unbind()
            self.handle.close()
        await self.cache.aclose()

    def _on_entry_changed(self, entry: CacheEntry) -> None:
        self.render_page()

    def render_page(self) -> None:
        """Redraw rows, status line and pager from the current cache entry."""
        if self.handle is None:
            return

        entry = self.handle.snapshot()
        table = self.query_one("#users", DataTable)
        status = self.query_one("#status", Static)
        pager = self.query_one("#pager", Static)

        view = self.controller.view(entry.data)
        table.clear()
        for record in view.items:
            user = to_user(record)
            table.add_row(*user.to_row(), key=user.row_key)

        if entry.is_validating:
            self.status_message = DisplayMessages.LOADING
        elif entry.error is not None and entry.data is None:
            self.status_message = f"{DisplayMessages.FETCH_ERROR}. {DisplayMessages.RETRY_HINT}"
        elif entry.error is not None:
            self.status_message = f"{entry.error}. {DisplayMessages.RETRY_HINT}"
        elif entry.data is not None and not entry.data:
            self.status_message = DisplayMessages.EMPTY
        else:
            self.status_message = ""
        status.update(Text(self.status_message))

        prev_label = "< Prev" if view.has_prev else "      "
        next_label = "Next >" if view.has_next else "      "
        pager.update(f"{prev_label}  [b]{view.current_page}[/b] / {view.total_pages}  {next_label}")

    def action_refresh(self) -> None:
        """Pull-to-refresh; ignored while a fetch is in flight."""
        if self.handle is None:
            return
        if self.handle.is_validating:
            logger.debug("Refresh ignored, fetch already in flight")
            return
        self.handle.mutate()

    def action_next_page(self) -> None:
        self.controller.next()
        self.render_page()

    def action_prev_page(self) -> None:
        self.controller.prev()
        self.render_page()


def launch_user_list_tui(url: str, page_size: int, config: Config) -> None:
    """Launch the TUI against ``url`` with the client and cache settings from ``config``."""
    with UsersAPIClient(timeout=config.request_timeout, retry_on_error=config.retry_on_error) as client:
        app = UserListApp(url, client.as_fetcher(), page_size, config.revalidate_on_mount)
        app.run()


def browse_users(
    ctx: typer.Context,
    url: URL_OPTION = None,
    page_size: PAGE_SIZE_OPTION = None,
) -> None:
    """Browse the users list interactively.

    Press r to refresh, n/p (or the arrow keys) to change page and q to quit.
    """
    config: Config = ctx.obj
    launch_user_list_tui(url or config.api_url, page_size or config.page_size, config)
