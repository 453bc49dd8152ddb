"""HTTP client for the users endpoint."""

import asyncio
import logging
from typing import Any

import backoff
import requests
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from userlist.cache.base import Fetcher
from userlist.core.constants import APIConstants
from userlist.exceptions import APIError, FetchFailure
from userlist.models.user import User

_USERS = TypeAdapter(list[User])


class UsersAPIClient:
    """Client that downloads and decodes user records."""

    def __init__(
        self,
        timeout: float = APIConstants.REQUEST_TIMEOUT,
        retry_on_error: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            timeout: Request timeout in seconds
            retry_on_error: Retry transport failures with exponential backoff
            session: Optional session to use instead of opening one per client
        """
        self.logger = logging.getLogger(__name__)
        self.timeout = timeout
        self.retry_on_error = retry_on_error
        self.session = session
        self._owns_session = session is None

    def __enter__(self) -> "UsersAPIClient":
        """Enter context."""
        if self.session is None:
            self.logger.info("Opening client session")
            self.session = requests.Session()
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context."""
        self.close()

    def close(self) -> None:
        if self.session and self._owns_session:
            self.logger.info("Closing client session")
            self.session.close()
            self.session = None

    def _max_tries(self) -> int:
        return APIConstants.BACKOFF_MAX_TRIES if self.retry_on_error else 1

    def _make_request(self, url: str) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises:
            APIError: If the endpoint answers with a non-success status
            requests.RequestException: If the transport fails after all retries
            ValueError: If the body is not valid JSON
        """
        retrying = backoff.on_exception(
            backoff.expo,
            (requests.exceptions.RequestException, APIError),
            max_tries=self._max_tries(),
            factor=APIConstants.BACKOFF_FACTOR,
            max_value=APIConstants.BACKOFF_MAX_VALUE,
            giveup=_should_give_up,
        )(self._get)
        return retrying(url)

    def _get(self, url: str) -> Any:
        if not self.session:
            raise RuntimeError("Client not initialized. Use context manager.")

        self.logger.debug(f"Making request: GET {url}")
        response = self.session.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)

        if not response.ok:
            raise APIError(
                response.status_code,
                f"Unexpected response status {response.status_code} for GET {url}",
                response.text,
            )
        return response.json()

    def fetch_users(self, url: str) -> list[User]:
        """Download the user list.

        Args:
            url: Users endpoint URL

        Returns:
            Decoded users, in endpoint order

        Raises:
            FetchFailure: On any transport, status or decode failure
        """
        self.logger.info(f"Fetching users from {url}")
        try:
            payload = self._make_request(url)
        except APIError as e:
            raise FetchFailure(e.message, {"status_code": e.status_code, "url": url}) from e
        except ValueError as e:
            raise FetchFailure(f"Could not decode response from {url}: {e}", {"url": url}) from e
        except requests.exceptions.Timeout as e:
            raise FetchFailure(f"Request to {url} timed out after {self.timeout} seconds", {"url": url}) from e
        except requests.exceptions.RequestException as e:
            raise FetchFailure(f"Failed to connect to {url}: {e}", {"url": url}) from e

        try:
            users = _USERS.validate_python(payload)
        except PydanticValidationError as e:
            raise FetchFailure(
                f"Could not decode users from {url}: {e.error_count()} invalid field(s)", {"url": url}
            ) from e

        self.logger.info(f"Found {len(users)} users")
        return users

    def as_fetcher(self) -> Fetcher:
        """Wrap ``fetch_users`` as a coroutine fetcher for the fetch cache.

        The blocking request runs in a worker thread.
        """

        async def fetcher(url: str) -> list[User]:
            return await asyncio.to_thread(self.fetch_users, url)

        return fetcher


def _should_give_up(error: Exception) -> bool:
    """Client errors and undecodable bodies will not change on retry."""
    if isinstance(error, ValueError):
        return True
    return isinstance(error, APIError) and 400 <= error.status_code < 500
