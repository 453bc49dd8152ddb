"""Tests for the users HTTP client."""

from unittest.mock import Mock, patch

import pytest
import requests
from conftest import USERS_URL

from userlist.api.client import UsersAPIClient
from userlist.cache import FetchCache
from userlist.exceptions import FetchFailure
from userlist.models.cache import CacheStatus
from userlist.models.user import User


def make_response(status_code: int = 200, payload=None, json_error: Exception | None = None) -> Mock:
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.text = "" if payload is None else str(payload)
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def make_session(*responses) -> Mock:
    session = Mock(spec=requests.Session)
    session.get.side_effect = list(responses)
    return session


class TestFetchUsers:
    def test_decodes_users(self, users):
        session = make_session(make_response(payload=users))
        client = UsersAPIClient(session=session)

        result = client.fetch_users(USERS_URL)

        assert [u.id for u in result] == list(range(1, 11))
        assert isinstance(result[0], User)
        assert result[0].email == "user1@example.test"
        session.get.assert_called_once()
        assert session.get.call_args.args == (USERS_URL,)

    def test_keeps_extra_fields(self):
        payload = [{"id": 1, "name": "Leanne", "username": "Bret", "email": "a@b.c", "phone": "1-770"}]
        client = UsersAPIClient(session=make_session(make_response(payload=payload)))

        user = client.fetch_users(USERS_URL)[0]

        assert user.model_dump()["phone"] == "1-770"
        assert user.row_key == "card_1"
        assert user.to_row() == ("Leanne", "Bret", "a@b.c")

    def test_server_error_is_fetch_failure(self):
        session = make_session(make_response(status_code=500, payload="boom"))
        client = UsersAPIClient(session=session)

        with pytest.raises(FetchFailure) as exc_info:
            client.fetch_users(USERS_URL)

        assert exc_info.value.details["status_code"] == 500
        assert session.get.call_count == 1

    def test_invalid_json_is_fetch_failure(self):
        response = make_response(json_error=requests.exceptions.JSONDecodeError("Expecting value", "", 0))
        client = UsersAPIClient(session=make_session(response))

        with pytest.raises(FetchFailure, match="Could not decode response"):
            client.fetch_users(USERS_URL)

    def test_unexpected_shape_is_fetch_failure(self):
        client = UsersAPIClient(session=make_session(make_response(payload={"users": []})))

        with pytest.raises(FetchFailure, match="Could not decode users"):
            client.fetch_users(USERS_URL)

    def test_timeout_is_fetch_failure(self):
        session = Mock(spec=requests.Session)
        session.get.side_effect = requests.exceptions.Timeout()
        client = UsersAPIClient(timeout=5, session=session)

        with pytest.raises(FetchFailure, match="timed out after 5 seconds"):
            client.fetch_users(USERS_URL)

    def test_connection_error_is_fetch_failure(self):
        session = Mock(spec=requests.Session)
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        client = UsersAPIClient(session=session)

        with pytest.raises(FetchFailure, match="Failed to connect"):
            client.fetch_users(USERS_URL)
        assert session.get.call_count == 1

    @patch("time.sleep")
    def test_retries_transport_errors_when_enabled(self, _sleep, users):
        session = Mock(spec=requests.Session)
        session.get.side_effect = [requests.exceptions.ConnectionError("reset"), make_response(payload=users)]
        client = UsersAPIClient(retry_on_error=True, session=session)

        result = client.fetch_users(USERS_URL)

        assert len(result) == 10
        assert session.get.call_count == 2

    @patch("time.sleep")
    def test_client_errors_are_not_retried(self, _sleep):
        session = make_session(make_response(status_code=404), make_response(payload=[]))
        client = UsersAPIClient(retry_on_error=True, session=session)

        with pytest.raises(FetchFailure):
            client.fetch_users(USERS_URL)
        assert session.get.call_count == 1

    def test_requires_session(self):
        client = UsersAPIClient()

        with pytest.raises(RuntimeError, match="Use context manager"):
            client.fetch_users(USERS_URL)

    def test_context_manager_owns_session(self):
        with patch("userlist.api.client.requests.Session") as session_cls:
            with UsersAPIClient() as client:
                assert client.session is session_cls.return_value
            session_cls.return_value.close.assert_called_once()
            assert client.session is None

    def test_injected_session_is_not_closed(self):
        session = make_session()
        with UsersAPIClient(session=session):
            pass

        session.close.assert_not_called()


class TestFetcher:
    @pytest.mark.asyncio
    async def test_fetcher_feeds_the_cache(self, users):
        client = UsersAPIClient(session=make_session(make_response(payload=users)))
        cache = FetchCache()

        handle = cache.subscribe(USERS_URL, client.as_fetcher())
        await handle.revalidate()

        assert handle.status == CacheStatus.SETTLED
        assert [u.username for u in handle.data[:2]] == ["user1", "user2"]

    @pytest.mark.asyncio
    async def test_http_failure_lands_on_entry(self):
        client = UsersAPIClient(session=make_session(make_response(status_code=503)))
        cache = FetchCache()

        handle = cache.subscribe(USERS_URL, client.as_fetcher())
        await handle.revalidate()

        assert handle.data is None
        assert handle.error.details["status_code"] == 503
