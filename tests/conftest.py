"""Shared fixtures for userlist tests."""

import asyncio
from typing import Any

import pytest

USERS_URL = "https://example.test/users"


def make_users(count: int) -> list[dict[str, Any]]:
    return [
        {
            "id": i,
            "name": f"User {i}",
            "username": f"user{i}",
            "email": f"user{i}@example.test",
        }
        for i in range(1, count + 1)
    ]


class FakeFetcher:
    """Coroutine fetcher that replays queued results and counts its calls.

    Each call consumes the next queued result; the last one is repeated.
    Exceptions in the queue are raised instead of returned. When ``gate`` is
    set, calls block until it is released.
    """

    def __init__(self, *results: Any) -> None:
        self.results = list(results) or [[]]
        self.calls = 0
        self.keys: list[str] = []
        self.gate: asyncio.Event | None = None

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        return self.gate

    async def __call__(self, key: str) -> Any:
        self.calls += 1
        self.keys.append(key)
        if self.gate is not None:
            await self.gate.wait()
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def users() -> list[dict[str, Any]]:
    return make_users(10)


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """Run without a developer .env file or USERLIST_* variables leaking in."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "USERLIST_API_URL",
        "USERLIST_PAGE_SIZE",
        "USERLIST_REQUEST_TIMEOUT",
        "USERLIST_RETRY_ON_ERROR",
        "USERLIST_REVALIDATE_ON_MOUNT",
        "USERLIST_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path
