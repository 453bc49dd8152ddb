"""Tests for configuration loading."""

import pytest

from userlist.config import load_config
from userlist.core.constants import API_URL
from userlist.exceptions import ConfigurationError


def test_defaults(isolated_env):
    config = load_config()

    assert config.api_url == API_URL
    assert config.page_size == 4
    assert config.request_timeout == 30
    assert config.retry_on_error is False
    assert config.revalidate_on_mount is True
    assert config.log_level == "WARNING"


def test_environment_overrides(isolated_env, monkeypatch):
    monkeypatch.setenv("USERLIST_API_URL", "https://example.test/users")
    monkeypatch.setenv("USERLIST_PAGE_SIZE", "10")
    monkeypatch.setenv("USERLIST_RETRY_ON_ERROR", "true")

    config = load_config()

    assert config.api_url == "https://example.test/users"
    assert config.page_size == 10
    assert config.retry_on_error is True


def test_dotenv_file(isolated_env):
    (isolated_env / ".env").write_text("USERLIST_PAGE_SIZE=7\nUSERLIST_LOG_LEVEL=debug\n", encoding="utf-8")

    config = load_config()

    assert config.page_size == 7
    assert config.log_level == "DEBUG"


def test_rejects_non_positive_page_size(isolated_env, monkeypatch):
    monkeypatch.setenv("USERLIST_PAGE_SIZE", "0")

    with pytest.raises(ConfigurationError, match="USERLIST_PAGE_SIZE|page_size"):
        load_config()
