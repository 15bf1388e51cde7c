"""
Tests for SearchClientConfig environment loading.
"""

from __future__ import annotations

import os

import pytest

from ultrasearch_client.config import SearchClientConfig


ENV_NAMES = ("ULTRASEARCH_RPC_URL", "SHYFT_API_KEY", "ULTRASEARCH_REQUEST_TIMEOUT", "ULTRASEARCH_MAX_PAGES")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    # load_dotenv writes to os.environ directly
    for name in ENV_NAMES:
        os.environ.pop(name, None)


def test_from_env_reads_explicit_url(monkeypatch):
    monkeypatch.setenv("ULTRASEARCH_RPC_URL", "https://rpc.example.test")
    monkeypatch.setenv("ULTRASEARCH_REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("ULTRASEARCH_MAX_PAGES", "50")

    config = SearchClientConfig.from_env()

    assert config.rpc_url == "https://rpc.example.test"
    assert config.request_timeout == 12.5
    assert config.max_pages == 50


def test_from_env_builds_shyft_url_from_key(monkeypatch):
    monkeypatch.setenv("SHYFT_API_KEY", "abc123")

    config = SearchClientConfig.from_env()

    assert config.rpc_url == "https://rpc.shyft.to?api_key=abc123"
    assert config.redacted_url == "https://rpc.shyft.to?api_key=***"


def test_from_env_reads_dotenv_file(tmp_path):
    env_file = tmp_path / "search.env"
    env_file.write_text("ULTRASEARCH_RPC_URL=https://from-dotenv.test\n")

    config = SearchClientConfig.from_env(str(env_file))

    assert config.rpc_url == "https://from-dotenv.test"


def test_from_env_without_endpoint_fails():
    with pytest.raises(ValueError, match="RPC URL"):
        SearchClientConfig.from_env()


def test_redacted_url_keeps_other_query_parameters():
    config = SearchClientConfig(rpc_url="https://rpc.shyft.to/v1?api_key=abc123&network=mainnet-beta")

    assert config.redacted_url == "https://rpc.shyft.to/v1?api_key=***&network=mainnet-beta"


def test_redacted_url_without_key_is_unchanged():
    config = SearchClientConfig(rpc_url="https://rpc.example.test/search?network=devnet")

    assert config.redacted_url == "https://rpc.example.test/search?network=devnet"
