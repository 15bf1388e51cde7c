"""
Pytest fixtures for the search client. Engine tests run against a scripted in-memory data source.
"""

from __future__ import annotations

from typing import Any, Sequence
from unittest.mock import AsyncMock, MagicMock

import msgspec
import pytest

from ultrasearch_client.config import SearchClientConfig
from ultrasearch_client.data_source.data_source import BaseDataSource
from ultrasearch_client.search.records import ResultPage, SignatureRecord
from ultrasearch_client.search.token import PaginationToken

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
PUMP_FUN = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"


class ScriptedDataSource(BaseDataSource):
    """Returns (or raises) the scripted items in order and records every filter it receives."""

    def __init__(self, script: Sequence[Any], latest_slot: int = 400_000_000, first_indexed_slot: int = 1_000):
        super().__init__()
        self.script = list(script)
        self.calls = []
        self.latest_slot = latest_slot
        self.first_indexed_slot = first_indexed_slot
        self.slot_calls = 0
        self.first_block_calls = 0

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def search_transactions(self, spec):
        self.calls.append(spec)
        item = self.script[len(self.calls) - 1]
        if isinstance(item, BaseException):
            raise item
        return item

    async def get_slot(self) -> int:
        self.slot_calls += 1
        return self.latest_slot

    async def get_first_available_block(self) -> int:
        self.first_block_calls += 1
        return self.first_indexed_slot

    @property
    def sent_tokens(self):
        return [spec.pagination_token.value if spec.pagination_token else None for spec in self.calls]


def make_page(slot: int, count: int, next_token: str | None, start_index: int = 0) -> ResultPage:
    records = [
        SignatureRecord(signature=f"sig-{slot}-{start_index + i}", slot=slot, transactionIndex=start_index + i)
        for i in range(count)
    ]
    return ResultPage(records=records, next_token=PaginationToken.coerce(next_token))


@pytest.fixture
def scripted_source():
    """Factory for ScriptedDataSource instances."""
    return ScriptedDataSource


@pytest.fixture
def config():
    return SearchClientConfig(rpc_url="https://rpc.example.test?api_key=secret", request_timeout=5.0)


@pytest.fixture
def mock_http():
    """Builds an aiohttp session mock whose post() answers with the given status and JSON payload."""

    def _build(payload: Any = None, status: int = 200, headers: dict | None = None, raw: bytes | None = None):
        body = raw if raw is not None else msgspec.json.encode(payload)
        response = MagicMock()
        response.status = status
        response.headers = headers or {}
        response.read = AsyncMock(return_value=body)
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=None)

        session = MagicMock()
        session.post = MagicMock(return_value=response)
        session.close = AsyncMock()
        return session

    return _build
