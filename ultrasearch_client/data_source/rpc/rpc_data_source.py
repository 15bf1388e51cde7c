# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


import asyncio
import itertools
from typing import Any, Dict, List, Optional, Union

import aiohttp
import msgspec
from loguru import logger

from ultrasearch_client.config import SearchClientConfig
from ultrasearch_client.data_source.data_source import BaseDataSource
from ultrasearch_client.data_source.rpc.model import (
    FullTransactionsResponse,
    RPCError,
    RPCRequest,
    Response,
    SignaturesResponse,
    SlotResponse,
)
from ultrasearch_client.search.errors import (
    CursorRejectedError,
    ProtocolError,
    RateLimitedError,
    RpcError,
    TransportError,
)
from ultrasearch_client.search.filter_spec import FilterSpec, TransactionDetails
from ultrasearch_client.search.records import ResultPage
from ultrasearch_client.search.token import PaginationToken

CURSOR_ERROR_HINTS = ("pagination", "cursor", "token")


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class UltraSearchRPCDataSource(BaseDataSource):
    """searchTransactions JSON-RPC data source implementation."""

    def __init__(self, config: Optional[SearchClientConfig] = None):
        """Initializes the data source. Falls back to the environment when no config is given."""
        super().__init__(config or SearchClientConfig.from_env())
        self.rpc_url = self.config.rpc_url
        self.session: Optional[aiohttp.ClientSession] = None
        self.encoder = msgspec.json.Encoder()
        self.signatures_decoder = msgspec.json.Decoder(SignaturesResponse)
        self.full_decoder = msgspec.json.Decoder(FullTransactionsResponse)
        self.slot_decoder = msgspec.json.Decoder(SlotResponse)
        self.error_decoder = msgspec.json.Decoder(Response[Any])
        self._request_ids = itertools.count(1)

    async def connect(self) -> None:
        """Opens the HTTP session to the RPC endpoint."""
        if not self.session:
            self.session = aiohttp.ClientSession()
        self._connected = True
        logger.info(f"Connected to search RPC at {self.config.redacted_url}")

    async def disconnect(self) -> None:
        """Closes the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
        self._connected = False

    async def _make_rpc_call(self, method: str, params: Union[Dict[str, Any], List[Any]],
                             sent_token: bool = False) -> bytes:
        """Posts one JSON-RPC request and returns the raw body.

        The connection is released when the `async with` block exits, including
        when the caller is cancelled mid-request.
        """
        if not self.session:
            raise RuntimeError("RPC client not connected")

        request = RPCRequest(method=method, params=params, id=next(self._request_ids))
        payload_bytes = self.encoder.encode(request)

        headers = {"Content-Type": "application/json"}
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        try:
            async with self.session.post(self.rpc_url, data=payload_bytes, headers=headers,
                                         timeout=timeout) as response:
                status = response.status
                retry_after = response.headers.get("Retry-After")
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{method} request failed: {e!r}") from e

        if status == 429:
            raise RateLimitedError(429, "Too many requests", retry_after=_parse_retry_after(retry_after))
        if status >= 400:
            self._raise_http_error(method, status, body, sent_token)
        return body

    def _raise_http_error(self, method: str, status: int, body: bytes, sent_token: bool) -> None:
        """Raises the JSON-RPC error carried by an HTTP error body, or a TransportError without one."""
        try:
            rpc_response = self.error_decoder.decode(body)
        except msgspec.DecodeError:
            rpc_response = None
        if rpc_response is not None and rpc_response.is_error:
            raise self._to_rpc_error(rpc_response.error, sent_token)
        raise TransportError(f"{method} returned HTTP {status}", status=status)

    @staticmethod
    def _to_rpc_error(error: RPCError, sent_token: bool) -> RpcError:
        if error.code == 429:
            return RateLimitedError(error.code, error.message, error.data)
        if sent_token and any(hint in error.message.lower() for hint in CURSOR_ERROR_HINTS):
            return CursorRejectedError(error.code, error.message, error.data)
        return RpcError(error.code, error.message, error.data)

    def _unwrap(self, decoder: msgspec.json.Decoder, body: bytes, method: str, sent_token: bool = False) -> Any:
        try:
            rpc_response: Response = decoder.decode(body)
        except msgspec.DecodeError as e:
            raise ProtocolError(f"Malformed {method} response: {e}") from e

        if rpc_response.is_error:
            raise self._to_rpc_error(rpc_response.error, sent_token)
        if rpc_response.result is None:
            raise ProtocolError(f"{method} response has neither 'result' nor 'error'")
        return rpc_response.result

    async def search_transactions(self, spec: FilterSpec) -> ResultPage:
        """Fetches one page of searchTransactions results."""
        sent_token = spec.pagination_token is not None
        logger.info(f"Searching transactions {spec.describe()} token={spec.pagination_token}")
        body = await self._make_rpc_call("searchTransactions", spec.to_params(), sent_token)

        if TransactionDetails(spec.transaction_details) is TransactionDetails.FULL:
            decoder = self.full_decoder
        else:
            decoder = self.signatures_decoder
        result = self._unwrap(decoder, body, "searchTransactions", sent_token)

        records = result.records
        if records is None:
            raise ProtocolError("searchTransactions result has neither 'data' nor 'transactions'")

        token = result.paginationToken
        if token is msgspec.UNSET:
            raise ProtocolError("searchTransactions result is missing 'paginationToken'")
        if token == "":
            raise ProtocolError("searchTransactions returned an empty pagination token")

        logger.info(f"Received {len(records)} records, next token {token}")
        return ResultPage(records=records, next_token=PaginationToken.coerce(token))

    async def get_slot(self) -> int:
        """Get the current slot."""
        result = await self._make_rpc_call("getSlot", [])
        return self._unwrap(self.slot_decoder, result, "getSlot")

    async def get_first_available_block(self) -> int:
        """Get the lowest slot still available on the endpoint."""
        result = await self._make_rpc_call("getFirstAvailableBlock", [])
        return self._unwrap(self.slot_decoder, result, "getFirstAvailableBlock")

    async def health_check(self) -> bool:
        """Perform a health check on the RPC endpoint."""
        if not self.is_connected:
            return False

        try:
            await self.get_slot()
            return True
        except Exception as e:
            logger.error(e)
            return False
