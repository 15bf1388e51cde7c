# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


"""Request and response models for the JSON-RPC data source."""

from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from msgspec import UNSET, Struct, UnsetType

from ultrasearch_client.search.records import FullTransactionRecord, SignatureRecord

T = TypeVar('T')


class RPCRequest(Struct):
    method: str
    params: Union[Dict[str, Any], List[Any]]
    jsonrpc: str = "2.0"
    id: Union[int, str] = 1


class RPCError(Struct):
    """RPC error structure."""
    code: int
    message: str
    data: Any = None


class Response(Struct, Generic[T]):
    """Generic RPC response wrapper."""
    jsonrpc: str = "2.0"
    id: Union[int, str, None] = None
    result: Optional[T] = None
    error: Optional[RPCError] = None

    @property
    def is_success(self) -> bool:
        """Check if response is successful."""
        return self.error is None and self.result is not None

    @property
    def is_error(self) -> bool:
        """Check if response has error."""
        return self.error is not None


class SearchResult(Struct, Generic[T]):
    """`result` object of searchTransactions.

    The record array is published as `data` by the live endpoint and as
    `transactions` in older documentation; either is accepted.
    """
    data: Optional[List[T]] = None
    transactions: Optional[List[T]] = None
    paginationToken: Union[str, None, UnsetType] = UNSET

    @property
    def records(self) -> Optional[List[T]]:
        return self.data if self.data is not None else self.transactions


class SignaturesResponse(Response[SearchResult[SignatureRecord]]):
    """Typed response for `signatures` mode."""
    pass


class FullTransactionsResponse(Response[SearchResult[FullTransactionRecord]]):
    """Typed response for `full` mode."""
    pass


class SlotResponse(Response[int]):
    """Typed response for getSlot and getFirstAvailableBlock."""
    pass
