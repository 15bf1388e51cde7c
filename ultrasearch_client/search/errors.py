# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Exception hierarchy for searchTransactions sessions."""
from __future__ import annotations

from typing import Any, Optional


class SearchError(Exception):
    """Base class for every error raised by the search client."""


class ValidationError(SearchError):
    """A filter was rejected locally, before any request was sent."""


class UnpairedBlockRange(ValidationError):
    """Exactly one of fromBlock/toBlock was set."""


class RangeInverted(ValidationError):
    """toBlock is lower than fromBlock."""


class LimitExceeded(ValidationError):
    """limit falls outside the range allowed for the detail level."""


class InvalidAddress(ValidationError):
    """An account filter entry is not a valid base58 public key."""


class MissingBlockRange(ValidationError):
    """An operation needing an explicit block range got a filter without one."""


class InconsistentFilterAcrossPages(ValidationError):
    """A held cursor was paired with a filter other than the one that produced it."""


class TransportError(SearchError):
    """The HTTP request failed before a JSON-RPC response could be read."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RpcError(SearchError):
    """Error object reported by the server, surfaced verbatim."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data


class RateLimitedError(RpcError):
    """HTTP or JSON-RPC 429. The same request may be replayed after a delay."""

    def __init__(self, code: int, message: str, data: Any = None, retry_after: Optional[float] = None):
        super().__init__(code, message, data)
        self.retry_after = retry_after


class CursorRejectedError(RpcError):
    """The server refused the pagination token, usually because it expired."""


class ProtocolError(SearchError):
    """The response did not match the documented envelope."""


class PageLimitReached(SearchError):
    """The configured page cap was hit while the server still issued tokens."""

    def __init__(self, max_pages: int, last_token: Any):
        super().__init__(f"Stopped after {max_pages} pages with pagination token {last_token} still pending")
        self.max_pages = max_pages
        self.last_token = last_token
