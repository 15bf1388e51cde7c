# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Immutable filter for one searchTransactions session, plus local validation."""
from __future__ import annotations

import hashlib
from enum import Enum
from typing import Any, Optional

import msgspec
from msgspec import Struct, field
from solders.pubkey import Pubkey

from ultrasearch_client.search.errors import (
    InvalidAddress,
    LimitExceeded,
    RangeInverted,
    UnpairedBlockRange,
)
from ultrasearch_client.search.token import PaginationToken
from ultrasearch_client.utils.known_accounts import describe_accounts


class SortOrder(str, Enum):
    """Slot ordering of results"""
    ASC = "ASC"
    DESC = "DESC"


class TransactionDetails(str, Enum):
    """Level of detail returned per transaction"""
    SIGNATURES = "signatures"
    FULL = "full"


MAX_LIMIT = {
    TransactionDetails.SIGNATURES: 1000,
    TransactionDetails.FULL: 100,
}
"""Per-request cap for each detail level. The cap is also the default limit."""


class FilterSpec(Struct, frozen=True, kw_only=True):
    account_include: frozenset[str] = field(default_factory=frozenset)
    """Match transactions touching ANY of these accounts"""

    account_exclude: frozenset[str] = field(default_factory=frozenset)
    """Drop transactions touching any of these accounts"""

    account_required: frozenset[str] = field(default_factory=frozenset)
    """Match only transactions touching ALL of these accounts"""

    from_block: Optional[int] = None
    """Inclusive lower slot bound. Must be set together with `to_block`."""

    to_block: Optional[int] = None
    """Inclusive upper slot bound. Must be set together with `from_block`."""

    vote: Optional[bool] = None
    """True keeps only vote transactions, False drops them, None applies no filter"""

    failed: Optional[bool] = None
    """True keeps only failed transactions, False drops them, None applies no filter"""

    sort: SortOrder = SortOrder.DESC

    transaction_details: TransactionDetails = TransactionDetails.SIGNATURES

    limit: Optional[int] = None
    """Results per page. None means the cap for `transaction_details`."""

    pagination_token: Optional[PaginationToken] = None
    """Token returned by the previous page, never built by hand"""

    @property
    def has_block_range(self) -> bool:
        return self.from_block is not None and self.to_block is not None

    @property
    def max_limit(self) -> int:
        return MAX_LIMIT[TransactionDetails(self.transaction_details)]

    @property
    def effective_limit(self) -> int:
        return self.limit if self.limit is not None else self.max_limit

    def with_token(self, token: PaginationToken | str | None) -> FilterSpec:
        """Returns a copy that differs only in its pagination token."""
        return msgspec.structs.replace(self, pagination_token=PaginationToken.coerce(token))

    def to_params(self, include_token: bool = True) -> dict[str, Any]:
        """Builds the JSON-RPC `params` object.

        Sort, detail level and limit are always sent explicitly so that the
        request never depends on the server's defaults.
        """
        params: dict[str, Any] = {}
        if self.account_include:
            params["accountInclude"] = sorted(set(self.account_include))
        if self.account_exclude:
            params["accountExclude"] = sorted(set(self.account_exclude))
        if self.account_required:
            params["accountRequired"] = sorted(set(self.account_required))
        if self.from_block is not None:
            params["fromBlock"] = self.from_block
        if self.to_block is not None:
            params["toBlock"] = self.to_block
        if self.vote is not None:
            params["vote"] = self.vote
        if self.failed is not None:
            params["failed"] = self.failed
        params["sort"] = SortOrder(self.sort).value
        params["transactionDetails"] = TransactionDetails(self.transaction_details).value
        params["limit"] = self.effective_limit
        if include_token and self.pagination_token is not None:
            params["paginationToken"] = self.pagination_token.value
        return params

    def fingerprint(self) -> str:
        """Digest of the filter without its token. Equal digests mean the same session."""
        payload = msgspec.json.encode(self.to_params(include_token=False))
        return hashlib.sha256(payload).hexdigest()

    def describe(self) -> str:
        parts = []
        if self.account_include:
            parts.append(f"include={describe_accounts(self.account_include)}")
        if self.account_exclude:
            parts.append(f"exclude={describe_accounts(self.account_exclude)}")
        if self.account_required:
            parts.append(f"required={describe_accounts(self.account_required)}")
        if self.has_block_range:
            parts.append(f"blocks=[{self.from_block}, {self.to_block}]")
        parts.append(f"sort={SortOrder(self.sort).value}")
        parts.append(f"details={TransactionDetails(self.transaction_details).value}")
        parts.append(f"limit={self.effective_limit}")
        return " ".join(parts)


def _check_addresses(name: str, accounts) -> None:
    for account in accounts:
        try:
            Pubkey.from_string(account)
        except (ValueError, TypeError) as e:
            raise InvalidAddress(f"{name} contains an invalid address {account!r}") from e


def validate(spec: FilterSpec) -> FilterSpec:
    """Rejects filters the server would refuse or misinterpret. Returns the filter unchanged."""
    if (spec.from_block is None) != (spec.to_block is None):
        raise UnpairedBlockRange("fromBlock and toBlock must be provided together")

    if spec.has_block_range and spec.to_block < spec.from_block:
        raise RangeInverted(f"toBlock {spec.to_block} is lower than fromBlock {spec.from_block}")

    if spec.limit is not None and not (1 <= spec.limit <= spec.max_limit):
        details = TransactionDetails(spec.transaction_details).value
        raise LimitExceeded(f"limit must be between 1 and {spec.max_limit} for {details} mode, got {spec.limit}")

    _check_addresses("accountInclude", spec.account_include)
    _check_addresses("accountExclude", spec.account_exclude)
    _check_addresses("accountRequired", spec.account_required)

    return spec
