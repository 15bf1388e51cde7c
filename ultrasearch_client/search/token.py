# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Opaque pagination token issued by searchTransactions."""
from __future__ import annotations

from typing import NamedTuple

from msgspec import Struct

from ultrasearch_client.search.errors import ProtocolError


class Cursor(NamedTuple):
    """Position of a transaction inside a sorted result stream."""
    slot: int
    transaction_index: int


class PaginationToken(Struct, frozen=True):
    value: str
    """Server-issued `"slot:transactionIndex"` string, echoed back untouched"""

    def __str__(self) -> str:
        return self.value

    def cursor(self) -> Cursor:
        """Decodes the token for window estimates. Never used to build a token."""
        slot, sep, index = self.value.partition(":")
        if not sep or not slot.isdigit() or not index.isdigit():
            raise ProtocolError(f"Unexpected pagination token shape: {self.value!r}")
        return Cursor(int(slot), int(index))

    @classmethod
    def coerce(cls, token: PaginationToken | str | None) -> PaginationToken | None:
        if token is None or isinstance(token, PaginationToken):
            return token
        return cls(token)
