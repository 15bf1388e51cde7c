# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Persistable resume point for long paginated exports."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

import msgspec
from msgspec import Struct

from ultrasearch_client.search.errors import InconsistentFilterAcrossPages
from ultrasearch_client.search.filter_spec import FilterSpec
from ultrasearch_client.search.records import ResultPage
from ultrasearch_client.search.token import PaginationToken


class Checkpoint(Struct, frozen=True, kw_only=True):
    filter_fingerprint: str
    """`FilterSpec.fingerprint()` of the session that issued the token"""

    pagination_token: Optional[str] = None
    """Token to send with the next request. None before the first page."""

    pages_seen: int = 0

    records_seen: int = 0

    exhausted: bool = False

    @classmethod
    def start(cls, spec: FilterSpec) -> Checkpoint:
        token = spec.pagination_token.value if spec.pagination_token else None
        return cls(filter_fingerprint=spec.fingerprint(), pagination_token=token)

    @property
    def token(self) -> Optional[PaginationToken]:
        return PaginationToken.coerce(self.pagination_token)

    def advance(self, page: ResultPage) -> Checkpoint:
        """Returns the checkpoint to persist once `page` has been fully consumed."""
        return msgspec.structs.replace(
            self,
            pagination_token=page.next_token.value if page.next_token else None,
            pages_seen=self.pages_seen + 1,
            records_seen=self.records_seen + len(page.records),
            exhausted=page.next_token is None,
        )

    def resume_spec(self, spec: FilterSpec) -> FilterSpec:
        """Returns `spec` carrying this checkpoint's token, after checking it belongs to the same session."""
        if spec.fingerprint() != self.filter_fingerprint:
            raise InconsistentFilterAcrossPages("Checkpoint was taken with a different filter")
        if spec.pagination_token is not None and spec.pagination_token != self.token:
            raise InconsistentFilterAcrossPages(
                f"Filter carries token {spec.pagination_token} but checkpoint holds {self.pagination_token}")
        return spec.with_token(self.token)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_bytes(msgspec.json.encode(self))
            os.replace(tmp_path, path)
        finally:
            tmp_path.unlink(missing_ok=True)

    @classmethod
    def load(cls, path: Union[str, Path]) -> Checkpoint:
        return msgspec.json.decode(Path(path).read_bytes(), type=cls)
