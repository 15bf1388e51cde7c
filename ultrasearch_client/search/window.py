# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Block window the server applies when fromBlock/toBlock are omitted.

The server anchors a 5000-slot window on every page separately: on the chain
tip or the first indexed slot for the first page, and on the page's cursor
afterwards. Two pages of the same session may therefore cover different
windows. Callers needing one stable range must send explicit bounds on every
call.
"""
from typing import NamedTuple, Optional

from ultrasearch_client.search.filter_spec import FilterSpec, SortOrder
from ultrasearch_client.search.token import Cursor

DEFAULT_WINDOW_SLOTS = 5000


class BlockWindow(NamedTuple):
    """Inclusive slot range"""
    from_block: int
    to_block: int


def resolve_default_window(
        spec: FilterSpec,
        cursor: Optional[Cursor],
        *,
        latest_slot: Optional[int] = None,
        first_indexed_slot: Optional[int] = None,
) -> BlockWindow:
    """Mirrors the server's default window for a filter without explicit bounds.

    `latest_slot` is needed for a DESC first page and `first_indexed_slot` for
    an ASC first page. Pages after the first are anchored on `cursor`.
    """
    if spec.from_block is not None or spec.to_block is not None:
        raise ValueError("Default window only applies when fromBlock and toBlock are both omitted")

    descending = SortOrder(spec.sort) is SortOrder.DESC

    if cursor is not None:
        anchor = cursor.slot
    elif descending:
        if latest_slot is None:
            raise ValueError("latest_slot is required for a descending first page")
        anchor = latest_slot
    else:
        if first_indexed_slot is None:
            raise ValueError("first_indexed_slot is required for an ascending first page")
        anchor = first_indexed_slot

    if descending:
        return BlockWindow(max(anchor - DEFAULT_WINDOW_SLOTS, 0), anchor)
    return BlockWindow(anchor, anchor + DEFAULT_WINDOW_SLOTS)
