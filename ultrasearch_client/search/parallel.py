# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Independent sessions over disjoint block ranges, run concurrently."""
import asyncio
from typing import List, Optional

import msgspec
from loguru import logger

from ultrasearch_client.search.engine import QueryEngine
from ultrasearch_client.search.errors import MissingBlockRange
from ultrasearch_client.search.filter_spec import FilterSpec, SortOrder, validate
from ultrasearch_client.search.records import TransactionRecord
from ultrasearch_client.search.window import BlockWindow


def split_block_range(from_block: int, to_block: int, shards: int) -> List[BlockWindow]:
    """Splits an inclusive range into at most `shards` contiguous, non-overlapping windows."""
    if shards < 1:
        raise ValueError("shards must be at least 1")
    if to_block < from_block:
        raise ValueError(f"to_block {to_block} is lower than from_block {from_block}")

    total = to_block - from_block + 1
    shards = min(shards, total)
    size, remainder = divmod(total, shards)

    windows = []
    start = from_block
    for i in range(shards):
        end = start + size - 1 + (1 if i < remainder else 0)
        windows.append(BlockWindow(start, end))
        start = end + 1
    return windows


async def collect_sharded(
        engine: QueryEngine,
        spec: FilterSpec,
        *,
        shards: int = 4,
        concurrency: Optional[int] = None,
) -> List[TransactionRecord]:
    """Collects every record of `spec` by running one session per shard.

    Each shard owns its own filter and token. The merged list follows the
    filter's sort order. The first failing shard cancels the others, which
    are awaited before its error is raised.
    """
    validate(spec)
    if not spec.has_block_range:
        raise MissingBlockRange("Sharded search needs explicit fromBlock and toBlock")
    if spec.pagination_token is not None:
        raise ValueError("Sharded search starts fresh sessions and cannot take a pagination token")

    windows = split_block_range(spec.from_block, spec.to_block, shards)
    semaphore = asyncio.Semaphore(concurrency or len(windows))

    async def run_shard(window: BlockWindow) -> List[TransactionRecord]:
        shard_spec = msgspec.structs.replace(spec, from_block=window.from_block, to_block=window.to_block)
        async with semaphore:
            records = [record async for record in engine.iterate(shard_spec)]
        logger.info(f"Shard [{window.from_block}, {window.to_block}] returned {len(records)} records")
        return records

    tasks = [asyncio.ensure_future(run_shard(window)) for window in windows]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    if SortOrder(spec.sort) is SortOrder.DESC:
        results = list(reversed(results))
    return [record for shard in results for record in shard]
