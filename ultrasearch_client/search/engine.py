# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Paginated query engine for searchTransactions."""
from contextlib import aclosing
from typing import AsyncIterator, Optional

from loguru import logger

from ultrasearch_client.data_source.data_source import BaseDataSource
from ultrasearch_client.search.checkpoint import Checkpoint
from ultrasearch_client.search.errors import PageLimitReached
from ultrasearch_client.search.filter_spec import FilterSpec, SortOrder, validate
from ultrasearch_client.search.records import ResultPage, TransactionRecord
from ultrasearch_client.search.retry import NoRetry, RetryPolicy
from ultrasearch_client.search.window import BlockWindow, resolve_default_window


class QueryEngine:
    """Walks every page of a search, one request at a time.

    Each page is requested with exactly the token the previous page returned,
    and the filter is never modified between pages. Records are yielded in
    server order. Iteration ends only on a null token. Any failure is raised
    to the consumer and never reported as exhaustion.
    """

    def __init__(
            self,
            data_source: BaseDataSource,
            *,
            retry_policy: Optional[RetryPolicy] = None,
            max_pages: Optional[int] = None,
    ):
        self.data_source = data_source
        self.retry_policy = retry_policy or NoRetry()
        if max_pages is None and data_source.config is not None:
            max_pages = data_source.config.max_pages
        self.max_pages = max_pages

    @staticmethod
    def validate(spec: FilterSpec) -> FilterSpec:
        return validate(spec)

    async def effective_window(self, spec: FilterSpec) -> BlockWindow:
        """Block window the next request of `spec` will cover."""
        validate(spec)
        if spec.has_block_range:
            return BlockWindow(spec.from_block, spec.to_block)

        cursor = spec.pagination_token.cursor() if spec.pagination_token else None
        latest_slot = first_indexed_slot = None
        if cursor is None:
            if SortOrder(spec.sort) is SortOrder.DESC:
                latest_slot = await self.data_source.get_slot()
            else:
                first_indexed_slot = await self.data_source.get_first_available_block()

        window = resolve_default_window(spec, cursor, latest_slot=latest_slot,
                                        first_indexed_slot=first_indexed_slot)
        logger.debug(f"Default window for {spec.describe()} is [{window.from_block}, {window.to_block}]")
        return window

    async def fetch_page(self, spec: FilterSpec) -> ResultPage:
        """Single round-trip through the retry policy."""
        validate(spec)
        return await self.retry_policy.run(lambda: self.data_source.search_transactions(spec))

    async def pages(self, spec: FilterSpec, *, checkpoint: Optional[Checkpoint] = None) -> AsyncIterator[ResultPage]:
        """Yields result pages until the server returns a null pagination token."""
        validate(spec)
        if checkpoint is not None:
            if checkpoint.exhausted:
                logger.info("Checkpoint is already exhausted, nothing to fetch")
                return
            spec = checkpoint.resume_spec(spec)

        page_count = 0
        record_count = 0
        while True:
            page = await self.fetch_page(spec)
            page_count += 1
            record_count += len(page.records)
            yield page

            if page.next_token is None:
                logger.success(f"Search exhausted after {page_count} pages and {record_count} records")
                return
            if self.max_pages is not None and page_count >= self.max_pages:
                raise PageLimitReached(self.max_pages, page.next_token)
            spec = spec.with_token(page.next_token)

    async def iterate(self, spec: FilterSpec, *,
                      checkpoint: Optional[Checkpoint] = None) -> AsyncIterator[TransactionRecord]:
        """Yields every matching record lazily, in server order."""
        async with aclosing(self.pages(spec, checkpoint=checkpoint)) as pages:
            async for page in pages:
                for record in page.records:
                    yield record
