# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Caller-injected retry policies wrapped around single page fetches.

A policy only ever replays the identical call it was given. It never edits
the filter or the pagination token.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from loguru import logger

from ultrasearch_client.search.errors import RateLimitedError, TransportError

T = TypeVar("T")


class RetryPolicy(ABC):

    @abstractmethod
    async def run(self, call: Callable[[], Awaitable[T]]) -> T:
        """Awaits `call`, possibly several times, and returns its first successful result."""
        pass


class NoRetry(RetryPolicy):
    """Surfaces the first failure unchanged."""

    async def run(self, call: Callable[[], Awaitable[T]]) -> T:
        return await call()


class ExponentialBackoff(RetryPolicy):
    """Retries rate limits and transport failures with exponential delays.

    A `Retry-After` hint from the server takes precedence over the computed
    delay. Both are capped at `max_delay`.
    """

    def __init__(
            self,
            max_attempts: int = 5,
            initial_delay: float = 1.0,
            max_delay: float = 60.0,
            retry_on: Tuple[Type[BaseException], ...] = (RateLimitedError, TransportError),
            sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.retry_on = retry_on
        self._sleep = sleep

    def delay_for(self, attempt: int, error: BaseException) -> float:
        hint = getattr(error, "retry_after", None)
        if hint is not None:
            return min(hint, self.max_delay)
        return min(self.initial_delay * (2 ** (attempt - 1)), self.max_delay)

    async def run(self, call: Callable[[], Awaitable[T]]) -> T:
        attempt = 1
        while True:
            try:
                return await call()
            except self.retry_on as e:
                if attempt >= self.max_attempts:
                    logger.error(f"Giving up after {attempt} attempts: {e}")
                    raise
                delay = self.delay_for(attempt, e)
                logger.warning(f"{e}, retrying in {delay}s (attempt {attempt}/{self.max_attempts})")
                await self._sleep(delay)
                attempt += 1
