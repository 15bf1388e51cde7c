# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Abstract base class for searchTransactions data sources."""

from abc import ABC, abstractmethod
from typing import Optional

from ultrasearch_client.config import SearchClientConfig
from ultrasearch_client.search.filter_spec import FilterSpec
from ultrasearch_client.search.records import ResultPage


class BaseDataSource(ABC):
    """Abstract base class for all data sources of the search client.

       Each data source should inherit this class.
    """

    def __init__(self, config: Optional[SearchClientConfig] = None):
        """Initializes the data source with optional configuration."""
        self.config = config
        self._connected = False

    @abstractmethod
    async def connect(self) -> None:
        """Establishes connection to the data source."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Closes connection to the data source."""
        pass

    @abstractmethod
    async def search_transactions(self, spec: FilterSpec) -> ResultPage:
        """Fetches the single page selected by `spec` and its pagination token."""
        pass

    @abstractmethod
    async def get_slot(self) -> int:
        """Returns the latest slot known to the data source."""
        pass

    @abstractmethod
    async def get_first_available_block(self) -> int:
        """Returns the first slot the data source has indexed."""
        pass

    @property
    def is_connected(self) -> bool:
        """Checks if the data source is connected."""
        return self._connected

    async def health_check(self) -> bool:
        """Performs a health check on the data source."""
        return self.is_connected

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
