# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Client configuration, injected explicitly into data sources."""
import os
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from dotenv import load_dotenv
from msgspec import Struct

SHYFT_RPC_URL_TEMPLATE = "https://rpc.shyft.to?api_key={key}"
API_KEY_PARAMS = ("api_key", "api-key")


class SearchClientConfig(Struct, frozen=True, kw_only=True):
    rpc_url: str
    """JSON-RPC endpoint, including the API key query parameter when required"""

    request_timeout: float = 30.0
    """Total seconds allowed for one HTTP round-trip"""

    max_pages: Optional[int] = None
    """Defensive cap on pages per session. None disables it."""

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "SearchClientConfig":
        """Reads ULTRASEARCH_* variables, loading a .env file first when present."""
        load_dotenv(env_file)

        rpc_url = os.getenv("ULTRASEARCH_RPC_URL")
        if not rpc_url and os.getenv("SHYFT_API_KEY"):
            rpc_url = SHYFT_RPC_URL_TEMPLATE.format(key=os.getenv("SHYFT_API_KEY"))
        if not rpc_url:
            raise ValueError("RPC URL must be provided via ULTRASEARCH_RPC_URL or SHYFT_API_KEY environment variable")

        timeout = os.getenv("ULTRASEARCH_REQUEST_TIMEOUT")
        max_pages = os.getenv("ULTRASEARCH_MAX_PAGES")
        return cls(
            rpc_url=rpc_url,
            request_timeout=float(timeout) if timeout else 30.0,
            max_pages=int(max_pages) if max_pages else None,
        )

    @property
    def redacted_url(self) -> str:
        """Endpoint with the API key masked, safe for log output"""
        parts = urlsplit(self.rpc_url)
        query = [(name, "***" if name in API_KEY_PARAMS else value)
                 for name, value in parse_qsl(parts.query, keep_blank_values=True)]
        return urlunsplit(parts._replace(query=urlencode(query, safe="*")))
