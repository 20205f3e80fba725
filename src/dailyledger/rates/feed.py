"""
Exchange-rate feed.

Fetches the official and parallel average rates once, for display next to
the ledger totals. The rates never enter any ledger computation; a failed
fetch leaves them at zero and is only logged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from dailyledger.core.config import Config
from dailyledger.core.exceptions import NetworkError
from dailyledger.core.logging import get_logger
from dailyledger.core.types import RateSnapshot, RateStatus

logger = get_logger("rates")


class RateFeed:
    """
    One-shot reader for a list of `{source, average rate}` entries.

    Usage:
        feed = RateFeed("https://ve.dolarapi.com/v1/dolares")
        snapshot = await feed.refresh()
        snapshot.official, snapshot.parallel
    """

    def __init__(
        self,
        url: str,
        official_source: str = "oficial",
        parallel_source: str = "paralelo",
        source_field: str = "fuente",
        rate_field: str = "promedio",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            url: Endpoint returning a JSON list of rate entries
            official_source: Source label of the official rate
            parallel_source: Source label of the parallel rate
            source_field: Entry field holding the source label
            rate_field: Entry field holding the average rate
            timeout: Request timeout in seconds
            http_client: Shared httpx client (for connection pooling)
        """
        self._url = url
        self._official_source = official_source
        self._parallel_source = parallel_source
        self._source_field = source_field
        self._rate_field = rate_field
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = False
        self._snapshot = RateSnapshot()

    @classmethod
    def from_config(cls, config: Config, http_client: httpx.AsyncClient | None = None) -> RateFeed:
        return cls(
            url=config.rate_feed_url,
            official_source=config.official_rate_source,
            parallel_source=config.parallel_rate_source,
            source_field=config.rate_source_field,
            rate_field=config.rate_value_field,
            timeout=config.http_timeout,
            http_client=http_client,
        )

    @property
    def snapshot(self) -> RateSnapshot:
        """Latest rates; status is LOADING until the first fetch finishes."""
        return self._snapshot

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_client = False

    def _rate_for(self, entries: list[Any], source: str) -> Decimal:
        for entry in entries:
            if isinstance(entry, dict) and entry.get(self._source_field) == source:
                try:
                    return Decimal(str(entry.get(self._rate_field)))
                except InvalidOperation:
                    logger.warning(f"Rate for {source} is not numeric: {entry!r}")
                    return Decimal("0")
        logger.warning(f"No rate entry for source {source}")
        return Decimal("0")

    async def fetch(self) -> tuple[Decimal, Decimal]:
        """
        Request the rates once.

        Returns:
            (official, parallel) average rates

        Raises:
            NetworkError: Request failed or the payload is not a list
        """
        client = await self._get_client()
        try:
            response = await client.get(self._url)
            response.raise_for_status()
            entries = response.json()
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"Rate feed returned {e.response.status_code}",
                status_code=e.response.status_code,
                url=self._url,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise NetworkError(f"Rate feed request failed: {e}", url=self._url) from e

        if not isinstance(entries, list):
            raise NetworkError("Rate feed payload is not a list", url=self._url)

        return (
            self._rate_for(entries, self._official_source),
            self._rate_for(entries, self._parallel_source),
        )

    async def refresh(self) -> RateSnapshot:
        """
        Fetch the rates and publish them; never raises.

        The snapshot always ends LOADED, with zeros if the fetch failed.
        """
        try:
            official, parallel = await self.fetch()
        except NetworkError as e:
            logger.warning(f"Exchange rates unavailable: {e}")
            official, parallel = Decimal("0"), Decimal("0")

        self._snapshot = RateSnapshot(
            status=RateStatus.LOADED,
            official=official,
            parallel=parallel,
            fetched_at=datetime.now(timezone.utc),
        )
        logger.debug(f"Rates loaded: official={official} parallel={parallel}")
        return self._snapshot
