"""DailyLedger - main entry point wiring store, ledger, rates and reports."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx

from dailyledger.core.config import Config
from dailyledger.core.logging import configure_logging, get_logger
from dailyledger.core.types import RateSnapshot
from dailyledger.guards.confirm import ConfirmCallback, ConfirmGuard
from dailyledger.ledger import EntryForm, PaymentLedger
from dailyledger.rates import RateFeed
from dailyledger.reports import ReportExporter
from dailyledger.storage import StorageBackend, get_storage


class DailyLedger:
    """
    Main client for dailyledger.

    Owns one record store, one PaymentLedger projected from it, the
    exchange-rate feed and the PDF exporter.

    Usage:
        >>> async with DailyLedger() as app:
        ...     form = app.form()
        ...     form.set_agent("Agente 1")
        ...     form.set_amount("150.00")
        ...     form.set_reference("4821")
        ...     await form.submit()
        ...     app.ledger.stats().total
    """

    def __init__(
        self,
        config: Config | None = None,
        storage: StorageBackend | None = None,
        confirm_callback: ConfirmCallback | None = None,
        http_client: httpx.AsyncClient | None = None,
        log_level: int | str | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Configuration (defaults to Config.from_env())
            storage: Record store (defaults to the configured backend)
            confirm_callback: Asked before delete and close-day
            http_client: Shared httpx client for the rate feed
            log_level: Logging level (defaults to config.log_level)
        """
        self._config = config or Config.from_env()

        configure_logging(level=log_level or self._config.log_level)
        self._logger = get_logger("client")

        self._storage = storage or get_storage(
            self._config.storage_backend, **self._config.storage_options()
        )
        self._logger.info(
            f"Initializing dailyledger (storage: {type(self._storage).__name__}, "
            f"env: {self._config.env})"
        )

        self._ledger = PaymentLedger(
            self._storage,
            config=self._config,
            confirm_guard=ConfirmGuard(confirm_callback),
        )
        self._rates = RateFeed.from_config(self._config, http_client=http_client)
        self._exporter = ReportExporter(
            output_dir=self._config.report_dir,
            fee_rate=self._config.fee_rate,
            currency_symbol=self._config.currency_symbol,
            offset_hours=self._config.business_utc_offset_hours,
        )

    @property
    def config(self) -> Config:
        return self._config

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def ledger(self) -> PaymentLedger:
        return self._ledger

    @property
    def rates(self) -> RateSnapshot:
        return self._rates.snapshot

    @property
    def rate_feed(self) -> RateFeed:
        return self._rates

    @property
    def exporter(self) -> ReportExporter:
        return self._exporter

    async def start(self, fetch_rates: bool = True) -> None:
        """Subscribe the ledger and load the exchange rates once."""
        await self._ledger.start()
        if fetch_rates:
            await self._rates.refresh()

    async def close(self) -> None:
        """Unsubscribe and release network resources."""
        await self._ledger.stop()
        await self._rates.close()
        await self._storage.close()

    async def __aenter__(self) -> DailyLedger:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def form(self) -> EntryForm:
        """A fresh entry form bound to the ledger."""
        return EntryForm(self._ledger)

    def export_report(self, path: str | Path | None = None, search: str = "") -> Path:
        """
        Write the PDF report for the active date filter.

        Args:
            path: Output path (defaults to a file named by the filter date)
            search: History search applied to the listed payments
        """
        return self._exporter.export(
            self._ledger.filter_date,
            self._ledger.stats(),
            self._ledger.history(search),
            path=path,
        )
