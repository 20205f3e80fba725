"""
Configuration management for dailyledger.

Handles loading configuration from environment variables and validation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any

from dailyledger.core.types import DuplicateScope

# Fee retained on every collected payment
FEE_RATE = Decimal("0.03")

# Business day runs on a fixed UTC-4 clock regardless of the viewer's zone
BUSINESS_UTC_OFFSET_HOURS = -4

MIN_REFERENCE_LENGTH = 4

# Seed suggestions for a fresh single-device file store
DEFAULT_AGENTS = (
    "Agente 0",
    "Agente 1",
    "Agente 2",
    "Agente 4",
    "Agente 6",
    "Agente 7",
    "Agente 8",
    "Agente 9",
    "Agente 10",
)


def _get_env_var(name: str, default: str | None = None, required: bool = False) -> str | None:
    """Get environment variable with optional default."""
    value = os.environ.get(name, default)
    if required and not value:
        raise ValueError(f"Required environment variable {name} is not set")
    return value


@dataclass(frozen=True)
class Config:
    """Ledger configuration."""

    fee_rate: Decimal = FEE_RATE
    business_utc_offset_hours: int = BUSINESS_UTC_OFFSET_HOURS
    min_reference_length: int = MIN_REFERENCE_LENGTH
    duplicate_scope: DuplicateScope = DuplicateScope.GLOBAL

    # Record store
    storage_backend: str = "memory"
    redis_url: str | None = None
    storage_path: str = "dailyledger.json"
    payments_collection: str = "payments"
    agents_collection: str = "agents"

    # Exchange-rate feed
    rate_feed_url: str = "https://ve.dolarapi.com/v1/dolares"
    official_rate_source: str = "oficial"
    parallel_rate_source: str = "paralelo"
    rate_source_field: str = "fuente"
    rate_value_field: str = "promedio"
    http_timeout: float = 10.0  # seconds

    # Reports
    currency_symbol: str = "Bs."
    report_dir: str = "."

    # Environment & Logging
    log_level: str = "INFO"
    env: str = "development"

    def __post_init__(self) -> None:
        if not Decimal("0") <= self.fee_rate < Decimal("1"):
            raise ValueError("fee_rate must be in [0, 1)")
        if self.min_reference_length < 1:
            raise ValueError("min_reference_length must be at least 1")
        if not -12 <= self.business_utc_offset_hours <= 14:
            raise ValueError("business_utc_offset_hours must be between -12 and 14")
        if not isinstance(self.duplicate_scope, DuplicateScope):
            raise ValueError(f"Unknown duplicate scope: {self.duplicate_scope}")

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """Load configuration from environment variables."""
        fee_rate_str = overrides.get("fee_rate") or _get_env_var(
            "DAILYLEDGER_FEE_RATE", default=str(FEE_RATE)
        )
        try:
            fee_rate = Decimal(str(fee_rate_str))
        except InvalidOperation:
            raise ValueError(f"Invalid DAILYLEDGER_FEE_RATE: {fee_rate_str}") from None

        offset = overrides.get("business_utc_offset_hours")
        if offset is None:
            offset = int(
                _get_env_var("DAILYLEDGER_UTC_OFFSET", default=str(BUSINESS_UTC_OFFSET_HOURS))
            )

        min_length = overrides.get("min_reference_length")
        if min_length is None:
            min_length = int(
                _get_env_var(
                    "DAILYLEDGER_MIN_REFERENCE_LENGTH", default=str(MIN_REFERENCE_LENGTH)
                )
            )

        scope = overrides.get("duplicate_scope") or _get_env_var(
            "DAILYLEDGER_DUPLICATE_SCOPE", default=DuplicateScope.GLOBAL.value
        )
        scope = DuplicateScope.from_string(scope) if isinstance(scope, str) else scope

        storage_backend = overrides.get("storage_backend") or _get_env_var(
            "DAILYLEDGER_STORAGE_BACKEND", default="memory"
        )
        redis_url = overrides.get("redis_url") or _get_env_var("DAILYLEDGER_REDIS_URL")
        storage_path = overrides.get("storage_path") or _get_env_var(
            "DAILYLEDGER_STORAGE_PATH", default=cls.storage_path
        )
        rate_feed_url = overrides.get("rate_feed_url") or _get_env_var(
            "DAILYLEDGER_RATE_FEED_URL", default=cls.rate_feed_url
        )
        currency_symbol = overrides.get("currency_symbol") or _get_env_var(
            "DAILYLEDGER_CURRENCY", default=cls.currency_symbol
        )
        report_dir = overrides.get("report_dir") or _get_env_var(
            "DAILYLEDGER_REPORT_DIR", default=cls.report_dir
        )
        log_level = overrides.get("log_level") or _get_env_var(
            "DAILYLEDGER_LOG_LEVEL", default="INFO"
        )
        env = overrides.get("env") or _get_env_var("DAILYLEDGER_ENV", default="development")

        return cls(
            fee_rate=fee_rate,
            business_utc_offset_hours=offset,
            min_reference_length=min_length,
            duplicate_scope=scope,
            storage_backend=storage_backend,  # type: ignore
            redis_url=redis_url,
            storage_path=storage_path,  # type: ignore
            payments_collection=overrides.get("payments_collection", cls.payments_collection),
            agents_collection=overrides.get("agents_collection", cls.agents_collection),
            rate_feed_url=rate_feed_url,  # type: ignore
            official_rate_source=overrides.get("official_rate_source", cls.official_rate_source),
            parallel_rate_source=overrides.get("parallel_rate_source", cls.parallel_rate_source),
            rate_source_field=overrides.get("rate_source_field", cls.rate_source_field),
            rate_value_field=overrides.get("rate_value_field", cls.rate_value_field),
            http_timeout=overrides.get("http_timeout", cls.http_timeout),
            currency_symbol=currency_symbol,  # type: ignore
            report_dir=report_dir,  # type: ignore
            log_level=log_level,  # type: ignore
            env=env,  # type: ignore
        )

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(updates)
        return Config(**current)

    def storage_options(self) -> dict[str, Any]:
        """Constructor arguments for the configured storage backend."""
        if self.storage_backend == "redis":
            return {"redis_url": self.redis_url}
        if self.storage_backend == "file":
            return {
                "path": self.storage_path,
                "storage_keys": {
                    self.payments_collection: "dailyPayments",
                    self.agents_collection: "agentsList_v2",
                },
                "seed": {
                    self.agents_collection: [{"name": name} for name in DEFAULT_AGENTS],
                },
            }
        return {}
