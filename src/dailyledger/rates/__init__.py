"""Advisory exchange rates shown alongside the ledger."""

from dailyledger.rates.feed import RateFeed

__all__ = ["RateFeed"]
