"""
Type definitions for dailyledger.

This module contains the enums, data classes, and type aliases used
throughout the library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, TypeAlias

# Type alias for flexible amount input
AmountType: TypeAlias = Decimal | int | float | str


class DuplicateScope(str, Enum):
    """Which payments a reference has to be unique against."""

    GLOBAL = "global"
    BUSINESS_DAY = "business_day"

    @classmethod
    def from_string(cls, value: str) -> DuplicateScope:
        value_lower = value.lower().replace("-", "_")
        for member in cls:
            if member.value == value_lower:
                return member
        raise ValueError(f"Unknown duplicate scope: {value}. Supported: {[s.value for s in cls]}")


class RateStatus(str, Enum):
    """Lifecycle of the advisory exchange-rate display."""

    LOADING = "loading"
    LOADED = "loaded"


@dataclass(frozen=True)
class OrderBy:
    """Ordering requested from a store subscription or query."""

    field: str
    descending: bool = False


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class Payment:
    """
    One collected payment.

    Attributes:
        id: Store-assigned identifier
        agent: Name of the collecting agent
        amount: Amount in local currency units
        reference: Bank reference, unique across payments
        timestamp: Timezone-aware moment the payment is booked at
    """

    id: str
    agent: str
    amount: Decimal
    reference: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to document fields for storage (the id is the store key)."""
        return {
            "agent": self.agent,
            "amount": str(self.amount),
            "reference": self.reference,
            "timestamp": self.timestamp.astimezone(timezone.utc).isoformat(
                timespec="milliseconds"
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], payment_id: str | None = None) -> Payment:
        """Create a Payment from a stored document."""
        doc_id = payment_id or data.get("_key") or data.get("id")
        if not doc_id:
            raise ValueError("Payment document has no id")
        return cls(
            id=str(doc_id),
            agent=str(data["agent"]),
            amount=Decimal(str(data["amount"])),
            reference=str(data["reference"]),
            timestamp=_parse_timestamp(data["timestamp"]),
        )


@dataclass(frozen=True)
class AgentSummary:
    """Per-agent aggregate inside a date-filtered view."""

    total: Decimal = Decimal("0")
    count: int = 0
    references: tuple[str, ...] = ()

    @property
    def last_reference(self) -> str | None:
        return self.references[-1] if self.references else None


@dataclass(frozen=True)
class AgentTotals:
    """Per-agent aggregate for range statistics (no reference list)."""

    total: Decimal = Decimal("0")
    count: int = 0


@dataclass(frozen=True)
class LedgerStats:
    """
    Aggregate statistics over a set of payments.

    Attributes:
        total: Sum of all amounts
        profit: Fee earned on the total (total x fee rate)
        net_remainder: What is left after the fee (total - profit)
        per_agent: Agent name -> AgentSummary, in first-seen order
    """

    total: Decimal = Decimal("0")
    profit: Decimal = Decimal("0")
    net_remainder: Decimal = Decimal("0")
    per_agent: dict[str, AgentSummary] = field(default_factory=dict)

    @property
    def payment_count(self) -> int:
        return sum(s.count for s in self.per_agent.values())


@dataclass(frozen=True)
class RangeStats:
    """Aggregate statistics over an inclusive range of business dates."""

    start_date: str
    end_date: str
    total: Decimal = Decimal("0")
    profit: Decimal = Decimal("0")
    net_remainder: Decimal = Decimal("0")
    per_agent: dict[str, AgentTotals] = field(default_factory=dict)


@dataclass(frozen=True)
class RateSnapshot:
    """Advisory exchange rates as last fetched."""

    status: RateStatus = RateStatus.LOADING
    official: Decimal = Decimal("0")
    parallel: Decimal = Decimal("0")
    fetched_at: datetime | None = None

    @property
    def is_loaded(self) -> bool:
        return self.status == RateStatus.LOADED
