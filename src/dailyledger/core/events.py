"""
Ledger event types.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable


class LedgerEventType(str, Enum):
    """Things the ledger announces to its listeners."""

    PAYMENT_CREATED = "payment.created"
    PAYMENT_UPDATED = "payment.updated"
    PAYMENT_DELETED = "payment.deleted"
    AGENT_REGISTERED = "agent.registered"
    DAY_CLOSED = "day.closed"
    SNAPSHOT_APPLIED = "snapshot.applied"


@dataclass(frozen=True)
class LedgerEvent:
    """
    A single ledger notification.

    `data` carries event-specific fields (payment id, agent name, report
    text) while `type` allows listeners to dispatch without inspecting it.
    """

    type: LedgerEventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventListener = Callable[[LedgerEvent], None]
