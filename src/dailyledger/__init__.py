"""
dailyledger - Daily cash collection ledger for payment agents.

Tracks payments collected by named agents, splits the fixed collection fee,
and produces closing reports.

Usage:
    >>> from dailyledger import DailyLedger
    >>>
    >>> async with DailyLedger() as app:
    ...     await app.ledger.submit(agent="Agente 1", amount="100", reference="9999")
    ...     stats = app.ledger.stats()
    ...     print(stats.total, stats.profit, stats.net_remainder)
"""

# The ledger package is imported first; guards and reports depend on its
# aggregation helpers.
from dailyledger.ledger import EntryForm, PaymentLedger, business_date
from dailyledger.client import DailyLedger
from dailyledger.core.config import Config
from dailyledger.core.events import LedgerEvent, LedgerEventType
from dailyledger.core.exceptions import (
    ConfigurationError,
    ConfirmationError,
    DailyLedgerError,
    DuplicateReferenceError,
    InvalidAmountError,
    MissingFieldsError,
    NetworkError,
    OfflineError,
    PaymentNotFoundError,
    ReferenceTooShortError,
    ReportError,
    StoreError,
    ValidationError,
)
from dailyledger.core.types import (
    AgentSummary,
    AgentTotals,
    DuplicateScope,
    LedgerStats,
    OrderBy,
    Payment,
    RangeStats,
    RateSnapshot,
    RateStatus,
)
from dailyledger.rates import RateFeed
from dailyledger.reports import ReportExporter
from dailyledger.storage import InMemoryStorage, JsonFileStorage, RedisStorage, get_storage

__version__ = "0.1.0"
__all__ = [
    # Main Client
    "DailyLedger",
    "PaymentLedger",
    "EntryForm",
    "business_date",
    # Config
    "Config",
    # Types
    "Payment",
    "AgentSummary",
    "AgentTotals",
    "LedgerStats",
    "RangeStats",
    "DuplicateScope",
    "OrderBy",
    "RateSnapshot",
    "RateStatus",
    # Events
    "LedgerEvent",
    "LedgerEventType",
    # Collaborators
    "RateFeed",
    "ReportExporter",
    "InMemoryStorage",
    "JsonFileStorage",
    "RedisStorage",
    "get_storage",
    # Exceptions
    "DailyLedgerError",
    "ConfigurationError",
    "ValidationError",
    "MissingFieldsError",
    "ReferenceTooShortError",
    "DuplicateReferenceError",
    "InvalidAmountError",
    "PaymentNotFoundError",
    "StoreError",
    "OfflineError",
    "ConfirmationError",
    "NetworkError",
    "ReportError",
]
