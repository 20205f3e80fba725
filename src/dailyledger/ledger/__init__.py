"""
Ledger module - the payment projection and its derived views.

Provides the PaymentLedger state object, the pure aggregation functions it
is built on, and the entry form that feeds it.
"""

from dailyledger.ledger.business_day import (
    business_date,
    business_time,
    business_today,
    business_tz,
    parse_business_date,
    stamp_for_business_date,
)
from dailyledger.ledger.aggregation import (
    amount_text,
    compute_stats,
    filter_by_date,
    filter_history,
    filter_summary,
    find_duplicate,
    range_stats,
    summarize_agents,
)
from dailyledger.ledger.ledger import PaymentLedger
from dailyledger.ledger.form import EntryForm

__all__ = [
    "PaymentLedger",
    "EntryForm",
    # Business day
    "business_date",
    "business_time",
    "business_today",
    "business_tz",
    "parse_business_date",
    "stamp_for_business_date",
    # Aggregation
    "amount_text",
    "compute_stats",
    "filter_by_date",
    "filter_history",
    "filter_summary",
    "find_duplicate",
    "range_stats",
    "summarize_agents",
]
