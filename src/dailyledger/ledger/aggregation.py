"""
Derived views over a payment snapshot.

Every function here is pure: it reads an ordered sequence of payments and
returns new values without touching its input, so calling it twice on the
same snapshot yields identical results.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from dailyledger.core.config import BUSINESS_UTC_OFFSET_HOURS, FEE_RATE
from dailyledger.core.exceptions import ValidationError
from dailyledger.core.types import (
    AgentSummary,
    AgentTotals,
    DuplicateScope,
    LedgerStats,
    Payment,
    RangeStats,
)
from dailyledger.ledger.business_day import business_date, parse_business_date


def amount_text(amount: Decimal) -> str:
    """Plain string form of an amount, without trailing zeros ("100", "100.5")."""
    normalized = amount.normalize()
    return format(normalized, "f")


def filter_by_date(
    payments: Iterable[Payment],
    selected_date: str | None,
    offset_hours: int = BUSINESS_UTC_OFFSET_HOURS,
) -> list[Payment]:
    """Payments whose business date equals `selected_date`; all of them if no date."""
    if not selected_date:
        return list(payments)
    return [p for p in payments if business_date(p.timestamp, offset_hours) == selected_date]


def _split(total: Decimal, fee_rate: Decimal) -> tuple[Decimal, Decimal]:
    profit = total * fee_rate
    return profit, total - profit


def compute_stats(payments: Iterable[Payment], fee_rate: Decimal = FEE_RATE) -> LedgerStats:
    """Total, fee, net remainder and per-agent breakdown of `payments`."""
    total = Decimal("0")
    grouped: dict[str, tuple[Decimal, int, list[str]]] = {}

    for payment in payments:
        total += payment.amount
        agent_total, count, refs = grouped.get(payment.agent, (Decimal("0"), 0, []))
        refs.append(payment.reference)
        grouped[payment.agent] = (agent_total + payment.amount, count + 1, refs)

    profit, net_remainder = _split(total, fee_rate)
    per_agent = {
        agent: AgentSummary(total=agent_total, count=count, references=tuple(refs))
        for agent, (agent_total, count, refs) in grouped.items()
    }
    return LedgerStats(total=total, profit=profit, net_remainder=net_remainder, per_agent=per_agent)


def range_stats(
    payments: Iterable[Payment],
    start_date: str,
    end_date: str,
    fee_rate: Decimal = FEE_RATE,
    offset_hours: int = BUSINESS_UTC_OFFSET_HOURS,
) -> RangeStats:
    """
    Statistics over every payment whose business date is in [start_date, end_date].

    Raises:
        ValidationError: If a date is malformed or the range is reversed
    """
    start = parse_business_date(start_date)
    end = parse_business_date(end_date)
    if start > end:
        raise ValidationError(
            f"Start date {start_date} is after end date {end_date}",
            details={"start_date": start_date, "end_date": end_date},
        )
    # Both sides are canonical YYYY-MM-DD strings, so string order is date order
    start_key, end_key = start.isoformat(), end.isoformat()

    total = Decimal("0")
    per_agent: dict[str, AgentTotals] = {}
    for payment in payments:
        if not start_key <= business_date(payment.timestamp, offset_hours) <= end_key:
            continue
        total += payment.amount
        current = per_agent.get(payment.agent, AgentTotals())
        per_agent[payment.agent] = AgentTotals(
            total=current.total + payment.amount, count=current.count + 1
        )

    profit, net_remainder = _split(total, fee_rate)
    return RangeStats(
        start_date=start_key,
        end_date=end_key,
        total=total,
        profit=profit,
        net_remainder=net_remainder,
        per_agent=per_agent,
    )


def filter_history(payments: Iterable[Payment], term: str = "") -> list[Payment]:
    """History view: match agent, reference or amount text, case-insensitively."""
    needle = term.lower()
    if not needle:
        return list(payments)
    return [
        p
        for p in payments
        if needle in p.agent.lower()
        or needle in p.reference.lower()
        or needle in amount_text(p.amount).lower()
    ]


def filter_summary(payments: Iterable[Payment], term: str = "") -> list[Payment]:
    """Summary view (per payment): match agent or reference, case-insensitively."""
    needle = term.lower()
    if not needle:
        return list(payments)
    return [p for p in payments if needle in p.agent.lower() or needle in p.reference.lower()]


def summarize_agents(
    per_agent: dict[str, AgentSummary],
    term: str = "",
) -> list[tuple[str, AgentSummary]]:
    """
    Summary view (per agent): groups whose name or any reference matches.

    Sorted by descending total; ties keep first-seen order.
    """
    needle = term.lower()
    matches = [
        (agent, summary)
        for agent, summary in per_agent.items()
        if not needle
        or needle in agent.lower()
        or any(needle in ref.lower() for ref in summary.references)
    ]
    return sorted(matches, key=lambda item: item[1].total, reverse=True)


def find_duplicate(
    payments: Sequence[Payment],
    reference: str,
    exclude_id: str | None = None,
    scope: DuplicateScope = DuplicateScope.GLOBAL,
    on_date: str | None = None,
    offset_hours: int = BUSINESS_UTC_OFFSET_HOURS,
) -> Payment | None:
    """
    First payment (in snapshot order) already using `reference`.

    Args:
        payments: Snapshot in store order
        reference: Exact, case-sensitive reference to look for
        exclude_id: Payment being edited, which may keep its own reference
        scope: GLOBAL checks every payment; BUSINESS_DAY only those on `on_date`
        on_date: Business date of the entry, used with BUSINESS_DAY scope
    """
    for payment in payments:
        if payment.reference != reference or payment.id == exclude_id:
            continue
        if (
            scope == DuplicateScope.BUSINESS_DAY
            and on_date
            and business_date(payment.timestamp, offset_hours) != on_date
        ):
            continue
        return payment
    return None
