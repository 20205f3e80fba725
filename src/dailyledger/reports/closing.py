"""Plain-text closing report produced when the day is closed."""

from __future__ import annotations

from decimal import Decimal

from dailyledger.core.config import FEE_RATE
from dailyledger.core.types import AgentSummary, LedgerStats
from dailyledger.reports.formatting import format_money, format_percent


def build_closing_report(
    report_date: str | None,
    stats: LedgerStats,
    summary: list[tuple[str, AgentSummary]],
    fee_rate: Decimal = FEE_RATE,
    currency_symbol: str = "Bs.",
) -> str:
    """
    Human-readable report of the day's totals and per-agent breakdown.

    Args:
        report_date: Business date the figures belong to (None for all dates)
        stats: Statistics for that date
        summary: Agent rows in display order
    """
    lines = [
        f"REPORT {report_date or 'ALL DATES'}",
        "",
        f"Total: {format_money(stats.total, currency_symbol)}",
        f"Fee ({format_percent(fee_rate)}): {format_money(stats.profit, currency_symbol)}",
        f"Net remainder: {format_money(stats.net_remainder, currency_symbol)}",
        "",
        "Detail:",
    ]
    for agent, data in summary:
        noun = "payment" if data.count == 1 else "payments"
        lines.append(f"- {agent}: {format_money(data.total, currency_symbol)} ({data.count} {noun})")
    return "\n".join(lines)
