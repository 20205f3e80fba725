"""
PDF export of the filtered ledger.

The report is written as Markdown, converted to HTML with python-markdown
and laid out on paginated A4 pages by WeasyPrint.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from html import escape
from pathlib import Path

import markdown

from dailyledger.core.config import BUSINESS_UTC_OFFSET_HOURS, FEE_RATE
from dailyledger.core.exceptions import ReportError
from dailyledger.core.logging import get_logger
from dailyledger.core.types import LedgerStats, Payment
from dailyledger.ledger.business_day import business_time
from dailyledger.reports.formatting import format_money, format_percent

logger = get_logger("reports")

REPORT_CSS = """
    @page {
        size: A4;
        margin: 2cm;
        @bottom-right {
            content: counter(page) " / " counter(pages);
            font-family: 'Helvetica', sans-serif;
            font-size: 9pt;
        }
    }
    body {
        font-family: 'Helvetica', 'Arial', sans-serif;
        line-height: 1.5;
        color: #333;
        font-size: 10pt;
    }
    h1 {
        color: #047857;
        border-bottom: 2px solid #047857;
        padding-bottom: 8px;
    }
    table {
        border-collapse: collapse;
        width: 100%;
        margin-bottom: 20px;
    }
    thead { display: table-header-group; }
    tr { page-break-inside: avoid; }
    th, td {
        border: 1px solid #ddd;
        padding: 6px;
        text-align: left;
    }
    th {
        background-color: #f2f2f2;
    }
    tr:nth-child(even) {background-color: #f9f9f9;}
"""


def _cell(value: str) -> str:
    # Pipes would split a Markdown table cell
    return escape(value).replace("|", "\\|")


class ReportExporter:
    """
    Renders ledger statistics and a payment list into a PDF.

    Pure with respect to the ledger: it only reads what it is given.
    """

    def __init__(
        self,
        output_dir: str | Path = ".",
        fee_rate: Decimal = FEE_RATE,
        currency_symbol: str = "Bs.",
        offset_hours: int = BUSINESS_UTC_OFFSET_HOURS,
        title: str = "Payment Control",
    ) -> None:
        self.output_dir = Path(output_dir)
        self.fee_rate = fee_rate
        self.currency_symbol = currency_symbol
        self.offset_hours = offset_hours
        self.title = title

    @staticmethod
    def filename_for(report_date: str | None) -> str:
        """File name derived from the active filter date."""
        return f"payments-report-{report_date or 'all'}.pdf"

    def render_markdown(
        self,
        report_date: str | None,
        stats: LedgerStats,
        payments: Sequence[Payment],
    ) -> str:
        """Header, totals block and payment table as Markdown."""
        def money(amount: Decimal) -> str:
            return format_money(amount, self.currency_symbol)

        lines = [
            f"# {_cell(self.title)} - {report_date or 'All dates'}",
            "",
            "| Total collected | Fee "
            f"({format_percent(self.fee_rate)}) | Net remainder |",
            "|---:|---:|---:|",
            f"| {money(stats.total)} | {money(stats.profit)} | {money(stats.net_remainder)} |",
            "",
            f"{len(payments)} payments",
            "",
            "| Agent | Reference | Time | Amount |",
            "|---|---|---|---:|",
        ]
        for p in payments:
            lines.append(
                f"| {_cell(p.agent)} | {_cell(p.reference)} | "
                f"{business_time(p.timestamp, self.offset_hours)} | {money(p.amount)} |"
            )
        return "\n".join(lines) + "\n"

    def render_html(
        self,
        report_date: str | None,
        stats: LedgerStats,
        payments: Sequence[Payment],
    ) -> str:
        """Complete HTML document for the report."""
        body = markdown.markdown(
            self.render_markdown(report_date, stats, payments), extensions=["tables"]
        )
        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{escape(self.title)} {escape(report_date or '')}</title>
</head>
<body>
    {body}
</body>
</html>
"""

    def _write_pdf(self, html: str, path: Path) -> None:
        from weasyprint import CSS, HTML

        HTML(string=html).write_pdf(str(path), stylesheets=[CSS(string=REPORT_CSS)])

    def export(
        self,
        report_date: str | None,
        stats: LedgerStats,
        payments: Sequence[Payment],
        path: str | Path | None = None,
    ) -> Path:
        """
        Write the report PDF.

        Args:
            report_date: Active filter date, used in the header and file name
            stats: Statistics for the active filter
            payments: Filtered payments in display order
            path: Explicit output path (defaults to output_dir/filename_for(date))

        Returns:
            Path of the written file

        Raises:
            ReportError: If rendering or writing fails
        """
        target = Path(path) if path else self.output_dir / self.filename_for(report_date)
        html = self.render_html(report_date, stats, payments)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._write_pdf(html, target)
        except Exception as e:
            logger.error(f"Failed to export report to {target}: {e}")
            raise ReportError(f"Could not write report: {e}", details={"path": str(target)}) from e

        logger.info(f"Report for {report_date or 'all dates'} written to {target}")
        return target
