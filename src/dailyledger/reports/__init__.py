"""
Reports - closing text and PDF export.
"""

from dailyledger.reports.closing import build_closing_report
from dailyledger.reports.exporter import ReportExporter
from dailyledger.reports.formatting import format_money, format_percent

__all__ = [
    "ReportExporter",
    "build_closing_report",
    "format_money",
    "format_percent",
]
