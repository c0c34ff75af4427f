"""Per-file LDIF statistics and change summaries."""

from .aggregator import (
    StatsAggregator,
    analyze_file,
    analyze_records,
    analyze_text,
    read_ldif_text,
)
from .summary import ChangeSummary, SummaryAggregator, format_summary

__all__ = [
    "ChangeSummary",
    "StatsAggregator",
    "SummaryAggregator",
    "analyze_file",
    "analyze_records",
    "analyze_text",
    "format_summary",
    "read_ldif_text",
]
