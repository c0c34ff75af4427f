"""Threshold comparison, entry diffs and reports."""

from .comparer import (
    BAD_MESSAGE,
    GOOD_MESSAGE,
    MAX_DISTRIBUTION_LINES,
    compare_files,
    compare_stats,
)
from .diff_analyzer import EntryDiffAnalyzer
from .diff_reporter import DiffReporter
from .differ import (
    SIGNIFICANT_ATTRIBUTE_CHANGE_PERCENT,
    compare_distribution,
    compare_entry_attributes,
    generate_entry_diffs,
)
from .percent import format_percent, percent_diff

__all__ = [
    "BAD_MESSAGE",
    "GOOD_MESSAGE",
    "MAX_DISTRIBUTION_LINES",
    "compare_files",
    "compare_stats",
    "EntryDiffAnalyzer",
    "DiffReporter",
    "SIGNIFICANT_ATTRIBUTE_CHANGE_PERCENT",
    "compare_distribution",
    "compare_entry_attributes",
    "generate_entry_diffs",
    "format_percent",
    "percent_diff",
]
