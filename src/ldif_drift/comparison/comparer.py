"""
Comparison Engine

Decides whether a new LDIF file is a safe evolution of a baseline:
1. entity count change vs entity threshold
2. total attribute count change vs attribute threshold
3. average attributes per entry change vs average threshold
4. attribute distribution changes (informational only)
5. entry-level diffs (informational only)

Only checks 1-3 can fail the verdict.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

from ldif_drift.analysis.aggregator import analyze_file
from ldif_drift.comparison.differ import compare_distribution, generate_entry_diffs
from ldif_drift.comparison.percent import format_percent, percent_diff
from ldif_drift.config.settings import Thresholds
from ldif_drift.domain.stats import ComparisonResult, LdifStats
from ldif_drift.exceptions import LdifFileError
from ldif_drift.utils.logger import get_logger, log_operation

logger = get_logger(__name__)

DEFAULT_ENTITY_THRESHOLD_PERCENT = 10.0
DEFAULT_ATTRIBUTE_THRESHOLD_PERCENT = 10.0
DEFAULT_AVG_ATTRIBUTES_THRESHOLD_PERCENT = 15.0

MAX_DISTRIBUTION_LINES = 10

GOOD_MESSAGE = "✓ New LDIF file appears good - within acceptable thresholds"
BAD_MESSAGE = "✗ New LDIF file has significant differences from baseline"


def compare_stats(
    baseline: LdifStats,
    new: LdifStats,
    entity_threshold_percent: float = DEFAULT_ENTITY_THRESHOLD_PERCENT,
    attribute_threshold_percent: float = DEFAULT_ATTRIBUTE_THRESHOLD_PERCENT,
    avg_attributes_threshold_percent: float = DEFAULT_AVG_ATTRIBUTES_THRESHOLD_PERCENT,
) -> ComparisonResult:
    """
    Compare two analysed files.

    Args:
        baseline: Statistics of the known-good file
        new: Statistics of the candidate file
        entity_threshold_percent: Tolerated change in record count
        attribute_threshold_percent: Tolerated change in total attribute values
        avg_attributes_threshold_percent: Tolerated change in average values per record

    Returns:
        ComparisonResult with verdict, ordered differences and entry diffs
    """
    result = ComparisonResult(is_good=True, baseline_stats=baseline, new_stats=new)

    entity_change = percent_diff(baseline.total_entries, new.total_entries)
    if abs(entity_change) > entity_threshold_percent:
        result.is_good = False
        result.differences.append(
            f"Entity count difference: {format_percent(entity_change)}% "
            f"(baseline: {baseline.total_entries}, new: {new.total_entries})"
        )

    attribute_change = percent_diff(baseline.total_attributes, new.total_attributes)
    if abs(attribute_change) > attribute_threshold_percent:
        result.is_good = False
        result.differences.append(
            f"Total attribute count difference: {format_percent(attribute_change)}% "
            f"(baseline: {baseline.total_attributes}, new: {new.total_attributes})"
        )

    avg_change = percent_diff(
        baseline.average_attributes_per_entry, new.average_attributes_per_entry
    )
    if abs(avg_change) > avg_attributes_threshold_percent:
        result.is_good = False
        result.differences.append(
            f"Average attributes per entry difference: {format_percent(avg_change)}% "
            f"(baseline: {baseline.average_attributes_per_entry:.2f}, "
            f"new: {new.average_attributes_per_entry:.2f})"
        )

    distribution = compare_distribution(baseline.attribute_counts, new.attribute_counts)
    if distribution:
        result.differences.append("Attribute distribution changes:")
        result.differences.extend(f"  {line}" for line in distribution[:MAX_DISTRIBUTION_LINES])
        if len(distribution) > MAX_DISTRIBUTION_LINES:
            result.differences.append(
                f"  ... and {len(distribution) - MAX_DISTRIBUTION_LINES} more"
            )

    result.entry_diffs = generate_entry_diffs(baseline, new)
    result.message = GOOD_MESSAGE if result.is_good else BAD_MESSAGE

    logger.info(
        "Compared LDIF statistics",
        operation="compare_stats",
        context={
            "is_good": result.is_good,
            "violations": len(result.differences),
            "entry_diffs": len(result.entry_diffs),
        },
    )
    return result


@log_operation("compare_files")
def compare_files(
    baseline_path: Union[str, Path],
    new_path: Union[str, Path],
    thresholds: Optional[Thresholds] = None,
    encoding: str = "utf-8",
    skip_invalid: bool = False,
) -> ComparisonResult:
    """
    Analyse two LDIF files and compare them.

    Both files are checked before any analysis starts; the two analyses then run
    on separate threads since they share no state.

    Raises:
        LdifFileError: If either file is missing
        LdifParseError: On malformed input unless skip_invalid
    """
    thresholds = thresholds or Thresholds()

    if not Path(baseline_path).is_file():
        raise LdifFileError(str(baseline_path), "Baseline LDIF file not found")
    if not Path(new_path).is_file():
        raise LdifFileError(str(new_path), "New LDIF file not found")

    with ThreadPoolExecutor(max_workers=2) as executor:
        baseline_future = executor.submit(analyze_file, baseline_path, encoding, skip_invalid)
        new_future = executor.submit(analyze_file, new_path, encoding, skip_invalid)
        baseline_stats = baseline_future.result()
        new_stats = new_future.result()

    return compare_stats(
        baseline_stats,
        new_stats,
        entity_threshold_percent=thresholds.entity_percent,
        attribute_threshold_percent=thresholds.attribute_percent,
        avg_attributes_threshold_percent=thresholds.avg_attributes_percent,
    )
