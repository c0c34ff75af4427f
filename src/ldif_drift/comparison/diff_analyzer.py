"""
Entry Diff Analyzer - explore an entry-diff JSON Lines file.

Loads the JSONL written by DiffReporter and produces summary, per-change-type
samples, DN search results and a CSV export.
"""

from __future__ import annotations

import csv
import json
import logging
from collections import Counter
from pathlib import Path
from typing import List

from ldif_drift.domain.stats import ChangeType, EntryDiff
from ldif_drift.exceptions import LdifFileError

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10
MODIFIED_SAMPLE_SIZE = 5
MODIFIED_DIFF_LINES = 3
FIND_LIMIT = 20

CSV_HEADER = [
    "DN",
    "Change Type",
    "Baseline Operations",
    "New Operations",
    "Baseline Attr Count",
    "New Attr Count",
    "Attr Changes",
]


class EntryDiffAnalyzer:
    """Reports over a list of entry diffs."""

    def __init__(self, diffs: List[EntryDiff], skipped_lines: int = 0) -> None:
        self.diffs = diffs
        self.skipped_lines = skipped_lines

    @classmethod
    def from_jsonl(cls, path: str | Path) -> "EntryDiffAnalyzer":
        """
        Load entry diffs from a JSON Lines file.

        Lines that are not valid entry diffs are skipped with a warning.

        Raises:
            LdifFileError: If the file cannot be read
        """
        path = Path(path)
        if not path.is_file():
            raise LdifFileError(str(path), "Entry diff file not found")

        diffs: List[EntryDiff] = []
        skipped = 0
        try:
            with path.open("r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        diffs.append(EntryDiff.from_dict(json.loads(line)))
                    except (json.JSONDecodeError, ValueError, TypeError, AttributeError) as e:
                        skipped += 1
                        logger.warning("Error parsing line %d: %s", line_number, e)
        except OSError as e:
            raise LdifFileError(str(path), f"Cannot read entry diff file ({e})") from e

        return cls(diffs, skipped)

    def _of_type(self, change_type: ChangeType) -> List[EntryDiff]:
        return [d for d in self.diffs if d.change_type == change_type.value]

    def summary_lines(self) -> List[str]:
        counts = Counter(d.change_type for d in self.diffs)
        lines = ["=== Summary Report ===", "", f"Total differences: {len(self.diffs)}"]
        lines.extend(f"  {change_type}: {counts[change_type]}" for change_type in sorted(counts))
        lines.append("")
        return lines

    def _one_sided_lines(self, change_type: ChangeType, title: str, label: str) -> List[str]:
        selected = self._of_type(change_type)
        lines = [f"=== {title} ===", "", f"Total {label}: {len(selected)}"]

        if selected:
            lines.append("")
            lines.append(f"Sample entries (first {SAMPLE_SIZE}):")
            for diff in selected[:SAMPLE_SIZE]:
                if change_type is ChangeType.ADDED:
                    operations, attr_count = diff.new_operations, diff.new_attr_count
                else:
                    operations, attr_count = diff.baseline_operations, diff.baseline_attr_count
                lines.append(f"  - {diff.dn}")
                if operations:
                    lines.append(f"    Operations: {', '.join(operations)}")
                lines.append(f"    Attributes: {attr_count or 0}")

        lines.append("")
        return lines

    def added_lines(self) -> List[str]:
        return self._one_sided_lines(ChangeType.ADDED, "Added Entries", "added")

    def removed_lines(self) -> List[str]:
        return self._one_sided_lines(ChangeType.REMOVED, "Removed Entries", "removed")

    def modified_lines(self) -> List[str]:
        modified = self._of_type(ChangeType.MODIFIED)
        lines = ["=== Modified Entries ===", "", f"Total modified: {len(modified)}"]

        if modified:
            markers = Counter(
                attr_diff.strip()[:1]
                for diff in modified
                for attr_diff in diff.attribute_differences
            )
            lines.extend(
                [
                    "",
                    "Attribute changes:",
                    f"  Added attributes: {markers['+']}",
                    f"  Removed attributes: {markers['-']}",
                    f"  Modified attributes: {markers['~']}",
                    "",
                    f"Sample modified entries (first {MODIFIED_SAMPLE_SIZE}):",
                ]
            )
            for diff in modified[:MODIFIED_SAMPLE_SIZE]:
                lines.append(f"  - {diff.dn}")
                for attr_diff in diff.attribute_differences[:MODIFIED_DIFF_LINES]:
                    lines.append(f"    {attr_diff.strip()}")
                extra = len(diff.attribute_differences) - MODIFIED_DIFF_LINES
                if extra > 0:
                    lines.append(f"    ... and {extra} more")

        lines.append("")
        return lines

    def find(self, pattern: str) -> List[EntryDiff]:
        """Entries whose DN contains pattern, ignoring case."""
        needle = pattern.lower()
        return [d for d in self.diffs if needle in d.dn.lower()]

    def find_lines(self, pattern: str) -> List[str]:
        matches = self.find(pattern)
        lines = [f"=== Entries matching '{pattern}' ===", "", f"Found {len(matches)} matching entries"]

        if matches:
            lines.append("")
            for diff in matches[:FIND_LIMIT]:
                lines.append(f"  [{diff.change_type}] {diff.dn}")
                if diff.attribute_differences:
                    lines.append(f"    {len(diff.attribute_differences)} attribute changes")
            if len(matches) > FIND_LIMIT:
                lines.append(f"  ... and {len(matches) - FIND_LIMIT} more")

        lines.append("")
        return lines

    def export_csv(self, output_path: str | Path) -> Path:
        output_path = Path(output_path)
        with output_path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for diff in self.diffs:
                writer.writerow(
                    [
                        diff.dn,
                        diff.change_type,
                        ";".join(diff.baseline_operations or []),
                        ";".join(diff.new_operations or []),
                        diff.baseline_attr_count or 0,
                        diff.new_attr_count or 0,
                        len(diff.attribute_differences),
                    ]
                )

        logger.info("Exported %d entries to %s", len(self.diffs), output_path)
        return output_path
