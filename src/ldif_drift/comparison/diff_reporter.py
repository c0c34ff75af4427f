"""Diff Reporter - console report, detailed entry diffs (text / JSONL) and JSON results."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, TextIO

from ldif_drift.domain.stats import ComparisonResult, EntryDiff, LdifStats

logger = logging.getLogger(__name__)


class DiffReporter:
    """Render comparison results for people (console, text) and machines (JSON, JSONL)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    @staticmethod
    def format_stats(stats: LdifStats, indent: str = "") -> List[str]:
        return [
            f"{indent}Total entries: {stats.total_entries}",
            f"{indent}  - Add operations: {stats.total_add_operations}",
            f"{indent}  - Modify operations: {stats.total_modify_operations}",
            f"{indent}  - Delete operations: {stats.total_delete_operations}",
            f"{indent}  - ModDn operations: {stats.total_moddn_operations}",
            f"{indent}Total attributes: {stats.total_attributes}",
            f"{indent}Average attributes per entry: {stats.average_attributes_per_entry:.2f}",
            f"{indent}Unique attribute types: {len(stats.attribute_counts)}",
        ]

    def format_comparison(
        self, result: ComparisonResult, detailed_diff_path: str | None = None
    ) -> List[str]:
        lines = [
            "=== LDIF Comparison Report ===",
            "",
            result.message,
            "",
            "Baseline Statistics:",
            *self.format_stats(result.baseline_stats, "  "),
            "",
            "New File Statistics:",
            *self.format_stats(result.new_stats, "  "),
            "",
        ]

        if result.differences:
            lines.append("Detected Differences:")
            lines.extend(result.differences)
            lines.append("")

        if result.entry_diffs:
            lines.append(f"Entry-level differences: {len(result.entry_diffs)} entries changed")
            if detailed_diff_path:
                fmt = "JSONL" if self.is_jsonl_path(detailed_diff_path) else "text"
                lines.append(f"Detailed diff written to: {detailed_diff_path} ({fmt} format)")
            else:
                lines.append("(Use --output flag to save detailed differences to a file)")
                lines.append("(Use .jsonl extension for machine-readable JSON Lines format)")
            lines.append("")

        lines.append("=== End of Report ===")
        return lines

    def print_comparison(
        self, result: ComparisonResult, detailed_diff_path: str | None = None
    ) -> None:
        """Print the console report, writing the detailed diff first when a path is given."""
        if detailed_diff_path and result.entry_diffs:
            self.write_detailed_diff(result.entry_diffs, detailed_diff_path)
        for line in self.format_comparison(result, detailed_diff_path):
            print(line, file=self.stream)

    @staticmethod
    def is_jsonl_path(path: str | Path) -> bool:
        return str(path).lower().endswith(".jsonl")

    @staticmethod
    def generate_text_diff(entry_diffs: List[EntryDiff]) -> str:
        lines = ["=== Detailed Entry-Level Differences ===", ""]

        for diff in entry_diffs:
            lines.append(f"[{diff.change_type.upper()}] {diff.dn}")
            if diff.baseline_operations:
                lines.append(
                    f"  Baseline: {', '.join(diff.baseline_operations)} operation(s), "
                    f"{diff.baseline_attr_count} attribute(s)"
                )
            if diff.new_operations:
                lines.append(
                    f"  New:      {', '.join(diff.new_operations)} operation(s), "
                    f"{diff.new_attr_count} attribute(s)"
                )
            if diff.attribute_differences:
                lines.append("  Attributes:")
                lines.extend(f"    {attr_diff}" for attr_diff in diff.attribute_differences)
            lines.append("")

        lines.append(f"Total differences: {len(entry_diffs)} entries")
        return "\n".join(lines) + "\n"

    @staticmethod
    def generate_jsonl_diff(entry_diffs: List[EntryDiff]) -> str:
        return "".join(
            json.dumps(diff.to_dict(), ensure_ascii=False, separators=(",", ":")) + "\n"
            for diff in entry_diffs
        )

    def write_detailed_diff(self, entry_diffs: List[EntryDiff], output_path: str | Path) -> Path:
        """Write entry diffs as JSON Lines for a .jsonl path, as text otherwise."""
        output_path = Path(output_path)
        if self.is_jsonl_path(output_path):
            content = self.generate_jsonl_diff(entry_diffs)
        else:
            content = self.generate_text_diff(entry_diffs)

        with output_path.open("w", encoding="utf-8", newline="\n") as f:
            f.write(content)

        logger.info("Wrote %d entry diffs to %s", len(entry_diffs), output_path)
        return output_path

    @staticmethod
    def generate_json_report(result: ComparisonResult) -> str:
        return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    def write_json_report(self, result: ComparisonResult, output_path: str | Path) -> Path:
        output_path = Path(output_path)
        output_path.write_text(self.generate_json_report(result) + "\n", encoding="utf-8")
        logger.info("Wrote comparison result: %s", output_path)
        return output_path
