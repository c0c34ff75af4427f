"""
Command-line entry point for ldif-drift.

Usage examples:
    ldif-drift analyze export.ldif
    ldif-drift compare baseline.ldif new.ldif -o changes.jsonl --json result.json
    ldif-drift diff baseline.ldif new.ldif changes.diff
    ldif-drift report changes.jsonl --all --csv changes.csv

Exit codes:
    0  success / new file within thresholds
    1  significant differences, or an input file is missing
    2  parse, configuration or other fatal error
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from ldif_drift import __version__
from ldif_drift.analysis.aggregator import analyze_records, read_ldif_text
from ldif_drift.analysis.summary import SummaryAggregator, format_summary
from ldif_drift.comparison.comparer import compare_files
from ldif_drift.comparison.diff_analyzer import EntryDiffAnalyzer
from ldif_drift.comparison.diff_reporter import DiffReporter
from ldif_drift.config.settings import ConfigurationError, Settings
from ldif_drift.exceptions import LdifFileError, LdifParseError
from ldif_drift.parsing.ldif_reader import LdifReader
from ldif_drift.unified.unified_diff import write_unified_diff
from ldif_drift.utils.logger import configure_logging

EXIT_OK = 0
EXIT_DIFFERENCES = 1
EXIT_FATAL = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ldif-drift",
        description="Detect structural drift between LDIF exports.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        help="YAML configuration file (default: $LDIF_DRIFT_CONFIG_FILE).",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level for the JSON logs written to stderr.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    analyze = commands.add_parser(
        "analyze", help="Parse an LDIF file and print its statistics and change summary."
    )
    analyze.add_argument("input", type=Path, help="LDIF file to analyse.")
    analyze.add_argument(
        "output",
        type=Path,
        nargs="?",
        help="JSON Lines file for the parsed records (default: INPUT with .jsonl suffix).",
    )
    analyze.add_argument(
        "--skip-invalid",
        action="store_true",
        default=None,
        help="Skip malformed records instead of failing.",
    )

    compare = commands.add_parser("compare", help="Compare a new LDIF file against a baseline.")
    compare.add_argument("baseline", type=Path, help="Known-good LDIF file.")
    compare.add_argument("new", type=Path, help="Candidate LDIF file.")
    compare.add_argument(
        "-o",
        "--output",
        help="Write entry-level differences here (.jsonl for JSON Lines, text otherwise).",
    )
    compare.add_argument("--json", dest="json_path", help="Write the comparison result as JSON.")
    compare.add_argument("--entity-threshold", type=float, help="Entity count threshold in percent.")
    compare.add_argument(
        "--attribute-threshold", type=float, help="Total attribute count threshold in percent."
    )
    compare.add_argument(
        "--avg-threshold", type=float, help="Average attributes per entry threshold in percent."
    )
    compare.add_argument(
        "--skip-invalid",
        action="store_true",
        default=None,
        help="Skip malformed records instead of failing.",
    )

    diff = commands.add_parser("diff", help="Write a DN-grouped unified diff of two LDIF files.")
    diff.add_argument("baseline", type=Path, help="Baseline LDIF file.")
    diff.add_argument("new", type=Path, help="New LDIF file.")
    diff.add_argument("output", type=Path, help="Output diff file.")

    report = commands.add_parser("report", help="Explore an entry-diff JSON Lines file.")
    report.add_argument("diff_file", type=Path, help="JSONL written by 'compare -o'.")
    report.add_argument("--summary", action="store_true", help="Counts per change type (default).")
    report.add_argument("--added", action="store_true", help="Show added entries.")
    report.add_argument("--removed", action="store_true", help="Show removed entries.")
    report.add_argument("--modified", action="store_true", help="Show modified entries.")
    report.add_argument("--all", action="store_true", help="Show every section.")
    report.add_argument("--find", metavar="PATTERN", help="Entries whose DN contains PATTERN.")
    report.add_argument("--csv", type=Path, help="Export all entries to CSV.")

    return parser.parse_args(argv)


def _skip_invalid(args: argparse.Namespace, settings: Settings) -> bool:
    if args.skip_invalid is not None:
        return args.skip_invalid
    return settings.skip_invalid_records


def _print_lines(lines: List[str]) -> None:
    for line in lines:
        print(line)


def _analyze_output(args: argparse.Namespace) -> Optional[Path]:
    """Records JSONL path; None when it would overwrite the input."""
    if args.output is not None:
        output = args.output
    else:
        output = args.input.with_suffix(".jsonl")
        if output.resolve() == args.input.resolve():
            output = args.input.with_name(f"{args.input.stem}.records.jsonl")
    if output.resolve() == args.input.resolve():
        return None
    return output


def run_analyze(args: argparse.Namespace, settings: Settings) -> int:
    output = _analyze_output(args)
    if output is None:
        print(
            f"[ERROR] Output file would overwrite the input: {args.input}",
            file=sys.stderr,
        )
        return EXIT_FATAL
    text = read_ldif_text(args.input, settings.encoding)

    reader = LdifReader(strict=not _skip_invalid(args, settings))
    records = list(reader.parse(text))
    stats = analyze_records(records)

    summary_aggregator = SummaryAggregator()
    with output.open("w", encoding="utf-8", newline="\n") as f:
        for record in records:
            is_user = summary_aggregator.add(record)
            data = dict(record.to_dict(), isUser=is_user)
            f.write(json.dumps(data, ensure_ascii=False, separators=(",", ":")))
            f.write("\n")
    for error in reader.errors:
        summary_aggregator.note_anomaly(f"Skipped malformed record: {error}")
    summary = summary_aggregator.finalize()

    print(f"=== LDIF Analysis: {args.input} ===")
    _print_lines(DiffReporter.format_stats(stats))
    if reader.errors:
        print(f"Skipped malformed records: {len(reader.errors)}")
    print()
    _print_lines(format_summary(summary, str(output)))
    return EXIT_OK


def run_compare(args: argparse.Namespace, settings: Settings) -> int:
    thresholds = settings.resolve_thresholds(
        entity_percent=args.entity_threshold,
        attribute_percent=args.attribute_threshold,
        avg_attributes_percent=args.avg_threshold,
    )
    result = compare_files(
        args.baseline,
        args.new,
        thresholds=thresholds,
        encoding=settings.encoding,
        skip_invalid=_skip_invalid(args, settings),
    )

    reporter = DiffReporter()
    reporter.print_comparison(result, args.output)
    if args.json_path:
        reporter.write_json_report(result, args.json_path)

    return EXIT_OK if result.is_good else EXIT_DIFFERENCES


def run_diff(args: argparse.Namespace, settings: Settings) -> int:
    output = write_unified_diff(args.baseline, args.new, args.output, settings.encoding)
    print(f"Unified diff written to: {output}")
    return EXIT_OK


def run_report(args: argparse.Namespace, settings: Settings) -> int:
    analyzer = EntryDiffAnalyzer.from_jsonl(args.diff_file)
    if analyzer.skipped_lines:
        print(f"Warning: skipped {analyzer.skipped_lines} malformed line(s)", file=sys.stderr)

    sections = args.added or args.removed or args.modified or args.find or args.csv
    if args.all or args.summary or not sections:
        _print_lines(analyzer.summary_lines())
    if args.all or args.added:
        _print_lines(analyzer.added_lines())
    if args.all or args.removed:
        _print_lines(analyzer.removed_lines())
    if args.all or args.modified:
        _print_lines(analyzer.modified_lines())
    if args.find:
        _print_lines(analyzer.find_lines(args.find))
    if args.csv:
        analyzer.export_csv(args.csv)
        print(f"Exported {len(analyzer.diffs)} entries to {args.csv}")

    return EXIT_OK


COMMANDS = {
    "analyze": run_analyze,
    "compare": run_compare,
    "diff": run_diff,
    "report": run_report,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = Settings(args.config)
    except ConfigurationError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return EXIT_FATAL

    configure_logging(args.log_level or settings.log_level)

    try:
        return COMMANDS[args.command](args, settings)
    except LdifFileError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return EXIT_DIFFERENCES
    except LdifParseError as exc:
        print(f"[ERROR] Parse error: {exc}", file=sys.stderr)
        return EXIT_FATAL
    except (ConfigurationError, OSError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
