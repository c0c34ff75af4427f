"""
Unified diff for LDIF files, grouped by DN.

Entries are matched across the two files by DN (case-insensitively), so a
file whose entries were merely reordered produces an empty diff. Within a
changed entry, lines are paired by a greedy first-match scan rather than a
longest-common-subsequence diff: every line of both sides is emitted exactly
once, but duplicated or reordered lines can come out visually misaligned.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set, Union

from ldif_drift.analysis.aggregator import read_ldif_text
from ldif_drift.parsing.ldif_reader import split_lines
from ldif_drift.utils.logger import get_logger, log_operation

logger = get_logger(__name__)


@dataclass
class DnBlock:
    """Raw lines of one entry: the dn line plus everything up to the next blank line."""

    dn: str
    lines: List[str] = field(default_factory=list)


def parse_to_blocks(text: str) -> Dict[str, DnBlock]:
    """
    Group raw LDIF lines by DN.

    Returns:
        Lower-cased DN -> DnBlock. A DN seen twice keeps its first spelling
        and the lines of its last block.
    """
    blocks: Dict[str, DnBlock] = {}
    current_dn = ""
    current_lines: List[str] = []

    def store() -> None:
        if not current_dn or not current_lines:
            return
        key = current_dn.lower()
        existing = blocks.get(key)
        if existing is None:
            blocks[key] = DnBlock(dn=current_dn, lines=list(current_lines))
        else:
            existing.lines = list(current_lines)

    for line in split_lines(text):
        if line[:8].lower() == "version:":
            continue

        if not line.strip():
            store()
            current_dn = ""
            current_lines = []
            continue

        if line[:3].lower() == "dn:":
            store()
            current_dn = line[3:].strip()
            current_lines = [line]
        elif current_dn:
            current_lines.append(line)

    store()
    return blocks


def compute_line_diff(baseline: List[str], new: List[str]) -> List[str]:
    """
    Greedy line diff of two blocks.

    Each baseline line claims the first unclaimed identical new line. A walk
    over both sides then emits unclaimed baseline lines as "-", unclaimed new
    lines as "+", and claimed lines as " " context.
    """
    baseline_used: Set[int] = set()
    new_used: Set[int] = set()

    for i, line in enumerate(baseline):
        for j, candidate in enumerate(new):
            if j not in new_used and candidate == line:
                baseline_used.add(i)
                new_used.add(j)
                break

    result: List[str] = []
    b = 0
    n = 0
    while b < len(baseline) or n < len(new):
        if b < len(baseline) and b not in baseline_used:
            result.append(f"-{baseline[b]}")
            b += 1
        elif n < len(new) and n not in new_used:
            result.append(f"+{new[n]}")
            n += 1
        elif b < len(baseline) and n < len(new):
            result.append(f" {baseline[b]}")
            b += 1
            n += 1
        elif b < len(baseline):
            result.append(f" {baseline[b]}")
            b += 1
        else:
            result.append(f" {new[n]}")
            n += 1

    return result


def _one_sided_block(header: str, marker: str, block: DnBlock) -> List[str]:
    lines = [f"@@ Entry {header}: {block.dn} @@"]
    lines.extend(f"{marker}{line}" for line in block.lines)
    lines.append(marker)
    lines.append("")
    return lines


def generate_unified_diff(
    baseline_text: str,
    new_text: str,
    baseline_label: str = "baseline",
    new_label: str = "new",
) -> List[str]:
    """
    Produce the unified diff of two LDIF texts as a list of output lines.

    Identical inputs yield only the three header lines.
    """
    baseline_blocks = parse_to_blocks(baseline_text)
    new_blocks = parse_to_blocks(new_text)

    output = [f"--- {baseline_label}", f"+++ {new_label}", ""]

    def display_dn(key: str) -> str:
        block = baseline_blocks.get(key) or new_blocks[key]
        return block.dn

    keys = sorted(set(baseline_blocks) | set(new_blocks), key=lambda k: (display_dn(k), k))

    for key in keys:
        base_block = baseline_blocks.get(key)
        new_block = new_blocks.get(key)

        if base_block is None:
            output.extend(_one_sided_block("Added", "+", new_block))
        elif new_block is None:
            output.extend(_one_sided_block("Removed", "-", base_block))
        elif base_block.lines != new_block.lines:
            output.append(f"@@ Entry Modified: {base_block.dn} @@")
            output.extend(compute_line_diff(base_block.lines, new_block.lines))
            output.append("")

    return output


def render_unified_diff(lines: List[str]) -> str:
    """Join diff lines into the final text, newline-terminated."""
    return "\n".join(lines) + "\n"


@log_operation("write_unified_diff")
def write_unified_diff(
    baseline_path: Union[str, Path],
    new_path: Union[str, Path],
    output_path: Union[str, Path],
    encoding: str = "utf-8",
) -> Path:
    """
    Diff two LDIF files and write the result (UTF-8, no BOM, LF line endings).

    Raises:
        LdifFileError: If either input cannot be read
    """
    baseline_text = read_ldif_text(baseline_path, encoding)
    new_text = read_ldif_text(new_path, encoding)

    lines = generate_unified_diff(baseline_text, new_text, str(baseline_path), str(new_path))

    output_path = Path(output_path)
    with output_path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(render_unified_diff(lines))

    logger.info(
        "Wrote unified diff",
        operation="write_unified_diff",
        context={"output": str(output_path), "lines": len(lines)},
    )
    return output_path
