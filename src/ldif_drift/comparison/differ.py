"""
Attribute and entry differ.

Two flavours of the same three-way attribute comparison:
- compare_distribution: file-wide counts, only material shifts are reported
- compare_entry_attributes: per-DN counts, every change is reported

generate_entry_diffs walks the DN union of two LdifStats and classifies each
DN as Added, Removed or Modified.
"""

from typing import Dict, List

from ldif_drift.comparison.percent import format_percent, percent_diff
from ldif_drift.domain.stats import ChangeType, EntryDiff, EntryInfo, LdifStats

# File-wide attribute count changes at or below this percentage are noise.
SIGNIFICANT_ATTRIBUTE_CHANGE_PERCENT = 20.0


def compare_distribution(
    baseline_counts: Dict[str, int], new_counts: Dict[str, int]
) -> List[str]:
    """
    Compare file-wide attribute value counts.

    Args:
        baseline_counts: Attribute name -> value count in the baseline
        new_counts: Attribute name -> value count in the new file

    Returns:
        One line per new, removed or significantly changed attribute,
        ordered by attribute name
    """
    diffs: List[str] = []

    for name in sorted(set(baseline_counts) | set(new_counts)):
        base_count = baseline_counts.get(name, 0)
        new_count = new_counts.get(name, 0)

        if base_count == 0 and new_count > 0:
            diffs.append(f"+ {name}: new attribute ({new_count} values)")
        elif base_count > 0 and new_count == 0:
            diffs.append(f"- {name}: removed ({base_count} values)")
        elif base_count != new_count:
            change = percent_diff(base_count, new_count)
            if abs(change) > SIGNIFICANT_ATTRIBUTE_CHANGE_PERCENT:
                diffs.append(
                    f"~ {name}: {format_percent(change)}% ({base_count} → {new_count})"
                )

    return diffs


def compare_entry_attributes(baseline_entry: EntryInfo, new_entry: EntryInfo) -> List[str]:
    """Report every attribute count change between two versions of one DN."""
    diffs: List[str] = []
    baseline_attrs = baseline_entry.attributes
    new_attrs = new_entry.attributes

    for name in sorted(set(baseline_attrs) | set(new_attrs)):
        base_count = baseline_attrs.get(name, 0)
        new_count = new_attrs.get(name, 0)

        if base_count == 0 and new_count > 0:
            diffs.append(f"+ {name}: {new_count} value(s)")
        elif base_count > 0 and new_count == 0:
            diffs.append(f"- {name}: {base_count} value(s)")
        elif base_count != new_count:
            diffs.append(f"~ {name}: {base_count} → {new_count} value(s)")

    return diffs


def generate_entry_diffs(baseline: LdifStats, new: LdifStats) -> List[EntryDiff]:
    """
    Classify every DN seen in either file.

    DNs are compared case-sensitively and visited in ascending order. A DN
    present on both sides with equal attribute counts, equal totals and the
    same operation sequence produces no diff.
    """
    diffs: List[EntryDiff] = []

    for dn in sorted(set(baseline.entries) | set(new.entries)):
        base_entry = baseline.entries.get(dn)
        new_entry = new.entries.get(dn)

        if base_entry is None:
            diffs.append(
                EntryDiff(
                    dn=dn,
                    change_type=ChangeType.ADDED.value,
                    new_operations=list(new_entry.operation_types),
                    new_attr_count=new_entry.total_attribute_count,
                    attribute_differences=[
                        f"+ {name}: {count} value(s)"
                        for name, count in new_entry.attributes.items()
                    ],
                )
            )
        elif new_entry is None:
            diffs.append(
                EntryDiff(
                    dn=dn,
                    change_type=ChangeType.REMOVED.value,
                    baseline_operations=list(base_entry.operation_types),
                    baseline_attr_count=base_entry.total_attribute_count,
                    attribute_differences=[
                        f"- {name}: {count} value(s)"
                        for name, count in base_entry.attributes.items()
                    ],
                )
            )
        else:
            attr_diffs = compare_entry_attributes(base_entry, new_entry)
            ops_changed = base_entry.operation_types != new_entry.operation_types
            total_changed = base_entry.total_attribute_count != new_entry.total_attribute_count
            if attr_diffs or total_changed or ops_changed:
                diffs.append(
                    EntryDiff(
                        dn=dn,
                        change_type=ChangeType.MODIFIED.value,
                        baseline_operations=list(base_entry.operation_types),
                        new_operations=list(new_entry.operation_types),
                        baseline_attr_count=base_entry.total_attribute_count,
                        new_attr_count=new_entry.total_attribute_count,
                        attribute_differences=attr_diffs,
                    )
                )

    return diffs
