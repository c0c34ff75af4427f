"""
Statistics and comparison result models.

LdifStats describes one analysed LDIF file; EntryDiff and ComparisonResult
describe how a new file differs from a baseline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ChangeType(Enum):
    """Entry-level change classification."""

    ADDED = "Added"
    REMOVED = "Removed"
    MODIFIED = "Modified"


@dataclass
class EntryInfo:
    """
    Everything recorded about a single DN within one file.

    Attributes:
        dn: Distinguished name (case-sensitive key)
        operation_types: Operation labels in file order, duplicates allowed
        total_attribute_count: Sum of every attribute value recorded for the DN
        attributes: Attribute name -> accumulated value count
    """

    dn: str
    operation_types: List[str] = field(default_factory=list)
    total_attribute_count: int = 0
    attributes: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dn": self.dn,
            "operationTypes": list(self.operation_types),
            "totalAttributeCount": self.total_attribute_count,
            "attributes": dict(self.attributes),
        }


@dataclass
class LdifStats:
    """Per-file counters produced by the statistics aggregator."""

    total_entries: int = 0
    total_add_operations: int = 0
    total_delete_operations: int = 0
    total_modify_operations: int = 0
    total_moddn_operations: int = 0
    total_attributes: int = 0
    attribute_counts: Dict[str, int] = field(default_factory=dict)
    entries: Dict[str, EntryInfo] = field(default_factory=dict)

    @property
    def average_attributes_per_entry(self) -> float:
        if self.total_entries > 0:
            return self.total_attributes / self.total_entries
        return 0.0

    def to_dict(self, include_entries: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            "totalEntries": self.total_entries,
            "totalAddOperations": self.total_add_operations,
            "totalDeleteOperations": self.total_delete_operations,
            "totalModifyOperations": self.total_modify_operations,
            "totalModDnOperations": self.total_moddn_operations,
            "totalAttributes": self.total_attributes,
            "averageAttributesPerEntry": self.average_attributes_per_entry,
            "attributeCounts": dict(sorted(self.attribute_counts.items())),
        }
        if include_entries:
            data["entries"] = {dn: self.entries[dn].to_dict() for dn in sorted(self.entries)}
        return data


@dataclass
class EntryDiff:
    """
    One changed DN between baseline and new.

    The side that does not exist for Added/Removed changes stays None.
    """

    dn: str
    change_type: str
    baseline_operations: Optional[List[str]] = None
    new_operations: Optional[List[str]] = None
    baseline_attr_count: Optional[int] = None
    new_attr_count: Optional[int] = None
    attribute_differences: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """camelCase form used by the JSON Lines output."""
        return {
            "dn": self.dn,
            "changeType": self.change_type,
            "baselineOperations": self.baseline_operations,
            "newOperations": self.new_operations,
            "baselineAttrCount": self.baseline_attr_count,
            "newAttrCount": self.new_attr_count,
            "attributeDifferences": list(self.attribute_differences),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EntryDiff":
        """
        Build an EntryDiff from its JSON form.

        Accepts camelCase (as written by the reporter) or snake_case keys.

        Raises:
            ValueError: If dn or change type is missing
        """

        def pick(camel: str, snake: str) -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake)

        dn = data.get("dn")
        change_type = pick("changeType", "change_type")
        if not dn or not change_type:
            raise ValueError("entry diff requires 'dn' and 'changeType'")

        return cls(
            dn=dn,
            change_type=change_type,
            baseline_operations=pick("baselineOperations", "baseline_operations"),
            new_operations=pick("newOperations", "new_operations"),
            baseline_attr_count=pick("baselineAttrCount", "baseline_attr_count"),
            new_attr_count=pick("newAttrCount", "new_attr_count"),
            attribute_differences=list(
                pick("attributeDifferences", "attribute_differences") or []
            ),
        )


@dataclass
class ComparisonResult:
    """Verdict of comparing a new LDIF file against a baseline."""

    is_good: bool
    message: str = ""
    differences: List[str] = field(default_factory=list)
    baseline_stats: LdifStats = field(default_factory=LdifStats)
    new_stats: LdifStats = field(default_factory=LdifStats)
    entry_diffs: List[EntryDiff] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "isGood": self.is_good,
            "message": self.message,
            "differences": list(self.differences),
            "baselineStats": self.baseline_stats.to_dict(),
            "newStats": self.new_stats.to_dict(),
            "entryDiffs": [diff.to_dict() for diff in self.entry_diffs],
        }
