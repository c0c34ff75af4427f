"""
Change Summary

Describes what a single LDIF change file does, as opposed to LdifStats which
only counts it:
- entries and users added / deleted / modified / renamed
- attribute values added, deleted and written by replaces
- attributes cleared outright (a "delete:" with no values)
- attributes that end up lost: cleared somewhere and never re-added or
  replaced by any modify in the file

Attribute names are compared case-insensitively; the first spelling seen is
the one reported.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ldif_drift.domain.records import (
    ChangeAdd,
    ChangeDelete,
    ChangeModDn,
    ChangeModify,
    ChangeRecord,
    ModSpecType,
)
from ldif_drift.exceptions import AggregatorStateError

USER_OBJECT_CLASSES = {"user", "inetorgperson", "person"}
USER_CONTAINERS = ("ou=users", "cn=users")


def is_user_dn(dn: str) -> bool:
    """True when the DN sits under an ou=Users / cn=Users container."""
    if not dn or not dn.strip():
        return False
    lowered = dn.lower()
    return any(container in lowered for container in USER_CONTAINERS)


def is_user_record(record: ChangeRecord) -> bool:
    """
    Heuristic user detection.

    Add records count as users when they carry a person-like objectClass;
    every record falls back to the DN container check.
    """
    if isinstance(record, ChangeAdd):
        for name, values in record.attributes.items():
            if name.lower() != "objectclass":
                continue
            if any(isinstance(v, str) and v.lower() in USER_OBJECT_CLASSES for v in values):
                return True
    return is_user_dn(record.dn)


def _remember(names: Dict[str, str], name: str) -> None:
    names.setdefault(name.lower(), name)


@dataclass
class ChangeSummary:
    """Counters and attribute sets describing one change file."""

    entries_added: int = 0
    entries_deleted: int = 0
    users_added: int = 0
    users_deleted: int = 0
    modify_operations: int = 0
    moddn_operations: int = 0
    user_modify_operations: int = 0
    user_moddn_operations: int = 0
    attribute_values_added: int = 0
    attribute_values_deleted: int = 0
    attribute_values_replaced: int = 0
    attributes_fully_cleared: int = 0
    attributes_observed: Dict[str, str] = field(default_factory=dict)
    attributes_touched: Dict[str, str] = field(default_factory=dict)
    attributes_cleared: Dict[str, str] = field(default_factory=dict)
    attributes_still_present: Dict[str, str] = field(default_factory=dict)
    deleted_dns: List[str] = field(default_factory=list)
    anomalies: List[str] = field(default_factory=list)

    @property
    def percentage_attributes_changed(self) -> float:
        if not self.attributes_observed:
            return 0.0
        return len(self.attributes_touched) / len(self.attributes_observed) * 100.0

    @property
    def attributes_lost(self) -> List[str]:
        """Attributes cleared somewhere and never re-added or replaced, sorted."""
        return sorted(
            spelling
            for key, spelling in self.attributes_cleared.items()
            if key not in self.attributes_still_present
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "entriesAdded": self.entries_added,
            "entriesDeleted": self.entries_deleted,
            "usersAdded": self.users_added,
            "usersDeleted": self.users_deleted,
            "modifyOperations": self.modify_operations,
            "modDnOperations": self.moddn_operations,
            "userModifyOperations": self.user_modify_operations,
            "userModDnOperations": self.user_moddn_operations,
            "attributeValuesAdded": self.attribute_values_added,
            "attributeValuesDeleted": self.attribute_values_deleted,
            "attributeValuesReplaced": self.attribute_values_replaced,
            "attributesFullyCleared": self.attributes_fully_cleared,
            "distinctAttributesObserved": len(self.attributes_observed),
            "distinctAttributesTouched": len(self.attributes_touched),
            "percentageAttributesChanged": self.percentage_attributes_changed,
            "attributesLost": self.attributes_lost,
            "deletedDns": list(self.deleted_dns),
            "anomalies": list(self.anomalies),
        }


class SummaryAggregator:
    """
    Single-use accumulator turning change records into a ChangeSummary.

    Unlike StatsAggregator, an unrecognised record is noted as an anomaly
    rather than rejected.
    """

    def __init__(self):
        self._summary = ChangeSummary()
        self._finalized = False

    def _observe(self, name: str) -> None:
        _remember(self._summary.attributes_observed, name)
        _remember(self._summary.attributes_touched, name)

    def add(self, record: ChangeRecord) -> bool:
        """
        Fold one record into the summary.

        Returns:
            Whether the record was classified as touching a user

        Raises:
            AggregatorStateError: If the aggregator was already finalized
        """
        if self._finalized:
            raise AggregatorStateError("summary aggregator already finalized")

        summary = self._summary
        is_user = is_user_record(record)

        if isinstance(record, ChangeAdd):
            summary.entries_added += 1
            summary.users_added += is_user
            for name, values in record.attributes.items():
                self._observe(name)
                summary.attribute_values_added += len(values)
        elif isinstance(record, ChangeDelete):
            summary.entries_deleted += 1
            summary.users_deleted += is_user
            summary.deleted_dns.append(record.dn)
        elif isinstance(record, ChangeModify):
            summary.modify_operations += 1
            summary.user_modify_operations += is_user
            for spec in record.mod_specs:
                self._observe(spec.attribute_type)
                if spec.mod_type is ModSpecType.ADD:
                    summary.attribute_values_added += spec.value_count
                    _remember(summary.attributes_still_present, spec.attribute_type)
                elif spec.mod_type is ModSpecType.REPLACE:
                    summary.attribute_values_replaced += spec.value_count
                    _remember(summary.attributes_still_present, spec.attribute_type)
                elif spec.values:
                    summary.attribute_values_deleted += spec.value_count
                else:
                    summary.attributes_fully_cleared += 1
                    _remember(summary.attributes_cleared, spec.attribute_type)
        elif isinstance(record, ChangeModDn):
            summary.moddn_operations += 1
            summary.user_moddn_operations += is_user
        else:
            summary.anomalies.append(f"Unknown record type: {type(record).__name__}")
            return False

        return is_user

    def note_anomaly(self, message: str) -> None:
        self._summary.anomalies.append(message)

    def finalize(self) -> ChangeSummary:
        """
        Return the finished summary; the aggregator cannot be used afterwards.

        Raises:
            AggregatorStateError: If called twice
        """
        if self._finalized:
            raise AggregatorStateError("summary aggregator already finalized")
        self._finalized = True
        return self._summary


def format_summary(summary: ChangeSummary, output_path: str) -> List[str]:
    """Console block for the analyze command."""
    lines = [
        "=== LDIF Change Summary ===",
        f"Records JSONL written to: {output_path}",
        "",
        f"Total entries added:   {summary.entries_added}",
        f"Total entries deleted: {summary.entries_deleted}",
        f"Users added:           {summary.users_added}",
        f"Users deleted:         {summary.users_deleted}",
        f"Modify operations:     {summary.modify_operations} ({summary.user_modify_operations} on users)",
        f"ModDn operations:      {summary.moddn_operations} ({summary.user_moddn_operations} on users)",
        "",
        f"Attribute values added:       {summary.attribute_values_added}",
        f"Attribute values deleted:     {summary.attribute_values_deleted}",
        f"Attribute values in replaces: {summary.attribute_values_replaced}",
        f"Attributes fully cleared:     {summary.attributes_fully_cleared}",
        "",
        f"Distinct attributes observed: {len(summary.attributes_observed)}",
        f"Distinct attributes touched:  {len(summary.attributes_touched)}",
        f"Percentage attributes changed: {summary.percentage_attributes_changed:.2f}%",
        "",
    ]

    lost = summary.attributes_lost
    if lost:
        lines.append("Attributes that appear lost from all modified entries:")
        lines.extend(f"  - {name}" for name in lost)

    if summary.anomalies:
        lines.append("")
        lines.append("Other failures / anomalies:")
        lines.extend(f"  - {anomaly}" for anomaly in summary.anomalies)

    lines.append("")
    lines.append("=== End of summary ===")
    return lines
