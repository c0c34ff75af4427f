"""
Statistics Aggregator

Folds a stream of change records into per-file counters:
- operation counters (Add/Delete/Modify/ModDn)
- file-wide attribute value counts
- per-DN EntryInfo (operation sequence, attribute counts)

An aggregator is owned by one analysis and finalized exactly once; records
are assumed well formed (parse errors belong to the reader).
"""

from pathlib import Path
from typing import Iterable, Union

from ldif_drift.domain.records import (
    ChangeAdd,
    ChangeDelete,
    ChangeModDn,
    ChangeModify,
    ChangeRecord,
)
from ldif_drift.domain.stats import EntryInfo, LdifStats
from ldif_drift.exceptions import AggregatorStateError, LdifFileError
from ldif_drift.parsing.ldif_reader import LdifReader
from ldif_drift.utils.logger import get_logger, log_operation

logger = get_logger(__name__)


class StatsAggregator:
    """
    Single-use accumulator turning change records into LdifStats.

    Usage:
        aggregator = StatsAggregator()
        for record in records:
            aggregator.add(record)
        stats = aggregator.finalize()
    """

    def __init__(self):
        self._stats = LdifStats()
        self._finalized = False

    def _entry(self, dn: str) -> EntryInfo:
        entry = self._stats.entries.get(dn)
        if entry is None:
            entry = EntryInfo(dn=dn)
            self._stats.entries[dn] = entry
        return entry

    def _fold_attribute(self, entry: EntryInfo, name: str, value_count: int) -> None:
        stats = self._stats
        stats.total_attributes += value_count
        stats.attribute_counts[name] = stats.attribute_counts.get(name, 0) + value_count
        entry.attributes[name] = entry.attributes.get(name, 0) + value_count
        entry.total_attribute_count += value_count

    def add(self, record: ChangeRecord) -> None:
        """
        Fold one record into the running counters.

        Raises:
            AggregatorStateError: If the aggregator was already finalized
            TypeError: If the record is not a known change record
        """
        if self._finalized:
            raise AggregatorStateError("aggregator already finalized")

        stats = self._stats

        if isinstance(record, ChangeAdd):
            stats.total_add_operations += 1
            entry = self._entry(record.dn)
            entry.operation_types.append(ChangeAdd.OPERATION)
            for name, values in record.attributes.items():
                self._fold_attribute(entry, name, len(values))
        elif isinstance(record, ChangeDelete):
            stats.total_delete_operations += 1
            self._entry(record.dn).operation_types.append(ChangeDelete.OPERATION)
        elif isinstance(record, ChangeModify):
            stats.total_modify_operations += 1
            entry = self._entry(record.dn)
            entry.operation_types.append(ChangeModify.OPERATION)
            for spec in record.mod_specs:
                self._fold_attribute(entry, spec.attribute_type, spec.value_count)
        elif isinstance(record, ChangeModDn):
            stats.total_moddn_operations += 1
            self._entry(record.dn).operation_types.append(ChangeModDn.OPERATION)
        else:
            raise TypeError(f"Unsupported change record: {type(record).__name__}")

        stats.total_entries += 1

    def finalize(self) -> LdifStats:
        """
        Return the finished statistics; the aggregator cannot be used afterwards.

        Raises:
            AggregatorStateError: If called twice
        """
        if self._finalized:
            raise AggregatorStateError("aggregator already finalized")
        self._finalized = True
        return self._stats


def analyze_records(records: Iterable[ChangeRecord]) -> LdifStats:
    """Consume a record stream once and return its statistics."""
    aggregator = StatsAggregator()
    for record in records:
        aggregator.add(record)
    return aggregator.finalize()


def analyze_text(text: str, skip_invalid: bool = False) -> LdifStats:
    """
    Parse LDIF text and aggregate it.

    Args:
        text: LDIF content
        skip_invalid: Skip malformed records instead of raising

    Raises:
        LdifParseError: On malformed input unless skip_invalid
    """
    reader = LdifReader(strict=not skip_invalid)
    stats = analyze_records(reader.parse(text))
    if reader.errors:
        logger.warning(
            "Skipped malformed records",
            operation="analyze_text",
            context={"skipped": len(reader.errors)},
        )
    return stats


def read_ldif_text(path: Union[str, Path], encoding: str = "utf-8") -> str:
    """
    Read a whole LDIF file.

    Raises:
        LdifFileError: If the file is missing or unreadable
    """
    path = Path(path)
    if not path.is_file():
        raise LdifFileError(str(path), "LDIF file not found")
    try:
        with path.open("r", encoding=encoding, newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise LdifFileError(str(path), f"Cannot read LDIF file ({e})") from e


@log_operation("analyze_file")
def analyze_file(
    path: Union[str, Path], encoding: str = "utf-8", skip_invalid: bool = False
) -> LdifStats:
    """
    Read, parse and aggregate one LDIF file.

    Raises:
        LdifFileError: If the file cannot be read
        LdifParseError: On malformed input unless skip_invalid
    """
    text = read_ldif_text(path, encoding)
    stats = analyze_text(text, skip_invalid=skip_invalid)
    logger.debug(
        "Analysed LDIF file",
        operation="analyze_file",
        context={
            "path": str(path),
            "records": stats.total_entries,
            "entries": len(stats.entries),
            "attributes": stats.total_attributes,
        },
    )
    return stats
