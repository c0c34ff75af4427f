"""Domain models - change records and analysis results."""

from .records import (
    ChangeAdd,
    ChangeDelete,
    ChangeModDn,
    ChangeModify,
    ChangeRecord,
    ModSpec,
    ModSpecType,
)
from .stats import ChangeType, ComparisonResult, EntryDiff, EntryInfo, LdifStats

__all__ = [
    "ChangeAdd",
    "ChangeDelete",
    "ChangeModDn",
    "ChangeModify",
    "ChangeRecord",
    "ModSpec",
    "ModSpecType",
    "ChangeType",
    "ComparisonResult",
    "EntryDiff",
    "EntryInfo",
    "LdifStats",
]
