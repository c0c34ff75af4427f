"""
LDIF change record models.

One record per parsed operation targeting a single DN. Records are produced by
the LDIF reader and are read-only to the analysis core; any iterable of these
objects satisfies the aggregator's input contract.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Value = Union[str, bytes]


def _value_to_json(value: Value) -> str:
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return value


class ModSpecType(Enum):
    """Kind of a single modify operation."""

    ADD = "add"
    DELETE = "delete"
    REPLACE = "replace"


@dataclass
class ModSpec:
    """One add/delete/replace block inside a modify record."""

    attribute_type: str
    mod_type: ModSpecType
    values: List[Value] = field(default_factory=list)

    @property
    def value_count(self) -> int:
        return len(self.values)

    def to_dict(self) -> Dict[str, Any]:
        # "delete" with no values clears the whole attribute
        operation = self.mod_type.value
        if self.mod_type is ModSpecType.DELETE and not self.values:
            operation = "delete_all"
        return {
            "attributeName": self.attribute_type,
            "operation": operation,
            "values": [_value_to_json(v) for v in self.values],
        }


@dataclass
class ChangeAdd:
    """Add (or content) record: a new entry with its attributes."""

    OPERATION = "Add"

    dn: str
    attributes: Dict[str, List[Value]] = field(default_factory=dict)
    line_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dn": self.dn,
            "operation": self.OPERATION,
            "attributeChanges": [
                {
                    "attributeName": name,
                    "operation": "add",
                    "values": [_value_to_json(v) for v in values],
                }
                for name, values in self.attributes.items()
            ],
        }


@dataclass
class ChangeDelete:
    """Delete record."""

    OPERATION = "Delete"

    dn: str
    line_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"dn": self.dn, "operation": self.OPERATION, "attributeChanges": []}


@dataclass
class ChangeModify:
    """Modify record: an ordered list of mod specs."""

    OPERATION = "Modify"

    dn: str
    mod_specs: List[ModSpec] = field(default_factory=list)
    line_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dn": self.dn,
            "operation": self.OPERATION,
            "attributeChanges": [spec.to_dict() for spec in self.mod_specs],
        }


@dataclass
class ChangeModDn:
    """Rename / move record (changetype modrdn or moddn)."""

    OPERATION = "ModDn"

    dn: str
    new_rdn: str
    delete_old_rdn: bool = True
    new_superior: Optional[str] = None
    line_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dn": self.dn,
            "operation": self.OPERATION,
            "attributeChanges": [],
            "newRdn": self.new_rdn,
            "deleteOldRdn": self.delete_old_rdn,
            "newSuperior": self.new_superior,
        }


ChangeRecord = Union[ChangeAdd, ChangeDelete, ChangeModify, ChangeModDn]
