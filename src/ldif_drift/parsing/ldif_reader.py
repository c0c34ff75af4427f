"""
LDIF Reader - turn LDIF text into change records.

Handles the parts of RFC 2849 that matter for change-log analysis:
- line folding (continuation lines start with a single space)
- comments, version line, control lines
- base64 ("::") and URL ("<:") values
- add/delete/modify/modrdn/moddn change records and plain content records

Malformed records raise LdifParseError carrying the physical line number.
In non-strict mode the record is skipped and the error is collected instead,
leaving the skip-vs-abort decision to the caller.
"""

import base64
import binascii
import re
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ldif_drift.domain.records import (
    ChangeAdd,
    ChangeDelete,
    ChangeModDn,
    ChangeModify,
    ChangeRecord,
    ModSpec,
    ModSpecType,
    Value,
)
from ldif_drift.exceptions import LdifParseError
from ldif_drift.utils.logger import get_logger

logger = get_logger(__name__)

Line = Tuple[int, str]

CHANGE_TYPES = ("add", "delete", "modify", "modrdn", "moddn")
MODDN_FIELDS = ("newrdn", "deleteoldrdn", "newsuperior")

LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> List[str]:
    """Split on CRLF, CR or LF only; other Unicode separators stay in the line."""
    lines = LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _unfold(lines: Iterable[str]) -> Iterator[Line]:
    """Join continuation lines and drop comments, keeping first line numbers."""
    current: Optional[List] = None
    in_comment = False

    for number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")

        if line.startswith(" ") and (in_comment or current is not None):
            if in_comment:
                continue
            if current[1]:
                current[1] += line[1:]
                continue

        if current is not None:
            yield current[0], current[1]
            current = None

        in_comment = line.startswith("#")
        if in_comment:
            continue
        current = [number, line]

    if current is not None:
        yield current[0], current[1]


def _blocks(logical_lines: Iterable[Line]) -> Iterator[List[Line]]:
    """Group logical lines into records separated by blank lines."""
    block: List[Line] = []
    for number, text in logical_lines:
        if not text.strip():
            if block:
                yield block
                block = []
            continue
        block.append((number, text))
    if block:
        yield block


def _decode_base64(number: int, encoded: str) -> Value:
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise LdifParseError(number, f"invalid base64 value: {e}") from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw


def split_line(number: int, text: str) -> Tuple[str, Value]:
    """
    Split an LDIF line into attribute description and value.

    Args:
        number: Physical line number (for error reporting)
        text: Logical (unfolded) line

    Returns:
        (attribute description, value)

    Raises:
        LdifParseError: If the separator is missing or the value is undecodable
    """
    if ":" not in text:
        raise LdifParseError(number, f"missing ':' separator in {text!r}")

    name, rest = text.split(":", 1)
    if not name or any(ch.isspace() for ch in name):
        raise LdifParseError(number, f"invalid attribute description {name!r}")

    if rest.startswith(":"):
        return name, _decode_base64(number, rest[1:].strip())
    if rest.startswith("<"):
        return name, rest[1:].strip()
    return name, rest.lstrip(" ")


class LdifReader:
    """
    Parses LDIF text into a stream of change records.

    Attributes:
        strict: Raise on the first malformed record when True; otherwise skip
            the record and keep going
        errors: Parse errors collected in non-strict mode
    """

    def __init__(self, strict: bool = True):
        self.strict = strict
        self.errors: List[LdifParseError] = []

    def parse(self, source: Union[str, Iterable[str]]) -> Iterator[ChangeRecord]:
        """
        Yield change records from LDIF text or an iterable of lines.

        Raises:
            LdifParseError: On malformed input when strict
        """
        lines = split_lines(source) if isinstance(source, str) else source

        for block in _blocks(_unfold(lines)):
            try:
                record = self._parse_record(block)
            except LdifParseError as e:
                if self.strict:
                    raise
                self.errors.append(e)
                logger.warning(
                    "Skipping malformed LDIF record",
                    operation="parse_ldif",
                    context={"line": e.line_number, "dn": e.dn},
                    error=e.message,
                )
                continue

            if record is not None:
                yield record

    def _parse_record(self, block: List[Line]) -> Optional[ChangeRecord]:
        if block[0][1].lower().startswith("version:"):
            block = block[1:]
            if not block:
                return None

        dn_number, dn_text = block[0]
        name, dn = split_line(dn_number, dn_text)
        if name.lower() != "dn":
            raise LdifParseError(dn_number, f"record must start with 'dn:', got {name!r}")
        if isinstance(dn, bytes):
            raise LdifParseError(dn_number, "dn is not valid UTF-8")

        try:
            return self._parse_body(dn_number, dn, block[1:])
        except LdifParseError as e:
            e.dn = dn
            raise

    def _parse_body(self, dn_number: int, dn: str, rest: List[Line]) -> ChangeRecord:
        while rest and rest[0][1].lower().startswith("control:"):
            rest = rest[1:]

        change_type = None
        if rest and rest[0][1].lower().startswith("changetype:"):
            number, text = rest[0]
            _, value = split_line(number, text)
            change_type = str(value).strip().lower()
            if change_type not in CHANGE_TYPES:
                raise LdifParseError(number, f"unknown changetype {change_type!r}")
            rest = rest[1:]

        if change_type is None or change_type == "add":
            attributes = self._parse_attributes(rest)
            if not attributes:
                raise LdifParseError(dn_number, "add record has no attributes")
            return ChangeAdd(dn=dn, attributes=attributes, line_number=dn_number)

        if change_type == "delete":
            if rest:
                raise LdifParseError(rest[0][0], "unexpected content in delete record")
            return ChangeDelete(dn=dn, line_number=dn_number)

        if change_type == "modify":
            return ChangeModify(dn=dn, mod_specs=self._parse_mod_specs(rest), line_number=dn_number)

        return self._parse_moddn(dn_number, dn, rest)

    @staticmethod
    def _parse_attributes(lines: List[Line]) -> Dict[str, List[Value]]:
        attributes: Dict[str, List[Value]] = {}
        for number, text in lines:
            name, value = split_line(number, text)
            attributes.setdefault(name, []).append(value)
        return attributes

    @staticmethod
    def _parse_mod_specs(lines: List[Line]) -> List[ModSpec]:
        specs: List[ModSpec] = []
        current: Optional[ModSpec] = None

        for number, text in lines:
            if text.strip() == "-":
                if current is None:
                    raise LdifParseError(number, "'-' without a preceding modification")
                specs.append(current)
                current = None
                continue

            name, value = split_line(number, text)

            if current is None:
                operation = name.lower()
                if operation not in ("add", "delete", "replace"):
                    raise LdifParseError(
                        number, f"expected add/delete/replace, got {name!r}"
                    )
                attribute = str(value).strip()
                if not attribute:
                    raise LdifParseError(number, f"'{operation}:' needs an attribute name")
                current = ModSpec(attribute_type=attribute, mod_type=ModSpecType(operation))
                continue

            if name.lower() != current.attribute_type.lower():
                raise LdifParseError(
                    number,
                    f"attribute {name!r} does not match modification of "
                    f"{current.attribute_type!r}",
                )
            current.values.append(value)

        if current is not None:
            specs.append(current)
        return specs

    @staticmethod
    def _parse_moddn(dn_number: int, dn: str, lines: List[Line]) -> ChangeModDn:
        fields: Dict[str, Tuple[int, Value]] = {}
        for number, text in lines:
            name, value = split_line(number, text)
            key = name.lower()
            if key not in MODDN_FIELDS:
                raise LdifParseError(number, f"unexpected {name!r} in moddn record")
            if key in fields:
                raise LdifParseError(number, f"duplicate {name!r} in moddn record")
            fields[key] = (number, value)

        if "newrdn" not in fields:
            raise LdifParseError(dn_number, "moddn record is missing 'newrdn'")
        if "deleteoldrdn" not in fields:
            raise LdifParseError(dn_number, "moddn record is missing 'deleteoldrdn'")

        flag_number, flag = fields["deleteoldrdn"]
        flag = str(flag).strip()
        if flag not in ("0", "1"):
            raise LdifParseError(flag_number, f"deleteoldrdn must be 0 or 1, got {flag!r}")

        new_superior = fields.get("newsuperior")
        return ChangeModDn(
            dn=dn,
            new_rdn=str(fields["newrdn"][1]),
            delete_old_rdn=flag == "1",
            new_superior=str(new_superior[1]) if new_superior else None,
            line_number=dn_number,
        )


def parse_ldif(source: Union[str, Iterable[str]], strict: bool = True) -> Iterator[ChangeRecord]:
    """Convenience wrapper around LdifReader(strict).parse(source)."""
    return LdifReader(strict=strict).parse(source)
