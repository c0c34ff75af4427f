"""
Unit tests for the LDIF reader (ldif_drift/parsing/ldif_reader.py)

Tests covering:
- content and add records, version line, comments
- line folding and base64 values
- delete, modify (mod specs) and modrdn/moddn records
- LdifParseError line numbers
- strict vs non-strict mode
"""

import base64

import pytest

from ldif_drift.domain.records import (
    ChangeAdd,
    ChangeDelete,
    ChangeModDn,
    ChangeModify,
    ModSpecType,
)
from ldif_drift.exceptions import LdifParseError
from ldif_drift.parsing.ldif_reader import LdifReader, parse_ldif, split_line


def parse(text, strict=True):
    return list(parse_ldif(text, strict=strict))


class TestSplitLine:
    """Tests for split_line."""

    def test_plain_value(self):
        assert split_line(1, "cn: John Smith") == ("cn", "John Smith")

    def test_value_without_space(self):
        assert split_line(1, "cn:John") == ("cn", "John")

    def test_empty_value(self):
        assert split_line(1, "description:") == ("description", "")

    def test_base64_value(self):
        encoded = base64.b64encode("Jürgen".encode("utf-8")).decode("ascii")
        assert split_line(1, f"cn:: {encoded}") == ("cn", "Jürgen")

    def test_binary_base64_value_stays_bytes(self):
        encoded = base64.b64encode(b"\xff\xfe\x00").decode("ascii")
        name, value = split_line(1, f"jpegPhoto:: {encoded}")
        assert name == "jpegPhoto"
        assert value == b"\xff\xfe\x00"

    def test_url_value_kept_as_reference(self):
        assert split_line(1, "jpegPhoto:< file:///tmp/photo.jpg") == (
            "jpegPhoto",
            "file:///tmp/photo.jpg",
        )

    def test_missing_separator(self):
        with pytest.raises(LdifParseError) as exc_info:
            split_line(7, "no separator here")
        assert exc_info.value.line_number == 7

    def test_invalid_base64(self):
        with pytest.raises(LdifParseError, match="invalid base64"):
            split_line(3, "cn:: !!!not-base64!!!")


class TestAddRecords:
    """Tests for content and add records."""

    def test_content_record_is_add(self):
        records = parse("dn: cn=a,dc=x\ncn: a\nmail: a@x\nmail: b@x\n")

        assert len(records) == 1
        record = records[0]
        assert isinstance(record, ChangeAdd)
        assert record.dn == "cn=a,dc=x"
        assert record.attributes == {"cn": ["a"], "mail": ["a@x", "b@x"]}
        assert record.line_number == 1

    def test_explicit_changetype_add(self):
        records = parse("dn: cn=a,dc=x\nchangetype: add\nobjectClass: person\ncn: a\n")

        assert isinstance(records[0], ChangeAdd)
        assert list(records[0].attributes) == ["objectClass", "cn"]

    def test_version_line_and_comments_skipped(self):
        text = "version: 1\n\n# exported\ndn: cn=a,dc=x\n# inline\ncn: a\n"

        records = parse(text)

        assert len(records) == 1
        assert records[0].attributes == {"cn": ["a"]}

    def test_version_line_in_first_record(self):
        records = parse("version: 1\ndn: cn=a,dc=x\ncn: a\n")
        assert [r.dn for r in records] == ["cn=a,dc=x"]

    def test_folded_line_is_joined(self):
        text = "dn: cn=a,dc=x\ndescription: hello\n  world\ncn: a\n"

        records = parse(text)

        assert records[0].attributes["description"] == ["hello world"]

    def test_folded_dn(self):
        text = "dn: cn=averylongname,ou=Us\n ers,dc=x\ncn: a\n"
        assert parse(text)[0].dn == "cn=averylongname,ou=Users,dc=x"

    def test_multiple_records_and_crlf(self):
        text = "dn: cn=a,dc=x\r\ncn: a\r\n\r\ndn: cn=b,dc=x\r\ncn: b\r\n"

        records = parse(text)

        assert [r.dn for r in records] == ["cn=a,dc=x", "cn=b,dc=x"]

    def test_unicode_separators_stay_in_value(self):
        """Form feed and U+2028 inside a value are not line breaks."""
        text = "dn: cn=a,dc=x\ndescription: one\x0ctwo\ncn: a\u2028b\n"

        records = list(LdifReader().parse(text))

        assert records[0].attributes["description"] == ["one\x0ctwo"]
        assert records[0].attributes["cn"] == ["a\u2028b"]

    def test_lone_carriage_return_ends_line(self):
        """A bare CR is a line break."""
        records = parse("dn: cn=a,dc=x\rcn: a\r")
        assert records[0].attributes == {"cn": ["a"]}

    def test_add_without_attributes_is_error(self):
        with pytest.raises(LdifParseError, match="no attributes"):
            parse("dn: cn=a,dc=x\nchangetype: add\n")

    def test_accepts_iterable_of_lines(self):
        lines = ["dn: cn=a,dc=x\n", "cn: a\n"]
        assert len(list(LdifReader().parse(lines))) == 1


class TestChangeRecords:
    """Tests for delete, modify and moddn records."""

    def test_delete(self):
        records = parse("dn: cn=a,dc=x\nchangetype: delete\n")

        assert isinstance(records[0], ChangeDelete)
        assert records[0].dn == "cn=a,dc=x"

    def test_delete_with_content_is_error(self):
        with pytest.raises(LdifParseError) as exc_info:
            parse("dn: cn=a,dc=x\nchangetype: delete\ncn: a\n")
        assert exc_info.value.line_number == 3
        assert exc_info.value.dn == "cn=a,dc=x"

    def test_modify_mod_specs(self):
        text = (
            "dn: cn=a,dc=x\n"
            "changetype: modify\n"
            "add: mail\n"
            "mail: a@x\n"
            "mail: b@x\n"
            "-\n"
            "replace: telephoneNumber\n"
            "telephoneNumber: +1 555 0100\n"
            "-\n"
            "delete: description\n"
            "-\n"
        )

        record = parse(text)[0]

        assert isinstance(record, ChangeModify)
        assert [(s.attribute_type, s.mod_type, s.value_count) for s in record.mod_specs] == [
            ("mail", ModSpecType.ADD, 2),
            ("telephoneNumber", ModSpecType.REPLACE, 1),
            ("description", ModSpecType.DELETE, 0),
        ]
        assert record.mod_specs[2].to_dict()["operation"] == "delete_all"

    def test_modify_last_spec_without_dash(self):
        record = parse("dn: cn=a,dc=x\nchangetype: modify\nreplace: cn\ncn: b\n")[0]
        assert len(record.mod_specs) == 1

    def test_modify_mismatched_attribute(self):
        text = "dn: cn=a,dc=x\nchangetype: modify\nadd: mail\ncn: b\n-\n"
        with pytest.raises(LdifParseError) as exc_info:
            parse(text)
        assert exc_info.value.line_number == 4

    def test_modify_unknown_operation(self):
        with pytest.raises(LdifParseError, match="expected add/delete/replace"):
            parse("dn: cn=a,dc=x\nchangetype: modify\nincrement: uidNumber\n-\n")

    def test_modrdn(self):
        text = (
            "dn: cn=a,ou=Old,dc=x\n"
            "changetype: modrdn\n"
            "newrdn: cn=b\n"
            "deleteoldrdn: 1\n"
            "newsuperior: ou=New,dc=x\n"
        )

        record = parse(text)[0]

        assert isinstance(record, ChangeModDn)
        assert record.new_rdn == "cn=b"
        assert record.delete_old_rdn is True
        assert record.new_superior == "ou=New,dc=x"

    def test_moddn_keep_old_rdn(self):
        text = "dn: cn=a,dc=x\nchangetype: moddn\nnewrdn: cn=b\ndeleteoldrdn: 0\n"

        record = parse(text)[0]

        assert record.delete_old_rdn is False
        assert record.new_superior is None

    def test_moddn_missing_newrdn(self):
        with pytest.raises(LdifParseError, match="newrdn"):
            parse("dn: cn=a,dc=x\nchangetype: modrdn\ndeleteoldrdn: 1\n")

    def test_moddn_bad_flag(self):
        text = "dn: cn=a,dc=x\nchangetype: modrdn\nnewrdn: cn=b\ndeleteoldrdn: yes\n"
        with pytest.raises(LdifParseError) as exc_info:
            parse(text)
        assert exc_info.value.line_number == 4

    def test_control_line_skipped(self):
        text = "dn: cn=a,dc=x\ncontrol: 1.2.840.113556.1.4.805 true\nchangetype: delete\n"
        assert isinstance(parse(text)[0], ChangeDelete)


class TestParseErrors:
    """Tests for error reporting and non-strict mode."""

    def test_record_without_dn(self):
        with pytest.raises(LdifParseError) as exc_info:
            parse("cn: a\nsn: b\n")
        assert exc_info.value.line_number == 1
        assert str(exc_info.value).startswith("line 1:")

    def test_unknown_changetype_line_number(self):
        text = "dn: cn=a,dc=x\ncn: a\n\ndn: cn=b,dc=x\nchangetype: rename\n"
        with pytest.raises(LdifParseError) as exc_info:
            parse(text)
        assert exc_info.value.line_number == 5

    def test_line_numbers_count_comment_lines(self):
        text = "# one\n# two\nno separator\n"
        with pytest.raises(LdifParseError) as exc_info:
            parse(text)
        assert exc_info.value.line_number == 3

    def test_non_strict_skips_bad_record(self):
        text = (
            "dn: cn=a,dc=x\ncn: a\n\n"
            "dn: cn=b,dc=x\nchangetype: bogus\n\n"
            "dn: cn=c,dc=x\ncn: c\n"
        )
        reader = LdifReader(strict=False)

        records = list(reader.parse(text))

        assert [r.dn for r in records] == ["cn=a,dc=x", "cn=c,dc=x"]
        assert len(reader.errors) == 1
        assert reader.errors[0].line_number == 5
        assert reader.errors[0].dn == "cn=b,dc=x"
