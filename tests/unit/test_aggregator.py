"""
Unit tests for the statistics aggregator (ldif_drift/analysis/aggregator.py)
"""

import pytest

from ldif_drift.analysis.aggregator import (
    StatsAggregator,
    analyze_file,
    analyze_records,
    analyze_text,
    read_ldif_text,
)
from ldif_drift.domain.records import (
    ChangeAdd,
    ChangeDelete,
    ChangeModDn,
    ChangeModify,
    ModSpec,
    ModSpecType,
)
from ldif_drift.exceptions import AggregatorStateError, LdifFileError, LdifParseError


@pytest.fixture
def mixed_records():
    """Add, modify, rename and delete touching two DNs."""
    return [
        ChangeAdd(dn="cn=a,dc=x", attributes={"cn": ["a"], "mail": ["a@x", "b@x"]}),
        ChangeModify(
            dn="cn=a,dc=x",
            mod_specs=[
                ModSpec("mail", ModSpecType.ADD, ["c@x"]),
                ModSpec("description", ModSpecType.DELETE, []),
            ],
        ),
        ChangeAdd(dn="cn=b,dc=x", attributes={"cn": ["b"]}),
        ChangeModDn(dn="cn=b,dc=x", new_rdn="cn=c"),
        ChangeDelete(dn="cn=a,dc=x"),
    ]


class TestStatsAggregator:
    """Tests for StatsAggregator."""

    def test_operation_counters(self, mixed_records):
        stats = analyze_records(mixed_records)

        assert stats.total_entries == 5
        assert stats.total_add_operations == 2
        assert stats.total_modify_operations == 1
        assert stats.total_moddn_operations == 1
        assert stats.total_delete_operations == 1

    def test_attribute_totals(self, mixed_records):
        stats = analyze_records(mixed_records)

        # 3 values from the first add, 1 from the modify, 1 from the second add
        assert stats.total_attributes == 5
        assert stats.attribute_counts == {"cn": 2, "mail": 3, "description": 0}

    def test_entry_info(self, mixed_records):
        stats = analyze_records(mixed_records)

        entry = stats.entries["cn=a,dc=x"]
        assert entry.operation_types == ["Add", "Modify", "Delete"]
        assert entry.attributes == {"cn": 1, "mail": 3, "description": 0}
        assert entry.total_attribute_count == 4

        renamed = stats.entries["cn=b,dc=x"]
        assert renamed.operation_types == ["Add", "ModDn"]
        assert renamed.total_attribute_count == 1

    def test_average_attributes_per_entry(self, mixed_records):
        stats = analyze_records(mixed_records)
        assert stats.average_attributes_per_entry == pytest.approx(1.0)

    def test_empty_stream(self):
        stats = analyze_records([])

        assert stats.total_entries == 0
        assert stats.average_attributes_per_entry == 0.0
        assert stats.entries == {}

    def test_dn_keys_are_case_sensitive(self):
        stats = analyze_records(
            [
                ChangeAdd(dn="cn=A,dc=x", attributes={"cn": ["A"]}),
                ChangeAdd(dn="cn=a,dc=x", attributes={"cn": ["a"]}),
            ]
        )
        assert sorted(stats.entries) == ["cn=A,dc=x", "cn=a,dc=x"]

    def test_finalize_twice_raises(self):
        aggregator = StatsAggregator()
        aggregator.finalize()

        with pytest.raises(AggregatorStateError):
            aggregator.finalize()

    def test_add_after_finalize_raises(self):
        aggregator = StatsAggregator()
        aggregator.finalize()

        with pytest.raises(AggregatorStateError):
            aggregator.add(ChangeDelete(dn="cn=a,dc=x"))

    def test_unknown_record_type(self):
        with pytest.raises(TypeError):
            StatsAggregator().add({"dn": "cn=a,dc=x"})

    def test_aggregators_are_independent(self):
        first = StatsAggregator()
        second = StatsAggregator()
        first.add(ChangeAdd(dn="cn=a,dc=x", attributes={"cn": ["a"]}))

        assert second.finalize().total_entries == 0
        assert first.finalize().total_entries == 1


class TestAnalyzeText:
    """Tests for analyze_text and analyze_file."""

    def test_analyze_text(self):
        text = "version: 1\n\ndn: cn=a,dc=x\ncn: a\nsn: b\n\ndn: cn=a,dc=x\nchangetype: delete\n"

        stats = analyze_text(text)

        assert stats.total_entries == 2
        assert stats.total_attributes == 2

    def test_parse_error_propagates(self):
        with pytest.raises(LdifParseError):
            analyze_text("dn: cn=a,dc=x\nchangetype: nope\n")

    def test_skip_invalid(self):
        text = "dn: cn=a,dc=x\nchangetype: nope\n\ndn: cn=b,dc=x\ncn: b\n"

        stats = analyze_text(text, skip_invalid=True)

        assert list(stats.entries) == ["cn=b,dc=x"]

    def test_analyze_file(self, tmp_path):
        path = tmp_path / "export.ldif"
        path.write_text("dn: cn=a,dc=x\ncn: a\n", encoding="utf-8")

        stats = analyze_file(path)

        assert stats.total_add_operations == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(LdifFileError) as exc_info:
            analyze_file(tmp_path / "missing.ldif")
        assert "LDIF file not found" in str(exc_info.value)

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "latin1.ldif"
        path.write_bytes("dn: cn=Jörg,dc=x\ncn: Jörg\n".encode("latin-1"))

        with pytest.raises(LdifFileError, match="Cannot read LDIF file"):
            read_ldif_text(path)

        assert read_ldif_text(path, encoding="latin-1").startswith("dn: cn=Jörg")
