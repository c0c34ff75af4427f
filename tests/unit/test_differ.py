"""
Unit tests for attribute and entry diffs (ldif_drift/comparison/differ.py)
"""

from ldif_drift.analysis.aggregator import analyze_records
from ldif_drift.comparison.differ import (
    SIGNIFICANT_ATTRIBUTE_CHANGE_PERCENT,
    compare_distribution,
    compare_entry_attributes,
    generate_entry_diffs,
)
from ldif_drift.domain.records import ChangeAdd, ChangeDelete
from ldif_drift.domain.stats import EntryInfo


def entry(dn="cn=a,dc=x", **attributes):
    return EntryInfo(
        dn=dn,
        operation_types=["Add"],
        total_attribute_count=sum(attributes.values()),
        attributes=dict(attributes),
    )


class TestCompareDistribution:
    """Tests for file-wide attribute distribution comparison."""

    def test_identical_counts(self):
        """Equal distributions produce no lines."""
        assert compare_distribution({"cn": 10, "mail": 4}, {"cn": 10, "mail": 4}) == []

    def test_new_and_removed_attributes(self):
        """Attributes present on one side only are always reported."""
        diffs = compare_distribution({"cn": 10, "fax": 3}, {"cn": 10, "mail": 5})

        assert diffs == [
            "- fax: removed (3 values)",
            "+ mail: new attribute (5 values)",
        ]

    def test_small_change_is_ignored(self):
        """10 -> 11 is a 10% change, below the significance cutoff."""
        assert compare_distribution({"mail": 10}, {"mail": 11}) == []

    def test_cutoff_is_exclusive(self):
        """Exactly 20% is not significant."""
        assert SIGNIFICANT_ATTRIBUTE_CHANGE_PERCENT == 20.0
        assert compare_distribution({"mail": 10}, {"mail": 12}) == []

    def test_significant_change(self):
        """Changes above the cutoff show percent and counts."""
        assert compare_distribution({"mail": 10}, {"mail": 13}) == ["~ mail: +30.0% (10 → 13)"]
        assert compare_distribution({"mail": 10}, {"mail": 5}) == ["~ mail: -50.0% (10 → 5)"]

    def test_sorted_by_attribute_name(self):
        """Lines are ordered by attribute name."""
        diffs = compare_distribution({}, {"sn": 1, "cn": 1, "mail": 1})
        assert [d.split(":")[0] for d in diffs] == ["+ cn", "+ mail", "+ sn"]

    def test_attribute_names_are_case_sensitive(self):
        """mail and Mail are different attributes."""
        diffs = compare_distribution({"mail": 2}, {"Mail": 2})
        assert diffs == ["+ Mail: new attribute (2 values)", "- mail: removed (2 values)"]


class TestCompareEntryAttributes:
    """Tests for per-entry attribute comparison."""

    def test_every_change_is_reported(self):
        """10 -> 11 is reported at entry granularity."""
        assert compare_entry_attributes(entry(mail=10), entry(mail=11)) == [
            "~ mail: 10 → 11 value(s)"
        ]

    def test_added_and_removed(self):
        """Attributes on one side only are marked + or -."""
        diffs = compare_entry_attributes(entry(cn=1, fax=2), entry(cn=1, mail=1))

        assert diffs == ["- fax: 2 value(s)", "+ mail: 1 value(s)"]

    def test_no_changes(self):
        """Attribute order does not matter."""
        assert compare_entry_attributes(entry(cn=1, sn=1), entry(sn=1, cn=1)) == []


class TestGenerateEntryDiffs:
    """Tests for entry-level diff generation."""

    def test_added_entry(self):
        """A DN only in the new file is Added with its attributes."""
        baseline = analyze_records([ChangeAdd("cn=U1,dc=x", {"cn": ["U1"], "sn": ["One"]})])
        new = analyze_records(
            [
                ChangeAdd("cn=U1,dc=x", {"cn": ["U1"], "sn": ["One"]}),
                ChangeAdd("cn=U2,dc=x", {"cn": ["U2"]}),
            ]
        )

        diffs = generate_entry_diffs(baseline, new)

        assert len(diffs) == 1
        diff = diffs[0]
        assert diff.dn == "cn=U2,dc=x"
        assert diff.change_type == "Added"
        assert diff.attribute_differences == ["+ cn: 1 value(s)"]
        assert diff.new_operations == ["Add"]
        assert diff.new_attr_count == 1
        assert diff.baseline_operations is None
        assert diff.baseline_attr_count is None

    def test_removed_entry_keeps_attribute_order(self):
        """Removed entries list attributes in first-seen order."""
        baseline = analyze_records([ChangeAdd("cn=a,dc=x", {"sn": ["A"], "cn": ["a"]})])
        new = analyze_records([])

        diff = generate_entry_diffs(baseline, new)[0]

        assert diff.change_type == "Removed"
        assert diff.attribute_differences == ["- sn: 1 value(s)", "- cn: 1 value(s)"]
        assert diff.baseline_attr_count == 2
        assert diff.new_operations is None

    def test_modified_by_operation_sequence_only(self):
        """A changed operation sequence alone makes an entry Modified."""
        baseline = analyze_records([ChangeAdd("cn=a,dc=x", {"cn": ["a"]})])
        new = analyze_records(
            [ChangeAdd("cn=a,dc=x", {"cn": ["a"]}), ChangeDelete("cn=a,dc=x")]
        )

        diff = generate_entry_diffs(baseline, new)[0]

        assert diff.change_type == "Modified"
        assert diff.attribute_differences == []
        assert diff.baseline_operations == ["Add"]
        assert diff.new_operations == ["Add", "Delete"]

    def test_identical_entries_yield_nothing(self):
        """Unchanged entries produce no diff."""
        records = [ChangeAdd("cn=a,dc=x", {"cn": ["a"], "mail": ["a@x"]})]
        assert generate_entry_diffs(analyze_records(records), analyze_records(records)) == []

    def test_case_only_dn_difference_is_added_and_removed(self):
        """DN comparison is case-sensitive."""
        baseline = analyze_records([ChangeAdd("cn=User,dc=x", {"cn": ["User"]})])
        new = analyze_records([ChangeAdd("cn=user,dc=x", {"cn": ["User"]})])

        diffs = generate_entry_diffs(baseline, new)

        assert [(d.dn, d.change_type) for d in diffs] == [
            ("cn=User,dc=x", "Removed"),
            ("cn=user,dc=x", "Added"),
        ]

    def test_sorted_by_dn(self):
        """Diffs are ordered by DN."""
        baseline = analyze_records([])
        new = analyze_records(
            [ChangeAdd("cn=c,dc=x", {"cn": ["c"]}), ChangeAdd("cn=a,dc=x", {"cn": ["a"]})]
        )
        assert [d.dn for d in generate_entry_diffs(baseline, new)] == ["cn=a,dc=x", "cn=c,dc=x"]
