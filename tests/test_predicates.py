"""Tests for match predicate construction."""

import sqlite3

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rsid_lookup.models import VariantRecord
from rsid_lookup.predicates import (
    PARAMS_PER_VARIANT,
    MatchPredicate,
    PlaceholderStyle,
    Placeholders,
    build_batch_predicate,
    build_predicate,
    combine_predicates,
    max_batch_size,
)


class TestPlaceholders:
    def test_qmark(self):
        placeholders = Placeholders(PlaceholderStyle.QMARK)
        assert [placeholders() for _ in range(3)] == ["?", "?", "?"]

    def test_numeric_continues_numbering(self):
        placeholders = Placeholders(PlaceholderStyle.NUMERIC)
        assert [placeholders() for _ in range(3)] == ["$1", "$2", "$3"]


class TestBuildPredicate:
    """Tests for single-variant predicates."""

    def test_covers_both_orientations(self):
        record = VariantRecord("1", 123456, "A", "G")
        predicate = build_predicate(record, Placeholders(PlaceholderStyle.QMARK))

        assert predicate.sql == (
            "(chr = ? AND pos = ? AND ((A1 = ? AND A2 = ?) OR (A1 = ? AND A2 = ?)))"
        )
        assert predicate.params == ("1", 123456, "A", "G", "G", "A")

    def test_numeric_placeholders(self):
        record = VariantRecord("1", 123456, "A", "G")
        predicate = build_predicate(record, Placeholders(PlaceholderStyle.NUMERIC))

        assert "$1" in predicate.sql
        assert "$6" in predicate.sql
        assert "$7" not in predicate.sql

    def test_values_never_appear_in_sql(self):
        record = VariantRecord("chrZZ", 987654321, "ACGTN", "TTTTT")
        predicate = build_predicate(record, Placeholders(PlaceholderStyle.QMARK))

        assert "chrZZ" not in predicate.sql
        assert "987654321" not in predicate.sql
        assert "ACGTN" not in predicate.sql
        assert len(predicate.params) == PARAMS_PER_VARIANT

    def test_empty_predicate_rejected(self):
        with pytest.raises(ValueError):
            MatchPredicate(sql="", params=())


class TestCombinePredicates:
    """Tests for batch-level predicate combination."""

    def test_or_combination(self):
        placeholders = Placeholders(PlaceholderStyle.QMARK)
        first = build_predicate(VariantRecord("1", 1, "A", "G"), placeholders)
        second = build_predicate(VariantRecord("2", 2, "C", "T"), placeholders)

        combined = combine_predicates([first, second])

        assert combined.sql == f"{first.sql} OR {second.sql}"
        assert combined.params == first.params + second.params

    def test_numeric_placeholders_line_up_with_params(self):
        records = [VariantRecord(str(i), i, "A", "G") for i in range(1, 4)]
        combined = build_batch_predicate(records, PlaceholderStyle.NUMERIC)

        assert f"${3 * PARAMS_PER_VARIANT}" in combined.sql
        assert f"${3 * PARAMS_PER_VARIANT + 1}" not in combined.sql
        assert len(combined.params) == 3 * PARAMS_PER_VARIANT

    def test_empty_combination_rejected(self):
        with pytest.raises(ValueError):
            combine_predicates([])


class TestMaxBatchSize:
    def test_sqlite_limit(self):
        assert max_batch_size(32766) == 5461

    def test_postgres_limit(self):
        assert max_batch_size(32767) == 5461


def _match_in_sqlite(stored: tuple, record: VariantRecord) -> list[tuple]:
    conn = sqlite3.connect(":memory:")
    try:
        conn.execute("CREATE TABLE snp (chr TEXT, rsID TEXT, pos INTEGER, A1 TEXT, A2 TEXT)")
        conn.execute("INSERT INTO snp VALUES (?, ?, ?, ?, ?)", stored)
        predicate = build_batch_predicate([record], PlaceholderStyle.QMARK)
        return conn.execute(
            f"SELECT chr, rsID, pos, A1, A2 FROM snp WHERE {predicate.sql}", predicate.params
        ).fetchall()
    finally:
        conn.close()


hostile_text = st.text(
    alphabet=st.sampled_from(list("ACGT'\";-/*() =OR1%_\\")), min_size=1, max_size=12
)


class TestSpecialCharacters:
    """Quote, semicolon and comment characters are bound as literal data."""

    @pytest.mark.parametrize(
        "allele",
        [
            "A'",
            "A' OR '1'='1",
            'G"',
            "A'; DROP TABLE snp; --",
            "/* comment */",
            "%",
            "_",
        ],
    )
    def test_injected_allele_matches_only_literally(self, allele):
        stored = ("1", "rs1", 100, allele, "G")

        assert _match_in_sqlite(stored, VariantRecord("1", 100, allele, "G")) == [stored]
        assert _match_in_sqlite(stored, VariantRecord("1", 100, "G", allele)) == [stored]
        assert _match_in_sqlite(stored, VariantRecord("1", 100, "A", "G")) == []

    def test_injected_chromosome_does_not_widen_match(self):
        stored = ("1", "rs1", 100, "A", "G")
        record = VariantRecord("1' OR '1'='1", 100, "A", "G")
        assert _match_in_sqlite(stored, record) == []

    @given(a1=hostile_text, a2=hostile_text, chrom=hostile_text)
    @settings(max_examples=100, deadline=None)
    def test_hostile_values_round_trip_as_literals(self, a1, a2, chrom):
        stored = (chrom, "rs1", 100, a1, a2)

        assert _match_in_sqlite(stored, VariantRecord(chrom, 100, a1, a2)) == [stored]
        assert _match_in_sqlite(stored, VariantRecord(chrom, 100, a2, a1)) == [stored]
        assert _match_in_sqlite(stored, VariantRecord(chrom, 101, a1, a2)) == []
