"""Tests for reading variant tables and writing results."""

import gzip
from pathlib import Path

from rsid_lookup.io import infer_delimiter, read_variant_table, write_result_table
from rsid_lookup.models import MatchedSNP, ResultTable


class TestInferDelimiter:
    def test_extensions(self):
        assert infer_delimiter(Path("variants.csv")) == ","
        assert infer_delimiter(Path("variants.CSV.gz")) == ","
        assert infer_delimiter(Path("variants.tsv")) == "\t"
        assert infer_delimiter(Path("variants.txt.gz")) == "\t"
        assert infer_delimiter(Path("variants")) == "\t"


class TestReadVariantTable:
    def test_tsv(self, tmp_path):
        path = tmp_path / "variants.tsv"
        path.write_text("chr\tpos\tA1\tA2\n1\t123456\tA\tG\n2\t234567\tC\tT\n")

        table = read_variant_table(path)

        assert table.columns == ("chr", "pos", "A1", "A2")
        assert len(table) == 2
        assert table.rows[0] == {"chr": "1", "pos": "123456", "A1": "A", "A2": "G"}

    def test_gzipped_csv(self, tmp_path):
        path = tmp_path / "variants.csv.gz"
        with gzip.open(path, "wt") as f:
            f.write("CHROM,BP,EA,OA\nX,1000,C,A\n")

        table = read_variant_table(path)

        assert table.columns == ("CHROM", "BP", "EA", "OA")
        assert table.rows[0]["EA"] == "C"

    def test_explicit_delimiter(self, tmp_path):
        path = tmp_path / "variants.txt"
        path.write_text("chr pos A1 A2\n1 5 A G\n")

        table = read_variant_table(path, delimiter=" ")

        assert table.rows[0]["pos"] == "5"

    def test_header_only(self, tmp_path):
        path = tmp_path / "variants.tsv"
        path.write_text("chr\tpos\tA1\tA2\n")

        table = read_variant_table(path)

        assert table.columns == ("chr", "pos", "A1", "A2")
        assert len(table) == 0


class TestWriteResultTable:
    def _table(self) -> ResultTable:
        return ResultTable(
            rows=[
                MatchedSNP("1", "rs1", 123456, "G", "A"),
                MatchedSNP("2", "rs3", 234567, "C", "T"),
            ]
        )

    def test_writes_fixed_header(self, tmp_path):
        path = tmp_path / "out.tsv"

        written = write_result_table(self._table(), path)

        assert written == 2
        assert path.read_text().splitlines() == [
            "chromosome\trsID\tposition\tallele1\tallele2",
            "1\trs1\t123456\tG\tA",
            "2\trs3\t234567\tC\tT",
        ]

    def test_gzip_output(self, tmp_path):
        path = tmp_path / "out.tsv.gz"

        write_result_table(self._table(), path)

        with gzip.open(path, "rt") as f:
            assert f.readline().rstrip("\n") == "chromosome\trsID\tposition\tallele1\tallele2"

    def test_empty_table_writes_header(self, tmp_path):
        path = tmp_path / "out.tsv"

        assert write_result_table(ResultTable(), path) == 0
        assert path.read_text() == "chromosome\trsID\tposition\tallele1\tallele2\n"
