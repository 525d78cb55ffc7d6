import pytest

from dayc.assessments.dayc2.types import RawToStandardTable, StandardToPercentileTable, SumToDomainTable
from dayc.assessments.dayc2.values import Bounded, Exact, Range
from dayc.assessments.enums import Bound, SubtestKey
from dayc.core.errors import TableDataError, ValueParseError
from dayc.data.ingest import (
    build_table,
    compute_sha256,
    create_source_meta,
    extract_table_id,
    parse_b_row,
    parse_csv,
)

B13_CSV = """raw_score,cognitive,receptive_language,expressive_language,social_emotional,gross_motor,fine_motor,adaptive_behavior
0,<50,<50,<50,<50,<50,56,<50
1,52,58,67,54,<50,,50
2,55,60,70,58,52,69,55
"""

C1_CSV = """standard_score_1,percentile_rank_1,standard_score_2,percentile_rank_2,standard_score_3,percentile_rank_3
160,>99.9,119,90,78,7
100,50,59,<1,,
"""

D1_CSV = """sum_range_1,standard_score_1,sum_range_2,standard_score_2,sum_range_3,standard_score_3
100-101,49,166-167,83,227-229,117
140,70,200-202,100,,
"""


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("Table-A1-raw-to-age-equivalents.csv", "A1"),
        ("Table-B17-22-24-months.csv", "B17"),
        ("Table-C1.csv", "C1"),
        ("Table-D1-sums.csv", "D1"),
        ("notes.csv", None),
        ("Table-B1-short.csv", None),
    ],
)
def test_extract_table_id(filename, expected):
    assert extract_table_id(filename) == expected


def test_compute_sha256_is_hex_digest():
    assert compute_sha256("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_parse_csv_keeps_blank_cells_as_empty_strings():
    records = parse_csv(B13_CSV)
    assert len(records) == 3
    assert records[1]["fine_motor"] == ""
    assert records[0]["raw_score"] == "0"


def test_parse_csv_requires_header():
    with pytest.raises(TableDataError):
        parse_csv("")


def test_source_meta_from_catalog():
    source = create_source_meta("B13", "Table-B13.csv", B13_CSV, generated_at="2025-01-01T00:00:00.000Z")
    assert source.table_title == "Table B.13 Raw Scores to Standard Scores: Ages 12–13 Months"
    assert source.manual_page == 4
    assert source.csv_sha256 == compute_sha256(B13_CSV)
    assert source.generated_at == "2025-01-01T00:00:00.000Z"
    assert source.age_band.min_months == 12
    assert source.age_band.max_months == 13


def test_source_meta_stamps_utc_time_by_default():
    source = create_source_meta("C1", "Table-C1.csv", C1_CSV)
    assert source.generated_at.endswith("Z")
    assert source.age_band is None


def test_source_meta_unknown_table():
    with pytest.raises(TableDataError):
        create_source_meta("B99", "Table-B99.csv", "")


def test_build_b_table_numbers_rows_from_two():
    table = build_table("B13", "Table-B13.csv", B13_CSV)
    assert isinstance(table, RawToStandardTable)
    assert [row.csv_row for row in table.rows] == [2, 3, 4]
    assert table.row_for(0).cell(SubtestKey.COGNITIVE) == Bounded(Bound.LT, 50)
    assert table.row_for(1).cell(SubtestKey.FINE_MOTOR) is None
    assert table.row_for(2).cell(SubtestKey.FINE_MOTOR) == Exact(69)
    assert table.max_raw_score == 2


def test_build_c1_and_d1_tables():
    c1 = build_table("C1", "Table-C1.csv", C1_CSV)
    assert isinstance(c1, StandardToPercentileTable)
    first = c1.rows[0].pairs[0]
    assert first.standard_score == Exact(160)
    assert first.percentile_rank == Bounded(Bound.GT, 99.9)
    assert c1.rows[1].pairs[2].standard_score is None

    d1 = build_table("D1", "Table-D1.csv", D1_CSV)
    assert isinstance(d1, SumToDomainTable)
    assert d1.rows[0].pairs[0].sum_range == Range(100, 101)
    assert d1.rows[1].pairs[0].sum_range == Exact(140)
    assert d1.rows[1].csv_row == 3


@pytest.mark.parametrize("raw", ["", "-1", "1.5", "x"])
def test_b_row_raw_score_must_be_a_whole_number(raw):
    with pytest.raises(ValueParseError):
        parse_b_row({"raw_score": raw}, 2)


def test_bad_cell_names_the_file():
    broken = B13_CSV.replace("55,60,70", "55,sixty,70")
    with pytest.raises(ValueParseError) as excinfo:
        build_table("B13", "Table-B13.csv", broken)
    assert excinfo.value.message.startswith("Table-B13.csv: ")
