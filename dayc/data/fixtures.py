"""Reduced conversion tables for tests and local development.

A1, B13 (12-13 months), B17 (22-24 months), C1 and D1, with a handful of rows
each, written the way the published CSVs print them and parsed through the
same row parsers the table builder uses. Row numbers are the CSV rows of the
published tables, so provenance assertions read like real lookups.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from dayc.assessments.constants import A1_TABLE_ID, C1_TABLE_ID, D1_TABLE_ID
from dayc.assessments.dayc2 import load_catalog
from dayc.assessments.dayc2.types import (
    AgeEquivalentsTable,
    RawToStandardTable,
    SourceMeta,
    StandardToPercentileTable,
    SumToDomainTable,
)
from dayc.data.context import LookupContext
from dayc.data.ingest import parse_a1_row, parse_b_row, parse_c1_row, parse_d1_row

__all__ = [
    "FIXTURE_A1",
    "FIXTURE_B13",
    "FIXTURE_B17",
    "FIXTURE_C1",
    "FIXTURE_D1",
    "create_fixture_lookup_context",
]

_MOCK_SHA = "mock-sha256-for-testing"
_MOCK_GENERATED_AT = "2025-01-01T00:00:00.000Z"
_MOCK_GENERATOR = "test@1.0.0"

_A1_COLUMNS = (
    "age_months",
    "cognitive",
    "communication",
    "receptive_language",
    "expressive_language",
    "social_emotional",
    "physical_development",
    "gross_motor",
    "fine_motor",
    "adaptive_behavior",
)
_B_COLUMNS = (
    "raw_score",
    "cognitive",
    "receptive_language",
    "expressive_language",
    "social_emotional",
    "gross_motor",
    "fine_motor",
    "adaptive_behavior",
)
_C1_COLUMNS = (
    "standard_score_1",
    "percentile_rank_1",
    "standard_score_2",
    "percentile_rank_2",
    "standard_score_3",
    "percentile_rank_3",
)
_D1_COLUMNS = (
    "sum_range_1",
    "standard_score_1",
    "sum_range_2",
    "standard_score_2",
    "sum_range_3",
    "standard_score_3",
)

# (csv row, cells...) exactly as printed; "" is a blank cell.
_A1_ROWS: Sequence[Tuple[int, ...]] = (
    (2, "<1", "0-4", "0-7", "0-4", "0-3", "0-6", "0-8", "0-5", "0-3", "0-6"),
    (14, "12", "24", "25", "13", "12", "22", "49", "28", "21", "18"),
    (26, "24", "39", "40", "20", "20", "35", "60", "38", "22", "33"),
)

_B13_ROWS: Sequence[Tuple[int, ...]] = (
    (2, "0", "<50", "<50", "<50", "<50", "<50", "56", "<50"),
    (7, "5", "50", "58", "67", "54", "<50", "69", "50"),
    (12, "10", "60", "90", "95", "70", "55", "85", "65"),
    (22, "20", "100", "120", "130", "105", "85", "110", "95"),
    (32, "30", "130", ">150", ">150", "140", "115", "", "125"),
)

_B17_ROWS: Sequence[Tuple[int, ...]] = (
    (2, "0", "<50", "<50", "<50", "<50", "<50", "<50", "<50"),
    (12, "10", "55", "70", "75", "60", "50", "65", "55"),
    (22, "20", "85", "100", "105", "90", "75", "95", "80"),
)

_C1_ROWS: Sequence[Tuple[int, ...]] = (
    (2, "160", ">99.9", "119", "90", "78", "7"),
    (22, "140", ">99.9", "99", "47", "58", "<1"),
    (32, "130", "98", "89", "23", "", ""),
    (42, "120", "91", "79", "8", "", ""),
    (52, "110", "75", "69", "2", "", ""),
    (62, "100", "50", "59", "<1", "", ""),
    (72, "90", "25", "49", "<1", "", ""),
    (82, "80", "9", "40", "<1", "", ""),
)

_D1_ROWS: Sequence[Tuple[int, ...]] = (
    (2, "100-101", "49", "166-167", "83", "227-229", "117"),
    (12, "120-122", "59", "186-188", "93", "247-250", "127"),
    (22, "140", "70", "200-202", "100", "260-262", "134"),
    (32, "160-162", "80", "220-222", "110", "280-282", "143"),
)


def _records(columns: Sequence[str], rows: Sequence[Tuple[int, ...]]) -> List[Tuple[int, Dict[str, str]]]:
    return [(int(row[0]), dict(zip(columns, (str(cell) for cell in row[1:])))) for row in rows]


def _source(table_id: str) -> SourceMeta:
    spec = load_catalog().spec(table_id)
    return SourceMeta(
        table_id=table_id,
        table_title=spec.title,
        manual_page=spec.manual_page,
        csv_filename=f"mock-{table_id}.csv",
        csv_sha256=_MOCK_SHA,
        generated_at=_MOCK_GENERATED_AT,
        generator_version=_MOCK_GENERATOR,
        age_band=spec.age_band,
    )


def _b_table(table_id: str, rows: Sequence[Tuple[int, ...]]) -> RawToStandardTable:
    return RawToStandardTable(
        table_id=table_id,
        source=_source(table_id),
        rows=tuple(parse_b_row(record, csv_row) for csv_row, record in _records(_B_COLUMNS, rows)),
    )


FIXTURE_A1 = AgeEquivalentsTable(
    table_id=A1_TABLE_ID,
    source=_source(A1_TABLE_ID),
    rows=tuple(parse_a1_row(record, csv_row) for csv_row, record in _records(_A1_COLUMNS, _A1_ROWS)),
)

FIXTURE_B13 = _b_table("B13", _B13_ROWS)
FIXTURE_B17 = _b_table("B17", _B17_ROWS)

FIXTURE_C1 = StandardToPercentileTable(
    table_id=C1_TABLE_ID,
    source=_source(C1_TABLE_ID),
    rows=tuple(parse_c1_row(record, csv_row) for csv_row, record in _records(_C1_COLUMNS, _C1_ROWS)),
)

FIXTURE_D1 = SumToDomainTable(
    table_id=D1_TABLE_ID,
    source=_source(D1_TABLE_ID),
    rows=tuple(parse_d1_row(record, csv_row) for csv_row, record in _records(_D1_COLUMNS, _D1_ROWS)),
)


def create_fixture_lookup_context() -> LookupContext:
    """Context over the fixture tables; ages outside 12-13 and 22-24 months have no B table."""
    return LookupContext(
        age_equivalents=FIXTURE_A1,
        raw_to_standard={"B13": FIXTURE_B13, "B17": FIXTURE_B17},
        standard_to_percentile=FIXTURE_C1,
        sum_to_domain=FIXTURE_D1,
    )
