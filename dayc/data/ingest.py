"""CSV ingestion for the published conversion tables.

Each table arrives as a CSV with a header row; the first data row is CSV row 2
and that number is kept on every parsed row so provenance can point back at it.
Cells are parsed with :func:`dayc.assessments.dayc2.values.parse_value` and its
narrower siblings.
"""

from __future__ import annotations

import csv
import re
from datetime import datetime, timezone
from hashlib import sha256
from typing import Dict, List, Mapping, Optional, Union

from dayc.assessments.dayc2 import load_catalog
from dayc.assessments.dayc2.catalog import TableCatalog
from dayc.assessments.dayc2.types import (
    AgeEquivalentRow,
    AgeEquivalentsTable,
    C1Row,
    CompositePair,
    D1Row,
    PercentilePair,
    RawToStandardRow,
    RawToStandardTable,
    SourceMeta,
    StandardToPercentileTable,
    SumToDomainTable,
)
from dayc.assessments.dayc2.values import parse_age_months, parse_percentile, parse_value
from dayc.assessments.enums import AgeEquivalentKey, SubtestKey, TableKind
from dayc.core.errors import TableDataError, ValueParseError

__all__ = [
    "AnyTable",
    "FIRST_DATA_ROW",
    "parse_csv",
    "compute_sha256",
    "extract_table_id",
    "create_source_meta",
    "parse_a1_row",
    "parse_b_row",
    "parse_c1_row",
    "parse_d1_row",
    "build_table",
]

AnyTable = Union[AgeEquivalentsTable, RawToStandardTable, StandardToPercentileTable, SumToDomainTable]

FIRST_DATA_ROW = 2

_FILENAME_PATTERN = re.compile(r"Table-(A1|B\d{2}|C1|D1)\b")


def parse_csv(content: str) -> List[Dict[str, str]]:
    reader = csv.DictReader(content.strip().splitlines())
    if not reader.fieldnames:
        raise TableDataError("CSV has no header row")
    return [{key: (value or "") for key, value in record.items() if key is not None} for record in reader]


def compute_sha256(content: str) -> str:
    return sha256(content.encode("utf-8")).hexdigest()


def extract_table_id(filename: str) -> Optional[str]:
    """Table id encoded in a file name such as ``Table-B17-22-24-months.csv``."""
    match = _FILENAME_PATTERN.search(filename)
    return match.group(1) if match else None


def create_source_meta(
    table_id: str,
    csv_filename: str,
    csv_content: str,
    *,
    catalog: TableCatalog | None = None,
    generated_at: str | None = None,
) -> SourceMeta:
    catalog = catalog or load_catalog()
    try:
        spec = catalog.spec(table_id)
    except KeyError as exc:
        raise TableDataError(f"Unknown table id {table_id!r}") from exc
    stamp = generated_at or datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return SourceMeta(
        table_id=table_id,
        table_title=spec.title,
        manual_page=spec.manual_page,
        csv_filename=csv_filename,
        csv_sha256=compute_sha256(csv_content),
        generated_at=stamp,
        generator_version=catalog.generator_version,
        age_band=spec.age_band,
    )


def _cell(record: Mapping[str, str], column: str) -> str:
    return record.get(column, "") or ""


def parse_a1_row(record: Mapping[str, str], csv_row: int) -> AgeEquivalentRow:
    return AgeEquivalentRow(
        csv_row=csv_row,
        age_months=parse_age_months(_cell(record, "age_months")),
        cells={key: parse_value(_cell(record, key.value)) for key in AgeEquivalentKey},
    )


def parse_b_row(record: Mapping[str, str], csv_row: int) -> RawToStandardRow:
    raw = _cell(record, "raw_score").strip()
    if not raw.isdigit():
        raise ValueParseError(f'raw_score must be a non-negative integer: "{raw}"', detail={"csv_row": csv_row})
    return RawToStandardRow(
        csv_row=csv_row,
        raw_score=int(raw),
        cells={key: parse_value(_cell(record, key.value)) for key in SubtestKey},
    )


def parse_c1_row(record: Mapping[str, str], csv_row: int) -> C1Row:
    pairs = tuple(
        PercentilePair(
            standard_score=parse_value(_cell(record, f"standard_score_{n}")),
            percentile_rank=parse_percentile(_cell(record, f"percentile_rank_{n}")),
        )
        for n in (1, 2, 3)
    )
    return C1Row(csv_row=csv_row, pairs=pairs)  # type: ignore[arg-type]


def parse_d1_row(record: Mapping[str, str], csv_row: int) -> D1Row:
    pairs = tuple(
        CompositePair(
            sum_range=parse_value(_cell(record, f"sum_range_{n}")),
            standard_score=parse_value(_cell(record, f"standard_score_{n}")),
        )
        for n in (1, 2, 3)
    )
    return D1Row(csv_row=csv_row, pairs=pairs)  # type: ignore[arg-type]


def build_table(
    table_id: str,
    csv_filename: str,
    csv_content: str,
    *,
    catalog: TableCatalog | None = None,
    generated_at: str | None = None,
) -> AnyTable:
    """Parse one published CSV into its typed table."""
    catalog = catalog or load_catalog()
    source = create_source_meta(
        table_id, csv_filename, csv_content, catalog=catalog, generated_at=generated_at
    )
    records = parse_csv(csv_content)
    kind = catalog.spec(table_id).kind
    try:
        if kind is TableKind.AGE_EQUIVALENTS:
            return AgeEquivalentsTable(
                table_id=table_id,
                source=source,
                rows=tuple(parse_a1_row(r, i) for i, r in enumerate(records, start=FIRST_DATA_ROW)),
            )
        if kind is TableKind.RAW_TO_STANDARD:
            return RawToStandardTable(
                table_id=table_id,
                source=source,
                rows=tuple(parse_b_row(r, i) for i, r in enumerate(records, start=FIRST_DATA_ROW)),
            )
        if kind is TableKind.STANDARD_TO_PERCENTILE:
            return StandardToPercentileTable(
                table_id=table_id,
                source=source,
                rows=tuple(parse_c1_row(r, i) for i, r in enumerate(records, start=FIRST_DATA_ROW)),
            )
        return SumToDomainTable(
            table_id=table_id,
            source=source,
            rows=tuple(parse_d1_row(r, i) for i, r in enumerate(records, start=FIRST_DATA_ROW)),
        )
    except ValueParseError as exc:
        raise ValueParseError(f"{csv_filename}: {exc.message}", detail=exc.detail) from exc
