"""Typed-table JSON files: validation on load, serialization on build.

The files use camelCase keys. Every cell is ``null`` or one of the shapes
``{"value"}``, ``{"bound", "value"}`` or ``{"min", "max"}``. Files written
before titles and manual pages were recorded are completed from the table
catalog.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from dayc.assessments.dayc2 import load_catalog
from dayc.assessments.dayc2.catalog import TableCatalog
from dayc.assessments.dayc2.types import (
    AgeBand,
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
from dayc.assessments.dayc2.values import Bounded, Exact, Range, numeric_from_dict
from dayc.assessments.enums import AgeEquivalentKey, SubtestKey, TableKind
from dayc.core.errors import ConfigurationError, TableDataError
from dayc.core.logging import get_logger, structured
from dayc.data.ingest import AnyTable

__all__ = [
    "TableBundle",
    "table_from_payload",
    "load_table",
    "load_tables_dir",
    "table_to_payload",
    "write_table",
]

logger = get_logger("dayc.data.tables", component="tables")

Cell = Optional[Dict[str, Any]]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class AgeBandModel(_CamelModel):
    min_months: int = Field(ge=0)
    max_months: int = Field(ge=0)
    label: str


class SourceModel(_CamelModel):
    table_id: str
    table_title: Optional[str] = None
    manual_page: Optional[int] = None
    csv_filename: str
    csv_sha256: str
    generated_at: str
    generator_version: str
    age_band: Optional[AgeBandModel] = None


class AgeEquivalentRowModel(_CamelModel):
    csv_row: int = Field(ge=2)
    age_months: Dict[str, Any]
    cognitive: Cell = None
    communication: Cell = None
    receptive_language: Cell = None
    expressive_language: Cell = None
    social_emotional: Cell = None
    physical_development: Cell = None
    gross_motor: Cell = None
    fine_motor: Cell = None
    adaptive_behavior: Cell = None


class RawToStandardRowModel(_CamelModel):
    csv_row: int = Field(ge=2)
    raw_score: int = Field(ge=0)
    cognitive: Cell = None
    receptive_language: Cell = None
    expressive_language: Cell = None
    social_emotional: Cell = None
    gross_motor: Cell = None
    fine_motor: Cell = None
    adaptive_behavior: Cell = None


class C1RowModel(_CamelModel):
    csv_row: int = Field(ge=2)
    standard_score1: Cell = None
    percentile_rank1: Cell = None
    standard_score2: Cell = None
    percentile_rank2: Cell = None
    standard_score3: Cell = None
    percentile_rank3: Cell = None


class D1RowModel(_CamelModel):
    csv_row: int = Field(ge=2)
    sum_range1: Cell = None
    standard_score1: Cell = None
    sum_range2: Cell = None
    standard_score2: Cell = None
    sum_range3: Cell = None
    standard_score3: Cell = None


class TableFileModel(_CamelModel):
    table_id: str
    source: SourceModel
    rows: List[Dict[str, Any]]


_ROW_MODELS = {
    TableKind.AGE_EQUIVALENTS: AgeEquivalentRowModel,
    TableKind.RAW_TO_STANDARD: RawToStandardRowModel,
    TableKind.STANDARD_TO_PERCENTILE: C1RowModel,
    TableKind.SUM_TO_DOMAIN: D1RowModel,
}


@dataclass(frozen=True, slots=True)
class TableBundle:
    age_equivalents: AgeEquivalentsTable
    raw_to_standard: Dict[str, RawToStandardTable]
    standard_to_percentile: StandardToPercentileTable
    sum_to_domain: SumToDomainTable


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _source_meta(model: SourceModel, table_id: str, catalog: TableCatalog) -> SourceMeta:
    spec = catalog.spec(table_id)
    band: AgeBand | None = spec.age_band
    if model.age_band is not None:
        band = AgeBand(
            min_months=model.age_band.min_months,
            max_months=model.age_band.max_months,
            label=model.age_band.label,
        )
    return SourceMeta(
        table_id=table_id,
        table_title=model.table_title or spec.title,
        manual_page=model.manual_page if model.manual_page is not None else spec.manual_page,
        csv_filename=model.csv_filename,
        csv_sha256=model.csv_sha256,
        generated_at=model.generated_at,
        generator_version=model.generator_version,
        age_band=band,
    )


def _percentile(payload: Cell):
    value = numeric_from_dict(payload)
    if isinstance(value, Range):
        raise TableDataError("Percentile ranks cannot be ranges")
    return value


def _build(table_id: str, kind: TableKind, source: SourceMeta, rows: List[Any]) -> AnyTable:
    if kind is TableKind.AGE_EQUIVALENTS:
        a1_rows = []
        for row in rows:
            age = numeric_from_dict(row.age_months)
            if not isinstance(age, (Exact, Bounded)):
                raise TableDataError(f"ageMonths at CSV row {row.csv_row} must be exact or bounded")
            a1_rows.append(
                AgeEquivalentRow(
                    csv_row=row.csv_row,
                    age_months=age,
                    cells={key: numeric_from_dict(getattr(row, key.value)) for key in AgeEquivalentKey},
                )
            )
        return AgeEquivalentsTable(table_id=table_id, source=source, rows=tuple(a1_rows))
    if kind is TableKind.RAW_TO_STANDARD:
        if source.age_band is None:
            raise TableDataError(f"{table_id} has no age band")
        return RawToStandardTable(
            table_id=table_id,
            source=source,
            rows=tuple(
                RawToStandardRow(
                    csv_row=row.csv_row,
                    raw_score=row.raw_score,
                    cells={key: numeric_from_dict(getattr(row, key.value)) for key in SubtestKey},
                )
                for row in rows
            ),
        )
    if kind is TableKind.STANDARD_TO_PERCENTILE:
        return StandardToPercentileTable(
            table_id=table_id,
            source=source,
            rows=tuple(
                C1Row(
                    csv_row=row.csv_row,
                    pairs=tuple(  # type: ignore[arg-type]
                        PercentilePair(
                            standard_score=numeric_from_dict(getattr(row, f"standard_score{n}")),
                            percentile_rank=_percentile(getattr(row, f"percentile_rank{n}")),
                        )
                        for n in (1, 2, 3)
                    ),
                )
                for row in rows
            ),
        )
    return SumToDomainTable(
        table_id=table_id,
        source=source,
        rows=tuple(
            D1Row(
                csv_row=row.csv_row,
                pairs=tuple(  # type: ignore[arg-type]
                    CompositePair(
                        sum_range=numeric_from_dict(getattr(row, f"sum_range{n}")),
                        standard_score=numeric_from_dict(getattr(row, f"standard_score{n}")),
                    )
                    for n in (1, 2, 3)
                ),
            )
            for row in rows
        ),
    )


def table_from_payload(
    payload: Mapping[str, Any],
    *,
    origin: str = "<payload>",
    catalog: TableCatalog | None = None,
) -> AnyTable:
    """Validate a decoded JSON document and build the matching table type."""
    catalog = catalog or load_catalog()
    try:
        envelope = TableFileModel.model_validate(payload)
        try:
            kind = catalog.spec(envelope.table_id).kind
        except KeyError as exc:
            raise TableDataError(
                f"{origin}: unknown tableId {envelope.table_id!r}", detail={"file": origin}
            ) from exc
        row_model = _ROW_MODELS[kind]
        rows = [row_model.model_validate(row) for row in envelope.rows]
        source = _source_meta(envelope.source, envelope.table_id, catalog)
        return _build(envelope.table_id, kind, source, rows)
    except PydanticValidationError as exc:
        raise TableDataError(
            f"{origin}: table does not match the expected schema",
            detail={"file": origin, "errors": exc.errors(include_url=False, include_input=False)},
        ) from exc
    except TableDataError as exc:
        if exc.message.startswith(origin):
            raise
        raise TableDataError(f"{origin}: {exc.message}", detail={"file": origin}) from exc


def load_table(path: Path | str, *, catalog: TableCatalog | None = None) -> AnyTable:
    file_path = Path(path)
    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise TableDataError(f"{file_path.name}: invalid JSON ({exc.msg})", detail={"file": str(file_path)}) from exc
    table = table_from_payload(payload, origin=file_path.name, catalog=catalog)
    logger.debug(
        "table_loaded",
        extra=structured(table_id=table.table_id, file=file_path.name, rows=len(table.rows)),
    )
    return table


def load_tables_dir(directory: Path | str, *, catalog: TableCatalog | None = None) -> TableBundle:
    """Load every ``*.json`` table in ``directory``; all catalog tables must be present."""
    catalog = catalog or load_catalog()
    root = Path(directory)
    if not root.is_dir():
        raise ConfigurationError(f"Tables directory not found: {root}", detail={"tables_dir": str(root)})

    loaded: Dict[str, AnyTable] = {}
    for path in sorted(root.glob("*.json")):
        table = load_table(path, catalog=catalog)
        if table.table_id in loaded:
            raise TableDataError(f"Duplicate table {table.table_id} in {path.name}", detail={"file": path.name})
        loaded[table.table_id] = table

    missing = [table_id for table_id in catalog.tables if table_id not in loaded]
    if missing:
        raise TableDataError(f"Missing conversion tables: {', '.join(missing)}", detail={"missing": missing})

    return TableBundle(
        age_equivalents=loaded[catalog.table_id_for(TableKind.AGE_EQUIVALENTS)],  # type: ignore[arg-type]
        raw_to_standard={table_id: loaded[table_id] for table_id in catalog.b_table_ids},  # type: ignore[misc]
        standard_to_percentile=loaded[catalog.table_id_for(TableKind.STANDARD_TO_PERCENTILE)],  # type: ignore[arg-type]
        sum_to_domain=loaded[catalog.table_id_for(TableKind.SUM_TO_DOMAIN)],  # type: ignore[arg-type]
    )


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _dump(value) -> Optional[Dict[str, Any]]:
    return value.as_dict() if value is not None else None


def _source_payload(source: SourceMeta) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "tableId": source.table_id,
        "tableTitle": source.table_title,
        "manualPage": source.manual_page,
        "csvFilename": source.csv_filename,
        "csvSha256": source.csv_sha256,
        "generatedAt": source.generated_at,
        "generatorVersion": source.generator_version,
    }
    if source.age_band is not None:
        data["ageBand"] = {
            "minMonths": source.age_band.min_months,
            "maxMonths": source.age_band.max_months,
            "label": source.age_band.label,
        }
    return data


def table_to_payload(table: AnyTable) -> Dict[str, Any]:
    """camelCase JSON document for ``table``; :func:`table_from_payload` reads it back."""
    rows: List[Dict[str, Any]] = []
    if isinstance(table, AgeEquivalentsTable):
        for row in table.rows:
            item: Dict[str, Any] = {"csvRow": row.csv_row, "ageMonths": row.age_months.as_dict()}
            item.update({to_camel(key.value): _dump(row.cell(key)) for key in AgeEquivalentKey})
            rows.append(item)
    elif isinstance(table, RawToStandardTable):
        for row in table.rows:
            item = {"csvRow": row.csv_row, "rawScore": row.raw_score}
            item.update({to_camel(key.value): _dump(row.cell(key)) for key in SubtestKey})
            rows.append(item)
    elif isinstance(table, StandardToPercentileTable):
        for row in table.rows:
            item = {"csvRow": row.csv_row}
            for n, pair in enumerate(row.pairs, start=1):
                item[f"standardScore{n}"] = _dump(pair.standard_score)
                item[f"percentileRank{n}"] = _dump(pair.percentile_rank)
            rows.append(item)
    else:
        for row in table.rows:
            item = {"csvRow": row.csv_row}
            for n, pair in enumerate(row.pairs, start=1):
                item[f"sumRange{n}"] = _dump(pair.sum_range)
                item[f"standardScore{n}"] = _dump(pair.standard_score)
            rows.append(item)
    return {"tableId": table.table_id, "source": _source_payload(table.source), "rows": rows}


def write_table(table: AnyTable, path: Path | str) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(table_to_payload(table), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return target
