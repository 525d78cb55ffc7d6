from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from dayc.assessments.dayc2.types import AgeBand
from dayc.assessments.enums import TableKind

__all__ = ["TableSpec", "TableCatalog"]


@dataclass(frozen=True, slots=True)
class TableSpec:
    """Published identity of one conversion table."""

    table_id: str
    kind: TableKind
    title: str
    manual_page: int
    age_band: AgeBand | None = None


@dataclass(frozen=True, slots=True)
class TableCatalog:
    """Every table of the scoring manual, keyed by table id."""

    instrument_id: str
    version: str
    generator_version: str
    tables: Mapping[str, TableSpec]

    def spec(self, table_id: str) -> TableSpec:
        return self.tables[table_id]

    @property
    def b_table_ids(self) -> Tuple[str, ...]:
        return tuple(
            table_id for table_id, spec in self.tables.items() if spec.kind is TableKind.RAW_TO_STANDARD
        )

    def table_id_for(self, kind: TableKind) -> str:
        for table_id, spec in self.tables.items():
            if spec.kind is kind:
                return table_id
        raise KeyError(kind)

    @classmethod
    def from_raw(cls, payload: Mapping[str, Any]) -> "TableCatalog":
        tables: Dict[str, TableSpec] = {}
        for kind in (TableKind.AGE_EQUIVALENTS, TableKind.STANDARD_TO_PERCENTILE, TableKind.SUM_TO_DOMAIN):
            entry = payload[kind.value]
            table_id = str(entry["table_id"])
            tables[table_id] = TableSpec(
                table_id=table_id,
                kind=kind,
                title=str(entry["title"]),
                manual_page=int(entry["manual_page"]),
            )
        for table_id, entry in payload["raw_to_standard"].items():
            low, high = (int(bound) for bound in entry["months"])
            number = int(str(table_id)[1:])
            tables[str(table_id)] = TableSpec(
                table_id=str(table_id),
                kind=TableKind.RAW_TO_STANDARD,
                title=f"Table B.{number} Raw Scores to Standard Scores: Ages {low}–{high} Months",
                manual_page=int(entry["manual_page"]),
                age_band=AgeBand(min_months=low, max_months=high, label=f"{low}-{high} Months"),
            )
        return cls(
            instrument_id=str(payload["id"]),
            version=str(payload["version"]),
            generator_version=str(payload["generator_version"]),
            tables=MappingProxyType(tables),
        )
