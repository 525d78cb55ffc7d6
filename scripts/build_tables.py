"""
CLI usage:
python -m scripts.build_tables <csv_dir> <json_dir>
Reads Table-A1*.csv, Table-B13*.csv .. Table-B29*.csv, Table-C1*.csv, Table-D1*.csv
and writes one typed-table JSON file per CSV.
"""

import sys
from pathlib import Path

from dayc.core.errors import DomainError
from dayc.core.logging import configure_logging, get_logger, structured
from dayc.data.ingest import build_table, extract_table_id
from dayc.data.tables import write_table

logger = get_logger("dayc.scripts.build_tables", component="etl")


def build_all(csv_dir: Path, json_dir: Path) -> list[Path]:
    json_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for csv_path in sorted(csv_dir.glob("*.csv")):
        table_id = extract_table_id(csv_path.name)
        if table_id is None:
            logger.warning("table_csv_skipped", extra=structured(file=csv_path.name))
            continue
        content = csv_path.read_text(encoding="utf-8")
        table = build_table(table_id, csv_path.name, content)
        target = write_table(table, json_dir / csv_path.with_suffix(".json").name)
        logger.info(
            "table_built",
            extra=structured(table_id=table_id, file=target.name, rows=len(table.rows)),
        )
        written.append(target)
    return written


def main():
    if len(sys.argv) != 3:
        print("Usage: python -m scripts.build_tables <csv_dir> <json_dir>")
        sys.exit(1)
    configure_logging(environment="prod")
    csv_dir, json_dir = Path(sys.argv[1]), Path(sys.argv[2])
    if not csv_dir.is_dir():
        print(f"CSV directory not found: {csv_dir}")
        sys.exit(1)
    try:
        written = build_all(csv_dir, json_dir)
    except DomainError as exc:
        print(f"Table build failed: {exc.message}")
        sys.exit(2)
    print(f"Wrote {len(written)} tables to {json_dir}")


if __name__ == '__main__':
    main()
