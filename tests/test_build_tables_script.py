import sys

import pytest

from dayc.data.tables import load_table
from scripts import build_tables

B13_CSV = """raw_score,cognitive,receptive_language,expressive_language,social_emotional,gross_motor,fine_motor,adaptive_behavior
0,<50,<50,<50,<50,<50,56,<50
2,55,60,70,58,52,69,55
"""

C1_CSV = """standard_score_1,percentile_rank_1,standard_score_2,percentile_rank_2,standard_score_3,percentile_rank_3
100,50,59,<1,,
"""


def test_build_all_writes_one_json_per_known_csv(tmp_path):
    csv_dir = tmp_path / "csv"
    csv_dir.mkdir()
    (csv_dir / "Table-B13-12-13-months.csv").write_text(B13_CSV, encoding="utf-8")
    (csv_dir / "Table-C1.csv").write_text(C1_CSV, encoding="utf-8")
    (csv_dir / "README.csv").write_text("a,b\n1,2\n", encoding="utf-8")

    written = build_tables.build_all(csv_dir, tmp_path / "json")

    assert sorted(path.name for path in written) == ["Table-B13-12-13-months.json", "Table-C1.json"]
    b13 = load_table(tmp_path / "json" / "Table-B13-12-13-months.json")
    assert b13.table_id == "B13"
    assert b13.source.csv_filename == "Table-B13-12-13-months.csv"
    assert b13.rows[0].csv_row == 2


def test_main_requires_two_arguments(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["build_tables"])
    with pytest.raises(SystemExit) as excinfo:
        build_tables.main()
    assert excinfo.value.code == 1
    assert "Usage" in capsys.readouterr().out


def test_main_reports_bad_table_data(tmp_path, monkeypatch, capsys):
    csv_dir = tmp_path / "csv"
    csv_dir.mkdir()
    (csv_dir / "Table-B13.csv").write_text(B13_CSV.replace("55,60,70", "55,sixty,70"), encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["build_tables", str(csv_dir), str(tmp_path / "json")])
    with pytest.raises(SystemExit) as excinfo:
        build_tables.main()
    assert excinfo.value.code == 2
    assert "Table build failed: Table-B13.csv" in capsys.readouterr().out


def test_module_docstring_documents_usage():
    assert build_tables.__doc__ is not None
    assert "python -m scripts.build_tables <csv_dir> <json_dir>" in build_tables.__doc__
