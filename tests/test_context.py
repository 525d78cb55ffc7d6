from dataclasses import replace

import pytest

from dayc.assessments.constants import A1_TABLE_ID, C1_TABLE_ID, D1_TABLE_ID
from dayc.assessments.dayc2 import load_catalog
from dayc.assessments.enums import TableKind
from dayc.data.context import (
    check_band_coverage,
    create_lookup_context,
    create_test_lookup_context,
)
from dayc.data.fixtures import FIXTURE_B13
from dayc.data.tables import write_table
from dayc.core.errors import ConfigurationError, TableDataError, TableNotFoundError


def _full_b_series():
    """Copy of the fixture B13 under every catalog id, each with its own band."""
    catalog = load_catalog()
    tables = {}
    for table_id in catalog.b_table_ids:
        source = replace(FIXTURE_B13.source, table_id=table_id, age_band=catalog.spec(table_id).age_band)
        tables[table_id] = replace(FIXTURE_B13, table_id=table_id, source=source)
    return tables


def test_full_band_series_covers_every_age(ctx):
    full = create_test_lookup_context(ctx, raw_to_standard=_full_b_series())
    check_band_coverage(full)
    for age in range(12, 72):
        table = full.get_b_table_for_age(age)
        assert table is not None
        assert age in table.age_band
    assert full.get_b_table_for_age(11) is None
    assert full.get_b_table_for_age(72) is None
    assert full.get_b_table_for_age(50).table_id == "B26"
    assert full.get_b_table_for_age(71).table_id == "B29"


def test_fixture_context_does_not_cover_full_range(ctx):
    with pytest.raises(TableDataError):
        check_band_coverage(ctx)


def test_gap_between_bands_is_reported(ctx):
    tables = _full_b_series()
    del tables["B20"]
    gapped = create_test_lookup_context(ctx, raw_to_standard=tables)
    with pytest.raises(TableDataError) as excinfo:
        check_band_coverage(gapped)
    assert excinfo.value.detail == {"after": 30, "next": 34}


def test_overlapping_bands_are_rejected(ctx):
    overlapping = replace(
        FIXTURE_B13,
        table_id="B14",
        source=replace(FIXTURE_B13.source, table_id="B14"),
    )
    with pytest.raises(TableDataError):
        create_test_lookup_context(ctx, raw_to_standard={"B13": FIXTURE_B13, "B14": overlapping})


def test_b_table_by_id(ctx):
    assert ctx.b_table("B17").age_band.label == "22-24 Months"
    with pytest.raises(TableNotFoundError):
        ctx.b_table("B99")


def test_table_ids_in_catalog_order(ctx):
    assert ctx.table_ids == ("A1", "B13", "B17", "C1", "D1")


def test_test_context_overrides_single_table(ctx, make_b13):
    table = make_b13((2, "0", "77", "77", "77", "77", "77", "77", "77"))
    swapped = create_test_lookup_context(ctx, raw_to_standard={"B13": table})
    assert swapped.get_b_table_for_age(12) is table
    assert swapped.standard_to_percentile is ctx.standard_to_percentile
    assert ctx.get_b_table_for_age(12) is FIXTURE_B13


def test_create_lookup_context_reads_table_directory(ctx, tmp_path):
    write_table(ctx.age_equivalents, tmp_path / "A1.json")
    write_table(ctx.standard_to_percentile, tmp_path / "C1.json")
    write_table(ctx.sum_to_domain, tmp_path / "D1.json")
    for table_id, table in _full_b_series().items():
        write_table(table, tmp_path / f"{table_id}.json")

    loaded = create_lookup_context(tmp_path)
    assert len(loaded.b_tables) == 17
    assert loaded.standard_to_percentile == ctx.standard_to_percentile
    assert loaded.get_b_table_for_age(30).table_id == "B19"


def test_create_lookup_context_requires_directory(tmp_path):
    with pytest.raises(ConfigurationError):
        create_lookup_context(tmp_path / "missing")


def test_single_table_ids_match_catalog(ctx):
    catalog = load_catalog()
    assert catalog.table_id_for(TableKind.AGE_EQUIVALENTS) == A1_TABLE_ID
    assert catalog.table_id_for(TableKind.STANDARD_TO_PERCENTILE) == C1_TABLE_ID
    assert catalog.table_id_for(TableKind.SUM_TO_DOMAIN) == D1_TABLE_ID
    assert ctx.age_equivalents.table_id == A1_TABLE_ID
    assert ctx.standard_to_percentile.table_id == C1_TABLE_ID
    assert ctx.sum_to_domain.table_id == D1_TABLE_ID
