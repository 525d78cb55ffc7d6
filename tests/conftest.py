import pytest
from fastapi.testclient import TestClient

from dayc.assessments.dayc2.types import RawToStandardTable
from dayc.data.fixtures import FIXTURE_B13, create_fixture_lookup_context
from dayc.data.ingest import parse_b_row
from dayc.main import app
from dayc.services.scoring import get_lookup_context

B_COLUMNS = (
    "raw_score",
    "cognitive",
    "receptive_language",
    "expressive_language",
    "social_emotional",
    "gross_motor",
    "fine_motor",
    "adaptive_behavior",
)


@pytest.fixture()
def ctx():
    return create_fixture_lookup_context()


@pytest.fixture()
def make_b13():
    """Build a replacement B13 from printed rows: (csv_row, raw, cog, RL, EL, SE, GM, FM, AB)."""

    def _make(*rows):
        parsed = tuple(parse_b_row(dict(zip(B_COLUMNS, row[1:])), row[0]) for row in rows)
        return RawToStandardTable(table_id="B13", source=FIXTURE_B13.source, rows=parsed)

    return _make


@pytest.fixture()
def client(ctx):
    app.dependency_overrides[get_lookup_context] = lambda: ctx
    yield TestClient(app)
    app.dependency_overrides.clear()
