from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

from dayc.assessments.dayc2.catalog import TableCatalog

CONFIG_PATH = Path(__file__).with_name("config.yaml")


@lru_cache
def load_catalog() -> TableCatalog:
    with CONFIG_PATH.open("r", encoding="utf-8") as fh:
        raw: Dict[str, Any] = yaml.safe_load(fh)
    return TableCatalog.from_raw(raw)
