from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Mapping, MutableMapping
from uuid import uuid4


_CORRELATION_ID: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_LEVELS_BY_ENVIRONMENT: Mapping[str, int] = {
    "dev": logging.DEBUG,
    "test": logging.DEBUG,
    "staging": logging.INFO,
    "prod": logging.INFO,
}


class JsonFormatter(logging.Formatter):
    """Serialize log records into single-line JSON for structured ingestion."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - override
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        correlation_id = _CORRELATION_ID.get()
        if correlation_id:
            payload["correlation_id"] = correlation_id
        structured = getattr(record, "structured_data", None)
        if isinstance(structured, Mapping):
            payload.update(structured)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


class StructuredAdapter(logging.LoggerAdapter):
    """Logger adapter that merges default fields with per-call structured data."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        merged: Dict[str, Any] = dict(self.extra or {})
        existing_extra = kwargs.get("extra")
        if isinstance(existing_extra, dict):
            structured = existing_extra.get("structured_data")
            if isinstance(structured, Mapping):
                merged.update(structured)
        else:
            existing_extra = {}
        existing_extra["structured_data"] = merged
        kwargs["extra"] = existing_extra
        return msg, kwargs


_STRUCTURED_ATTR = "_dayc_structured_configured"


def configure_logging(*, environment: str = "dev", level: int | None = None) -> None:
    """Install the JSON handler on the root logger once.

    ``dev`` and ``test`` log at DEBUG, ``staging`` and ``prod`` at INFO unless
    an explicit ``level`` is passed. Repeated calls are no-ops.
    """
    root = logging.getLogger()
    if getattr(root, _STRUCTURED_ATTR, False):
        return
    effective_level = level if level is not None else _LEVELS_BY_ENVIRONMENT.get(environment, logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(effective_level)
    setattr(root, _STRUCTURED_ATTR, True)


def get_logger(name: str, **defaults: Any) -> StructuredAdapter:
    """Return a structured logger adapter injecting default structured fields."""

    return StructuredAdapter(logging.getLogger(name), defaults)


def structured(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping understood by :class:`JsonFormatter`."""

    return {"structured_data": fields}


def get_correlation_id() -> str | None:
    return _CORRELATION_ID.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block."""

    cid = correlation_id or str(uuid4())
    token = _CORRELATION_ID.set(cid)
    try:
        yield cid
    finally:
        _CORRELATION_ID.reset(token)


__all__ = [
    "configure_logging",
    "get_logger",
    "structured",
    "get_correlation_id",
    "correlation_context",
]
