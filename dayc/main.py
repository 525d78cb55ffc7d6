from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response

from dayc.core.config import settings
from dayc.core.errors import DomainError
from dayc.core.logging import configure_logging, correlation_context, get_logger, structured
from dayc.core.metrics import get_counters, get_metrics, inc_counter
from dayc.routers.exceptions import register_exception_handlers
from dayc.routers.goals import router as goals_router
from dayc.routers.score import router as score_router
from dayc.services.scoring import get_lookup_context

configure_logging(environment=settings.environment)
logger = get_logger("dayc.app.main", component="app")

CORRELATION_HEADER = "X-Correlation-ID"

_app_start_time = datetime.now(timezone.utc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Optionally load every conversion table before serving requests."""
    if settings.context_preload_enabled:
        logger.info("startup_preload_tables", extra=structured(tables_dir=str(settings.tables_dir)))
        get_lookup_context()
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
register_exception_handlers(app)


@app.middleware("http")
async def bind_correlation_id(request: Request, call_next):
    with correlation_context(request.headers.get(CORRELATION_HEADER)) as cid:
        inc_counter("http.requests.total")
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = cid
        return response


app.include_router(score_router)
app.include_router(goals_router)


@app.get("/health")
def health():
    """Application status plus the conversion tables currently loaded."""
    now = datetime.now(timezone.utc)
    try:
        ctx = get_lookup_context()
        tables = {"status": "loaded", "table_ids": list(ctx.table_ids)}
        overall_status = "healthy"
    except DomainError as exc:
        logger.error("health_check_tables_failed", extra=structured(error=exc.error_code, message=exc.message))
        tables = {"status": "unavailable", "error": exc.error_code, "message": exc.message}
        overall_status = "unhealthy"
    return {
        "status": overall_status,
        "started_at": _app_start_time.isoformat(),
        "uptime_seconds": round((now - _app_start_time).total_seconds(), 2),
        "environment": settings.environment,
        "tables": tables,
    }


@app.get("/metrics")
def metrics():
    return {"timings": get_metrics(), "counters": get_counters()}


@app.get("/", include_in_schema=False)
def root():
    return {
        "name": settings.app_name,
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/favicon.ico", include_in_schema=False)
def favicon():
    return Response(status_code=204)
