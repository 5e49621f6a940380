import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from harmwatch.api.error_handlers import register_error_handlers
from harmwatch.api.routes.auth import router as auth_router
from harmwatch.api.routes.cases import router as cases_router
from harmwatch.api.routes.metrics import router as metrics_router
from harmwatch.api.routes.stats import router as stats_router
from harmwatch.core.config import settings
from harmwatch.core.observability import setup_logging
from harmwatch.db import session as db_session
from harmwatch.metrics.prometheus import api_request_latency_seconds

app = FastAPI(
    title=settings.service_name,
    version=settings.version,
    description="Incident reporting for AI-system harms",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.on_event("startup")
def on_startup():
    setup_logging(settings.log_level, settings.log_format)
    db_session.store.bootstrap()


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.perf_counter()
    response: Response | None = None
    try:
        response = await call_next(request)
        return response
    finally:
        dt = time.perf_counter() - start
        # route template keeps case ids out of the label set
        route = getattr(request.scope.get("route"), "path", request.url.path)
        status = str(getattr(response, "status_code", 500))
        api_request_latency_seconds.labels(route=route, method=request.method, status=status).observe(dt)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "service": settings.service_name,
        "version": settings.version,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


app.include_router(auth_router)
app.include_router(cases_router)
app.include_router(stats_router)
app.include_router(metrics_router)
