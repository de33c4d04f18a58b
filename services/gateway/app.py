"""Alumni portal HTTP gateway.

Exposes every workflow over FastAPI, attaches tracing middleware and CORS,
maps infrastructure failures to 503, and owns the process-wide resources
(database engine, identity client, invalidation bus) across startup and
shutdown.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from packages.common.config import get_settings
from packages.common.errors import InfrastructureFailure
from packages.common.logging import configure_logging
from packages.common.tracing import trace_middleware
from services.events.routes import router as events_router
from services.internships.routes import router as internships_router
from services.mentors.routes import router as mentors_router
from services.posts.routes import router as posts_router
from services.stories.routes import router as stories_router
from services.users.routes import router as users_router
from .dependencies import get_database, get_identity_provider, get_invalidator

log = logging.getLogger(__name__)

app = FastAPI(title="Alumni Portal Gateway", version="1.0.0")
app.middleware("http")(trace_middleware)
for router in (events_router, stories_router, mentors_router, posts_router, internships_router, users_router):
    app.include_router(router)


def _origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def install_cors(application: FastAPI) -> None:
    """Allow the configured front-end origins, if any."""
    origins = _origins(get_settings().FRONTEND_ORIGINS)
    if origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )


install_cors(app)


@app.exception_handler(InfrastructureFailure)
async def _infrastructure_failure(request: Request, exc: InfrastructureFailure) -> JSONResponse:
    log.error("Infrastructure failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"success": False, "message": "Service temporarily unavailable, please retry", "error": "infrastructure"},
    )


@app.get("/healthz", tags=["ops"])
def healthz():
    return {"ok": True}


@app.on_event("startup")
async def _init() -> None:
    """Initialize logging and the database schema at application startup."""
    s = get_settings()
    configure_logging(s.LOG_LEVEL, s.SERVICE_NAME)
    await get_database().init()
    log.info("%s started (env=%s)", s.SERVICE_NAME, s.ENV)


@app.on_event("shutdown")
async def _close() -> None:
    """Release pooled connections, the identity client and the invalidation bus."""
    await get_invalidator().close()
    await get_identity_provider().close()
    await get_database().dispose()
