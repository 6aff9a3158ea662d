# labtrack/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers for the typed domain errors,
and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from labtrack.routers import admin, auth, health, logs, roster, sessions, users
from labtrack.database import SessionLocal
from labtrack.exceptions import TrackerError
from labtrack.services.schema_service import ensure_schema
from labtrack.config import settings
from labtrack.utils.logger import get_logger
import time

logger = get_logger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(
    title="Lab Attendance Tracker API",
    description="Check-in/out, tags, rosters and the live presence display.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (kiosk + display pages on the same LAN) ─────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
OPEN_PATHS = {
    f"{API_PREFIX}/health",
    f"{API_PREFIX}/sessions/check-in",
    f"{API_PREFIX}/sessions/check-out",
    f"{API_PREFIX}/sessions/swipe",
    f"{API_PREFIX}/present",
    f"{API_PREFIX}/auth/verify",
    "/docs", "/redoc", "/openapi.json",
}


class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional API key auth for admin endpoints.
    The kiosk (check-in/out, swipe) and the display feed stay open.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        if request.url.path in OPEN_PATHS or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key", "kind": "unauthorized"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.kind} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "kind": "internal"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(sessions.router, prefix=API_PREFIX, tags=["Sessions"])
app.include_router(users.router,    prefix=API_PREFIX, tags=["Users"])
app.include_router(logs.router,     prefix=API_PREFIX, tags=["Logs"])
app.include_router(roster.router,   prefix=API_PREFIX, tags=["Roster"])
app.include_router(auth.router,     prefix=API_PREFIX, tags=["Auth"])
app.include_router(admin.router,    prefix=API_PREFIX, tags=["Admin"])
app.include_router(health.router,   prefix=API_PREFIX, tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Lab attendance tracker starting up...")
    db = SessionLocal()
    try:
        report = ensure_schema(db)
    finally:
        db.close()
    logger.info(f"Database ready (changed={report.changed})")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Lab attendance tracker shutting down...")
