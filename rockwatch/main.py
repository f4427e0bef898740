# rockwatch/main.py
"""
FastAPI application entry point.
Includes CORS handling, request timing, the global error handler, and all routers.
"""

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from rockwatch.routers import predict, alerts, sensor_data, mines, weather, health
from rockwatch.database import create_tables
from rockwatch.config import get_settings
from rockwatch.utils.logger import get_logger
import time

logger = get_logger(__name__)
settings = get_settings()

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
CORS_ALLOW_METHODS = ["POST", "GET", "OPTIONS", "PUT", "DELETE"]
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
    "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
    "Access-Control-Max-Age": "86400",
}

app = FastAPI(
    title="RockWatch Rockfall Alert API",
    description="Sensor-driven rockfall risk scoring with edge-triggered SMS/email alerts.",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (dashboard is served from a different origin) ───────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,   # Keeps Access-Control-Allow-Origin a literal "*"
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
    max_age=86400,
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
        headers={"Access-Control-Allow-Origin": "*"},
    )


# ── Preflight for clients that omit the CORS request headers ─────────────────
@app.options("/{path:path}", include_in_schema=False)
async def preflight(path: str):
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(predict.router,     tags=["🪨 Risk Prediction"])
app.include_router(alerts.router,      tags=["🚨 Alerts"])
app.include_router(sensor_data.router, tags=["📡 Sensor Data"])
app.include_router(mines.router,       tags=["⛏️ Mines"])
app.include_router(weather.router,     tags=["🌧️ Weather"])
app.include_router(health.router,      tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 RockWatch backend starting up...")
    try:
        create_tables()
        logger.info("✅ Database tables ready")
    except Exception as e:
        logger.error(f"❌ Database unavailable at startup: {e}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 RockWatch backend shutting down...")
