# carcheck/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from carcheck.routers import check, vehicle, tier, pricing, health
from carcheck.database import create_tables
from carcheck.config import settings
from carcheck.exceptions import vehicle_check_exception_handler
from carcheck.schemas.tier import SubscriptionTier
from carcheck.services.exceptions import VehicleCheckError
from carcheck.services.tier_service import tier_notifier
from carcheck.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="CarCheck API",
    description="UK vehicle history lookups with tier-gated report sections.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the web front-end to call the API) ──────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the front-end origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Health, pricing and docs stay open so the landing page can render without a key.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/api/v1/pricing", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
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
app.add_exception_handler(VehicleCheckError, vehicle_check_exception_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(check.router,   prefix="/api/v1", tags=["🔍 Vehicle Check"])
app.include_router(vehicle.router, prefix="/api/v1", tags=["🏛️  DVLA Proxy"])
app.include_router(tier.router,    prefix="/api/v1", tags=["⭐ Subscription Tier"])
app.include_router(pricing.router, prefix="/api/v1", tags=["💷 Pricing"])
app.include_router(health.router,  prefix="/api/v1", tags=["💚 Health"])


def _log_tier_change(client_id: str, new_tier: SubscriptionTier):
    logger.info(f"[TIER] {client_id} is now on {new_tier.value}")


_unsubscribe_tier_log = None


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    global _unsubscribe_tier_log
    logger.info("🚀 CarCheck Backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    if settings.DVLA_OFFLINE_DEMO:
        logger.info(f"🧪 DVLA offline demo mode — serving fixtures for {settings.DEMO_VRM}")
    else:
        logger.info(f"🏛️  DVLA endpoint: {settings.DVLA_ENDPOINT}")
    _unsubscribe_tier_log = tier_notifier.subscribe(_log_tier_change)
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 CarCheck Backend shutting down...")
    if _unsubscribe_tier_log is not None:
        _unsubscribe_tier_log()
