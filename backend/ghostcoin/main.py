"""
FastAPI app entrypoint.

One backend for the mobile and web clients: drop listings with token/distance gating,
scan-to-claim, profiles, and admin review.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from ghostcoin.api.routes import admin, claims, drops, profile, wallet  # noqa: E402
from ghostcoin.config import settings  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Ghostcoin backend ready: claim_policy=%s require_wallet_for_claim=%s max_drop_distance_miles=%s auth=%s",
        settings.claim_policy,
        settings.require_wallet_for_claim,
        settings.max_drop_distance_miles,
        "jwt" if settings.auth_jwt_secret else "dev-header",
    )
    if not settings.auth_jwt_secret:
        logger.warning("AUTH_JWT_SECRET not set: trusting X-User-Id header (development only)")
    yield


app = FastAPI(title="Ghostcoin", version="0.1.0", lifespan=lifespan)

# CORS: dev origins (web + Expo) + optional CORS_ORIGINS (comma-separated) for production frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://localhost:8081",
    "http://localhost:19006",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(drops.router, tags=["drops"])
app.include_router(claims.router, tags=["claims"])
app.include_router(profile.router, tags=["profile"])
app.include_router(wallet.router, tags=["wallet"])
app.include_router(admin.router, prefix="/admin", tags=["admin"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Ghostcoin API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
