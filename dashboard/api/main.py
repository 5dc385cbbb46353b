"""
Agency Pulse — API Server
===========================

Sales-performance API for the agency dashboard, reading producer activity
and stored-procedure analytics from Supabase.

Route groups:
  /api/health       - Health check
  /api/producers/*  - Producer list and weekly producer leaderboard
  /api/zips/*       - Zip code performance and health
  /api/csr/*        - CSR points, leaderboard, config and activity log
  /api/summaries/*  - Monthly summary and top sources
  /api/reviews/*    - Accountability review summary
  /api/coaching/*   - Coaching effectiveness dashboard
  /api/patterns/*   - Detected producer patterns
  /api/entries/*    - Central Time entry dates and 6 PM lock
  /api/session/*    - Session roles and sign-out
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard.api.middleware import registry_from_env

load_dotenv()

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ─── Lifespan ─────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app):
    """Application startup and shutdown."""
    logger.info("Starting Agency Pulse...")

    try:
        from scripts.lib.supabase_client import get_client
        get_client()
        logger.info("Supabase connected")
    except Exception as e:
        logger.warning("Supabase not available: %s", e)

    logger.info("Agency Pulse ready")
    yield
    logger.info("Shutting down Agency Pulse...")


# ─── App Setup ────────────────────────────────────────────────

cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:5173,http://localhost:8001"
).split(",")

app = FastAPI(
    title="Agency Pulse",
    version=VERSION,
    description="Insurance agency sales performance: producers, zips, CSR points",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.sessions = registry_from_env()


# ─── Include Routers ──────────────────────────────────────────

from dashboard.api.routers.producers import router as producers_router
from dashboard.api.routers.zips import router as zips_router
from dashboard.api.routers.csr import router as csr_router
from dashboard.api.routers.summaries import router as summaries_router
from dashboard.api.routers.entries import router as entries_router
from dashboard.api.routers.session import router as session_router
from dashboard.api.routers.reviews import router as reviews_router
from dashboard.api.routers.coaching import router as coaching_router
from dashboard.api.routers.patterns import router as patterns_router

app.include_router(producers_router)
app.include_router(zips_router)
app.include_router(csr_router)
app.include_router(summaries_router)
app.include_router(entries_router)
app.include_router(session_router)
app.include_router(reviews_router)
app.include_router(coaching_router)
app.include_router(patterns_router)


# ─── Health ───────────────────────────────────────────────────

@app.get("/api/health", tags=["system"])
async def health():
    """Health check with service status."""
    from scripts.lib.supabase_client import check_connection

    return {
        "status": "healthy",
        "service": "Agency Pulse",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "integrations": {
            "supabase": check_connection(),
        },
        "active_sessions": app.state.sessions.session_count,
    }
