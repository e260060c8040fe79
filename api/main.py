"""
FastAPI application entry point for the Helldivers Leaderboard API.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config import settings
from database import close_client, get_database
from services.leaderboard_cache import LeaderboardCache
from utils.logging_config import configure_logging

# Import routers
from routers import leaderboard, users

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Helldivers Leaderboard API",
    description="Clan player statistics and leaderboards",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    configure_logging(settings.ENV, settings.LOG_LEVEL)
    logger.info("Starting Helldivers Leaderboard API...")

    app.state.leaderboard_cache = LeaderboardCache(
        ttl_seconds=settings.LEADERBOARD_CACHE_TTL_SECONDS,
        max_entries=settings.LEADERBOARD_CACHE_MAX_ENTRIES,
    )
    logger.info(
        f"Leaderboard cache initialized "
        f"(ttl={settings.LEADERBOARD_CACHE_TTL_SECONDS}s, max={settings.LEADERBOARD_CACHE_MAX_ENTRIES})"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Helldivers Leaderboard API...")
    await close_client()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "message": "Helldivers Leaderboard API is running",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Detailed health check endpoint."""
    try:
        await get_database().command("ping")
        database_status = "connected"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        database_status = "unavailable"

    return {
        "status": "healthy" if database_status == "connected" else "degraded",
        "database": database_status,
    }


# Include routers
app.include_router(leaderboard.router)
app.include_router(users.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
