"""
FastAPI dependency functions.
"""
from fastapi import Depends, Query, Request
from pymongo.asynchronous.database import AsyncDatabase
from typing import Optional
import re

from config import settings
from database import get_db
from schemas.leaderboard import LeaderboardQuery, LeaderboardScope
from services.leaderboard_cache import LeaderboardCache
from services.leaderboard_service import LeaderboardService

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Optional[str]) -> Optional[int]:
    """
    Parse a leading integer from a query parameter.

    Returns None for missing or non-numeric values, so bad input falls
    back to defaults instead of failing validation.
    """
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def get_leaderboard_cache(request: Request) -> LeaderboardCache:
    """Process-wide leaderboard cache, created on first use."""
    cache = getattr(request.app.state, "leaderboard_cache", None)
    if cache is None:
        cache = LeaderboardCache(
            ttl_seconds=settings.LEADERBOARD_CACHE_TTL_SECONDS,
            max_entries=settings.LEADERBOARD_CACHE_MAX_ENTRIES,
        )
        request.app.state.leaderboard_cache = cache
    return cache


def get_leaderboard_service(
    db: AsyncDatabase = Depends(get_db),
    cache: LeaderboardCache = Depends(get_leaderboard_cache),
) -> LeaderboardService:
    return LeaderboardService(db, cache)


def get_leaderboard_query(
    sortBy: Optional[str] = Query(None, description="Sort field, defaults to Kills"),
    sortDir: Optional[str] = Query(None, description="'asc' or 'desc' (default)"),
    limit: Optional[str] = Query(None, description="Rows to return, 1-1000 (default 100)"),
    scope: Optional[str] = Query(None, description="day, week, month (default), lifetime, solo or squad"),
    month: Optional[str] = Query(None, description="1-12, month scope only"),
    year: Optional[str] = Query(None, description="1970-9999, month scope only"),
) -> LeaderboardQuery:
    """Single-scope query; unknown scopes fall back to the month board."""
    return LeaderboardQuery.normalize(
        sort_by=sortBy,
        sort_dir=sortDir,
        limit=parse_int(limit),
        scope=scope,
        month=parse_int(month),
        year=parse_int(year),
    )


def get_batch_query(
    sortBy: Optional[str] = Query(None),
    sortDir: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    month: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
) -> LeaderboardQuery:
    """Shared parameters for a batch; each scope is applied later."""
    return LeaderboardQuery.normalize(
        sort_by=sortBy,
        sort_dir=sortDir,
        limit=parse_int(limit),
        scope=LeaderboardScope.MONTH,
        month=parse_int(month),
        year=parse_int(year),
    )
