"""
Leaderboard endpoints - single scope and batched player rankings.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from typing import Optional
import logging

from schemas import LeaderboardQuery
from services.leaderboard_service import LeaderboardService
from utils.dependencies import (
    get_batch_query,
    get_leaderboard_query,
    get_leaderboard_service,
)
from utils.http_cache import LEADERBOARD_CACHE_CONTROL, json_with_etag

router = APIRouter(prefix="/api/leaderboard", tags=["Leaderboard"])
logger = logging.getLogger(__name__)


@router.get("")
async def get_leaderboard(
    request: Request,
    query: LeaderboardQuery = Depends(get_leaderboard_query),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """
    Get one leaderboard.

    - **scope**: day, week, month, lifetime, solo or squad (unknown values use month)
    - **sortBy** / **sortDir**: sort field and direction (default Kills, desc)
    - **limit**: 1-1000 rows (default 100)
    - **month** / **year**: calendar month for the month scope (defaults to the current one)
    - Served from a 60 second cache; supports If-None-Match
    """
    try:
        data = await service.fetch_one(query)
    except Exception as e:
        logger.error(f"Failed to fetch {query.scope.value} leaderboard: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch leaderboard"
        )

    return json_with_etag(
        request,
        jsonable_encoder(data),
        headers={"Cache-Control": LEADERBOARD_CACHE_CONTROL},
    )


@router.get("/batch")
async def get_leaderboard_batch(
    request: Request,
    scopes: Optional[str] = Query(None, description="Comma-separated scopes, e.g. day,week,month"),
    query: LeaderboardQuery = Depends(get_batch_query),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """
    Get several leaderboards in one call.

    - **scopes**: comma-separated list; duplicates are ignored
    - Other parameters are shared by every scope
    - Scopes that fail or are unknown are listed under **errors**; the rest still return
    """
    requested = [s.strip().lower() for s in (scopes or "").split(",") if s.strip()]
    if not requested:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No scopes provided"
        )

    try:
        results, errors = await service.fetch_many(requested, query)
    except Exception as e:
        logger.error(f"Failed to fetch leaderboard batch: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch leaderboard batch"
        )

    payload = {scope: jsonable_encoder(data) for scope, data in results.items()}
    if errors:
        payload["errors"] = errors

    return json_with_etag(
        request,
        payload,
        headers={"Cache-Control": LEADERBOARD_CACHE_CONTROL},
    )
