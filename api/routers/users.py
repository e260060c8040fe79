"""
User lookup endpoint - public profile data for leaderboard players.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pymongo.asynchronous.database import AsyncDatabase
from typing import Optional
import logging

from database import get_db
from schemas import UserLookupResponse
from services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["Users"])
logger = logging.getLogger(__name__)


@router.get("/lookup")
async def lookup_user(
    name: Optional[str] = Query(None, description="Display name, case-insensitive exact match"),
    discordId: Optional[str] = Query(None, description="Discord account id"),
    db: AsyncDatabase = Depends(get_db)
):
    """
    Look up a player's public profile.

    - Requires **name** or **discordId**
    - Returns an empty object when no profile matches
    """
    if not name and not discordId:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing name or discordId"
        )

    try:
        user = await UserService.lookup(db, name=name, discord_id=discordId)
    except Exception as e:
        logger.error(f"User lookup failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Lookup failed"
        )

    if user is None:
        return {}

    return UserLookupResponse(
        name=user.name,
        callsign=user.callsign,
        rankTitle=user.rankTitle,
        motto=user.motto,
        sesName=user.sesName,
        avatarUrl=user.avatar_url,
    )
