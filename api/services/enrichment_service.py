"""
Attach profile display data (avatar, SES title) to leaderboard rows.
"""
from typing import List, Optional
import logging

from pymongo.asynchronous.database import AsyncDatabase

from models.user import User
from schemas.leaderboard import LeaderboardRow
from services.user_service import UserService

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_URL = "https://cdn.discordapp.com/embed/avatars/{index}.png"


def default_avatar_url(discord_id: str) -> str:
    """Discord's stock avatar for an id without a custom picture."""
    try:
        index = abs(int(discord_id)) % 5
    except ValueError:
        index = 0
    return DEFAULT_AVATAR_URL.format(index=index)


class EnrichmentService:
    """Best-effort join of leaderboard rows against user profiles."""

    def __init__(self, db: AsyncDatabase, chunk_size: Optional[int] = None):
        self.db = db
        self.chunk_size = chunk_size

    async def enrich(self, rows: List[LeaderboardRow]) -> None:
        """
        Fill avatar_url and ses_title on rows in place.

        A Discord id match wins over a name match. Failures are logged and
        swallowed; rows are left untouched in that case.
        """
        if not rows:
            return

        try:
            discord_ids = list(dict.fromkeys(r.discord_id for r in rows if r.discord_id))
            by_discord = await UserService.find_by_discord_ids(self.db, discord_ids)
            by_name = await UserService.find_by_names(
                self.db,
                (r.player_name for r in rows),
                chunk_size=self.chunk_size,
            )
        except Exception:
            logger.warning("Leaderboard enrichment failed, serving rows without profile data", exc_info=True)
            return

        for row in rows:
            user: Optional[User] = None
            if row.discord_id and row.discord_id in by_discord:
                user = by_discord[row.discord_id]
            elif row.player_name:
                user = by_name.get(row.player_name.lower())

            avatar_url = user.avatar_url if user else None
            if not avatar_url and row.discord_id:
                avatar_url = default_avatar_url(row.discord_id)

            if avatar_url:
                row.avatar_url = avatar_url
            if user and user.sesName and not row.ses_title:
                row.ses_title = user.sesName
