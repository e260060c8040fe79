"""
Read-only queries against the user profile collection.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging
import re

from pymongo.asynchronous.database import AsyncDatabase

from config import settings
from models.user import User, USER_PROFILE_PROJECTION

logger = logging.getLogger(__name__)


class UserService:
    """Lookups of profile documents by Discord id or display name."""

    @staticmethod
    def name_pattern(name: str) -> Dict[str, Any]:
        """Case-insensitive exact match on a display name."""
        return {"$regex": f"^{re.escape(name)}$", "$options": "i"}

    @staticmethod
    async def find_by_discord_ids(db: AsyncDatabase, discord_ids: Iterable[str]) -> Dict[str, User]:
        """
        Fetch profiles whose providerAccountId is one of the given ids.

        Returns:
            Mapping of providerAccountId (as string) to user
        """
        ids = list(discord_ids)
        if not ids:
            return {}

        cursor = db[settings.USERS_COLLECTION].find(
            {"providerAccountId": {"$in": ids}},
            USER_PROFILE_PROJECTION,
        )
        users = {}
        for doc in await cursor.to_list(length=None):
            user = User.model_validate(doc)
            users[str(user.providerAccountId)] = user
        return users

    @staticmethod
    async def find_by_names(
        db: AsyncDatabase,
        names: Iterable[str],
        chunk_size: Optional[int] = None,
    ) -> Dict[str, User]:
        """
        Fetch profiles by case-insensitive exact name match.

        Names are queried in chunks so a single $or never grows unbounded.

        Returns:
            Mapping of lower-cased name to user
        """
        chunk_size = chunk_size or settings.ENRICHMENT_NAME_CHUNK_SIZE
        unique: List[str] = list(dict.fromkeys(n for n in names if n))

        users: Dict[str, User] = {}
        for i in range(0, len(unique), chunk_size):
            chunk = unique[i:i + chunk_size]
            cursor = db[settings.USERS_COLLECTION].find(
                {"$or": [{"name": UserService.name_pattern(n)} for n in chunk]},
                USER_PROFILE_PROJECTION,
            )
            for doc in await cursor.to_list(length=None):
                user = User.model_validate(doc)
                if user.name:
                    users[user.name.lower()] = user
        return users

    @staticmethod
    async def lookup(
        db: AsyncDatabase,
        name: Optional[str] = None,
        discord_id: Optional[str] = None,
    ) -> Optional[User]:
        """Find a single profile; both criteria must match when both are given."""
        query: Dict[str, Any] = {}
        if discord_id:
            query["providerAccountId"] = discord_id
        if name:
            query["name"] = UserService.name_pattern(name)
        if not query:
            return None

        doc = await db[settings.USERS_COLLECTION].find_one(query, USER_PROFILE_PROJECTION)
        if doc is None:
            return None
        return User.model_validate(doc)
