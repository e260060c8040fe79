"""
User model - profile documents owned by the site's account system.

The leaderboard only reads these documents for display enrichment.
"""
from pydantic import BaseModel, ConfigDict
from typing import Any, Optional

# Fields fetched for enrichment and lookups
USER_PROFILE_PROJECTION = {
    "_id": 0,
    "providerAccountId": 1,
    "name": 1,
    "image": 1,
    "customAvatarDataUrl": 1,
    "sesName": 1,
    "callsign": 1,
    "rankTitle": 1,
    "motto": 1,
}


class User(BaseModel):
    """Read-only view of a user profile document."""

    model_config = ConfigDict(extra="ignore")

    providerAccountId: Optional[Any] = None
    name: Optional[str] = None
    image: Optional[str] = None
    customAvatarDataUrl: Optional[str] = None
    sesName: Optional[str] = None
    callsign: Optional[str] = None
    rankTitle: Optional[str] = None
    motto: Optional[str] = None

    @property
    def avatar_url(self) -> Optional[str]:
        return self.customAvatarDataUrl or self.image or None

    def __repr__(self):
        return f"<User(name={self.name}, providerAccountId={self.providerAccountId})>"
