"""
Pydantic schemas for request/response validation.
"""
from .leaderboard import (
    LeaderboardScope,
    SortDirection,
    LeaderboardQuery,
    LeaderboardRow,
    LeaderboardResponse,
    VALID_SORT_FIELDS,
    AVERAGE_SORT_FIELDS,
)
from .user import UserLookupResponse

__all__ = [
    # Leaderboard schemas
    "LeaderboardScope",
    "SortDirection",
    "LeaderboardQuery",
    "LeaderboardRow",
    "LeaderboardResponse",
    "VALID_SORT_FIELDS",
    "AVERAGE_SORT_FIELDS",
    # User schemas
    "UserLookupResponse",
]
