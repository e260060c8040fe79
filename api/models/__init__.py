"""
MongoDB document models.
"""
from .user import User, USER_PROFILE_PROJECTION
from .stat_submission import (
    USER_STATS_COLLECTION,
    SOLO_STATS_COLLECTION,
    SQUAD_STATS_COLLECTION,
    COUNTER_FIELDS,
    STAT_INDEXES,
    archive_collection_name,
)

__all__ = [
    "User",
    "USER_PROFILE_PROJECTION",
    "USER_STATS_COLLECTION",
    "SOLO_STATS_COLLECTION",
    "SQUAD_STATS_COLLECTION",
    "COUNTER_FIELDS",
    "STAT_INDEXES",
    "archive_collection_name",
]
