"""
Service for archiving the live monthly stats collection.
"""
from typing import Any, Dict, Optional, Tuple
from datetime import datetime, timedelta, timezone
import logging

from pymongo import IndexModel
from pymongo.database import Database

from models.stat_submission import (
    STAT_INDEXES,
    USER_STATS_COLLECTION,
    archive_collection_name,
)

logger = logging.getLogger(__name__)


class StatsRotationService:
    """Month-end rotation of User_Stats into User_Stats_<year>_<month>."""

    @staticmethod
    def previous_month(reference_date: Optional[datetime] = None) -> Tuple[int, int]:
        """
        Get the (year, month) of the month before reference_date.

        Args:
            reference_date: Date to calculate from (defaults to now, UTC)

        Returns:
            Tuple of (year, month)
        """
        if reference_date is None:
            reference_date = datetime.now(timezone.utc)
        last_day = reference_date.replace(day=1) - timedelta(days=1)
        return last_day.year, last_day.month

    @staticmethod
    def ensure_live_collection(db: Database) -> bool:
        """
        Create an empty User_Stats with its indexes if it is missing.

        Returns:
            True if the collection was created
        """
        if USER_STATS_COLLECTION in db.list_collection_names():
            return False

        db.create_collection(USER_STATS_COLLECTION)
        db[USER_STATS_COLLECTION].create_indexes([IndexModel(keys) for keys in STAT_INDEXES])
        logger.info(f"Created fresh {USER_STATS_COLLECTION} collection")
        return True

    @staticmethod
    def rotate(db: Database, reference_date: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Archive last month's submissions and start a fresh live collection.

        The rename is skipped if the archive already exists, so a rerun of
        the job never overwrites an archived month.

        Args:
            db: Database handle (synchronous client)
            reference_date: Date the rotation runs for (defaults to now)

        Returns:
            Summary of what was done
        """
        year, month = StatsRotationService.previous_month(reference_date)
        archive = archive_collection_name(year, month)
        existing = set(db.list_collection_names())

        renamed = False
        if USER_STATS_COLLECTION not in existing:
            logger.info(f"No {USER_STATS_COLLECTION} collection to rotate")
        elif archive in existing:
            logger.warning(f"Archive {archive} already exists, skipping rename")
        else:
            logger.info(f"Renaming {USER_STATS_COLLECTION} -> {archive}")
            db[USER_STATS_COLLECTION].rename(archive)
            renamed = True

        created = StatsRotationService.ensure_live_collection(db)

        return {
            "archive": archive,
            "renamed": renamed,
            "created_live_collection": created,
        }
