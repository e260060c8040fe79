"""
Celery tasks for the monthly stats rotation.
"""
import logging

from tasks.celery_app import celery_app
from config import settings
from database import create_sync_client
from services.stats_rotation_service import StatsRotationService

logger = logging.getLogger(__name__)


@celery_app.task(name="tasks.rotate_user_stats")
def rotate_user_stats():
    """
    Archive the month that just ended.

    Scheduled shortly after midnight UTC on the 1st. Lifetime leaderboards
    pick the archive up once it is listed in LIFETIME_MONTH_COLLECTIONS.
    """
    client = create_sync_client()

    try:
        result = StatsRotationService.rotate(client[settings.MONGODB_DB])
        logger.info(f"User stats rotation completed: {result}")

        return {
            "status": "success",
            **result,
        }

    except Exception as e:
        logger.error(f"Failed to rotate user stats: {e}")
        raise

    finally:
        client.close()
