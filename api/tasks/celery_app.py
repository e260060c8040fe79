"""
Celery application configuration.
"""
from celery import Celery
from celery.schedules import crontab
from config import settings

# Create Celery app
celery_app = Celery(
    "helldivers_leaderboard",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["tasks.stats_rotation"]  # Include task modules
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=900,  # 15 minutes max per task
    task_soft_time_limit=840,
    worker_prefetch_multiplier=1,
)

# Results expire after 1 day
celery_app.conf.result_expires = 86400

# Celery Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    "rotate-user-stats-monthly": {
        "task": "tasks.rotate_user_stats",
        "schedule": crontab(day_of_month=1, hour=0, minute=5),  # 00:05 UTC on the 1st
    },
}

if __name__ == "__main__":
    celery_app.start()
