"""
StatSubmission documents - one per player per reporting period.

Submissions are stored loosely typed: counters may be numbers, numeric
strings or absent. They are normalized at aggregation time, never on write.
"""
from pymongo import ASCENDING

# Live collections (the user stats collection is rotated monthly)
USER_STATS_COLLECTION = "User_Stats"
SOLO_STATS_COLLECTION = "Solo_Stats"
SQUAD_STATS_COLLECTION = "Squad_Stats"

# Stored field name for each normalized counter computed by the pipelines
COUNTER_FIELDS = {
    "numericKills": "Kills",
    "numericDeaths": "Deaths",
    "numericShotsFired": "Shots Fired",
    "numericShotsHit": "Shots Hit",
    "numericMeleeKills": "Melee Kills",
    "numericStimsUsed": "Stims Used",
    "numericStratsUsed": "Strats Used",
}

ACCURACY_FIELD = "Accuracy"
SUBMITTED_AT_FIELD = "submitted_at"
TITLE_FIELD = "SES"

# Indexes created on a fresh live collection after rotation
STAT_INDEXES = [
    [(SUBMITTED_AT_FIELD, ASCENDING)],
    [("player_name", ASCENDING)],
    [("discord_id", ASCENDING)],
]


def archive_collection_name(year: int, month: int) -> str:
    """Name of the archive holding a rotated month, e.g. User_Stats_2025_06."""
    return f"{USER_STATS_COLLECTION}_{year}_{month:02d}"
