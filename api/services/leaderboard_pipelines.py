"""
Aggregation pipeline builders for the player leaderboards.

Each scope has its own builder returning an AggregationPlan: the collection
to aggregate plus the stage list. Builders are pure; the current time and
the lifetime archive list are passed in.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from config import settings
from models.stat_submission import (
    ACCURACY_FIELD,
    COUNTER_FIELDS,
    SOLO_STATS_COLLECTION,
    SQUAD_STATS_COLLECTION,
    SUBMITTED_AT_FIELD,
    TITLE_FIELD,
    USER_STATS_COLLECTION,
)
from schemas.leaderboard import LeaderboardQuery, LeaderboardScope, SortDirection

Stage = Dict[str, Any]

# Request sort field -> grouped document field
SORT_KEYS = {
    "Kills": "totalKills",
    "Accuracy": "accuracyPct",
    "Shots Fired": "totalShotsFired",
    "Shots Hit": "totalShotsHit",
    "Deaths": "totalDeaths",
    "Melee Kills": "totalMeleeKills",
    "Stims Used": "totalStimsUsed",
    "Strats Used": "totalStratsUsed",
    "player_name": "player_name",
    "clan_name": "clan_name",
    "submitted_at": "lastSubmittedAt",
}
AVERAGE_SORT_KEYS = {
    "Avg Kills": "avgKills",
    "Avg Shots Fired": "avgShotsFired",
    "Avg Shots Hit": "avgShotsHit",
    "Avg Deaths": "avgDeaths",
}

# Grouped total -> per-submission average
AVERAGED_TOTALS = {
    "totalKills": "avgKills",
    "totalShotsFired": "avgShotsFired",
    "totalShotsHit": "avgShotsHit",
    "totalDeaths": "avgDeaths",
}

# Output field -> grouped total
PROJECTED_TOTALS = {
    "Kills": "$totalKills",
    "Deaths": "$totalDeaths",
    "Shots Fired": "$totalShotsFired",
    "Shots Hit": "$totalShotsHit",
    "MeleeKills": "$totalMeleeKills",
    "StimsUsed": "$totalStimsUsed",
    "StratsUsed": "$totalStratsUsed",
}


@dataclass(frozen=True)
class AggregationPlan:
    """A collection and the stages to run against it."""
    collection: str
    pipeline: List[Stage] = field(default_factory=list)


def _field(name: str) -> Dict[str, Any]:
    # $getField copes with stored names containing spaces
    return {"$getField": {"field": name, "input": "$$ROOT"}}


def _to_double(expression: Any) -> Dict[str, Any]:
    return {"$convert": {"input": expression, "to": "double", "onError": 0, "onNull": 0}}


def normalize_stage() -> Stage:
    """
    Coerce loosely typed submission fields into typed values.

    Missing or unconvertible counters become 0 and percentage strings lose
    their '%' suffix. The member key prefers the Discord id and falls back
    to the exact player name.
    """
    fields: Dict[str, Any] = {
        name: _to_double(_field(stored)) for name, stored in COUNTER_FIELDS.items()
    }
    fields["numericAccuracy"] = _to_double({
        "$replaceAll": {
            "input": {"$convert": {
                "input": {"$ifNull": [_field(ACCURACY_FIELD), "0"]},
                "to": "string",
                "onError": "0",
            }},
            "find": "%",
            "replacement": "",
        }
    })
    fields["submittedAtDate"] = {
        "$convert": {"input": _field(SUBMITTED_AT_FIELD), "to": "date", "onError": None, "onNull": None}
    }
    fields["memberKey"] = {"$toString": {"$ifNull": ["$discord_id", "$player_name"]}}
    fields["sesTitle"] = {"$ifNull": [_field(TITLE_FIELD), None]}
    return {"$addFields": fields}


def month_bounds(month: int, year: int) -> Tuple[datetime, datetime]:
    """UTC [start, end) of a calendar month."""
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        if year == datetime.max.year:
            return start, datetime.max.replace(tzinfo=timezone.utc)
        return start, datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    return start, datetime(year, month + 1, 1, tzinfo=timezone.utc)


def _group_stage(with_submitter: bool = False) -> Stage:
    group: Dict[str, Any] = {
        "_id": "$memberKey",
        "player_name": {"$last": "$player_name"},
        "clan_name": {"$last": "$clan_name"},
        "discord_id": {"$last": "$discord_id"},
        "discord_server_id": {"$last": "$discord_server_id"},
        "lastSubmittedAt": {"$max": "$submittedAtDate"},
        "sesTitle": {"$last": "$sesTitle"},
        "submissionsCount": {"$sum": 1},
    }
    for name in COUNTER_FIELDS:
        group["total" + name[len("numeric"):]] = {"$sum": "$" + name}
    if with_submitter:
        group["submitted_by"] = {"$last": "$submitted_by"}
    return {"$group": group}


def _accuracy_expression() -> Dict[str, Any]:
    return {
        "$cond": [
            {"$gt": ["$totalShotsFired", 0]},
            {"$multiply": [{"$divide": ["$totalShotsHit", "$totalShotsFired"]}, 100]},
            0,
        ]
    }


def _derived_stage(with_averages: bool = False) -> Stage:
    fields: Dict[str, Any] = {"accuracyPct": _accuracy_expression()}
    if with_averages:
        for total, average in AVERAGED_TOTALS.items():
            fields[average] = {
                "$cond": [
                    {"$gt": ["$submissionsCount", 0]},
                    {"$divide": ["$" + total, "$submissionsCount"]},
                    0,
                ]
            }
    return {"$addFields": fields}


def sort_key(query: LeaderboardQuery, allow_averages: bool = False) -> str:
    """Grouped field to sort on; averages fall back to kills outside lifetime."""
    if allow_averages and query.sort_by in AVERAGE_SORT_KEYS:
        return AVERAGE_SORT_KEYS[query.sort_by]
    return SORT_KEYS.get(query.sort_by, SORT_KEYS["Kills"])


def _ranking_stages(
    query: LeaderboardQuery,
    with_submitter: bool = False,
    with_averages: bool = False,
) -> List[Stage]:
    direction = 1 if query.sort_dir is SortDirection.ASC else -1
    key = sort_key(query, allow_averages=with_averages)

    projection: Dict[str, Any] = {
        "_id": 1,
        "player_name": 1,
        "clan_name": 1,
        "discord_id": 1,
        "discord_server_id": 1,
        "submitted_at": "$lastSubmittedAt",
        "accuracyPct": 1,
        "sesTitle": 1,
    }
    projection.update(PROJECTED_TOTALS)
    if with_submitter:
        projection["submitted_by"] = 1
    if with_averages:
        projection.update({average: 1 for average in AVERAGED_TOTALS.values()})

    return [
        # Oldest first so $last picks the most recent identity fields
        {"$sort": {"submittedAtDate": 1}},
        _group_stage(with_submitter=with_submitter),
        _derived_stage(with_averages=with_averages),
        {"$sort": {key: direction, "_id": direction}},
        {"$limit": query.limit},
        {"$project": projection},
    ]


def _windowed_plan(query: LeaderboardQuery, start: datetime, end: datetime) -> AggregationPlan:
    pipeline = [
        normalize_stage(),
        {"$match": {"submittedAtDate": {"$gte": start, "$lt": end}}},
    ]
    pipeline.extend(_ranking_stages(query))
    return AggregationPlan(USER_STATS_COLLECTION, pipeline)


def build_month_plan(query: LeaderboardQuery, now: datetime, archives: Sequence[str]) -> AggregationPlan:
    month = query.month or now.month
    year = query.year or now.year
    start, end = month_bounds(month, year)
    return _windowed_plan(query, start, end)


def build_day_plan(query: LeaderboardQuery, now: datetime, archives: Sequence[str]) -> AggregationPlan:
    return _windowed_plan(query, now - timedelta(days=1), now)


def build_week_plan(query: LeaderboardQuery, now: datetime, archives: Sequence[str]) -> AggregationPlan:
    return _windowed_plan(query, now - timedelta(days=7), now)


def _mode_plan(query: LeaderboardQuery, collection: str) -> AggregationPlan:
    pipeline = [normalize_stage()]
    pipeline.extend(_ranking_stages(query, with_submitter=True))
    return AggregationPlan(collection, pipeline)


def build_solo_plan(query: LeaderboardQuery, now: datetime, archives: Sequence[str]) -> AggregationPlan:
    return _mode_plan(query, SOLO_STATS_COLLECTION)


def build_squad_plan(query: LeaderboardQuery, now: datetime, archives: Sequence[str]) -> AggregationPlan:
    return _mode_plan(query, SQUAD_STATS_COLLECTION)


def build_lifetime_plan(query: LeaderboardQuery, now: datetime, archives: Sequence[str]) -> AggregationPlan:
    """Live collection unioned with every archived month."""
    pipeline = [normalize_stage()]
    for collection in archives:
        pipeline.append({"$unionWith": {"coll": collection, "pipeline": [normalize_stage()]}})
    pipeline.extend(_ranking_stages(query, with_submitter=True, with_averages=True))
    return AggregationPlan(USER_STATS_COLLECTION, pipeline)


PlanBuilder = Callable[[LeaderboardQuery, datetime, Sequence[str]], AggregationPlan]

PLAN_BUILDERS: Dict[LeaderboardScope, PlanBuilder] = {
    LeaderboardScope.DAY: build_day_plan,
    LeaderboardScope.WEEK: build_week_plan,
    LeaderboardScope.MONTH: build_month_plan,
    LeaderboardScope.LIFETIME: build_lifetime_plan,
    LeaderboardScope.SOLO: build_solo_plan,
    LeaderboardScope.SQUAD: build_squad_plan,
}


def build_plan(
    query: LeaderboardQuery,
    now: Optional[datetime] = None,
    archives: Optional[Sequence[str]] = None,
) -> AggregationPlan:
    """Build the aggregation plan for a normalized query."""
    if now is None:
        now = datetime.now(timezone.utc)
    if archives is None:
        archives = settings.get_lifetime_collections()
    return PLAN_BUILDERS[query.scope](query, now, archives)
