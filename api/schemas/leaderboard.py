"""
Pydantic schemas for leaderboard queries and responses.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union
from datetime import datetime
from enum import Enum
import json


class LeaderboardScope(str, Enum):
    """Aggregation window/mode for a leaderboard."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    LIFETIME = "lifetime"
    SOLO = "solo"
    SQUAD = "squad"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["LeaderboardScope"]:
        """Case-insensitive lookup; None for unknown values."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


SORT_FIELDS = (
    "Kills",
    "Accuracy",
    "Shots Fired",
    "Shots Hit",
    "Deaths",
    "Melee Kills",
    "Stims Used",
    "Strats Used",
    "player_name",
    "clan_name",
    "submitted_at",
)
# Only meaningful for the lifetime scope
AVERAGE_SORT_FIELDS = (
    "Avg Kills",
    "Avg Shots Fired",
    "Avg Shots Hit",
    "Avg Deaths",
)
VALID_SORT_FIELDS = SORT_FIELDS + AVERAGE_SORT_FIELDS

DEFAULT_SORT_FIELD = "Kills"
DEFAULT_LIMIT = 100
MAX_LIMIT = 1000
MIN_YEAR = 1970
MAX_YEAR = 9999


def _clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


class LeaderboardQuery(BaseModel):
    """Normalized leaderboard request; also the shape of the cache key."""

    model_config = ConfigDict(frozen=True)

    sort_by: str = DEFAULT_SORT_FIELD
    sort_dir: SortDirection = SortDirection.DESC
    limit: int = DEFAULT_LIMIT
    scope: LeaderboardScope = LeaderboardScope.MONTH
    month: Optional[int] = None
    year: Optional[int] = None

    @classmethod
    def normalize(
        cls,
        sort_by: Optional[str] = None,
        sort_dir: Optional[str] = None,
        limit: Optional[int] = None,
        scope: Union[LeaderboardScope, str, None] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> "LeaderboardQuery":
        """
        Build a query from raw request values.

        Unknown or out-of-range values fall back to defaults or are clamped;
        nothing here rejects a request. Month and year only apply to the
        month scope and are dropped for every other scope.
        """
        if not isinstance(scope, LeaderboardScope):
            scope = LeaderboardScope.parse(scope) or LeaderboardScope.MONTH

        direction = SortDirection.ASC if (sort_dir or "").lower() == "asc" else SortDirection.DESC

        if scope is LeaderboardScope.MONTH:
            month = _clamp(month, 1, 12) if month is not None else None
            year = _clamp(year, MIN_YEAR, MAX_YEAR) if year is not None else None
        else:
            month = year = None

        return cls(
            sort_by=sort_by if sort_by in VALID_SORT_FIELDS else DEFAULT_SORT_FIELD,
            sort_dir=direction,
            limit=_clamp(limit, 1, MAX_LIMIT) if limit is not None else DEFAULT_LIMIT,
            scope=scope,
            month=month,
            year=year,
        )

    def with_scope(self, scope: LeaderboardScope) -> "LeaderboardQuery":
        return LeaderboardQuery.normalize(
            sort_by=self.sort_by,
            sort_dir=self.sort_dir.value,
            limit=self.limit,
            scope=scope,
            month=self.month,
            year=self.year,
        )

    def cache_key(self) -> str:
        return json.dumps({
            "sortBy": self.sort_by,
            "sortDir": self.sort_dir.value,
            "limit": self.limit,
            "scope": self.scope.value,
            "month": self.month,
            "year": self.year,
        })


Number = Union[int, float]


class LeaderboardRow(BaseModel):
    """Single aggregated player row in a leaderboard."""

    model_config = ConfigDict(populate_by_name=True)

    rank: int
    id: str
    player_name: str = ""
    clan_name: str = ""
    submitted_by: str = ""
    submitted_at: Optional[datetime] = None
    discord_id: Optional[str] = None
    discord_server_id: Optional[str] = None

    kills: Number = Field(0, alias="Kills")
    deaths: Number = Field(0, alias="Deaths")
    shots_fired: Number = Field(0, alias="ShotsFired")
    shots_hit: Number = Field(0, alias="ShotsHit")
    melee_kills: Number = Field(0, alias="MeleeKills")
    stims_used: Number = Field(0, alias="StimsUsed")
    strats_used: Number = Field(0, alias="StratsUsed")
    accuracy: str = Field("0.0%", alias="Accuracy")

    # Lifetime scope only
    avg_kills: Optional[float] = Field(None, alias="AvgKills")
    avg_shots_fired: Optional[float] = Field(None, alias="AvgShotsFired")
    avg_shots_hit: Optional[float] = Field(None, alias="AvgShotsHit")
    avg_deaths: Optional[float] = Field(None, alias="AvgDeaths")

    # Filled by profile enrichment
    ses_title: Optional[str] = Field(None, alias="sesTitle")
    avatar_url: Optional[str] = Field(None, alias="_avatarUrl")


class LeaderboardResponse(BaseModel):
    """Response for one leaderboard scope."""

    model_config = ConfigDict(populate_by_name=True)

    sort_by: str = Field(alias="sortBy")
    sort_dir: SortDirection = Field(alias="sortDir")
    limit: int
    results: list[LeaderboardRow]
