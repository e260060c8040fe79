"""
Service for computing, enriching and caching player leaderboards.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from datetime import datetime
import asyncio
import logging

from pymongo.asynchronous.database import AsyncDatabase

from schemas.leaderboard import (
    LeaderboardQuery,
    LeaderboardResponse,
    LeaderboardRow,
    LeaderboardScope,
)
from services.enrichment_service import EnrichmentService
from services.leaderboard_cache import LeaderboardCache
from services.leaderboard_pipelines import build_plan

logger = logging.getLogger(__name__)

UNSUPPORTED_SCOPE_ERROR = "Unsupported scope"


def format_accuracy(accuracy_pct: Any) -> str:
    """Render an accuracy percentage as e.g. '42.5%'."""
    if isinstance(accuracy_pct, (int, float)) and not isinstance(accuracy_pct, bool):
        return f"{accuracy_pct:.1f}%"
    return "0.0%"


def _number(value: Any):
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _optional_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _optional_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def row_from_document(doc: Dict[str, Any], rank: int) -> LeaderboardRow:
    """Convert one projected aggregation document into a leaderboard row."""
    return LeaderboardRow(
        rank=rank,
        id=str(doc.get("_id")),
        player_name=doc.get("player_name") or "",
        clan_name=doc.get("clan_name") or "",
        submitted_by=doc.get("submitted_by") or "",
        submitted_at=doc.get("submitted_at"),
        discord_id=_optional_id(doc.get("discord_id")),
        discord_server_id=_optional_id(doc.get("discord_server_id")),
        kills=_number(doc.get("Kills")),
        deaths=_number(doc.get("Deaths")),
        shots_fired=_number(doc.get("Shots Fired")),
        shots_hit=_number(doc.get("Shots Hit")),
        melee_kills=_number(doc.get("MeleeKills")),
        stims_used=_number(doc.get("StimsUsed")),
        strats_used=_number(doc.get("StratsUsed")),
        accuracy=format_accuracy(doc.get("accuracyPct")),
        avg_kills=_optional_float(doc.get("avgKills")),
        avg_shots_fired=_optional_float(doc.get("avgShotsFired")),
        avg_shots_hit=_optional_float(doc.get("avgShotsHit")),
        avg_deaths=_optional_float(doc.get("avgDeaths")),
        ses_title=doc.get("sesTitle") or None,
    )


async def fetch_leaderboard(
    db: AsyncDatabase,
    query: LeaderboardQuery,
    now: Optional[datetime] = None,
    archives: Optional[Sequence[str]] = None,
) -> LeaderboardResponse:
    """
    Run the aggregation for one scope, without enrichment or caching.

    Database errors propagate to the caller.
    """
    plan = build_plan(query, now=now, archives=archives)
    cursor = await db[plan.collection].aggregate(plan.pipeline, allowDiskUse=True)
    documents = await cursor.to_list(length=None)

    return LeaderboardResponse(
        sort_by=query.sort_by,
        sort_dir=query.sort_dir,
        limit=query.limit,
        results=[row_from_document(doc, index + 1) for index, doc in enumerate(documents)],
    )


class LeaderboardService:
    """
    Cache-aware leaderboard fetching for one or many scopes.

    The cache is injected so each app (or test) owns its instance.
    """

    def __init__(
        self,
        db: AsyncDatabase,
        cache: LeaderboardCache,
        enrichment: Optional[EnrichmentService] = None,
        archives: Optional[Sequence[str]] = None,
    ):
        self.db = db
        self.cache = cache
        self.enrichment = enrichment or EnrichmentService(db)
        self.archives = archives

    async def _compute(self, query: LeaderboardQuery) -> LeaderboardResponse:
        data = await fetch_leaderboard(self.db, query, archives=self.archives)
        await self.enrichment.enrich(data.results)
        self.cache.set(query.cache_key(), data)
        return data

    async def fetch_one(self, query: LeaderboardQuery) -> LeaderboardResponse:
        """Single scope; errors propagate."""
        cached = self.cache.get(query.cache_key())
        if cached is not None:
            logger.debug(f"Leaderboard cache hit for {query.scope.value}")
            return cached
        return await self._compute(query)

    async def fetch_many(
        self,
        scopes: Iterable[str],
        query: LeaderboardQuery,
    ) -> Tuple[Dict[str, LeaderboardResponse], Dict[str, str]]:
        """
        Fetch several scopes sharing sort/limit/date parameters.

        Cache misses are computed concurrently. A failing or unknown scope
        is reported in the errors mapping and never affects the others.

        Returns:
            Tuple of (results by scope, error message by scope)
        """
        results: Dict[str, LeaderboardResponse] = {}
        errors: Dict[str, str] = {}
        pending: List[LeaderboardQuery] = []

        for raw in dict.fromkeys(s.strip().lower() for s in scopes if s and s.strip()):
            scope = LeaderboardScope.parse(raw)
            if scope is None:
                errors[raw] = UNSUPPORTED_SCOPE_ERROR
                continue

            scoped = query.with_scope(scope)
            cached = self.cache.get(scoped.cache_key())
            if cached is not None:
                results[scope.value] = cached
            else:
                pending.append(scoped)

        if not pending:
            return results, errors

        outcomes = await asyncio.gather(
            *(self._compute(scoped) for scoped in pending),
            return_exceptions=True,
        )
        for scoped, outcome in zip(pending, outcomes):
            scope = scoped.scope.value
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                errors[scope] = str(outcome) or "Fetch failed"
                logger.error(f"Leaderboard scope '{scope}' fetch failed: {outcome!r}")
            else:
                results[scope] = outcome

        return results, errors
