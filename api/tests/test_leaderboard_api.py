from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from services.leaderboard_cache import LeaderboardCache
from utils.http_cache import etag_matches


def _doc(name, kills, discord_id=None):
    return {
        "_id": discord_id or name,
        "player_name": name,
        "clan_name": "Sons of Liberty",
        "discord_id": discord_id,
        "Kills": float(kills),
        "Deaths": 2.0,
        "Shots Fired": 10.0,
        "Shots Hit": 5.0,
        "MeleeKills": 0.0,
        "StimsUsed": 1.0,
        "StratsUsed": 4.0,
        "accuracyPct": 50.0,
        "submitted_at": datetime(2025, 6, 15, tzinfo=timezone.utc),
    }


@pytest.fixture
def client(fake_db):
    async def override_get_db():
        return fake_db

    app.dependency_overrides[get_db] = override_get_db
    app.state.leaderboard_cache = LeaderboardCache(ttl_seconds=60, max_entries=100)
    # No context manager: startup would reconfigure logging and build its own cache
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.leaderboard_cache = None


@pytest.fixture
def stats(fake_db):
    fake_db.add_collection("users")
    return fake_db.add_collection("User_Stats", aggregate_results=[
        _doc("Alpha", 22, discord_id="111"),
        _doc("Bravo", 8),
    ])


def test_month_leaderboard(client, stats):
    response = client.get("/api/leaderboard", params={"scope": "month", "month": "6", "year": "2025"})

    assert response.status_code == 200
    body = response.json()
    assert body["sortBy"] == "Kills"
    assert body["sortDir"] == "desc"
    assert body["limit"] == 100

    alpha, bravo = body["results"]
    assert (alpha["rank"], alpha["player_name"], alpha["Kills"]) == (1, "Alpha", 22)
    assert (bravo["rank"], bravo["player_name"], bravo["Kills"]) == (2, "Bravo", 8)
    assert alpha["Accuracy"] == "50.0%"
    assert alpha["_avatarUrl"] == "https://cdn.discordapp.com/embed/avatars/1.png"
    assert bravo["_avatarUrl"] is None


def test_response_caching_headers(client, stats):
    response = client.get("/api/leaderboard")

    assert response.headers["cache-control"] == "public, max-age=30, s-maxage=60, stale-while-revalidate=300"
    assert response.headers["etag"].startswith('W/"')


def test_matching_etag_returns_not_modified(client, stats):
    first = client.get("/api/leaderboard", params={"scope": "week"})
    etag = first.headers["etag"]

    second = client.get("/api/leaderboard", params={"scope": "week"}, headers={"If-None-Match": etag})

    assert second.status_code == 304
    assert second.content == b""
    assert second.headers["etag"] == etag
    assert len(stats.aggregate_calls) == 1


def test_repeat_request_within_ttl_hits_cache(client, stats):
    client.get("/api/leaderboard", params={"scope": "day", "sortBy": "Deaths"})
    client.get("/api/leaderboard", params={"scope": "day", "sortBy": "Deaths"})

    assert len(stats.aggregate_calls) == 1


def test_invalid_parameters_fall_back_to_defaults(client, stats):
    response = client.get(
        "/api/leaderboard",
        params={"scope": "nonsense", "sortBy": "Bogus", "sortDir": "up", "limit": "abc"},
    )

    assert response.status_code == 200
    body = response.json()
    assert (body["sortBy"], body["sortDir"], body["limit"]) == ("Kills", "desc", 100)
    pipeline = stats.aggregate_calls[0]
    assert {"$limit": 100} in pipeline


def test_limit_is_clamped(client, stats):
    body = client.get("/api/leaderboard", params={"limit": "5000"}).json()
    assert body["limit"] == 1000


def test_database_error_returns_500(client, stats):
    async def boom(pipeline):
        raise RuntimeError("server selection timeout")

    stats.aggregate_handler = boom

    response = client.get("/api/leaderboard")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch leaderboard"}


def test_batch_returns_each_scope(client, stats, fake_db):
    fake_db.add_collection("Solo_Stats", aggregate_results=[_doc("Charlie", 3)])

    response = client.get("/api/leaderboard/batch", params={"scopes": "day,solo,Day"})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"day", "solo"}
    assert body["day"]["results"][0]["player_name"] == "Alpha"
    assert body["solo"]["results"][0]["player_name"] == "Charlie"
    assert "etag" in response.headers


def test_batch_reports_failed_and_unknown_scopes(client, stats, fake_db):
    squad = fake_db.add_collection("Squad_Stats")

    async def boom(pipeline):
        raise RuntimeError("squad stats unavailable")

    squad.aggregate_handler = boom

    response = client.get("/api/leaderboard/batch", params={"scopes": "week,squad,galaxy"})

    assert response.status_code == 200
    body = response.json()
    assert body["week"]["results"][0]["Kills"] == 22
    assert body["errors"] == {"squad": "squad stats unavailable", "galaxy": "Unsupported scope"}


@pytest.mark.parametrize("scopes", [None, "", " , "])
def test_batch_without_scopes_is_rejected(client, stats, scopes):
    params = {} if scopes is None else {"scopes": scopes}

    response = client.get("/api/leaderboard/batch", params=params)

    assert response.status_code == 400
    assert response.json() == {"detail": "No scopes provided"}


@pytest.mark.parametrize("header,matches", [
    (None, False),
    ('W/"abc"', True),
    ('"abc"', True),
    ('W/"other", W/"abc"', True),
    ("*", True),
    ('W/"other"', False),
])
def test_etag_matching(header, matches):
    assert etag_matches(header, 'W/"abc"') is matches
