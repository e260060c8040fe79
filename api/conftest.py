# api/conftest.py
import sys
from pathlib import Path

import pytest

# Modules import each other as top-level names (config, database, services...)
API_ROOT = Path(__file__).resolve().parent
if str(API_ROOT) not in sys.path:
    sys.path.insert(0, str(API_ROOT))


@pytest.fixture
def fake_db():
    """Empty in-memory database; tests add collections as needed."""
    from tests.fakes import FakeDatabase

    return FakeDatabase()


@pytest.fixture
def leaderboard_cache():
    """Fresh cache per test so cached boards never leak between tests."""
    from services.leaderboard_cache import LeaderboardCache

    return LeaderboardCache(ttl_seconds=60, max_entries=100)
