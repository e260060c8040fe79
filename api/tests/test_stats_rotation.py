from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from models.stat_submission import archive_collection_name
from services.stats_rotation_service import StatsRotationService


def _db(collections):
    db = MagicMock()
    db.list_collection_names.return_value = list(collections)
    return db


@pytest.mark.parametrize("reference,expected", [
    (datetime(2025, 7, 1, 0, 5, tzinfo=timezone.utc), (2025, 6)),
    (datetime(2025, 1, 1, tzinfo=timezone.utc), (2024, 12)),
    (datetime(2024, 3, 15, tzinfo=timezone.utc), (2024, 2)),
])
def test_previous_month(reference, expected):
    assert StatsRotationService.previous_month(reference) == expected


def test_archive_collection_name_zero_pads_month():
    assert archive_collection_name(2025, 6) == "User_Stats_2025_06"
    assert archive_collection_name(2025, 11) == "User_Stats_2025_11"


def test_rotate_renames_live_collection():
    db = _db(["User_Stats", "users"])
    # After the rename the live collection is gone
    db.list_collection_names.side_effect = [["User_Stats", "users"], ["User_Stats_2025_06", "users"]]

    result = StatsRotationService.rotate(db, datetime(2025, 7, 1, tzinfo=timezone.utc))

    db["User_Stats"].rename.assert_called_once_with("User_Stats_2025_06")
    db.create_collection.assert_called_once_with("User_Stats")
    assert result == {"archive": "User_Stats_2025_06", "renamed": True, "created_live_collection": True}


def test_rotate_never_overwrites_existing_archive():
    db = _db(["User_Stats", "User_Stats_2025_06"])

    result = StatsRotationService.rotate(db, datetime(2025, 7, 1, tzinfo=timezone.utc))

    db["User_Stats"].rename.assert_not_called()
    db.create_collection.assert_not_called()
    assert result["renamed"] is False
    assert result["created_live_collection"] is False


def test_rotate_without_live_collection_creates_it():
    db = _db(["users"])

    result = StatsRotationService.rotate(db, datetime(2025, 7, 1, tzinfo=timezone.utc))

    db["User_Stats"].rename.assert_not_called()
    db.create_collection.assert_called_once_with("User_Stats")
    db["User_Stats"].create_indexes.assert_called_once()
    assert result["renamed"] is False
    assert result["created_live_collection"] is True


def test_rotate_task_closes_client(monkeypatch):
    from tasks import stats_rotation

    client = MagicMock()
    client.__getitem__.return_value = _db(["User_Stats_2025_06", "User_Stats"])
    monkeypatch.setattr(stats_rotation, "create_sync_client", lambda: client)

    result = stats_rotation.rotate_user_stats.run()

    assert result["status"] == "success"
    client.close.assert_called_once()
