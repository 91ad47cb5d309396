import json
import stat
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from roulette_sync.config import EventConfig
from roulette_sync.models import Week
from roulette_sync.storage import Storage, default_event


def test_missing_file_yields_skeleton(document_path: Path) -> None:
    event = Storage(document_path).load()

    assert event.event_name == "RA Roulette 2026"
    assert event.event_id == 200
    assert event.badge_threshold == 52
    assert event.max_points == 156
    assert event.start_date == "2026-02-07T00:00:00.000000Z"
    assert event.end_date == "2027-02-06T23:59:59.000000Z"
    assert event.weeks == []
    assert not document_path.exists()


def test_skeleton_follows_config(document_path: Path) -> None:
    config = EventConfig(event_name="RA Roulette 2027", event_id=300)
    event = Storage(document_path, config).load()
    assert event.event_name == "RA Roulette 2027"
    assert event.event_id == 300


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        '{"eventName": "x", "weeks": "nope"}',
        '{"weeks": [{"weekNumber": -1}]}',
    ],
)
def test_corrupt_file_yields_skeleton(document_path: Path, content: str) -> None:
    document_path.write_text(content, encoding="utf-8")

    event = Storage(document_path).load()

    assert event.weeks == []
    assert event.event_name == "RA Roulette 2026"
    # The corrupt file is left for the next save to replace.
    assert document_path.read_text(encoding="utf-8") == content


def test_save_and_load(document_path: Path, make_week: Callable[..., Week]) -> None:
    storage = Storage(document_path)
    event = default_event()
    event.weeks = [make_week(2), make_week(1)]

    assert storage.save(event) is True

    raw = document_path.read_text(encoding="utf-8")
    assert raw.endswith("}\n")
    data = json.loads(raw)
    assert [w["weekNumber"] for w in data["weeks"]] == [1, 2]
    assert data["weeks"][0]["achievements"][0]["consoleId"] == 7
    assert data["weeks"][0]["startDate"] == "2026-02-07T00:00:00.000Z"

    loaded = storage.load()
    assert loaded == event


def test_save_is_world_readable(
    document_path: Path, make_week: Callable[..., Week]
) -> None:
    event = default_event()
    event.weeks = [make_week(1)]
    Storage(document_path).save(event)
    assert stat.S_IMODE(document_path.stat().st_mode) == 0o644


def test_identical_content_is_not_rewritten(
    document_path: Path, make_week: Callable[..., Week]
) -> None:
    storage = Storage(document_path)
    event = default_event()
    event.weeks = [make_week(1)]

    assert storage.save(event) is True
    first = document_path.read_bytes()
    assert storage.save(storage.load()) is False
    assert document_path.read_bytes() == first


def test_failed_save_keeps_previous_document(
    document_path: Path, make_week: Callable[..., Week]
) -> None:
    storage = Storage(document_path)
    event = default_event()
    event.weeks = [make_week(1)]
    storage.save(event)
    before = document_path.read_bytes()

    event.weeks.append(make_week(2))
    with patch("roulette_sync.storage.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            storage.save(event)

    assert document_path.read_bytes() == before
    assert [p.name for p in document_path.parent.iterdir()] == [document_path.name]


def test_legacy_keys_are_migrated(document_path: Path) -> None:
    legacy = {
        "eventName": "RA Roulette 2026",
        "eventId": 200,
        "badgeThreshold": 52,
        "maxPoints": 156,
        "startDate": "2026-02-07T00:00:00.000000Z",
        "endDate": "2027-02-06T23:59:59.000000Z",
        "weeks": [
            {
                "week": 1,
                "startDate": "2026-02-07T00:00:00.000Z",
                "endDate": "2026-02-13T23:59:59.999Z",
                "achievements": [
                    {
                        "achievementId": 101,
                        "achievementTitle": "Blue Bomber",
                        "achievementDescription": "",
                        "achievementBadgeName": "54321",
                        "gameId": 555,
                        "gameTitle": "Mega Man 2",
                        "gameImageIcon": "",
                        "consoleID": 7,
                        "consoleName": "NES/Famicom",
                    }
                ],
            }
        ],
    }
    document_path.write_text(json.dumps(legacy), encoding="utf-8")
    storage = Storage(document_path)

    event = storage.load()
    assert event.weeks[0].week_number == 1
    assert event.weeks[0].achievements[0].console_id == 7

    storage.save(event)
    data = json.loads(document_path.read_text(encoding="utf-8"))
    assert data["weeks"][0]["weekNumber"] == 1
    assert "week" not in data["weeks"][0]
    assert data["weeks"][0]["achievements"][0]["consoleId"] == 7
    assert "consoleID" not in data["weeks"][0]["achievements"][0]
