"""Shared pytest fixtures for roulette sync tests."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from roulette_sync.models import Achievement, Week
from roulette_sync.schedule import WeekSchedule

EVENT_START = datetime(2026, 2, 7, tzinfo=UTC)


class FakeClock:
    """Monotonic clock whose sleep() advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def schedule() -> WeekSchedule:
    """The real event schedule: weekly from 2026-02-07 UTC."""
    return WeekSchedule(EVENT_START)


@pytest.fixture
def document_path(tmp_path: Path) -> Path:
    """Provides a path for the event document inside a temp dir."""
    return tmp_path / "roulette2026.json"


@pytest.fixture
def make_achievement() -> Callable[..., Achievement]:
    """Factory for fully resolved achievements."""

    def _make(achievement_id: int, game_id: int = 0, **overrides: object) -> Achievement:
        values: dict[str, object] = {
            "achievement_id": achievement_id,
            "achievement_title": f"Achievement {achievement_id}",
            "achievement_description": f"Do thing {achievement_id}",
            "achievement_badge_name": f"{achievement_id:05d}",
            "game_id": game_id or achievement_id * 10,
            "game_title": f"Game {game_id or achievement_id * 10}",
            "game_image_icon": "/Images/000001.png",
            "console_id": 7,
            "console_name": "NES/Famicom",
        }
        values.update(overrides)
        return Achievement(**values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def make_week(
    schedule: WeekSchedule, make_achievement: Callable[..., Achievement]
) -> Callable[..., Week]:
    """Factory for a complete week whose ids are week * 100 + slot."""

    def _make(week_number: int, ids: list[int] | None = None) -> Week:
        start, end = schedule.week_date_strings(week_number)
        ids = ids if ids is not None else [week_number * 100 + i for i in (1, 2, 3)]
        return Week(
            week_number=week_number,
            start_date=start,
            end_date=end,
            achievements=[make_achievement(i) for i in ids],
        )

    return _make
