"""Data model of the persisted event document.

The JSON wire format uses camelCase keys because the mobile app and its
widgets read the document directly.
"""

from dataclasses import dataclass, field
from typing import Any, TypedDict

ACHIEVEMENTS_PER_WEEK = 3

PLACEHOLDER_BADGE = "00000"
UNKNOWN = "Unknown"


class AchievementDict(TypedDict):
    """Dictionary representation of an Achievement."""

    achievementId: int
    achievementTitle: str
    achievementDescription: str
    achievementBadgeName: str
    gameId: int
    gameTitle: str
    gameImageIcon: str
    consoleId: int
    consoleName: str


class WeekDict(TypedDict):
    """Dictionary representation of a Week."""

    weekNumber: int
    startDate: str
    endDate: str
    achievements: list[AchievementDict]


class EventDict(TypedDict):
    """Dictionary representation of the whole Event document."""

    eventName: str
    eventId: int
    badgeThreshold: int
    maxPoints: int
    startDate: str
    endDate: str
    weeks: list[WeekDict]


def _as_int(value: Any) -> int:
    """Coerces ids that may arrive as strings or null to int (0 when unusable)."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Candidate:
    """An unverified (id, text) pair discovered by one source.

    Never persisted.
    """

    achievement_id: int
    display_text: str
    source: str


@dataclass
class Achievement:
    """One achievement slot of a week.

    An id of 0 (for achievement or game) means the slot is unresolved.
    """

    achievement_id: int = 0
    achievement_title: str = ""
    achievement_description: str = ""
    achievement_badge_name: str = PLACEHOLDER_BADGE
    game_id: int = 0
    game_title: str = ""
    game_image_icon: str = ""
    console_id: int = 0
    console_name: str = ""

    @classmethod
    def placeholder(cls, candidate: Candidate) -> "Achievement":
        """Builds the stand-in used when a candidate could not be enriched."""
        return cls(
            achievement_id=candidate.achievement_id,
            achievement_title=candidate.display_text.strip() or UNKNOWN,
            achievement_description="",
            achievement_badge_name=PLACEHOLDER_BADGE,
            game_id=0,
            game_title=UNKNOWN,
            game_image_icon="",
            console_id=0,
            console_name=UNKNOWN,
        )

    def to_dict(self) -> AchievementDict:
        return AchievementDict(
            achievementId=self.achievement_id,
            achievementTitle=self.achievement_title,
            achievementDescription=self.achievement_description,
            achievementBadgeName=self.achievement_badge_name,
            gameId=self.game_id,
            gameTitle=self.game_title,
            gameImageIcon=self.game_image_icon,
            consoleId=self.console_id,
            consoleName=self.console_name,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Achievement":
        # "consoleID" is the key written by earlier versions of the job.
        console_id = data.get("consoleId", data.get("consoleID"))
        return cls(
            achievement_id=_as_int(data.get("achievementId")),
            achievement_title=_as_str(data.get("achievementTitle")),
            achievement_description=_as_str(data.get("achievementDescription")),
            achievement_badge_name=_as_str(
                data.get("achievementBadgeName", PLACEHOLDER_BADGE)
            ),
            game_id=_as_int(data.get("gameId")),
            game_title=_as_str(data.get("gameTitle")),
            game_image_icon=_as_str(data.get("gameImageIcon")),
            console_id=_as_int(console_id),
            console_name=_as_str(data.get("consoleName")),
        )


@dataclass
class Week:
    """One scheduling unit of the event.

    Date formats: ISO 8601 UTC with milliseconds (e.g. 2026-02-07T00:00:00.000Z).
    """

    week_number: int
    start_date: str
    end_date: str
    achievements: list[Achievement] = field(default_factory=list)

    def to_dict(self) -> WeekDict:
        return WeekDict(
            weekNumber=self.week_number,
            startDate=self.start_date,
            endDate=self.end_date,
            achievements=[a.to_dict() for a in self.achievements],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Week":
        """Parses a week, accepting the legacy "week" key for the number.

        Raises:
            ValueError: If the week number is missing or not positive.
        """
        number = _as_int(data.get("weekNumber", data.get("week")))
        if number < 1:
            raise ValueError(f"Invalid week number: {data.get('weekNumber')!r}")

        raw_achievements = data.get("achievements") or []
        if not isinstance(raw_achievements, list):
            raise ValueError(f"Week {number} achievements is not a list")

        return cls(
            week_number=number,
            start_date=_as_str(data.get("startDate")),
            end_date=_as_str(data.get("endDate")),
            achievements=[Achievement.from_dict(a) for a in raw_achievements],
        )


@dataclass
class Event:
    """The top-level document: event metadata plus its weeks."""

    event_name: str
    event_id: int
    badge_threshold: int
    max_points: int
    start_date: str
    end_date: str
    weeks: list[Week] = field(default_factory=list)

    def get_week(self, week_number: int) -> Week | None:
        return next((w for w in self.weeks if w.week_number == week_number), None)

    def upsert_week(self, week: Week) -> None:
        """Replaces the week with the same number, or inserts it in order."""
        for i, existing in enumerate(self.weeks):
            if existing.week_number == week.week_number:
                self.weeks[i] = week
                return
        self.weeks.append(week)
        self.sort_weeks()

    def sort_weeks(self) -> None:
        self.weeks.sort(key=lambda w: w.week_number)

    def to_dict(self) -> EventDict:
        return EventDict(
            eventName=self.event_name,
            eventId=self.event_id,
            badgeThreshold=self.badge_threshold,
            maxPoints=self.max_points,
            startDate=self.start_date,
            endDate=self.end_date,
            weeks=[w.to_dict() for w in self.weeks],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """Parses the document.

        Weeks are sorted and de-duplicated (first occurrence wins).

        Raises:
            ValueError: If the document is not an object or weeks are malformed.
        """
        if not isinstance(data, dict):
            raise ValueError("Document root is not a JSON object")

        raw_weeks = data.get("weeks") or []
        if not isinstance(raw_weeks, list):
            raise ValueError("Document 'weeks' is not a list")

        weeks: list[Week] = []
        seen: set[int] = set()
        for raw in raw_weeks:
            if not isinstance(raw, dict):
                raise ValueError("Week entry is not a JSON object")
            week = Week.from_dict(raw)
            if week.week_number in seen:
                continue
            seen.add(week.week_number)
            weeks.append(week)

        event = cls(
            event_name=_as_str(data.get("eventName")),
            event_id=_as_int(data.get("eventId")),
            badge_threshold=_as_int(data.get("badgeThreshold")),
            max_points=_as_int(data.get("maxPoints")),
            start_date=_as_str(data.get("startDate")),
            end_date=_as_str(data.get("endDate")),
            weeks=weeks,
        )
        event.sort_weeks()
        return event
