from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from .utils.date_and_time import format_iso_millis

ONE_MILLISECOND = timedelta(milliseconds=1)


@dataclass(frozen=True)
class WeekSchedule:
    """Maps wall-clock time to event week numbers and back.

    Week n covers [start + (n-1) * duration, start + n * duration), with the
    stored end date being the last millisecond of that interval.
    """

    event_start: datetime
    week_duration: timedelta = timedelta(days=7)

    def __post_init__(self) -> None:
        if self.event_start.tzinfo is None:
            object.__setattr__(self, "event_start", self.event_start.replace(tzinfo=UTC))
        if self.week_duration <= timedelta(0):
            raise ValueError("week_duration must be positive")

    def current_week_number(self, now: datetime) -> int:
        """Returns the 1-based week containing `now`, or 0 before the event."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        if now < self.event_start:
            return 0
        return (now - self.event_start) // self.week_duration + 1

    def week_date_range(self, week_number: int) -> tuple[datetime, datetime]:
        """Returns (start, end) of a week, end being start + duration - 1ms."""
        start = self.event_start + (week_number - 1) * self.week_duration
        end = start + self.week_duration - ONE_MILLISECOND
        return start, end

    def week_date_strings(self, week_number: int) -> tuple[str, str]:
        start, end = self.week_date_range(week_number)
        return format_iso_millis(start), format_iso_millis(end)
