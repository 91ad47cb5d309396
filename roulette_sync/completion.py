from datetime import datetime

import structlog

from .models import ACHIEVEMENTS_PER_WEEK, Event, Week
from .utils.date_and_time import parse_iso_datetime

logger = structlog.get_logger(__name__)

# Titles that mark a slot as not yet published or not yet resolved.
PLACEHOLDER_TITLES: frozenset[str] = frozenset({"TBD", "Placeholder", "Unknown"})


def is_week_complete(week: Week | None) -> bool:
    """Checks whether every slot of a week holds real, resolved data.

    Args:
        week: The week to check (None counts as incomplete).

    Returns:
        True if the week has exactly ACHIEVEMENTS_PER_WEEK achievements and
        each has a positive achievement id, a positive game id and a
        non-placeholder title.
    """
    if week is None or len(week.achievements) != ACHIEVEMENTS_PER_WEEK:
        return False
    return all(
        a.achievement_id > 0
        and a.game_id > 0
        and a.achievement_title.strip() not in PLACEHOLDER_TITLES
        for a in week.achievements
    )


def is_document_stale(event: Event, now: datetime) -> bool:
    """A document is stale when its last known week has already ended.

    A document without weeks is stale as well, as is one whose last end date
    cannot be parsed.
    """
    if not event.weeks:
        return True

    last = max(event.weeks, key=lambda w: w.week_number)
    try:
        end = parse_iso_datetime(last.end_date)
    except ValueError:
        logger.warning(
            "week_end_date_unparseable", week=last.week_number, end_date=last.end_date
        )
        return True
    return end < now
