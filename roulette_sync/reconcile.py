from collections.abc import Collection, Mapping, Sequence

import structlog

from .models import ACHIEVEMENTS_PER_WEEK, Candidate

logger = structlog.get_logger(__name__)

SourceResult = tuple[str, Mapping[int, Sequence[Candidate]]]


def reconcile(
    per_source: Sequence[SourceResult],
    weeks: Collection[int] | None = None,
    slots: int = ACHIEVEMENTS_PER_WEEK,
) -> dict[int, list[Candidate]]:
    """Merges per-week candidate lists from several sources.

    For each week, every source's list is cut to its first `slots` entries
    (discovery order is slot order) and the longest list wins. On a tie the
    source listed first wins. The merge is best-effort: enrichment and the
    completeness check decide what is actually kept.

    Args:
        per_source: (source name, week -> candidates) pairs in priority order.
        weeks: If given, only these week numbers are reconciled.
        slots: Maximum number of candidates kept per week.

    Returns:
        A mapping of week number to the selected candidates, by week number.
    """
    merged: dict[int, list[Candidate]] = {}
    chosen_from: dict[int, str] = {}

    for source_name, by_week in per_source:
        for week_number, candidates in by_week.items():
            if weeks is not None and week_number not in weeks:
                continue
            trimmed = list(candidates[:slots])
            if not trimmed:
                continue
            current = merged.get(week_number)
            if current is None or len(trimmed) > len(current):
                merged[week_number] = trimmed
                chosen_from[week_number] = source_name

    for week_number in sorted(merged):
        logger.debug(
            "week_reconciled",
            week=week_number,
            source=chosen_from[week_number],
            candidates=[c.achievement_id for c in merged[week_number]],
        )

    return dict(sorted(merged.items()))
