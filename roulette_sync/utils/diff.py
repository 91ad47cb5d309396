import datetime

from ..completion import is_week_complete
from ..models import Week


def calculate_stats(
    old_weeks: list[Week],
    new_weeks: list[Week],
    event_name: str = "RA Roulette 2026",
) -> str:
    """Summarises the difference between two versions of the weeks list.

    Args:
        old_weeks: Weeks of the document as loaded.
        new_weeks: Weeks of the document as saved.
        event_name: Name used in the first line.

    Returns:
        A commit message string summarizing the changes.
    """
    old_map = {w.week_number: w.to_dict() for w in old_weeks}
    new_map = {w.week_number: w.to_dict() for w in new_weeks}

    new_ids = set(new_map) - set(old_map)
    changed_count = sum(
        1 for n in set(old_map) & set(new_map) if old_map[n] != new_map[n]
    )
    complete = sum(1 for w in new_weeks if is_week_complete(w))

    today = datetime.date.today().isoformat()
    msg = f"Update {event_name}: {today}\n"
    msg += (
        f"New: {len(new_ids)}, Changed: {changed_count}, "
        f"Complete: {complete}/{len(new_weeks)}"
    )

    incomplete = sorted(w.week_number for w in new_weeks if not is_week_complete(w))
    if incomplete:
        msg += "\nIncomplete weeks: " + ", ".join(str(n) for n in incomplete)

    return msg
