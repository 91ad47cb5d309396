from typing import Any

import structlog

from roulette_sync.api_client import RetroAchievementsClient
from roulette_sync.enrichment import iter_game_achievements
from roulette_sync.exceptions import EnrichmentTransient, ExtractionError
from roulette_sync.models import ACHIEVEMENTS_PER_WEEK, Candidate
from roulette_sync.sources.base_source import CandidateSource, CandidatesByWeek

logger = structlog.get_logger(__name__)

UNPUBLISHED_TITLE = "Placeholder"


def _display_order(achievement: dict[str, Any]) -> int:
    try:
        return int(achievement.get("DisplayOrder"))
    except (TypeError, ValueError):
        return 0


def split_event_achievements(
    game: dict[str, Any],
    source: str = "event_game",
    per_week: int = ACHIEVEMENTS_PER_WEEK,
) -> CandidatesByWeek:
    """Groups the event game's achievements into weeks by display order.

    The event game mirrors the weekly picks: display orders 1-3 are week 1,
    4-6 week 2, and so on. Slots the organisers have not revealed yet are
    titled "Placeholder" and are skipped.

    Args:
        game: A GetGameExtended payload for the event game.
        source: Tag recorded on every candidate.
        per_week: Achievements per week.

    Returns:
        A mapping of week number to candidates in display order.
    """
    by_week: CandidatesByWeek = {}
    ordered = sorted(iter_game_achievements(game), key=_display_order)

    for achievement in ordered:
        order = _display_order(achievement)
        title = str(achievement.get("Title") or "").strip()
        if order < 1 or title == UNPUBLISHED_TITLE:
            continue
        try:
            achievement_id = int(achievement.get("ID"))
        except (TypeError, ValueError):
            continue

        week = (order - 1) // per_week + 1
        by_week.setdefault(week, []).append(
            Candidate(achievement_id=achievement_id, display_text=title, source=source)
        )

    return by_week


class EventGameSource(CandidateSource):
    """Candidates from the event's own achievement set on the remote API.

    Not a scraped page: it goes through the rate-limited API client, and
    unlike the pages it has no anti-bot protection.
    """

    name = "event_game"

    def __init__(self, api: RetroAchievementsClient, event_game_id: int):
        self.api = api
        self.event_game_id = event_game_id

    def _extract(self) -> CandidatesByWeek:
        try:
            game = self.api.get_game_extended(self.event_game_id)
        except EnrichmentTransient as e:
            raise ExtractionError(
                f"Event game {self.event_game_id} could not be fetched",
                source=self.name,
                error_data=dict(e.error_data),
            ) from e

        logger.debug(
            "event_game_loaded",
            game_id=self.event_game_id,
            title=game.get("Title"),
            achievements=len(iter_game_achievements(game)),
        )
        return split_event_achievements(game, self.name)
