from typing import Any

import structlog

from .api_client import RetroAchievementsClient
from .exceptions import EnrichmentNotFound, EnrichmentTransient
from .models import PLACEHOLDER_BADGE, Achievement

logger = structlog.get_logger(__name__)


def iter_game_achievements(game: dict[str, Any]) -> list[dict[str, Any]]:
    """Returns a game's achievements as a list.

    The API serialises the list as an object keyed by id, or as an empty
    array when the game has none.
    """
    raw = game.get("Achievements") or {}
    if isinstance(raw, dict):
        return [a for a in raw.values() if isinstance(a, dict)]
    if isinstance(raw, list):
        return [a for a in raw if isinstance(a, dict)]
    return []


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class EnrichmentClient:
    """Resolves a scraped achievement id into a full Achievement record."""

    def __init__(self, api: RetroAchievementsClient):
        self.api = api

    def resolve_achievement(self, achievement_id: int) -> Achievement:
        """Resolves one achievement id.

        The unlocks lookup names the owning game and console but not the
        achievement's text, so the game's full achievement list is fetched to
        recover title, description and badge.

        Args:
            achievement_id: The id scraped from a page.

        Returns:
            The enriched achievement.

        Raises:
            EnrichmentNotFound: If the owning game is unknown or the id is not
                in the game's achievement list.
            EnrichmentTransient: On network/HTTP failures.
        """
        try:
            unlocks = self.api.get_achievement_unlocks(achievement_id)
            game_ref = _mapping(unlocks.get("Game"))
            game_id = _int(game_ref.get("ID"))
            if game_id <= 0:
                raise EnrichmentNotFound(
                    f"No owning game for achievement {achievement_id}",
                    achievement_id=achievement_id,
                )

            game = self.api.get_game_extended(game_id)
            match = next(
                (
                    a
                    for a in iter_game_achievements(game)
                    if _int(a.get("ID")) == achievement_id
                ),
                None,
            )
            if match is None:
                raise EnrichmentNotFound(
                    f"Achievement {achievement_id} not in game {game_id}",
                    achievement_id=achievement_id,
                    game_id=game_id,
                )

            image_icon = game.get("ImageIcon") or ""
            if not image_icon:
                image_icon = self.api.get_game(game_id).get("ImageIcon") or ""
        except EnrichmentTransient as e:
            e.achievement_id = achievement_id
            e.error_data["achievement_id"] = achievement_id
            raise

        console = _mapping(unlocks.get("Console"))
        achievement = Achievement(
            achievement_id=achievement_id,
            achievement_title=str(match.get("Title") or ""),
            achievement_description=str(match.get("Description") or ""),
            achievement_badge_name=str(match.get("BadgeName") or PLACEHOLDER_BADGE),
            game_id=game_id,
            game_title=str(game_ref.get("Title") or game.get("Title") or ""),
            game_image_icon=str(image_icon),
            console_id=_int(console.get("ID") or game.get("ConsoleID")),
            console_name=str(console.get("Title") or game.get("ConsoleName") or ""),
        )
        logger.info(
            "achievement_resolved",
            achievement_id=achievement_id,
            title=achievement.achievement_title,
            game=achievement.game_title,
            console=achievement.console_name,
        )
        return achievement
