from typing import Any

import requests
import structlog
from requests.exceptions import RequestException

from .config import Credentials
from .exceptions import EnrichmentTransient
from .rate_limit import RateLimiter, shared_rate_limiter

logger = structlog.get_logger(__name__)

DEFAULT_API_BASE = "https://retroachievements.org/API"


class RetroAchievementsClient:
    """Thin read-only client for the RetroAchievements web API.

    Every request, retries included, waits on the rate limiter first.
    Failures surface as EnrichmentTransient; interpreting empty payloads
    is left to the caller.
    """

    def __init__(
        self,
        credentials: Credentials,
        rate_limiter: RateLimiter | None = None,
        base_url: str = DEFAULT_API_BASE,
        session: requests.Session | None = None,
        retries: int = 2,
        timeout: float = 30.0,
    ):
        """Initializes the client.

        Args:
            credentials: Username and API key sent with every request.
            rate_limiter: Limiter to share; defaults to the process-wide one.
            base_url: API base URL.
            session: Optional requests session (tests pass a mock).
            retries: Attempts per request before giving up.
            timeout: Per-request timeout in seconds.
        """
        self.credentials = credentials
        self.rate_limiter = rate_limiter or shared_rate_limiter()
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.retries = max(1, retries)
        self.timeout = timeout

    def get_achievement_unlocks(self, achievement_id: int) -> dict[str, Any]:
        """Looks up an achievement's owning game and console."""
        return self._get(
            "API_GetAchievementUnlocks.php", {"a": achievement_id, "c": 1}
        )

    def get_game(self, game_id: int) -> dict[str, Any]:
        """Fetches a game summary (title, console, images)."""
        return self._get("API_GetGame.php", {"i": game_id})

    def get_game_extended(self, game_id: int) -> dict[str, Any]:
        """Fetches a game together with its full achievement list."""
        return self._get("API_GetGameExtended.php", {"i": game_id})

    def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"
        query = {"z": self.credentials.username, "y": self.credentials.api_key}
        query.update(params)

        last_error: Exception | None = None
        status_code: int | None = None
        for attempt in range(self.retries):
            self.rate_limiter.wait()
            status_code = None
            try:
                if attempt > 0:
                    logger.info(
                        "api_request_retry",
                        endpoint=endpoint,
                        attempt=attempt + 1,
                        retries=self.retries,
                    )
                else:
                    logger.debug("api_request", endpoint=endpoint, params=params)

                response = self.session.get(url, params=query, timeout=self.timeout)
                status_code = response.status_code
                response.raise_for_status()
                data = response.json()
            except (RequestException, ValueError) as e:
                # Never log the query string: it carries the API key.
                logger.warning(
                    "api_request_failed",
                    endpoint=endpoint,
                    status_code=status_code,
                    error=type(e).__name__,
                )
                last_error = e
                if attempt < self.retries - 1:
                    self.rate_limiter.sleep(2**attempt)
                continue

            if not isinstance(data, dict):
                # The API answers unknown ids with an empty list.
                return {}
            return data

        raise EnrichmentTransient(
            f"{endpoint} failed after {self.retries} attempts: "
            f"{type(last_error).__name__}",
            endpoint=endpoint,
            status_code=status_code,
        )
