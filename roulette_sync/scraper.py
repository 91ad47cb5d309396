import random
import time

import cloudscraper
import structlog
from requests import Response
from requests.exceptions import HTTPError, RequestException

from .snapshots import PageSnapshots

logger = structlog.get_logger(__name__)

# Markers of an anti-bot interstitial served instead of the real page.
CHALLENGE_MARKERS = ("Just a moment", "Checking your browser")

# Client errors that will not go away on retry.
NON_RETRYABLE_STATUS = {400, 401, 403, 404, 410}


def is_challenge_page(html: str) -> bool:
    return any(marker in html for marker in CHALLENGE_MARKERS)


class Scraper:
    """Fetches HTML pages politely through a Cloudflare-aware session."""

    def __init__(
        self,
        delay_range: tuple[float, float] = (1.0, 3.0),
        snapshots: PageSnapshots | None = None,
    ):
        """Initialize the Scraper with cloudscraper to pass Cloudflare.

        Args:
            delay_range: (min, max) seconds to sleep between requests.
            snapshots: Optional store that receives every fetched page.
        """
        self.scraper = cloudscraper.create_scraper()
        self.delay_range = delay_range
        self.snapshots = snapshots
        self.last_request_time: float | None = None

        self.scraper.headers.update({"Accept-Language": "en-US,en;q=0.9"})

    def _wait_for_rate_limit(self) -> None:
        """Sleeps for a random amount of time to respect rate limits."""
        if self.last_request_time is not None:
            elapsed = time.monotonic() - self.last_request_time
            wait_time = random.uniform(*self.delay_range)
            if elapsed < wait_time:
                sleep_time = wait_time - elapsed
                logger.debug("rate_limit_sleep", seconds=round(sleep_time, 2))
                time.sleep(sleep_time)
        self.last_request_time = time.monotonic()

    def get(
        self, url: str, retries: int = 3, snapshot_key: str | None = None
    ) -> Response | None:
        """Performs a GET request with rate limiting and retries.

        Args:
            url: Target URL.
            retries: Number of attempts.
            snapshot_key: If set and snapshots are enabled, the body is saved
                under this key (challenge pages included).

        Returns:
            The response, or None if every attempt failed or the site served
            a challenge page.
        """
        for attempt in range(retries):
            self._wait_for_rate_limit()
            try:
                if attempt > 0:
                    logger.info(
                        "fetching_url", url=url, attempt=attempt + 1, retries=retries
                    )
                else:
                    logger.info("fetching_url", url=url)

                response = self.scraper.get(url, timeout=60)
                response.raise_for_status()
            except HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                logger.warning("request_failed", url=url, status_code=status)
                if status in NON_RETRYABLE_STATUS:
                    return None
            except RequestException as e:
                logger.warning("request_failed", url=url, error=str(e))
            else:
                if self.snapshots is not None and snapshot_key:
                    self.snapshots.save(snapshot_key, response.text)
                if is_challenge_page(response.text):
                    logger.error("cloudflare_challenge", url=url)
                    return None
                return response

            if attempt < retries - 1:
                time.sleep(2**attempt)  # Exponential backoff

        logger.error("fetch_failed", url=url, attempts=retries)
        return None
