from bs4 import BeautifulSoup

from roulette_sync.exceptions import ExtractionError
from roulette_sync.scraper import Scraper
from roulette_sync.sources.base_source import (
    WEEK_LABEL_RE,
    CandidateSource,
    CandidatesByWeek,
    achievement_link,
    keep_longest,
    label_text,
)

# Containers that may hold one week's achievements.
WEEK_CONTAINER_SELECTOR = '[class*="week"], [data-week], table tr, .card'


def parse_event_page(html: str, source: str = "event_page") -> CandidatesByWeek:
    """Extracts week-labelled achievement links from the event page.

    Any container whose text outside links mentions "Week N" contributes the
    achievement links inside it to week N. Containers labelled with more than
    one week are skipped. Containers nest, so the same week is usually seen
    several times; the longest list found wins.

    Args:
        html: The event page HTML.
        source: Tag recorded on every candidate.

    Returns:
        A mapping of week number to candidates.
    """
    soup = BeautifulSoup(html, "lxml")
    by_week: CandidatesByWeek = {}

    for container in soup.select(WEEK_CONTAINER_SELECTOR):
        labels = {int(n) for n in WEEK_LABEL_RE.findall(label_text(container))}
        # Wrappers spanning several weeks would merge their links.
        if len(labels) != 1:
            continue
        week = labels.pop()
        if week < 1:
            continue

        found = [
            c
            for c in (achievement_link(a, source) for a in container.find_all("a"))
            if c is not None
        ]
        keep_longest(by_week, week, found)

    return by_week


class EventPageSource(CandidateSource):
    """Candidates from the public event page."""

    name = "event_page"

    def __init__(self, url: str, scraper: Scraper | None = None):
        self.url = url
        self.scraper = scraper or Scraper()

    def _extract(self) -> CandidatesByWeek:
        response = self.scraper.get(self.url, snapshot_key=self.name)
        if not response:
            raise ExtractionError(
                "Event page could not be fetched", source=self.name, url=self.url
            )
        return parse_event_page(response.text, self.name)
