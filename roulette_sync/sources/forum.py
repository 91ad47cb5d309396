from bs4 import BeautifulSoup, NavigableString, Tag

from roulette_sync.exceptions import ExtractionError
from roulette_sync.models import Candidate
from roulette_sync.scraper import Scraper
from roulette_sync.sources.base_source import (
    WEEK_LABEL_RE,
    CandidateSource,
    CandidatesByWeek,
    achievement_link,
    in_link,
    keep_longest,
)

POST_SELECTOR = '.post, .comment, article, [class*="post"]'


def _outermost(elements: list[Tag]) -> list[Tag]:
    """Drops matches nested inside another match (e.g. .post-body in .post)."""
    matched = {id(e) for e in elements}
    return [e for e in elements if not any(id(p) in matched for p in e.parents)]


def _split_post(post: Tag, source: str) -> dict[int, list[Candidate]]:
    """Walks a post in document order, filing links under the last week label."""
    per_week: dict[int, list[Candidate]] = {}
    current_week: int | None = None

    for node in post.descendants:
        if isinstance(node, NavigableString):
            if in_link(node):
                continue
            labels = WEEK_LABEL_RE.findall(str(node))
            if labels:
                current_week = int(labels[-1])
        elif isinstance(node, Tag) and node.name == "a" and current_week:
            candidate = achievement_link(node, source)
            if candidate is not None:
                per_week.setdefault(current_week, []).append(candidate)

    return per_week


def parse_forum_page(html: str, source: str = "forum") -> CandidatesByWeek:
    """Extracts week-labelled achievement links from the forum topic.

    Organisers announce each week in a post ("Week 5: ..."), sometimes
    several weeks per post. Links before the first label are ignored.

    Args:
        html: The forum topic HTML.
        source: Tag recorded on every candidate.

    Returns:
        A mapping of week number to candidates.
    """
    soup = BeautifulSoup(html, "lxml")
    by_week: CandidatesByWeek = {}

    for post in _outermost(soup.select(POST_SELECTOR)):
        for week, found in _split_post(post, source).items():
            keep_longest(by_week, week, found)

    return by_week


class ForumSource(CandidateSource):
    """Candidates from the event's announcement topic on the forum."""

    name = "forum"

    def __init__(self, url: str, scraper: Scraper | None = None):
        self.url = url
        self.scraper = scraper or Scraper()

    def _extract(self) -> CandidatesByWeek:
        response = self.scraper.get(self.url, snapshot_key=self.name)
        if not response:
            raise ExtractionError(
                "Forum topic could not be fetched", source=self.name, url=self.url
            )
        return parse_forum_page(response.text, self.name)
