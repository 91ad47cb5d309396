import re
from abc import ABC, abstractmethod

import structlog
from bs4 import Tag
from bs4.element import PageElement

from roulette_sync.exceptions import ExtractionError
from roulette_sync.models import Candidate

logger = structlog.get_logger(__name__)

ACHIEVEMENT_HREF_RE = re.compile(r"/achievement/(\d+)")
WEEK_LABEL_RE = re.compile(r"Week\s*(\d+)", re.IGNORECASE)

# Link text longer than this is page noise, not an achievement title.
MAX_DISPLAY_TEXT = 100

CandidatesByWeek = dict[int, list[Candidate]]


def in_link(node: PageElement) -> bool:
    """True for page content nested inside an <a> element."""
    return node.find_parent("a") is not None


def label_text(tag: Tag) -> str:
    """Text of `tag` outside its links.

    Achievement titles may mention a week ("Beat the Week 2 boss"), so link
    text never counts as a week label.
    """
    return " ".join(s for s in tag.find_all(string=True) if not in_link(s))


def achievement_link(link: Tag, source: str) -> Candidate | None:
    """Turns an <a href=".../achievement/<id>"> into a Candidate."""
    href = link.get("href") or ""
    if isinstance(href, list):
        href = " ".join(href)
    match = ACHIEVEMENT_HREF_RE.search(href)
    if not match:
        return None
    text = link.get_text(" ", strip=True)[:MAX_DISPLAY_TEXT]
    return Candidate(achievement_id=int(match.group(1)), display_text=text, source=source)


def dedupe(candidates: list[Candidate]) -> list[Candidate]:
    """Drops repeated ids, keeping the first occurrence and its order.

    A repeat that carries link text replaces the text of an earlier bare
    link (e.g. an icon link followed by the titled link).
    """
    by_id: dict[int, Candidate] = {}
    for c in candidates:
        existing = by_id.get(c.achievement_id)
        if existing is None:
            by_id[c.achievement_id] = c
        elif not existing.display_text and c.display_text:
            by_id[c.achievement_id] = Candidate(
                existing.achievement_id, c.display_text, existing.source
            )
    return list(by_id.values())


def keep_longest(by_week: CandidatesByWeek, week: int, found: list[Candidate]) -> None:
    """Records `found` for `week` unless an earlier list is at least as long."""
    found = dedupe(found)
    if not found:
        return
    if len(found) > len(by_week.get(week, [])):
        by_week[week] = found


class CandidateSource(ABC):
    """A place where weekly achievement candidates can be discovered.

    Sources are unreliable: a source that fails yields an empty mapping
    rather than raising, and its week labels are only hints.
    """

    name: str = "source"

    @abstractmethod
    def _extract(self) -> CandidatesByWeek:
        """Fetches and parses the source.

        Raises:
            ExtractionError: If the source could not be fetched at all.
        """

    def extract_candidates(self) -> CandidatesByWeek:
        """Returns week number -> candidates in discovery order.

        Returns:
            The candidates found, or an empty mapping on total failure.
        """
        try:
            by_week = self._extract()
        except ExtractionError as e:
            logger.warning("extraction_failed", source=self.name, **e.to_dict())
            return {}

        if not by_week:
            logger.warning("extraction_empty", source=self.name)
            return {}

        logger.info(
            "candidates_extracted",
            source=self.name,
            weeks={w: len(c) for w, c in sorted(by_week.items())},
        )
        return dict(sorted(by_week.items()))
