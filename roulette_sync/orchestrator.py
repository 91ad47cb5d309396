import copy
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from .completion import is_document_stale, is_week_complete
from .enrichment import EnrichmentClient
from .exceptions import EnrichmentError
from .models import ACHIEVEMENTS_PER_WEEK, Achievement, Candidate, Event, Week
from .reconcile import SourceResult, reconcile
from .schedule import WeekSchedule
from .sources.base_source import CandidateSource
from .storage import Storage

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_STALE = 1


@dataclass
class SyncResult:
    """Outcome of one run, used for logging and the process exit status."""

    current_week: int
    pending_weeks: list[int] = field(default_factory=list)
    updated_weeks: list[int] = field(default_factory=list)
    completed_weeks: list[int] = field(default_factory=list)
    stale_before: bool = False
    stale_after: bool = False
    saved: bool = False
    previous_weeks: list[Week] = field(default_factory=list)
    event: Event | None = None

    @property
    def exit_code(self) -> int:
        return EXIT_STALE if self.stale_after else EXIT_OK


class SyncOrchestrator:
    """Drives one synchronization run end to end.

    load -> pending weeks -> extract -> reconcile -> enrich -> merge -> save.
    Weeks that are already complete are never touched.
    """

    def __init__(
        self,
        storage: Storage,
        sources: Sequence[CandidateSource],
        enrichment: EnrichmentClient,
        schedule: WeekSchedule,
        total_weeks: int | None = None,
        slots: int = ACHIEVEMENTS_PER_WEEK,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        """Initializes the orchestrator.

        Args:
            storage: Document store.
            sources: Candidate sources in priority order (ties favour earlier).
            enrichment: Resolver for candidate ids.
            schedule: Week schedule of the event.
            total_weeks: Last week of the event; later weeks are ignored.
            slots: Achievements per week.
            clock: Returns the current time; replaced in tests.
        """
        self.storage = storage
        self.sources = list(sources)
        self.enrichment = enrichment
        self.schedule = schedule
        self.total_weeks = total_weeks
        self.slots = slots
        self.clock = clock

    def pending_weeks(self, event: Event, current_week: int) -> list[int]:
        """Weeks up to `current_week` whose stored data is not complete."""
        return [
            w for w in range(1, current_week + 1)
            if not is_week_complete(event.get_week(w))
        ]

    def collect_candidates(self, weeks: list[int]) -> dict[int, list[Candidate]]:
        """Runs every source and reconciles their results for `weeks`."""
        results: list[SourceResult] = []
        for source in self.sources:
            try:
                found = source.extract_candidates()
            except Exception as e:
                logger.error("source_crashed", source=source.name, error=str(e))
                found = {}
            results.append((source.name, found))

        succeeded = [name for name, found in results if found]
        if not succeeded:
            logger.warning("all_sources_failed", sources=[s.name for s in self.sources])
            return {}

        logger.info("sources_succeeded", sources=succeeded)
        return reconcile(results, weeks=set(weeks), slots=self.slots)

    def build_week(self, week_number: int, candidates: list[Candidate]) -> Week:
        """Enriches a week's candidates, degrading failures to placeholders."""
        achievements: list[Achievement] = []
        for candidate in candidates[: self.slots]:
            try:
                achievement = self.enrichment.resolve_achievement(
                    candidate.achievement_id
                )
            except EnrichmentError as e:
                logger.warning(
                    "enrichment_failed",
                    week=week_number,
                    achievement_id=candidate.achievement_id,
                    error_type=type(e).__name__,
                    message=e.message,
                )
                achievement = Achievement.placeholder(candidate)
            achievements.append(achievement)

        start, end = self.schedule.week_date_strings(week_number)
        return Week(
            week_number=week_number,
            start_date=start,
            end_date=end,
            achievements=achievements,
        )

    def run(self, now: datetime | None = None) -> SyncResult:
        """Performs one synchronization run.

        Args:
            now: Reference time (defaults to the injected clock).

        Returns:
            The run summary; its exit_code is non-zero when the document is
            still stale afterwards.
        """
        now = now or self.clock()
        current_week = self.schedule.current_week_number(now)
        if self.total_weeks is not None:
            current_week = min(current_week, self.total_weeks)

        event = self.storage.load()
        result = SyncResult(
            current_week=current_week,
            stale_before=is_document_stale(event, now),
            previous_weeks=copy.deepcopy(event.weeks),
            event=event,
        )
        logger.info(
            "sync_started",
            current_week=current_week,
            weeks_in_document=len(event.weeks),
            stale=result.stale_before,
        )

        result.pending_weeks = self.pending_weeks(event, current_week)
        if not result.pending_weeks:
            logger.info("all_weeks_up_to_date")
            return result

        logger.info("weeks_pending", weeks=result.pending_weeks)
        candidates = self.collect_candidates(result.pending_weeks)

        for week_number in result.pending_weeks:
            week_candidates = candidates.get(week_number)
            if not week_candidates:
                logger.info("week_without_candidates", week=week_number)
                continue

            week = self.build_week(week_number, week_candidates)
            event.upsert_week(week)
            result.updated_weeks.append(week_number)

            complete = is_week_complete(week)
            if complete:
                result.completed_weeks.append(week_number)
            logger.info(
                "week_updated",
                week=week_number,
                achievements=len(week.achievements),
                complete=complete,
            )

        if result.updated_weeks:
            result.saved = self.storage.save(event)
        result.stale_after = is_document_stale(event, now)

        if result.stale_after:
            logger.error(
                "document_still_stale",
                pending=result.pending_weeks,
                updated=result.updated_weeks,
            )
        elif result.stale_before:
            logger.info("document_refreshed", updated=result.updated_weeks)

        return result
