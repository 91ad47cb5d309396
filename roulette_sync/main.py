import logging
import sys
from pathlib import Path

import click
import structlog

from roulette_sync.api_client import RetroAchievementsClient
from roulette_sync.config import (
    DEFAULT_OUTPUT,
    EventConfig,
    load_credentials,
    load_event_config,
)
from roulette_sync.enrichment import EnrichmentClient
from roulette_sync.exceptions import ConfigurationError
from roulette_sync.orchestrator import SyncOrchestrator
from roulette_sync.rate_limit import shared_rate_limiter
from roulette_sync.schedule import WeekSchedule
from roulette_sync.scraper import Scraper
from roulette_sync.snapshots import PageSnapshots
from roulette_sync.sources import (
    CandidateSource,
    EventGameSource,
    EventPageSource,
    ForumSource,
)
from roulette_sync.storage import Storage
from roulette_sync.utils.diff import calculate_stats

logger = structlog.get_logger(__name__)

EXIT_CONFIG_ERROR = 2

SOURCE_NAMES = ("event_page", "forum", "event_game")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def build_sources(
    names: list[str],
    config: EventConfig,
    api: RetroAchievementsClient,
    scraper: Scraper,
) -> list[CandidateSource]:
    """Instantiates the enabled sources in the order given."""
    sources: list[CandidateSource] = []
    for name in names:
        if name == "event_page":
            sources.append(EventPageSource(config.event_url, scraper))
        elif name == "forum":
            sources.append(ForumSource(config.forum_url, scraper))
        elif name == "event_game":
            sources.append(EventGameSource(api, config.event_game_id))
        else:
            raise ConfigurationError(f"Unknown source: {name}", parameter="sources")
    return sources


@click.command()
@click.option(
    "--output",
    default=DEFAULT_OUTPUT,
    show_default=True,
    help="Event JSON document to update",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="YAML file overriding event settings",
)
@click.option(
    "--source",
    "source_names",
    multiple=True,
    type=click.Choice(SOURCE_NAMES),
    help="Enable only this source (repeatable, default: all in config order)",
)
@click.option(
    "--snapshot-dir",
    type=click.Path(file_okay=False),
    help="Save every fetched page here for debugging",
)
@click.option(
    "--summary-file",
    type=click.Path(dir_okay=False),
    help="Write a commit message here when the document changed",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def main(
    output: str,
    config_path: str | None,
    source_names: tuple[str, ...],
    snapshot_dir: str | None,
    summary_file: str | None,
    verbose: bool,
) -> None:
    """RA Roulette weekly achievement sync."""
    _setup_logging(verbose)

    try:
        credentials = load_credentials()
        config = load_event_config(config_path)
    except ConfigurationError as e:
        logger.error("configuration_error", **e.to_dict())
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    logger.info(
        "sync_configured",
        event_name=config.event_name,
        username=credentials.username,
        api_key=credentials.masked_key,
        output=output,
    )

    limiter = shared_rate_limiter()
    limiter.min_interval = config.api_min_interval
    api = RetroAchievementsClient(credentials, limiter, base_url=config.api_base_url)
    scraper = Scraper(snapshots=PageSnapshots(snapshot_dir) if snapshot_dir else None)

    try:
        sources = build_sources(
            list(source_names) or config.sources, config, api, scraper
        )
    except ConfigurationError as e:
        logger.error("configuration_error", **e.to_dict())
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    orchestrator = SyncOrchestrator(
        storage=Storage(output, config),
        sources=sources,
        enrichment=EnrichmentClient(api),
        schedule=WeekSchedule(config.event_start, config.week_duration),
        total_weeks=config.total_weeks,
    )
    result = orchestrator.run()

    if result.saved and summary_file and result.event is not None:
        message = calculate_stats(
            result.previous_weeks, result.event.weeks, config.event_name
        )
        Path(summary_file).write_text(message + "\n", encoding="utf-8")
        logger.info("summary_written", path=summary_file)

    logger.info(
        "sync_finished",
        current_week=result.current_week,
        updated=result.updated_weeks,
        completed=result.completed_weeks,
        saved=result.saved,
        stale=result.stale_after,
        exit_code=result.exit_code,
    )
    sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
