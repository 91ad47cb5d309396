from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from roulette_sync.config import EventConfig
from roulette_sync.exceptions import ConfigurationError
from roulette_sync.main import build_sources, main
from roulette_sync.models import Week
from roulette_sync.orchestrator import SyncResult
from roulette_sync.storage import default_event


@pytest.fixture
def credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RA_USERNAME", "roulette_bot")
    monkeypatch.setenv("RA_API_KEY", "abcdef123456")


@pytest.fixture
def orchestrator_cls():
    with (
        patch("roulette_sync.main.SyncOrchestrator") as orchestrator_cls,
        patch("roulette_sync.main.Scraper"),
    ):
        orchestrator_cls.return_value.run.return_value = SyncResult(current_week=1)
        yield orchestrator_cls


def test_missing_credentials_exit_2(
    monkeypatch: pytest.MonkeyPatch, orchestrator_cls: MagicMock
) -> None:
    monkeypatch.delenv("RA_USERNAME", raising=False)
    monkeypatch.delenv("RA_API_KEY", raising=False)

    result = CliRunner().invoke(main, [])

    assert result.exit_code == 2
    orchestrator_cls.assert_not_called()


@pytest.mark.usefixtures("credentials")
def test_invalid_config_exit_2(tmp_path: Path, orchestrator_cls: MagicMock) -> None:
    config = tmp_path / "event.yaml"
    config.write_text("sources: [bogus]\n", encoding="utf-8")

    result = CliRunner().invoke(main, ["--config", str(config)])

    assert result.exit_code == 2
    orchestrator_cls.assert_not_called()


@pytest.mark.usefixtures("credentials")
def test_successful_run_exit_0(tmp_path: Path, orchestrator_cls: MagicMock) -> None:
    output = tmp_path / "doc.json"

    result = CliRunner().invoke(main, ["--output", str(output)])

    assert result.exit_code == 0
    kwargs = orchestrator_cls.call_args.kwargs
    assert kwargs["storage"].path == output
    assert kwargs["total_weeks"] == 52
    assert [s.name for s in kwargs["sources"]] == ["event_page", "forum", "event_game"]


@pytest.mark.usefixtures("credentials")
def test_stale_document_exit_1(orchestrator_cls: MagicMock) -> None:
    orchestrator_cls.return_value.run.return_value = SyncResult(
        current_week=3, stale_after=True
    )

    result = CliRunner().invoke(main, [])

    assert result.exit_code == 1


@pytest.mark.usefixtures("credentials")
def test_source_option_limits_sources(orchestrator_cls: MagicMock) -> None:
    result = CliRunner().invoke(main, ["--source", "forum", "--source", "event_game"])

    assert result.exit_code == 0
    sources = orchestrator_cls.call_args.kwargs["sources"]
    assert [s.name for s in sources] == ["forum", "event_game"]


@pytest.mark.usefixtures("credentials")
def test_summary_file_written_after_save(
    tmp_path: Path, orchestrator_cls: MagicMock, make_week: Callable[..., Week]
) -> None:
    event = default_event()
    event.weeks = [make_week(1)]
    orchestrator_cls.return_value.run.return_value = SyncResult(
        current_week=1, saved=True, previous_weeks=[], event=event
    )
    summary = tmp_path / "summary.txt"

    result = CliRunner().invoke(main, ["--summary-file", str(summary)])

    assert result.exit_code == 0
    lines = summary.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Update RA Roulette 2026: ")
    assert lines[1] == "New: 1, Changed: 0, Complete: 1/1"


@pytest.mark.usefixtures("credentials")
def test_summary_file_skipped_without_save(
    tmp_path: Path, orchestrator_cls: MagicMock
) -> None:
    summary = tmp_path / "summary.txt"

    CliRunner().invoke(main, ["--summary-file", str(summary)])

    assert not summary.exists()


def test_build_sources_rejects_unknown_name() -> None:
    with pytest.raises(ConfigurationError):
        build_sources(["event_page", "rss"], EventConfig(), MagicMock(), MagicMock())


@pytest.mark.usefixtures("credentials")
def test_unsafe_api_interval_exit_2(
    tmp_path: Path, orchestrator_cls: MagicMock
) -> None:
    config = tmp_path / "event.yaml"
    config.write_text("api_min_interval: 0\n", encoding="utf-8")

    result = CliRunner().invoke(main, ["--config", str(config)])

    assert result.exit_code == 2
    assert "api_min_interval" in result.output
    orchestrator_cls.assert_not_called()
