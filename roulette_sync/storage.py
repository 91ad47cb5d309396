import contextlib
import json
import os
import tempfile
from pathlib import Path

import structlog

from .config import EventConfig
from .exceptions import PersistenceCorrupt
from .models import Event

logger = structlog.get_logger(__name__)


def default_event(config: EventConfig | None = None) -> Event:
    """Builds the empty document used when nothing valid is on disk."""
    config = config or EventConfig()
    return Event(
        event_name=config.event_name,
        event_id=config.event_id,
        badge_threshold=config.badge_threshold,
        max_points=config.max_points,
        start_date=config.start_date,
        end_date=config.end_date,
        weeks=[],
    )


def serialize(event: Event) -> str:
    """Renders the document exactly as it is written to disk."""
    return json.dumps(event.to_dict(), indent=2, ensure_ascii=False) + "\n"


class Storage:
    """Loads and atomically saves the event document."""

    def __init__(self, path: str | Path, config: EventConfig | None = None):
        """Initializes the Storage instance.

        Args:
            path: Path of the JSON document (e.g. 'roulette2026.json').
            config: Event configuration used to build the default skeleton.
        """
        self.path = Path(path)
        self.config = config or EventConfig()

    def _read(self) -> Event:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return Event.from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise PersistenceCorrupt(
                f"Cannot parse {self.path}: {e}", path=str(self.path)
            ) from e

    def load(self) -> Event:
        """Loads the document, falling back to the default skeleton.

        A missing file is normal on the first run. An unreadable or corrupt
        file is logged at error level; its weeks are lost for this run.

        Returns:
            The loaded (or default) event. Never raises.
        """
        if not self.path.exists():
            logger.info("document_missing", path=str(self.path))
            return default_event(self.config)

        try:
            event = self._read()
        except PersistenceCorrupt as e:
            logger.error("document_corrupt", **e.to_dict())
            return default_event(self.config)
        except OSError as e:
            logger.error("document_load_failed", path=str(self.path), error=str(e))
            return default_event(self.config)

        logger.info("document_loaded", path=str(self.path), weeks=len(event.weeks))
        return event

    def save(self, event: Event) -> bool:
        """Writes the document if its content changed.

        The new content goes to a temporary file in the same directory which
        then replaces the target, so readers never see a partial document.

        Args:
            event: The document to persist.

        Returns:
            True if the file was written, False if it was already up to date.
        """
        event.sort_weeks()
        content = serialize(event)

        if self.path.exists():
            try:
                if self.path.read_text(encoding="utf-8") == content:
                    logger.info("document_unchanged", path=str(self.path))
                    return False
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(
                    "document_compare_failed", path=str(self.path), error=str(e)
                )

        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600 files; the document is published as-is.
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.remove(tmp_path)
            raise

        logger.info("document_saved", path=str(self.path), weeks=len(event.weeks))
        return True
