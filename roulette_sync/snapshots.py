import re
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class PageSnapshots:
    """Keeps the most recent HTML of every scraped page on disk.

    Files are stored at: {base_dir}/{key}.html. They exist only to debug
    extraction when a page changes layout or serves a challenge.
    """

    def __init__(self, base_dir: str | Path = "snapshots") -> None:
        """Initialize the snapshot store.

        Args:
            base_dir: Directory for snapshot files (default: "snapshots").
        """
        self.base_dir = Path(base_dir)

    def path_for(self, key: str) -> Path:
        """Compute the snapshot file path for a key (e.g. "event_page")."""
        safe = _UNSAFE_CHARS.sub("_", key).strip("._") or "page"
        return self.base_dir / f"{safe}.html"

    def save(self, key: str, html: str) -> None:
        """Write a snapshot. Failures are logged, never raised."""
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(html, encoding="utf-8")
            logger.debug("snapshot_saved", path=str(path), size=len(html))
        except OSError as e:
            logger.warning("snapshot_write_failed", path=str(path), error=str(e))
