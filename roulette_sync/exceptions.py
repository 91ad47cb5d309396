"""Exception hierarchy for the roulette sync job.

Every error carries structured context and a correction hint so that the
scheduled job's log tells the operator what to fix.
"""

from typing import Any


class SyncError(Exception):
    """Base exception for all sync errors.

    Attributes:
        message: Human-readable error message.
        error_data: Structured error information.
        suggestion: Hint for how to resolve the error.
    """

    def __init__(
        self,
        message: str,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize the sync error.

        Args:
            message: Human-readable error message.
            error_data: Structured context (URLs, IDs, fields, etc.).
            suggestion: Actionable correction hint.
        """
        super().__init__(message)
        self.message = message
        self.error_data = error_data or {}
        self.suggestion = suggestion

    def __str__(self) -> str:
        """Return formatted error message with suggestion if available."""
        base = self.message
        if self.suggestion:
            return f"{base}\nSuggestion: {self.suggestion}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to structured dictionary for logging.

        Returns:
            Dictionary with error type, message, data, and suggestion.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_data": self.error_data,
            "suggestion": self.suggestion,
        }


class ConfigurationError(SyncError):
    """Missing credentials or an invalid configuration file.

    Always fatal and raised before any network activity.
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        data = error_data or {}
        data.update({"parameter": parameter})

        default_suggestion = suggestion or (
            f"Set '{parameter}' in the environment or the config file."
            if parameter
            else "Check the command-line arguments and configuration."
        )

        super().__init__(message, data, default_suggestion)
        self.parameter = parameter


class ExtractionError(SyncError):
    """A candidate source produced nothing usable.

    Recoverable: the source contributes an empty mapping and the run
    continues with the remaining sources.
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        url: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        data = error_data or {}
        data.update({"source": source, "url": url})

        default_suggestion = suggestion or (
            "The page may be blocked or its structure may have changed. "
            "Inspect the saved page snapshot if --snapshot-dir was used."
        )

        super().__init__(message, data, default_suggestion)
        self.source = source
        self.url = url


class EnrichmentError(SyncError):
    """Base class for failures resolving one achievement id."""

    def __init__(
        self,
        message: str,
        achievement_id: int | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        data = error_data or {}
        data.update({"achievement_id": achievement_id})
        super().__init__(message, data, suggestion)
        self.achievement_id = achievement_id


class EnrichmentNotFound(EnrichmentError):
    """The owning game, or the id within the game's list, could not be found."""

    def __init__(
        self,
        message: str,
        achievement_id: int | None = None,
        game_id: int | None = None,
        error_data: dict[str, Any] | None = None,
    ):
        data = error_data or {}
        data.update({"game_id": game_id})
        super().__init__(
            message,
            achievement_id=achievement_id,
            error_data=data,
            suggestion=(
                "The scraped id may be wrong or not yet published. "
                "The slot stays a placeholder until a later run resolves it."
            ),
        )
        self.game_id = game_id


class EnrichmentTransient(EnrichmentError):
    """Network/HTTP failure talking to the remote API."""

    def __init__(
        self,
        message: str,
        achievement_id: int | None = None,
        endpoint: str | None = None,
        status_code: int | None = None,
        error_data: dict[str, Any] | None = None,
    ):
        data = error_data or {}
        data.update({"endpoint": endpoint, "status_code": status_code})
        super().__init__(
            message,
            achievement_id=achievement_id,
            error_data=data,
            suggestion="Temporary API failure. The next scheduled run will retry.",
        )
        self.endpoint = endpoint
        self.status_code = status_code


class PersistenceCorrupt(SyncError):
    """The persisted document exists but cannot be parsed."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        error_data: dict[str, Any] | None = None,
    ):
        data = error_data or {}
        data.update({"path": path})
        super().__init__(
            message,
            data,
            "Restore the document from version control. Until then the job "
            "rebuilds it from the default skeleton.",
        )
        self.path = path
