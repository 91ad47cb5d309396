import re
from datetime import UTC, datetime

_FRACTION_RE = re.compile(r"\.(\d+)")


def format_iso_millis(dt: datetime) -> str:
    """Formats a datetime as UTC ISO 8601 with milliseconds and a "Z" suffix.

    This is the format the mobile clients parse, e.g. 2026-02-07T00:00:00.000Z.

    Args:
        dt: A timezone-aware datetime (naive values are taken as UTC).

    Returns:
        The formatted string.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{dt.microsecond // 1000:03d}Z"


def parse_iso_datetime(value: str) -> datetime:
    """Parses an ISO 8601 timestamp into an aware UTC datetime.

    Accepts a trailing "Z" and fractional seconds of any precision
    (the document skeleton uses microseconds, week dates use milliseconds).

    Args:
        value: The timestamp string.

    Returns:
        An aware datetime in UTC.

    Raises:
        ValueError: If the value is not a valid timestamp.
    """
    if not value:
        raise ValueError("Empty timestamp")

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    # Normalize fractional seconds to exactly 6 digits.
    text = _FRACTION_RE.sub(
        lambda m: "." + (m.group(1) + "000000")[:6], text, count=1
    )

    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
