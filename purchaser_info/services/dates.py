"""
Date Normalizer - ISO-8601 wire timestamps to aware UTC datetimes.

`normalize_date` and `format_date` are inverses: every string produced by
`format_date` parses back to the same instant.
"""

from datetime import UTC, datetime

from purchaser_info.exceptions import MalformedDateError


def normalize_date(raw: object) -> datetime | None:
    """
    Convert a raw wire value into a UTC instant.

    Args:
        raw: ISO-8601 string, aware datetime, None or empty string

    Returns:
        Aware UTC datetime, or None when the value is absent/empty.
        Strings without an offset are read as UTC.

    Raises:
        MalformedDateError: If the value is present but not a usable timestamp
    """
    if raw is None:
        return None

    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise MalformedDateError(raw, str(e)) from e
    else:
        raise MalformedDateError(raw, f"expected ISO-8601 string, got {type(raw).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)

    try:
        return parsed.astimezone(UTC)
    except (OverflowError, ValueError) as e:
        raise MalformedDateError(raw, f"out of range: {e}") from e


def format_date(instant: datetime) -> str:
    """
    Encode an aware instant as `YYYY-MM-DDTHH:MM:SSZ`.

    Microseconds are written only when non-zero.
    """
    if instant.tzinfo is None:
        raise ValueError(f"Cannot format naive datetime: {instant!r}")

    utc = instant.astimezone(UTC).replace(tzinfo=None)
    timespec = "microseconds" if utc.microsecond else "seconds"
    return f"{utc.isoformat(timespec=timespec)}Z"
