"""Timestamp parsing for note exports."""

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from loguru import logger

from ..utils.clock import utc_now

# Evernote compact format: YYYYMMDDTHHMMSSZ
_COMPACT = re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})Z?$")


def parse_timestamp(value: str | None, now: datetime | None = None) -> datetime:
    """Parse an export timestamp into an aware UTC datetime.

    Recognizes the compact ENEX format strictly, then falls back to ISO-8601
    and RFC 2822. Naive results are taken as UTC. Never raises: a missing or
    unparseable value yields ``now``.

    Args:
        value: Raw timestamp string.
        now: Fallback instant (defaults to the current time).

    Returns:
        Aware datetime in UTC.
    """
    fallback = now or utc_now()
    if value is None:
        return fallback

    raw = value.strip()
    if not raw:
        return fallback

    parsed = _parse(raw)
    if parsed is None:
        logger.debug(f"Unparseable timestamp {raw!r}, using current time")
        return fallback
    return parsed


def parse_timestamp_strict(value: str | None) -> datetime | None:
    """Parse a timestamp, returning None instead of falling back to now."""
    if not value or not value.strip():
        return None
    return _parse(value.strip())


def _parse(raw: str) -> datetime | None:
    """Parse ``raw`` and normalize it to UTC, or None if that is impossible."""
    try:
        parsed = _parse_any(raw)
        if parsed is None:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        # Offsets near year 1 or 9999 overflow the datetime range
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError) as e:
        logger.debug(f"Timestamp {raw!r} out of range: {e}")
        return None


def _parse_any(raw: str) -> datetime | None:
    match = _COMPACT.match(raw)
    if match:
        year, month, day, hour, minute, second = (int(g) for g in match.groups())
        try:
            return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
        except ValueError:
            return None

    iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass

    try:
        return parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        return None


def to_iso(value: datetime) -> str:
    """Format an aware datetime for storage."""
    return value.astimezone(timezone.utc).isoformat()
