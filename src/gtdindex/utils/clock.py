"""UTC clock helpers shared by the store and pipelines."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Current time as an ISO-8601 UTC string."""
    return utc_now().isoformat()


def iso_ago(seconds: float, now: datetime | None = None) -> str:
    """ISO-8601 UTC string for ``seconds`` before ``now``."""
    return ((now or utc_now()) - timedelta(seconds=seconds)).isoformat()
