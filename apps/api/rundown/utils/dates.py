from datetime import datetime, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_iso(now: Optional[datetime] = None) -> str:
    """UTC calendar date as YYYY-MM-DD."""
    now = now or utc_now()
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date().isoformat()


def is_same_utc_day(timestamp: Union[str, datetime, None], today: str) -> bool:
    # compares the ISO-8601 date prefix, so the timestamp must be stored in UTC
    if isinstance(timestamp, datetime):
        timestamp = timestamp.astimezone(timezone.utc).isoformat() if timestamp.tzinfo else timestamp.isoformat()
    if not isinstance(timestamp, str) or len(timestamp) < 10:
        return False
    return timestamp[:10] == today
