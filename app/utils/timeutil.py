from datetime import datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a Postgres/ISO timestamp into an aware datetime (naive values are UTC)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def within_window(now: datetime, start, end) -> bool:
    """start <= now <= end; a missing bound is open."""
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt is not None and now < start_dt:
        return False
    if end_dt is not None and now > end_dt:
        return False
    return True
