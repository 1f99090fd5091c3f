import calendar
import time
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

def now_ms() -> int:
    return int(time.time() * 1000)

def to_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)

def iso_from_ms(ms: Optional[int]) -> Optional[str]:
    """Render epoch milliseconds as an ISO-8601 UTC string with a trailing 'Z'."""
    if ms is None:
        return None
    dt = datetime.fromtimestamp(int(ms) / 1000.0, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def day_from_ms(ms: int) -> str:
    return datetime.fromtimestamp(int(ms) / 1000.0, tz=timezone.utc).strftime("%Y-%m-%d")

def _minus_one_month(dt: datetime) -> datetime:
    year, month = (dt.year, dt.month - 1) if dt.month > 1 else (dt.year - 1, 12)
    # Clamp the day (e.g. Mar 31 -> Feb 28/29)
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)

def date_window(date_range: Optional[str], now: Optional[datetime] = None) -> Tuple[Optional[int], Optional[int]]:
    """
    Translate a dashboard dateRange into an inclusive (start_ms, end_ms) window in UTC.
    - today: midnight to 23:59:59.999
    - week:  now - 7 days to now
    - month: now - 1 calendar month to now
    - all / None: (None, None), no filtering
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if date_range == "today":
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1) - timedelta(milliseconds=1)
        return to_ms(start), to_ms(end)
    if date_range == "week":
        return to_ms(now - timedelta(days=7)), to_ms(now)
    if date_range == "month":
        return to_ms(_minus_one_month(now)), to_ms(now)
    return None, None
