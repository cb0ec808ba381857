"""Query time window and NOTAM activity filtering."""
import re
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from notam_briefing.config import Config
from notam_briefing.errors import ValidationError
from notam_briefing.models.notam import NotamRecord, PERMANENT_SENTINELS

logger = logging.getLogger(__name__)

TIME_UNITS = ('hours', 'days')

# ICAO B)/C) format: YYMMDDHHMM
ICAO_DATE_PATTERN = re.compile(r'^\d{10}$')


@dataclass(frozen=True)
class TimeWindow:
    """Immutable [start, end] interval for a single query."""

    start: datetime
    end: datetime

    @property
    def duration_hours(self) -> int:
        return int((self.end - self.start).total_seconds() // 3600)

    def describe(self) -> str:
        """Human description such as '24 hours' or '2 days'."""
        hours = self.duration_hours
        if hours % 24 == 0 and hours >= 24:
            days = hours // 24
            return f"{days} day{'s' if days > 1 else ''}"
        return f"{hours} hour{'s' if hours > 1 else ''}"


def compute_window(value: int, unit: str = 'hours', now: Optional[datetime] = None) -> TimeWindow:
    """
    Build the query window starting now.

    Args:
        value: Window length in ``unit``
        unit: "hours" or "days"
        now: Reference time (defaults to current UTC time)

    Raises:
        ValidationError: If the unit is unknown or the duration is out of range
    """
    if unit not in TIME_UNITS:
        raise ValidationError(f"Invalid time unit '{unit}': expected one of {', '.join(TIME_UNITS)}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Time value must be an integer (got {value!r})")

    hours = value * 24 if unit == 'days' else value
    if not Config.MIN_WINDOW_HOURS <= hours <= Config.MAX_WINDOW_HOURS:
        raise ValidationError(
            f"Time window of {hours}h is out of range "
            f"({Config.MIN_WINDOW_HOURS}-{Config.MAX_WINDOW_HOURS} hours)"
        )

    start = now or datetime.now(timezone.utc)
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return TimeWindow(start=start, end=start + timedelta(hours=hours))


def parse_timestamp(value) -> Optional[datetime]:
    """
    Tolerant timestamp parser.

    Accepts datetimes, ISO-8601 strings (with 'Z' or an offset), FAA
    "MM/DD/YYYY HHMM" and ICAO "YYMMDDHHMM". Naive values are taken as UTC.

    Returns:
        Timezone-aware UTC datetime, or None for sentinels and malformed input
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        s = value.strip()
        if not s or s.upper() in PERMANENT_SENTINELS:
            return None
        # Trailing "EST" on C) means estimated, not a timezone
        s = re.sub(r'\s*(EST|UTC|GMT)$', '', s)
        dt = _parse_string(s)
        if dt is None:
            logger.debug(f"Could not parse timestamp '{value}'")
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_string(s: str) -> Optional[datetime]:
    if ICAO_DATE_PATTERN.match(s):
        try:
            year = int(s[0:2])
            year += 2000 if year < 50 else 1900
            return datetime(year, int(s[2:4]), int(s[4:6]), int(s[6:8]), int(s[8:10]))
        except ValueError:
            return None

    try:
        return datetime.strptime(s, '%m/%d/%Y %H%M')
    except ValueError:
        pass

    if s.endswith(('Z', 'z')):
        s = s[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


def is_active(record: NotamRecord, window: TimeWindow) -> bool:
    """
    Decide whether a record overlaps the window.

    A missing, permanent or unparsable end is open-ended: the record is
    active if it has started by the end of the window. Boundaries are inclusive.
    """
    start = parse_timestamp(record.effective_start)
    end = parse_timestamp(record.effective_end)

    starts_in_time = start is None or start <= window.end
    if end is None:
        return starts_in_time
    return starts_in_time and end >= window.start


def filter_active(records: Iterable[NotamRecord], window: TimeWindow) -> List[NotamRecord]:
    """Return the records active within the window, in their original order."""
    return [record for record in records if is_active(record, window)]
