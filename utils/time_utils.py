from datetime import datetime, timedelta, time, date as dt_date
from typing import Iterable, List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.models import BlockedInterval, TimeConstraints

Interval = Tuple[datetime, datetime]


def get_zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone '{tz_name}': {e}")


def at(day: dt_date, t: time, tz_name: str) -> datetime:
    """Anchor a time of day on the given day in the given zone."""
    return datetime.combine(day, t, tzinfo=get_zone(tz_name))


def day_window(day: dt_date, constraints: TimeConstraints, tz_name: str) -> Interval:
    return at(day, constraints.start_time, tz_name), at(day, constraints.end_time, tz_name)


def blocked_occurrences(
    day: dt_date, blocked_intervals: Iterable[BlockedInterval], tz_name: str
) -> List[Tuple[datetime, datetime, str]]:
    """
    Concrete blocked windows touching the given day.

    Intervals that wrap past midnight contribute their evening part on `day`
    and the morning part carried over from the previous day.
    """
    occurrences = []
    next_day = day + timedelta(days=1)
    for b in blocked_intervals:
        if b.wraps_midnight:
            occurrences.append(
                (at(day - timedelta(days=1), b.start_time, tz_name), at(day, b.end_time, tz_name), b.title)
            )
            occurrences.append((at(day, b.start_time, tz_name), at(next_day, b.end_time, tz_name), b.title))
        else:
            occurrences.append((at(day, b.start_time, tz_name), at(day, b.end_time, tz_name), b.title))
    return sorted(occurrences, key=lambda o: o[0])


def overlap_minutes(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> int:
    """Length of the intersection of two half-open intervals, in minutes."""
    start, end = max(a_start, b_start), min(a_end, b_end)
    if end <= start:
        return 0
    return int((end - start).total_seconds() // 60)


def minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def earliest_start(now: datetime, window_start: datetime) -> datetime:
    """First whole minute strictly after `now`, never before the window opens."""
    floored = now.replace(second=0, microsecond=0)
    return max(window_start, floored + timedelta(minutes=1))


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    merged: List[Interval] = []
    for start, end in sorted(intervals):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged

