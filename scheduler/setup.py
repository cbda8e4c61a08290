from datetime import date, datetime, timedelta
from typing import List, Sequence, Tuple

from core.models import (
    BlockedInterval,
    ReasonCode,
    ScheduledItem,
    Task,
    TimeConstraints,
    UnscheduledEntry,
)
from core.state import PlacementState
from scheduler.rules.high import choose_midday_reservation, required_gap
from utils.constants import LOOKAHEAD_DAYS
from utils.time_utils import blocked_occurrences, day_window, earliest_start, get_zone
import logging

logger = logging.getLogger(__name__)


def sort_tasks(tasks: Sequence[Task]) -> List[Task]:
    """
    Total order used by both synthesis modes: earlier deadline first (tasks without a
    deadline last), then higher priority, then original input order.
    """
    indexed = list(enumerate(tasks))
    indexed.sort(
        key=lambda pair: (
            pair[1].deadline is None,
            pair[1].deadline.timestamp() if pair[1].deadline is not None else 0.0,
            -pair[1].priority.rank,
            pair[0],
        )
    )
    return [task for _, task in indexed]


def reserved_gap(item: ScheduledItem, selective: bool) -> timedelta:
    """In selective mode a reserved item counts as prior work, so its break stays busy too."""
    return timedelta(minutes=required_gap(item.minutes) if selective else 0)


def setup_state(
    day: date,
    timezone: str,
    constraints: TimeConstraints,
    blocked_intervals: Sequence[BlockedInterval],
    now: datetime,
    reserved: Sequence[ScheduledItem] = (),
    selective: bool = False,
) -> PlacementState:
    """
    Build the placement state for one day.

    Anchors the availability window and the blocked occurrences on `day` in `timezone`,
    computes the first admissible start (strictly after `now`), records reserved calendar
    items as busy time and, in selective mode, keeps the break after each reserved item
    busy and reserves the midday break.

    Args:
        day (date): The target day.
        timezone (str): IANA zone name used to interpret times of day.
        constraints (TimeConstraints): The daily availability window.
        blocked_intervals (Sequence[BlockedInterval]): Recurring daily blocked times.
        now (datetime): The current instant.
        reserved (Sequence[ScheduledItem]): Items already on the calendar outside the pool.
        selective (bool): Whether the day-fit rules apply.

    Returns:
        PlacementState: A fresh state with nothing placed yet.
    """
    window_start, window_end = day_window(day, constraints, timezone)
    state = PlacementState(
        day=day,
        timezone=timezone,
        window_start=window_start,
        window_end=window_end,
        earliest=earliest_start(now, window_start),
        blocked=[(s, e) for s, e, _ in blocked_occurrences(day, blocked_intervals, timezone)],
        reserved=[(i.start_time, i.end_time + reserved_gap(i, selective)) for i in reserved],
    )
    if selective:
        state.midday = choose_midday_reservation(state)

    logger.info(
        f"📋 Day {day} in {timezone}: window {window_start:%H:%M}-{window_end:%H:%M}, "
        f"{len(state.blocked)} blocked occurrence(s), {len(state.reserved)} reserved item(s)"
    )
    return state


def prefilter_tasks(
    tasks: Sequence[Task], day: date, timezone: str, now: datetime
) -> Tuple[List[Task], List[UnscheduledEntry]]:
    """
    Select the tasks worth considering today (selective mode).

    Tasks already past their deadline are dropped with PastDeadline. Tasks whose deadline
    falls after the look-ahead horizon, or that have none, are dropped with NotDueToday,
    unless nothing would be left, in which case every non-past task stays eligible.
    """
    zone = get_zone(timezone)
    horizon = day + timedelta(days=LOOKAHEAD_DAYS)

    left_out: List[UnscheduledEntry] = []
    live: List[Task] = []
    for task in tasks:
        if task.deadline is not None and task.deadline <= now:
            left_out.append(UnscheduledEntry(task.id, ReasonCode.PAST_DEADLINE))
        else:
            live.append(task)

    due = [t for t in live if t.deadline is not None and t.deadline.astimezone(zone).date() <= horizon]
    if not due:
        logger.info("No task is due soon; keeping every live task eligible.")
        return live, left_out

    due_ids = {t.id for t in due}
    left_out.extend(
        UnscheduledEntry(t.id, ReasonCode.NOT_DUE_TODAY) for t in live if t.id not in due_ids
    )
    return due, left_out
