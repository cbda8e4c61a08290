from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from core.models import ReasonCode, ScheduledItem, Task, UnscheduledEntry
from core.state import PlacementState
from scheduler.rules.high import required_gap
from scheduler.rules.low import spread_intensity
from utils.constants import (
    BUFFER_MINUTES,
    LONG_TASK_BUFFER_MINUTES,
    LONG_TASK_MINUTES,
    SLOT_STEP_MINUTES,
)
from utils.time_utils import minutes_between
import logging

logger = logging.getLogger(__name__)


def buffer_for(task: Task) -> int:
    """Minutes kept free after a task in full-pool mode."""
    if task.estimated_time >= LONG_TASK_MINUTES:
        return LONG_TASK_BUFFER_MINUTES
    return BUFFER_MINUTES


def latest_end(task: Task, state: PlacementState) -> datetime:
    if task.deadline is not None:
        return min(state.window_end, task.deadline)
    return state.window_end


def find_earliest_slot(
    task: Task, state: PlacementState, not_before: Optional[datetime] = None, buffered: bool = True
) -> Optional[datetime]:
    """
    Earliest start at or after `not_before` where the task fits.

    The task may not touch blocked, reserved or midday time, and must keep clear of placed
    items plus their buffers: its own buffer before a placed item, the placed item's buffer
    after it. Returns None if the task cannot finish before its deadline or the window end.
    """
    duration = timedelta(minutes=task.estimated_time)
    own_buffer = timedelta(minutes=buffer_for(task) if buffered else 0)
    busy = list(state.obstacles())
    for item in state.placed:
        after = timedelta(minutes=state.buffer_after.get(item.task_id, 0) if buffered else 0)
        busy.append((item.start_time - own_buffer, item.end_time + after))

    start = max(not_before or state.earliest, state.earliest)
    limit = latest_end(task, state)
    while start + duration <= limit:
        end = start + duration
        clashes = [e for s, e in busy if s < end and start < e]
        if not clashes:
            return start
        # any start before the furthest clash end still hits that clash
        start = max(clashes)
    return None


def place(state: PlacementState, task: Task, start: datetime, buffer_minutes: int) -> ScheduledItem:
    item = ScheduledItem(
        task_id=task.id,
        title=task.title,
        start_time=start,
        end_time=start + timedelta(minutes=task.estimated_time),
    )
    if state.placed:
        last = max(state.placed, key=lambda i: i.end_time)
        gap = minutes_between(last.end_time, item.start_time)
        if 0 <= gap < required_gap(last.minutes):
            state.continuous_minutes += gap + task.estimated_time
        else:
            state.continuous_minutes = task.estimated_time
    else:
        state.continuous_minutes = task.estimated_time

    state.placed.append(item)
    state.buffer_after[task.id] = buffer_minutes
    state.committed_minutes += task.estimated_time
    state.last_task = task
    logger.debug(f"Placed '{task.title}' at {item.start_time:%H:%M}-{item.end_time:%H:%M}")
    return item


def run_full_pool(tasks: Sequence[Task], state: PlacementState) -> PlacementState:
    """
    Greedy one-pass walk: each task, in sorted order, goes to the earliest slot that fits.
    Tasks with no slot before their deadline or the window end are left out with
    NoFeasibleSlot and the walk carries on.
    """
    for task in tasks:
        start = find_earliest_slot(task, state)
        if start is None:
            logger.info(f"⚠️ No slot for '{task.title}' ({task.estimated_time} min)")
            state.unscheduled.append(UnscheduledEntry(task.id, ReasonCode.NO_FEASIBLE_SLOT))
            continue
        place(state, task, start, buffer_for(task))
    return state


def fits_at(task: Task, start: datetime, state: PlacementState) -> bool:
    """Whether the task fits at `start`, keeping its own break clear of reserved items."""
    end = start + timedelta(minutes=task.estimated_time)
    if start < state.earliest or end > latest_end(task, state):
        return False
    for s, e in state.obstacles():
        if s < end and start < e:
            return False
    rest = end + timedelta(minutes=required_gap(task.estimated_time))
    if any(s < rest and start < e for s, e in state.reserved):
        return False
    return not any(item.overlaps(start, end) for item in state.placed)


def next_cursor(cursor: datetime, state: PlacementState) -> datetime:
    """Skip to the end of whatever covers the cursor, or idle for one slot step."""
    covering = [e for s, e in state.obstacles() if s <= cursor < e]
    if covering:
        return max(covering)
    return cursor + timedelta(minutes=SLOT_STEP_MINUTES)


def run_selective(tasks: Sequence[Task], state: PlacementState) -> PlacementState:
    """
    Chronological walk for day-fit mode.

    At the cursor, candidates are tried in preference order (after intensity spreading) and
    the first one that fits right there is placed; the cursor then moves past it plus the gap
    its length requires. If nothing fits, the cursor idles forward. Candidates that can no
    longer finish before their deadline or the window end are left out with NoFeasibleSlot.
    """
    pending: List[Task] = list(tasks)
    cursor = state.earliest
    while pending:
        still_possible = []
        for task in pending:
            if cursor + timedelta(minutes=task.estimated_time) > latest_end(task, state):
                logger.info(f"⚠️ '{task.title}' can no longer fit today")
                state.unscheduled.append(UnscheduledEntry(task.id, ReasonCode.NO_FEASIBLE_SLOT))
            else:
                still_possible.append(task)
        pending = still_possible
        if not pending:
            break

        chosen = None
        for task in spread_intensity(pending, state.last_task, cursor):
            if fits_at(task, cursor, state):
                chosen = task
                break

        if chosen is None:
            cursor = next_cursor(cursor, state)
            continue

        item = place(state, chosen, cursor, required_gap(chosen.estimated_time))
        pending.remove(chosen)
        cursor = item.end_time + timedelta(minutes=required_gap(chosen.estimated_time))
    return state
