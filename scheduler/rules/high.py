from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from core.hard_rules import HARD_RULES
from core.models import ReasonCode, RuleCode, Task, UnscheduledEntry, Violation
from core.state import PlacementState, ValidationContext
from utils.constants import (
    LONG_TASK_MINUTES,
    MAX_CONTINUOUS_MINUTES,
    MIDDAY_BREAK_MINUTES,
    MIDDAY_WINDOW_END,
    MIDDAY_WINDOW_START,
    MIN_GAP_LONG_MINUTES,
    MIN_GAP_SHORT_MINUTES,
    SLOT_STEP_MINUTES,
)
from utils.time_utils import at, merge_intervals, minutes_between, overlap_minutes
import logging

"""
This module contains the rules that keep a selective (day-fit) schedule sustainable:
the burnout gaps, the midday break and the capacity guard.
"""

logger = logging.getLogger(__name__)


def required_gap(task_minutes: int) -> int:
    """Minimum idle minutes that must follow a task of the given length."""
    if task_minutes >= LONG_TASK_MINUTES:
        return MIN_GAP_LONG_MINUTES
    return MIN_GAP_SHORT_MINUTES


def midday_range(day, tz_name: str) -> Tuple[datetime, datetime]:
    return at(day, MIDDAY_WINDOW_START, tz_name), at(day, MIDDAY_WINDOW_END, tz_name)


def usable_intervals(state: PlacementState) -> List[Tuple[datetime, datetime]]:
    """Parts of the window from `earliest` on that are not blocked, reserved or kept for midday."""
    start = max(state.earliest, state.window_start)
    if start >= state.window_end:
        return []
    free = []
    cursor = start
    for b_start, b_end in merge_intervals(state.obstacles()):
        if b_end <= cursor:
            continue
        if b_start >= state.window_end:
            break
        if b_start > cursor:
            free.append((cursor, b_start))
        cursor = max(cursor, b_end)
    if cursor < state.window_end:
        free.append((cursor, state.window_end))
    return free


def choose_midday_reservation(state: PlacementState) -> Tuple[datetime, datetime]:
    """
    Pick the 60-minute window inside the midday range to keep free.

    Candidates start every SLOT_STEP_MINUTES. The winner is the candidate that covers
    the most time which is unusable anyway (blocked, reserved, outside the window or
    already past), so the break costs as little capacity as possible. Ties keep the
    earliest candidate.
    """
    range_start, range_end = midday_range(state.day, state.timezone)
    length = timedelta(minutes=MIDDAY_BREAK_MINUTES)
    free = usable_intervals(state)

    best, best_cost = None, None
    candidate = range_start
    while candidate + length <= range_end:
        cost = sum(overlap_minutes(candidate, candidate + length, s, e) for s, e in free)
        if best is None or cost < best_cost:
            best, best_cost = candidate, cost
        candidate += timedelta(minutes=SLOT_STEP_MINUTES)

    logger.debug(f"Midday break kept at {best:%H:%M} (costs {best_cost} usable min)")
    return best, best + length


def capacity_guard(
    candidates: Sequence[Task], state: PlacementState
) -> Tuple[List[Task], List[UnscheduledEntry]]:
    """
    Admit tasks in order while their work plus the breaks they need still fits the usable
    time left after the midday reservation. Once a task does not fit, it and every task
    after it are left out with CapacityReserved.
    """
    usable = sum(minutes_between(s, e) for s, e in usable_intervals(state))
    admitted: List[Task] = []
    left_out: List[UnscheduledEntry] = []
    needed = 0
    for idx, task in enumerate(candidates):
        if needed + task.estimated_time > usable:
            left_out.extend(
                UnscheduledEntry(t.id, ReasonCode.CAPACITY_RESERVED) for t in candidates[idx:]
            )
            logger.info(
                f"Capacity reached at {needed}/{usable} min; {len(candidates) - idx} task(s) held back."
            )
            break
        admitted.append(task)
        needed += task.estimated_time + required_gap(task.estimated_time)
    return admitted, left_out


def burnout_rule(ctx: ValidationContext) -> list[Violation]:
    """
    Gaps between consecutive tasks respect the minimum for the task before them, and
    runs of tasks joined by shorter gaps never exceed MAX_CONTINUOUS_MINUTES. A single
    task longer than the cap forms its own run and is allowed.

    Reserved calendar items count as work too; only pairs of two reserved items, which
    the caller placed, are not judged.
    """
    violations = []
    reserved_ids = {r.task_id for r in ctx.reserved}
    items = sorted(list(ctx.schedule.items) + list(ctx.reserved), key=lambda i: i.start_time)
    if not items:
        return violations
    run_minutes = items[0].minutes
    for prev, item in zip(items, items[1:]):
        gap = minutes_between(prev.end_time, item.start_time)
        if gap >= required_gap(prev.minutes):
            run_minutes = item.minutes
            continue
        if prev.task_id in reserved_ids and item.task_id in reserved_ids:
            run_minutes += max(gap, 0) + item.minutes
            continue
        violations.append(
            Violation(
                RuleCode.BURNOUT,
                item.task_id,
                f"{HARD_RULES[RuleCode.BURNOUT].message} Only {gap} min after '{prev.title}', "
                f"{required_gap(prev.minutes)} min needed.",
                prev.task_id,
            )
        )
        run_minutes += max(gap, 0) + item.minutes
        if run_minutes > MAX_CONTINUOUS_MINUTES:
            violations.append(
                Violation(
                    RuleCode.BURNOUT,
                    item.task_id,
                    f"{HARD_RULES[RuleCode.BURNOUT].message} {run_minutes} min of continuous work.",
                )
            )
    return violations


def midday_rule(ctx: ValidationContext) -> list[Violation]:
    """At least one task-free stretch of MIDDAY_BREAK_MINUTES inside the midday range."""
    if ctx.midday is None:
        return []
    range_start, range_end = ctx.midday
    longest = 0
    cursor = range_start
    for item in ctx.schedule.items:
        if item.end_time <= cursor:
            continue
        if item.start_time >= range_end:
            break
        longest = max(longest, minutes_between(cursor, min(item.start_time, range_end)))
        cursor = max(cursor, item.end_time)
    if cursor < range_end:
        longest = max(longest, minutes_between(cursor, range_end))

    if longest >= MIDDAY_BREAK_MINUTES:
        return []
    return [
        Violation(
            RuleCode.MIDDAY,
            None,
            f"{HARD_RULES[RuleCode.MIDDAY].message} Longest free stretch is {longest} min.",
        )
    ]
