from datetime import datetime
from typing import List, Sequence, Tuple

from core.models import (
    BlockedInterval,
    ReasonCode,
    Schedule,
    Task,
    TimeConstraints,
    UnscheduledEntry,
)
from scheduler.runner import find_earliest_slot
from scheduler.setup import setup_state
from scheduler.solver import solve_repair
from utils.constants import DEFAULT_REPAIR_STRATEGY, REPAIR_STRATEGIES
import logging

logger = logging.getLogger(__name__)


def repair_schedule(
    candidate: Schedule,
    displaced_ids: Sequence[str],
    tasks: Sequence[Task],
    blocked_intervals: Sequence[BlockedInterval],
    constraints: TimeConstraints,
    now: datetime,
    strategy: str = DEFAULT_REPAIR_STRATEGY,
) -> Tuple[Schedule, List[UnscheduledEntry]]:
    """
    Move displaced items out of the way after an edit.

    Every item not in `displaced_ids` stays where it is. With the "nearest" strategy the
    displaced items are handled in order of their original start, each going to the
    earliest slot at or after its original start that clears blocked time, the window
    end, its deadline and every item already fixed. With "cp-sat" the same slots are
    searched jointly by the solver. Items with no slot are dropped and reported as
    DisplacedNoSlot.

    Args:
        candidate (Schedule): The edited schedule, still containing the overlaps.
        displaced_ids (Sequence[str]): Ids of the items that have to move.
        tasks (Sequence[Task]): The task pool, including any task added by the edit.
        blocked_intervals (Sequence[BlockedInterval]): Recurring daily blocked times.
        constraints (TimeConstraints): The daily availability window.
        now (datetime): The current instant.
        strategy (str): "nearest" or "cp-sat".

    Returns:
        Tuple[Schedule, List[UnscheduledEntry]]: The repaired schedule and the items that
            could not be kept.
    """
    if strategy not in REPAIR_STRATEGIES:
        raise ValueError(f"Unknown repair strategy '{strategy}'. Use one of {REPAIR_STRATEGIES}.")

    tasks_by_id = {t.id: t for t in tasks}
    moving = set(displaced_ids)
    displaced = sorted(
        (i for i in candidate.items if i.task_id in moving),
        key=lambda i: (i.start_time, i.task_id),
    )
    state = setup_state(candidate.day, candidate.timezone, constraints, blocked_intervals, now)
    state.placed = [i for i in candidate.items if i.task_id not in moving]

    schedule = Schedule(candidate.day, candidate.timezone, tuple(state.placed))
    dropped: List[UnscheduledEntry] = []

    if strategy == "cp-sat":
        result = solve_repair(state, displaced, tasks_by_id)
        for item in displaced:
            start = result.starts.get(item.task_id)
            if start is None:
                dropped.append(UnscheduledEntry(item.task_id, ReasonCode.DISPLACED_NO_SLOT))
            else:
                schedule = schedule.with_item(item.moved_to(start))
    else:
        for item in displaced:
            task = tasks_by_id[item.task_id]
            start = find_earliest_slot(task, state, not_before=item.start_time, buffered=False)
            if start is None:
                logger.info(f"⚠️ No later slot for displaced '{item.title}'")
                dropped.append(UnscheduledEntry(item.task_id, ReasonCode.DISPLACED_NO_SLOT))
                continue
            moved = item.moved_to(start)
            logger.debug(f"Shifted '{item.title}' {item.start_time:%H:%M} -> {start:%H:%M}")
            state.placed.append(moved)
            schedule = schedule.with_item(moved)

    logger.info(
        f"Repair ({strategy}) kept {len(displaced) - len(dropped)} of {len(displaced)} displaced item(s)"
    )
    return schedule, dropped
