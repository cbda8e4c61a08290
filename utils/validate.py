from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from core.models import (
    AddTask,
    BlockedInterval,
    MoveTask,
    Priority,
    Query,
    RemoveTask,
    Schedule,
    Task,
    TimeConstraints,
)
from exceptions.custom_errors import MalformedInputError
from utils.constants import REPAIR_STRATEGIES
from utils.time_utils import get_zone


def _is_aware(value) -> bool:
    return isinstance(value, datetime) and value.tzinfo is not None and value.utcoffset() is not None


def validate_task_pool(tasks: Sequence[Task]) -> List[str]:
    """Check each task's shape and that ids are unique."""
    errors = []
    for task in tasks:
        label = f"'{task.title}' ({task.id})"
        if not str(task.id).strip():
            errors.append(f" • A task titled '{task.title}' has an empty id.\n")
        if isinstance(task.estimated_time, bool) or not isinstance(task.estimated_time, int):
            errors.append(f" • Estimated time of {label} must be a whole number of minutes.\n")
        elif task.estimated_time <= 0:
            errors.append(f" • Estimated time of {label} must be greater than 0.\n")
        if not isinstance(task.priority, Priority):
            errors.append(f" • Priority of {label} must be one of low, medium, high.\n")
        if task.deadline is not None and not _is_aware(task.deadline):
            errors.append(f" • Deadline of {label} must carry a time-zone offset.\n")

    duplicates = [tid for tid, n in Counter(t.id for t in tasks).items() if n > 1]
    if duplicates:
        errors.append(f" • Duplicate task ids: {', '.join(sorted(duplicates))}.\n")
    return errors


def validate_window(
    constraints: TimeConstraints, blocked_intervals: Iterable[BlockedInterval]
) -> List[str]:
    """Check the availability window and the blocked intervals."""
    errors = []
    if constraints.start_time >= constraints.end_time:
        errors.append(
            f" • Availability start ({constraints.start_time:%H:%M}) must be before its end ({constraints.end_time:%H:%M}).\n"
        )
    for b in blocked_intervals:
        if b.start_time == b.end_time:
            errors.append(f" • Blocked time '{b.title}' starts and ends at {b.start_time:%H:%M}.\n")
    return errors


def validate_context(now: datetime, timezone: str) -> List[str]:
    errors = []
    if not _is_aware(now):
        errors.append(" • Current date-time must carry a time-zone offset.\n")
    try:
        get_zone(timezone)
    except ValueError as e:
        errors.append(f" • {e}.\n")
    return errors


def validate_schedule_shape(schedule: Schedule) -> List[str]:
    """Structural checks only; rule checks belong to the validator."""
    errors = []
    for item in schedule.items:
        if not (_is_aware(item.start_time) and _is_aware(item.end_time)):
            errors.append(f" • Scheduled item '{item.title}' must carry time-zone offsets.\n")
        elif item.end_time <= item.start_time:
            errors.append(f" • Scheduled item '{item.title}' ends before it starts.\n")
    duplicates = [tid for tid, n in Counter(schedule.task_ids).items() if n > 1]
    if duplicates:
        errors.append(f" • Tasks scheduled more than once: {', '.join(sorted(duplicates))}.\n")
    return errors


def validate_schedule_membership(schedule: Schedule, tasks: Sequence[Task]) -> List[str]:
    pool_ids = {t.id for t in tasks}
    unknown = [tid for tid in schedule.task_ids if tid not in pool_ids]
    if unknown:
        return [f" • Scheduled items refer to tasks outside the pool: {', '.join(unknown)}.\n"]
    return []


def validate_intent(intent, tasks: Sequence[Task], schedule: Schedule) -> List[str]:
    """Check that the intent refers to tasks the call knows about."""
    errors = []
    pool_ids = {t.id for t in tasks}
    if isinstance(intent, MoveTask):
        if intent.task_id not in pool_ids:
            errors.append(f" • Cannot move unknown task '{intent.task_id}'.\n")
        if not _is_aware(intent.requested_start):
            errors.append(" • Requested start must carry a time-zone offset.\n")
    elif isinstance(intent, AddTask):
        errors.extend(validate_task_pool([intent.task]))
        if schedule.get(intent.task.id) is not None:
            errors.append(f" • Task '{intent.task.id}' is already scheduled.\n")
        if intent.requested_start is not None and not _is_aware(intent.requested_start):
            errors.append(" • Requested start must carry a time-zone offset.\n")
    elif isinstance(intent, RemoveTask):
        if intent.task_id not in pool_ids:
            errors.append(f" • Cannot remove unknown task '{intent.task_id}'.\n")
    elif not isinstance(intent, Query):
        errors.append(f" • Unsupported intent type {type(intent).__name__}.\n")
    return errors


def ensure_valid_inputs(
    tasks: Sequence[Task],
    blocked_intervals: Sequence[BlockedInterval],
    constraints: TimeConstraints,
    now: datetime,
    timezone: str,
    schedule: Optional[Schedule] = None,
    intent=None,
    strategy: Optional[str] = None,
):
    """
    Run every structural check and raise a single MalformedInputError listing all problems.

    Raises:
        MalformedInputError: If any input is structurally invalid.
    """
    errors = []
    errors.extend(validate_task_pool(tasks))
    errors.extend(validate_window(constraints, blocked_intervals))
    errors.extend(validate_context(now, timezone))
    if schedule is not None:
        errors.extend(validate_schedule_shape(schedule))
        errors.extend(validate_schedule_membership(schedule, tasks))
    if intent is not None:
        errors.extend(validate_intent(intent, tasks, schedule or Schedule(None, timezone)))
    if strategy is not None and strategy not in REPAIR_STRATEGIES:
        errors.append(f" • Repair strategy must be one of {', '.join(REPAIR_STRATEGIES)}.\n")

    if errors:
        errors.insert(0, "Recheck your inputs:\n")
        raise MalformedInputError("".join(errors))
