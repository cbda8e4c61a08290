from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from core.models import Priority, Task
from scheduler.rules.high import required_gap
import logging

"""
This module contains the soft rules for the selective (day-fit) walk. Soft rules only reorder
candidates; they never cause a task to be rejected.
"""

logger = logging.getLogger(__name__)


def _high_task_keeps_deadline(high: Task, lighter: Task, cursor: datetime) -> bool:
    """True if `high` can still finish by its deadline after `lighter` runs first at `cursor`."""
    if high.deadline is None:
        return True
    delay = lighter.estimated_time + required_gap(lighter.estimated_time) + high.estimated_time
    return cursor + timedelta(minutes=delay) <= high.deadline


def spread_intensity(
    pending: Sequence[Task], last_task: Optional[Task], cursor: datetime
) -> List[Task]:
    """
    Avoid two high-priority tasks back to back.

    When the last placed task and the next candidate are both high priority, the first
    medium/low candidate is moved to the front, as long as the skipped high task can still
    meet its deadline. Otherwise the order is kept.
    """
    ordered = list(pending)
    if last_task is None or last_task.priority != Priority.HIGH:
        return ordered
    if not ordered or ordered[0].priority != Priority.HIGH:
        return ordered

    head = ordered[0]
    for alt in ordered[1:]:
        if alt.priority == Priority.HIGH:
            continue
        if _high_task_keeps_deadline(head, alt, cursor):
            logger.debug(f"Spreading intensity: '{alt.title}' goes before '{head.title}'")
            return [alt] + [t for t in ordered if t is not alt]
    return ordered
