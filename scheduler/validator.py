from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Sequence, Tuple

from core.constraint_manager import ConstraintManager
from core.models import (
    BlockedInterval,
    RuleCode,
    Schedule,
    ScheduledItem,
    Task,
    TimeConstraints,
    UnscheduledEntry,
    Violation,
)
from core.state import ValidationContext
from scheduler.rules import (
    blocked_rule,
    bounds_rule,
    burnout_rule,
    completeness_rule,
    deadline_rule,
    duration_rule,
    future_rule,
    midday_range,
    midday_rule,
    overlap_rule,
)
from utils.time_utils import blocked_occurrences, day_window
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    violations: Tuple[Violation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def codes(self) -> List[RuleCode]:
        """Violated rule codes, in rule order, without repeats."""
        seen: List[RuleCode] = []
        for v in self.violations:
            if v.code not in seen:
                seen.append(v.code)
        return seen

    def involving(self, task_id: str) -> List[Violation]:
        return [v for v in self.violations if task_id in (v.task_id, v.other_id)]


def build_context(
    schedule: Schedule,
    tasks: Sequence[Task],
    blocked_intervals: Sequence[BlockedInterval],
    constraints: TimeConstraints,
    now: datetime,
    unscheduled: Iterable[UnscheduledEntry] = (),
    settled: Iterable[ScheduledItem] = (),
    selective: bool = False,
    reserved: Iterable[ScheduledItem] = (),
) -> ValidationContext:
    window_start, window_end = day_window(schedule.day, constraints, schedule.timezone)
    return ValidationContext(
        schedule=schedule,
        tasks_by_id={t.id: t for t in tasks},
        pool_ids=[t.id for t in tasks],
        unscheduled=list(unscheduled),
        blocked=blocked_occurrences(schedule.day, blocked_intervals, schedule.timezone),
        window_start=window_start,
        window_end=window_end,
        now=now,
        settled=set(settled),
        midday=midday_range(schedule.day, schedule.timezone) if selective else None,
        reserved=list(reserved),
    )


def validate(
    schedule: Schedule,
    tasks: Sequence[Task],
    blocked_intervals: Sequence[BlockedInterval],
    constraints: TimeConstraints,
    now: datetime,
    unscheduled: Iterable[UnscheduledEntry] = (),
    settled: Iterable[ScheduledItem] = (),
    selective: bool = False,
    reserved: Iterable[ScheduledItem] = (),
) -> ValidationResult:
    """
    Check a schedule against every hard rule and collect all violations.

    Rules run in a fixed order (duration, overlap, blocked times, bounds, deadline,
    future-only, completeness) and none of them short-circuits the others, so callers
    get the full list. With `selective=True` the burnout and midday-break checks of
    day-fit synthesis run as well.

    Args:
        schedule (Schedule): The schedule to check.
        tasks (Sequence[Task]): The full task pool.
        blocked_intervals (Sequence[BlockedInterval]): Recurring daily blocked times.
        constraints (TimeConstraints): The daily availability window.
        now (datetime): The current instant.
        unscheduled (Iterable[UnscheduledEntry]): Tasks reported as left out.
        settled (Iterable[ScheduledItem]): Items exempt from the future-only rule.
        selective (bool): Also run the selective-mode checks.
        reserved (Iterable[ScheduledItem]): Calendar items outside the pool; in selective mode
            they count as work for the burnout check.

    Returns:
        ValidationResult: Empty when the schedule is valid.
    """
    ctx = build_context(
        schedule,
        tasks,
        blocked_intervals,
        constraints,
        now,
        unscheduled,
        settled,
        selective,
        reserved,
    )

    cm = ConstraintManager(ctx)
    cm.add_rule(duration_rule)
    cm.add_rule(overlap_rule)
    cm.add_rule(blocked_rule)
    cm.add_rule(bounds_rule)
    cm.add_rule(deadline_rule)
    cm.add_rule(future_rule)
    cm.add_rule(completeness_rule)
    cm.add_rule(burnout_rule, condition=selective)
    cm.add_rule(midday_rule, condition=selective)

    result = ValidationResult(tuple(cm.apply_all()))
    if not result.ok:
        logger.debug(f"Validation found {len(result.violations)} violation(s): {result.codes}")
    return result
