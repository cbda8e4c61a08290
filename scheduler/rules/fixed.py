from collections import Counter
from datetime import timedelta

from core.hard_rules import HARD_RULES
from core.models import RuleCode, Violation
from core.state import ValidationContext

"""
This module contains the hard rules every schedule must satisfy: duration fidelity, no overlap,
blocked-interval avoidance, staying in bounds, meeting deadlines, future-only placement and completeness.
Each rule takes a ValidationContext and returns the list of violations it found.
"""


def _violation(code: RuleCode, task_id, detail: str, other_id=None) -> Violation:
    return Violation(code, task_id, f"{HARD_RULES[code].message} {detail}".strip(), other_id)


def duration_rule(ctx: ValidationContext) -> list[Violation]:
    """Each item lasts exactly its task's estimated time."""
    violations = []
    for item in ctx.schedule.items:
        task = ctx.tasks_by_id.get(item.task_id)
        if task is None:
            continue  # reported by the completeness rule
        if item.end_time - item.start_time != timedelta(minutes=task.estimated_time):
            violations.append(
                _violation(
                    RuleCode.DURATION,
                    item.task_id,
                    f"'{item.title}' lasts {item.minutes} min, expected {task.estimated_time} min.",
                )
            )
    return violations


def overlap_rule(ctx: ValidationContext) -> list[Violation]:
    """No two items share any minute (half-open intervals)."""
    violations = []
    items = ctx.schedule.items
    for i, first in enumerate(items):
        for second in items[i + 1 :]:
            if second.start_time >= first.end_time:
                break  # items are ordered by start
            violations.append(
                _violation(
                    RuleCode.OVERLAP,
                    second.task_id,
                    f"'{second.title}' overlaps '{first.title}'.",
                    other_id=first.task_id,
                )
            )
    return violations


def blocked_rule(ctx: ValidationContext) -> list[Violation]:
    """No item intersects a blocked occurrence on the schedule day."""
    violations = []
    for item in ctx.schedule.items:
        for start, end, title in ctx.blocked:
            if item.overlaps(start, end):
                violations.append(
                    _violation(
                        RuleCode.BLOCKED,
                        item.task_id,
                        f"'{item.title}' runs into '{title}'.",
                    )
                )
    return violations


def bounds_rule(ctx: ValidationContext) -> list[Violation]:
    """Every item lies inside the availability window of the schedule day."""
    violations = []
    for item in ctx.schedule.items:
        if item.start_time < ctx.window_start or item.end_time > ctx.window_end:
            violations.append(
                _violation(
                    RuleCode.BOUNDS,
                    item.task_id,
                    f"'{item.title}' falls outside {ctx.window_start:%H:%M}-{ctx.window_end:%H:%M}.",
                )
            )
    return violations


def deadline_rule(ctx: ValidationContext) -> list[Violation]:
    """Items with a deadline end on or before it."""
    violations = []
    for item in ctx.schedule.items:
        task = ctx.tasks_by_id.get(item.task_id)
        if task is None or task.deadline is None:
            continue
        if item.end_time > task.deadline:
            violations.append(
                _violation(
                    RuleCode.DEADLINE,
                    item.task_id,
                    f"'{item.title}' ends after its deadline {task.deadline.isoformat()}.",
                )
            )
    return violations


def future_rule(ctx: ValidationContext) -> list[Violation]:
    """New placements start strictly after now. Settled items are exempt."""
    violations = []
    for item in ctx.schedule.items:
        if item in ctx.settled:
            continue
        if item.start_time <= ctx.now:
            violations.append(
                _violation(
                    RuleCode.FUTURE,
                    item.task_id,
                    f"'{item.title}' would start at or before {ctx.now.isoformat()}.",
                )
            )
    return violations


def completeness_rule(ctx: ValidationContext) -> list[Violation]:
    """Every pool task appears exactly once across scheduled and unscheduled."""
    violations = []
    scheduled = Counter(ctx.schedule.task_ids)
    left_out = Counter(e.task_id for e in ctx.unscheduled)
    pool = set(ctx.pool_ids)

    for task_id in sorted((set(scheduled) | set(left_out)) - pool):
        violations.append(
            _violation(RuleCode.COMPLETENESS, task_id, f"'{task_id}' is not in the task pool.")
        )

    for task_id in ctx.pool_ids:
        seen = scheduled[task_id] + left_out[task_id]
        if seen == 0:
            detail = f"'{task_id}' is missing."
        elif scheduled[task_id] and left_out[task_id]:
            detail = f"'{task_id}' is both scheduled and unscheduled."
        elif seen > 1:
            detail = f"'{task_id}' appears {seen} times."
        else:
            continue
        violations.append(_violation(RuleCode.COMPLETENESS, task_id, detail))
    return violations
