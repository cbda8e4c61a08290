from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from core.constraint_manager import ConstraintManager
from core.hard_rules import HARD_RULES
from core.models import (
    AddTask,
    BlockedInterval,
    EditIntent,
    MoveTask,
    Outcome,
    Query,
    ReasonCode,
    RemoveTask,
    RuleCode,
    Schedule,
    ScheduledItem,
    Task,
    TimeConstraints,
    UnscheduledEntry,
    Violation,
)
from exceptions.custom_errors import MalformedInputError
from scheduler.repair import repair_schedule
from scheduler.reporter import build_outcome
from scheduler.rules import blocked_rule, bounds_rule, deadline_rule, future_rule
from scheduler.runner import buffer_for, find_earliest_slot
from scheduler.setup import setup_state
from scheduler.validator import ValidationResult, build_context, validate
from utils.constants import DEFAULT_REPAIR_STRATEGY
from utils.validate import ensure_valid_inputs
import logging

logger = logging.getLogger(__name__)


class EditPhase(str, Enum):
    RECEIVED = "Received"
    SPECULATING = "Speculating"
    VALIDATING = "Validating"
    COMMITTING = "Committing"
    ROLLING_BACK = "RollingBack"
    DONE = "Done"


def _enter(phase: EditPhase, detail: str = ""):
    logger.info(f"[{phase.value}] {detail}".rstrip())


def _complete_unscheduled(
    entries: Iterable[UnscheduledEntry], pool: Sequence[Task], schedule: Schedule
) -> List[UnscheduledEntry]:
    """
    Unscheduled list consistent with `schedule`: entries for tasks now on the schedule
    are dropped and pool tasks missing from both lists count as NoFeasibleSlot.
    """
    scheduled = set(schedule.task_ids)
    known = {}
    for entry in entries:
        if entry.task_id not in scheduled and entry.task_id not in known:
            known[entry.task_id] = entry
    for task in pool:
        if task.id not in scheduled and task.id not in known:
            known[task.id] = UnscheduledEntry(task.id, ReasonCode.NO_FEASIBLE_SLOT)
    return [known[t.id] for t in pool if t.id in known]


def check_target(
    target: ScheduledItem,
    pool: Sequence[Task],
    blocked_intervals: Sequence[BlockedInterval],
    constraints: TimeConstraints,
    now: datetime,
    day,
    timezone: str,
) -> List[Violation]:
    """
    Inherent checks for the edited item alone, in rejection order: blocked time, bounds,
    deadline, future-only.
    """
    ctx = build_context(
        Schedule(day, timezone, (target,)), pool, blocked_intervals, constraints, now
    )
    cm = ConstraintManager(ctx)
    cm.add_rule(blocked_rule)
    cm.add_rule(bounds_rule)
    cm.add_rule(deadline_rule)
    cm.add_rule(future_rule)
    return cm.apply_all()


def rejection_for(violations: Sequence[Violation]) -> ReasonCode:
    """Rejection code of the first violation whose rule maps to one."""
    for v in violations:
        rejection = HARD_RULES[v.code].rejection
        if rejection is not None:
            return rejection
    messages = "".join(f" • {v.message}\n" for v in violations)
    raise MalformedInputError(f"Recheck your inputs:\n{messages}")


def _only_target_overlaps(result: ValidationResult, target_id: str) -> bool:
    return all(
        v.code == RuleCode.OVERLAP and target_id in (v.task_id, v.other_id)
        for v in result.violations
    )


def _place_new_task(
    task: Task,
    current: Schedule,
    pool: Sequence[Task],
    blocked_intervals: Sequence[BlockedInterval],
    constraints: TimeConstraints,
    now: datetime,
) -> Optional[datetime]:
    """Earliest slot for an added task under full-pool placement rules."""
    by_id = {t.id: t for t in pool}
    state = setup_state(current.day, current.timezone, constraints, blocked_intervals, now)
    state.placed = list(current.items)
    state.buffer_after = {i.task_id: buffer_for(by_id[i.task_id]) for i in current.items}
    return find_earliest_slot(task, state)


# == Apply Edit Intent ==
def apply_intent(
    current: Schedule,
    tasks: Sequence[Task],
    blocked_intervals: Sequence[BlockedInterval],
    constraints: TimeConstraints,
    now: datetime,
    intent: EditIntent,
    unscheduled: Iterable[UnscheduledEntry] = (),
    strategy: str = DEFAULT_REPAIR_STRATEGY,
) -> Outcome:
    """
    Apply one edit to an accepted schedule, atomically.

    The edit is made on a copy (speculation), the edited item is checked on its own, then
    the whole copy is validated. A valid copy is committed. If the only problems are
    overlaps with the edited item, the items it pushed aside are moved later (cascading
    repair) and the repaired copy is committed. Anything else rolls back: the returned
    Outcome holds the input schedule unchanged plus the rejection reason.

    Args:
        current (Schedule): The accepted schedule.
        tasks (Sequence[Task]): The task pool the schedule was built from.
        blocked_intervals (Sequence[BlockedInterval]): Recurring daily blocked times.
        constraints (TimeConstraints): The daily availability window.
        now (datetime): The current instant (tz-aware).
        intent (EditIntent): MoveTask, AddTask, RemoveTask or Query.
        unscheduled (Iterable[UnscheduledEntry]): Pool tasks currently left out, if known.
        strategy (str): Repair strategy, "nearest" or "cp-sat".

    Returns:
        Outcome: Committed or rolled-back result with its reason.

    Raises:
        MalformedInputError: If the inputs or the intent are structurally invalid.
    """
    _enter(EditPhase.RECEIVED, f"{type(intent).__name__} on {len(current.items)} item(s)")
    ensure_valid_inputs(
        tasks,
        blocked_intervals,
        constraints,
        now,
        current.timezone,
        schedule=current,
        intent=intent,
        strategy=strategy,
    )
    pool = list(tasks)
    before = _complete_unscheduled(unscheduled, pool, current)

    def no_op() -> Outcome:
        _enter(EditPhase.DONE, ReasonCode.NO_OP.value)
        return build_outcome(current, pool, before, changed=False, reason=ReasonCode.NO_OP)

    def roll_back(reason: ReasonCode, violations: Sequence[Violation] = ()) -> Outcome:
        _enter(EditPhase.ROLLING_BACK, reason.value)
        outcome = build_outcome(
            current, pool, before, changed=False, reason=reason, violations=violations
        )
        _enter(EditPhase.DONE, reason.value)
        return outcome

    if isinstance(intent, Query):
        return no_op()

    # === Speculate ===
    _enter(EditPhase.SPECULATING)
    target: Optional[ScheduledItem] = None
    extra: List[UnscheduledEntry] = []

    if isinstance(intent, RemoveTask):
        if current.get(intent.task_id) is None:
            return no_op()
        candidate = current.without(intent.task_id)
        extra.append(UnscheduledEntry(intent.task_id, ReasonCode.REMOVED_BY_REQUEST))
        target_id = intent.task_id

    elif isinstance(intent, MoveTask):
        task = next(t for t in pool if t.id == intent.task_id)
        start = intent.requested_start
        target = ScheduledItem(
            task.id, task.title, start, start + timedelta(minutes=task.estimated_time)
        )
        if current.get(task.id) == target:
            return no_op()
        candidate = current.with_item(target)
        target_id = task.id

    else:  # AddTask
        task = intent.task
        pool = [t for t in pool if t.id != task.id] + [task]
        # until it is placed the new task counts as left out
        before = [e for e in before if e.task_id != task.id]
        before.append(UnscheduledEntry(task.id, ReasonCode.NO_FEASIBLE_SLOT))
        start = intent.requested_start
        if start is None:
            start = _place_new_task(task, current, pool, blocked_intervals, constraints, now)
            if start is None:
                return roll_back(ReasonCode.REJECTED_NO_FEASIBLE_SLOT)
        target = ScheduledItem(
            task.id, task.title, start, start + timedelta(minutes=task.estimated_time)
        )
        candidate = current.with_item(target)
        target_id = task.id

    # === Validate ===
    _enter(EditPhase.VALIDATING, f"target '{target_id}'")
    if target is not None:
        inherent = check_target(
            target, pool, blocked_intervals, constraints, now, current.day, current.timezone
        )
        if inherent:
            return roll_back(rejection_for(inherent), inherent)

    previous = set(current.items)
    settled = [i for i in candidate.items if i.task_id != target_id and i in previous]
    after = _complete_unscheduled(extra + before, pool, candidate)
    result = validate(
        candidate, pool, blocked_intervals, constraints, now, unscheduled=after, settled=settled
    )

    reason = ReasonCode.APPLIED
    if not result.ok and target is not None and _only_target_overlaps(result, target_id):
        displaced = {
            v.other_id if v.task_id == target_id else v.task_id for v in result.violations
        }
        logger.info(f"🔁 Reflowing {len(displaced)} displaced item(s) with '{strategy}'")
        candidate, dropped = repair_schedule(
            candidate, sorted(displaced), pool, blocked_intervals, constraints, now, strategy
        )
        settled = [i for i in candidate.items if i.task_id != target_id and i in previous]
        after = _complete_unscheduled(dropped + extra + before, pool, candidate)
        result = validate(
            candidate, pool, blocked_intervals, constraints, now, unscheduled=after, settled=settled
        )
        reason = ReasonCode.APPLIED_WITH_REFLOW

    if not result.ok:
        return roll_back(rejection_for(result.violations), result.violations)

    # === Commit ===
    _enter(EditPhase.COMMITTING, reason.value)
    outcome = build_outcome(candidate, pool, after, changed=True, reason=reason)
    _enter(EditPhase.DONE, reason.value)
    return outcome
