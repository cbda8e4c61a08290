from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from core.models import (
    Outcome,
    ReasonCode,
    Schedule,
    Task,
    UnscheduledEntry,
    Violation,
)
from exceptions.custom_errors import SynthesisInvariantViolation
import logging

logger = logging.getLogger(__name__)


EXPLANATIONS: Dict[ReasonCode, str] = {
    ReasonCode.SYNTHESIZED: "Scheduled {scheduled} of {total} task(s) for {day}.",
    ReasonCode.APPLIED: "The change was applied. {scheduled} task(s) are on the schedule.",
    ReasonCode.APPLIED_WITH_REFLOW: (
        "The change was applied and overlapping tasks were pushed to later slots. "
        "{scheduled} task(s) are on the schedule."
    ),
    ReasonCode.NO_OP: "Nothing changed.",
    ReasonCode.REJECTED_OVERLAP: (
        "The change was not applied because the requested time clashes with a blocked period "
        "or another task."
    ),
    ReasonCode.REJECTED_OUT_OF_BOUNDS: (
        "The change was not applied because the requested time falls outside the available hours."
    ),
    ReasonCode.REJECTED_PAST_START: "The change was not applied because the requested time is in the past.",
    ReasonCode.REJECTED_DEADLINE: (
        "The change was not applied because the task would finish after its deadline."
    ),
    ReasonCode.REJECTED_NO_FEASIBLE_SLOT: (
        "The change was not applied because there is no free slot for the task today."
    ),
}

UNSCHEDULED_SENTENCES: Dict[ReasonCode, str] = {
    ReasonCode.NO_FEASIBLE_SLOT: "'{title}' did not fit before its deadline or the end of the day.",
    ReasonCode.PAST_DEADLINE: "'{title}' was skipped because its deadline has already passed.",
    ReasonCode.CAPACITY_RESERVED: "'{title}' was held back to keep room for breaks today.",
    ReasonCode.NOT_DUE_TODAY: "'{title}' is not due soon and was left for another day.",
    ReasonCode.DISPLACED_NO_SLOT: "'{title}' was displaced and no later slot was free.",
    ReasonCode.REMOVED_BY_REQUEST: "'{title}' was removed from the schedule.",
}


def _explain(
    schedule: Schedule,
    tasks_by_id: Dict[str, Task],
    unscheduled: Sequence[UnscheduledEntry],
    reason: ReasonCode,
) -> str:
    lines = [
        EXPLANATIONS[reason].format(
            scheduled=len(schedule.items),
            total=len(schedule.items) + len(unscheduled),
            day=schedule.day,
        )
    ]
    for entry in unscheduled:
        template = UNSCHEDULED_SENTENCES.get(entry.reason)
        if template is None:
            continue
        lines.append(template.format(title=tasks_by_id[entry.task_id].title))
    return " ".join(lines)


def build_outcome(
    schedule: Schedule,
    tasks: Sequence[Task],
    unscheduled: Iterable[UnscheduledEntry],
    changed: bool,
    reason: ReasonCode,
    violations: Iterable[Violation] = (),
    fill_reason: Optional[ReasonCode] = None,
) -> Outcome:
    """
    Assemble the Outcome returned to the caller.

    Scheduled and unscheduled ids together must be exactly the task pool with no task
    in both. Pool tasks that appear in neither are filled in with `fill_reason` when one
    is given; otherwise the gap is a logic error.

    Args:
        schedule (Schedule): The resulting schedule.
        tasks (Sequence[Task]): The task pool for this call.
        unscheduled (Iterable[UnscheduledEntry]): Tasks reported as left out.
        changed (bool): Whether the schedule differs from the input.
        reason (ReasonCode): Terminal reason for the call.
        violations (Iterable[Violation]): Violations behind a rejection, if any.
        fill_reason (Optional[ReasonCode]): Reason given to pool tasks missing from both lists.

    Returns:
        Outcome: The complete, explained result.

    Raises:
        SynthesisInvariantViolation: If the two lists do not partition the pool.
    """
    tasks_by_id = {t.id: t for t in tasks}
    scheduled_ids = set(schedule.task_ids)
    entries: Dict[str, UnscheduledEntry] = {}
    problems: List[str] = []

    for task_id in schedule.task_ids:
        if task_id not in tasks_by_id:
            problems.append(f"scheduled task '{task_id}' is not in the pool")
    for entry in unscheduled:
        if entry.task_id not in tasks_by_id:
            problems.append(f"unscheduled task '{entry.task_id}' is not in the pool")
        elif entry.task_id in scheduled_ids:
            problems.append(f"task '{entry.task_id}' is both scheduled and unscheduled")
        elif entry.task_id in entries:
            problems.append(f"task '{entry.task_id}' is reported unscheduled twice")
        else:
            entries[entry.task_id] = entry

    for task in tasks:
        if task.id in scheduled_ids or task.id in entries:
            continue
        if fill_reason is None:
            problems.append(f"task '{task.id}' is neither scheduled nor unscheduled")
        else:
            entries[task.id] = UnscheduledEntry(task.id, fill_reason)

    if problems:
        raise SynthesisInvariantViolation("Incomplete outcome: " + "; ".join(problems))

    # keep pool order so the report reads the way the caller listed the tasks
    ordered = tuple(entries[t.id] for t in tasks if t.id in entries)
    explanation = _explain(schedule, tasks_by_id, ordered, reason)
    logger.debug(f"Outcome {reason.value}: {explanation}")
    return Outcome(
        schedule=schedule,
        unscheduled=ordered,
        changed=changed,
        reason=reason,
        explanation=explanation,
        violations=tuple(violations),
    )


def outcome_frames(outcome: Outcome, tasks: Sequence[Task]) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Tabular view of an outcome: one row per scheduled item, and a one-row summary.
    """
    tasks_by_id = {t.id: t for t in tasks}
    rows = []
    for item in outcome.schedule.items:
        task = tasks_by_id.get(item.task_id)
        rows.append(
            {
                "Task ID": item.task_id,
                "Title": item.title,
                "Start": item.start_time,
                "End": item.end_time,
                "Minutes": item.minutes,
                "Priority": task.priority.value if task is not None else None,
            }
        )
    schedule_df = pd.DataFrame(
        rows, columns=["Task ID", "Title", "Start", "End", "Minutes", "Priority"]
    )

    summary_df = pd.DataFrame(
        [
            {
                "Scheduled": len(outcome.schedule.items),
                "Unscheduled": len(outcome.unscheduled),
                "Committed Minutes": int(schedule_df["Minutes"].sum()) if rows else 0,
                "Reason": outcome.reason.value,
                "Changed": outcome.changed,
            }
        ]
    )
    return schedule_df, summary_df
