from datetime import date, datetime
from typing import Iterable, List, Optional

from core.models import (
    AddTask,
    BlockedInterval,
    EditIntent,
    MoveTask,
    Outcome,
    Query,
    RemoveTask,
    ScheduledItem,
    Task,
    TimeConstraints,
    UnscheduledEntry,
)
from exceptions.custom_errors import MalformedInputError
from scheduler.reporter import outcome_frames
from utils.time_utils import get_zone


def to_task(t) -> Task:
    return Task(
        id=t.id,
        title=t.title,
        estimated_time=t.estimatedTime,
        priority=t.priority,
        deadline=t.deadline,
    )


def to_blocked(b) -> BlockedInterval:
    return BlockedInterval(title=b.title, start_time=b.startTime, end_time=b.endTime)


def to_constraints(c) -> TimeConstraints:
    return TimeConstraints(start_time=c.startTime, end_time=c.endTime)


def to_item(i) -> ScheduledItem:
    return ScheduledItem(task_id=i.taskId, title=i.title, start_time=i.startTime, end_time=i.endTime)


def to_unscheduled(u) -> UnscheduledEntry:
    return UnscheduledEntry(task_id=u.taskId, reason=u.reason)


def to_intent(intent) -> EditIntent:
    """Map a request intent (discriminated on `type`) to its core edit intent."""
    if intent.type == "move":
        return MoveTask(task_id=intent.taskId, requested_start=intent.requestedStart)
    if intent.type == "add":
        return AddTask(task=to_task(intent.task), requested_start=intent.requestedStart)
    if intent.type == "remove":
        return RemoveTask(task_id=intent.taskId)
    return Query()


def resolve_day(
    day: Optional[date], timezone: str, now: datetime, items: Iterable[ScheduledItem] = ()
) -> date:
    """
    The day a request is about: the explicit `day`, else the local date of the first
    scheduled item, else the local date of `now`.
    """
    if day is not None:
        return day
    try:
        zone = get_zone(timezone)
    except ValueError as e:
        raise MalformedInputError(f"Recheck your inputs:\n • {e}.\n")
    items = sorted(items, key=lambda i: i.start_time)
    reference = items[0].start_time if items else now
    if reference.tzinfo is None:
        return reference.date()  # rejected later by the input checks
    return reference.astimezone(zone).date()


def outcome_to_response(outcome: Outcome, tasks: List[Task]) -> dict:
    """JSON-friendly response body for an Outcome."""
    schedule_df, summary_df = outcome_frames(outcome, tasks)
    schedule_df = schedule_df.rename(
        columns={
            "Task ID": "taskId",
            "Title": "title",
            "Start": "startTime",
            "End": "endTime",
            "Minutes": "minutes",
            "Priority": "priority",
        }
    )
    schedule_df["startTime"] = schedule_df["startTime"].map(lambda t: t.isoformat())
    schedule_df["endTime"] = schedule_df["endTime"].map(lambda t: t.isoformat())

    summary_df = summary_df.rename(
        columns={
            "Scheduled": "scheduled",
            "Unscheduled": "unscheduled",
            "Committed Minutes": "committedMinutes",
            "Reason": "reason",
            "Changed": "changed",
        }
    )

    return {
        "day": outcome.schedule.day.isoformat(),
        "timezone": outcome.schedule.timezone,
        "schedule": schedule_df.to_dict(orient="records"),
        "unscheduled": [
            {"taskId": u.task_id, "reason": u.reason.value} for u in outcome.unscheduled
        ],
        "changed": outcome.changed,
        "reason": outcome.reason.value,
        "explanation": outcome.explanation,
        "violations": [
            {
                "code": v.code.value,
                "taskId": v.task_id,
                "otherId": v.other_id,
                "message": v.message,
            }
            for v in outcome.violations
        ],
        "summary": summary_df.to_dict(orient="records")[0],
    }
