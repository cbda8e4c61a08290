from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Tuple, Union

from utils.constants import PRIORITY_RANKS


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Higher rank is scheduled first among equal deadlines."""
        return PRIORITY_RANKS[self.value]


class Mode(str, Enum):
    """Synthesis mode selected by the caller."""

    FULL_POOL = "full"
    SELECTIVE = "selective"


class RuleCode(str, Enum):
    """Hard rules checked by the validator, in evaluation order."""

    DURATION = "Duration"
    OVERLAP = "Overlap"
    BLOCKED = "Blocked"
    BOUNDS = "OutOfBounds"
    DEADLINE = "DeadlineViolation"
    FUTURE = "PastStart"
    COMPLETENESS = "Completeness"
    # selective-mode checks
    BURNOUT = "Burnout"
    MIDDAY = "MiddayBreak"


class ReasonCode(str, Enum):
    # terminal reasons
    SYNTHESIZED = "Synthesized"
    APPLIED = "Applied"
    APPLIED_WITH_REFLOW = "AppliedWithReflow"
    NO_OP = "NoOp"
    REJECTED_OVERLAP = "Rejected:Overlap"
    REJECTED_OUT_OF_BOUNDS = "Rejected:OutOfBounds"
    REJECTED_PAST_START = "Rejected:PastStart"
    REJECTED_DEADLINE = "Rejected:DeadlineViolation"
    REJECTED_NO_FEASIBLE_SLOT = "Rejected:NoFeasibleSlot"
    # per-task unscheduled reasons
    NO_FEASIBLE_SLOT = "NoFeasibleSlot"
    PAST_DEADLINE = "PastDeadline"
    CAPACITY_RESERVED = "CapacityReserved"
    NOT_DUE_TODAY = "NotDueToday"
    DISPLACED_NO_SLOT = "DisplacedNoSlot"
    REMOVED_BY_REQUEST = "RemovedByRequest"

    @property
    def is_rejection(self) -> bool:
        return self.value.startswith("Rejected:")


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    estimated_time: int  # minutes
    priority: Priority = Priority.MEDIUM
    deadline: Optional[datetime] = None  # tz-aware or None


@dataclass(frozen=True)
class BlockedInterval:
    title: str
    start_time: time
    end_time: time  # earlier than start_time means it wraps past midnight

    @property
    def wraps_midnight(self) -> bool:
        return self.end_time < self.start_time


@dataclass(frozen=True)
class TimeConstraints:
    start_time: time
    end_time: time


@dataclass(frozen=True)
class ScheduledItem:
    task_id: str
    title: str
    start_time: datetime  # tz-aware
    end_time: datetime  # tz-aware

    @property
    def minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open interval test against [start, end)."""
        return self.start_time < end and start < self.end_time

    def moved_to(self, start: datetime) -> "ScheduledItem":
        return replace(
            self, start_time=start, end_time=start + (self.end_time - self.start_time)
        )


@dataclass(frozen=True)
class Schedule:
    day: date
    timezone: str
    items: Tuple[ScheduledItem, ...] = ()

    def __post_init__(self):
        ordered = tuple(sorted(self.items, key=lambda i: (i.start_time, i.task_id)))
        object.__setattr__(self, "items", ordered)

    @property
    def task_ids(self) -> list[str]:
        return [i.task_id for i in self.items]

    def get(self, task_id: str) -> Optional[ScheduledItem]:
        for item in self.items:
            if item.task_id == task_id:
                return item
        return None

    def without(self, task_id: str) -> "Schedule":
        return replace(self, items=tuple(i for i in self.items if i.task_id != task_id))

    def with_item(self, item: ScheduledItem) -> "Schedule":
        return replace(self, items=self.without(item.task_id).items + (item,))


@dataclass(frozen=True)
class UnscheduledEntry:
    task_id: str
    reason: ReasonCode


# == Edit intents ==
@dataclass(frozen=True)
class MoveTask:
    task_id: str
    requested_start: datetime


@dataclass(frozen=True)
class AddTask:
    task: Task
    requested_start: Optional[datetime] = None


@dataclass(frozen=True)
class RemoveTask:
    task_id: str


@dataclass(frozen=True)
class Query:
    """Conversational no-op: the schedule is returned untouched."""

    pass


EditIntent = Union[MoveTask, AddTask, RemoveTask, Query]


@dataclass(frozen=True)
class Violation:
    code: RuleCode
    task_id: Optional[str]
    message: str
    other_id: Optional[str] = None


@dataclass(frozen=True)
class Outcome:
    schedule: Schedule
    unscheduled: Tuple[UnscheduledEntry, ...]
    changed: bool
    reason: ReasonCode
    explanation: str
    violations: Tuple[Violation, ...] = field(default_factory=tuple)
