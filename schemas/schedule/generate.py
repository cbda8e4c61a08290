from pydantic import BaseModel, model_validator, ConfigDict
from typing import List, Optional, Any
from datetime import date
import datetime as dt
from core.models import Mode, Priority


# Define data models
class TaskIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    estimatedTime: int
    priority: Priority = Priority.MEDIUM
    deadline: Optional[dt.datetime] = None

    @model_validator(mode="before")
    @classmethod
    def extract_estimatedTime(cls, values: Any) -> Any:
        """
        Accept the task length under other common keys, e.g. "estimated_time", "duration"
        or "Duration (min)", and move it to "estimatedTime".
        """
        if isinstance(values, dict) and "estimatedTime" not in values:
            for key in list(values.keys()):
                lowered = key.lower()
                if "estimated" in lowered or "duration" in lowered:
                    values["estimatedTime"] = values.pop(key)
                    break
        return values


class BlockedIntervalIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str
    startTime: dt.time  # HH:MM
    endTime: dt.time  # HH:MM, earlier than startTime wraps past midnight


class TimeConstraintsIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    startTime: dt.time
    endTime: dt.time


class ScheduledItemIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    taskId: str
    title: str
    startTime: dt.datetime
    endTime: dt.datetime


class ScheduleRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    tasks: List[TaskIn]
    blockedIntervals: List[BlockedIntervalIn] = []
    timeConstraints: TimeConstraintsIn
    now: dt.datetime
    day: Optional[date] = None  # defaults to the local date of `now`
    timezone: str = "UTC"
    mode: Mode = Mode.FULL_POOL
    reserved: List[ScheduledItemIn] = []

    @model_validator(mode="after")
    def check_reserved_outside_pool(self) -> "ScheduleRequest":
        pool_ids = {t.id for t in self.tasks}
        clashes = [r.taskId for r in self.reserved if r.taskId in pool_ids]
        if clashes:
            raise ValueError(
                f"Reserved items must not be pool tasks. Found: {', '.join(clashes)}"
            )
        return self
