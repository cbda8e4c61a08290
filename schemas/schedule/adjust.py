from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, List, Literal, Optional, Union
from datetime import date
import datetime as dt
from core.models import ReasonCode
from schemas.schedule.generate import (
    BlockedIntervalIn,
    ScheduledItemIn,
    TaskIn,
    TimeConstraintsIn,
)


# Edit intents, told apart by `type`
class MoveIntent(BaseModel):
    type: Literal["move"]
    taskId: str
    requestedStart: dt.datetime


class AddIntent(BaseModel):
    type: Literal["add"]
    task: TaskIn
    requestedStart: Optional[dt.datetime] = None  # earliest free slot when omitted


class RemoveIntent(BaseModel):
    type: Literal["remove"]
    taskId: str


class QueryIntent(BaseModel):
    type: Literal["query"]
    text: Optional[str] = None


Intent = Annotated[
    Union[MoveIntent, AddIntent, RemoveIntent, QueryIntent], Field(discriminator="type")
]


class UnscheduledIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    taskId: str
    reason: ReasonCode


class AdjustRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    tasks: List[TaskIn]
    blockedIntervals: List[BlockedIntervalIn] = []
    timeConstraints: TimeConstraintsIn
    now: dt.datetime
    day: Optional[date] = None  # defaults to the local date of the first item, then of `now`
    timezone: str = "UTC"
    currentSchedule: List[ScheduledItemIn] = []
    unscheduled: List[UnscheduledIn] = []
    intent: Intent
    strategy: Optional[str] = None  # "nearest" or "cp-sat"; server default when omitted
