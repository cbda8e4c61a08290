"""Shared test fixtures for the day scheduler test suite."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from core.models import (
    BlockedInterval,
    Priority,
    Schedule,
    ScheduledItem,
    Task,
    TimeConstraints,
)

DAY = date(2025, 3, 10)
TZ = "UTC"


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    """An aware UTC instant on the test day."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def item(task: Task, start: datetime) -> ScheduledItem:
    """A scheduled item lasting exactly the task's estimated time."""
    return ScheduledItem(task.id, task.title, start, start + timedelta(minutes=task.estimated_time))


def make_task(task_id: str, minutes: int, priority=Priority.MEDIUM, deadline=None) -> Task:
    return Task(
        id=task_id,
        title=task_id.upper(),
        estimated_time=minutes,
        priority=priority,
        deadline=deadline,
    )


@pytest.fixture
def day() -> date:
    return DAY


@pytest.fixture
def now() -> datetime:
    """Early morning, before the window opens."""
    return at(7)


@pytest.fixture
def window() -> TimeConstraints:
    """Availability 09:00-17:00."""
    return TimeConstraints(time(9), time(17))


@pytest.fixture
def standup() -> BlockedInterval:
    return BlockedInterval("Standup", time(9, 15), time(9, 45))


@pytest.fixture
def task_x() -> Task:
    return make_task("x", 30)


@pytest.fixture
def task_y() -> Task:
    return make_task("y", 60)


@pytest.fixture
def accepted(task_x: Task, task_y: Task) -> Schedule:
    """X at 10:00-10:30 and Y at 11:00-12:00."""
    return Schedule(DAY, TZ, (item(task_x, at(10)), item(task_y, at(11))))
