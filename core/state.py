from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Set, Tuple

from core.models import Schedule, ScheduledItem, Task, UnscheduledEntry


@dataclass
class ValidationContext:
    """
    Everything a rule check needs to judge one schedule. Built once per
    validation run; rules only read from it.
    """

    schedule: Schedule
    """The schedule under test."""
    tasks_by_id: Dict[str, Task]
    """The task pool keyed by task id."""
    pool_ids: List[str]
    """Task ids in pool order, used for the completeness rule."""
    unscheduled: List[UnscheduledEntry]
    """Tasks reported as left out of the schedule."""
    blocked: List[Tuple[datetime, datetime, str]]
    """Blocked occurrences touching the schedule day, as (start, end, title)."""
    window_start: datetime
    """Opening of the availability window on the schedule day."""
    window_end: datetime
    """Close of the availability window on the schedule day."""
    now: datetime
    """The caller's current instant."""
    settled: Set[ScheduledItem] = field(default_factory=set)
    """Items carried over unchanged from an accepted schedule; exempt from the
    future-only rule because they are not new placements."""
    midday: Optional[Tuple[datetime, datetime]] = None
    """The midday range checked in selective mode, if the check is enabled."""
    reserved: List[ScheduledItem] = field(default_factory=list)
    """Calendar items outside the pool; they count as prior work for the burnout check."""


@dataclass
class PlacementState:
    """
    Running state of a single placement walk over one day.
    """

    # day inputs
    day: date
    """The target day."""
    timezone: str
    """IANA zone used to anchor times of day."""
    window_start: datetime
    """Opening of the availability window."""
    window_end: datetime
    """Close of the availability window."""
    earliest: datetime
    """First admissible start: after `now` and not before the window opens."""
    blocked: List[Tuple[datetime, datetime]]
    """Blocked occurrences as (start, end)."""
    reserved: List[Tuple[datetime, datetime]] = field(default_factory=list)
    """Busy time from items already on the calendar that are not in the pool."""
    midday: Optional[Tuple[datetime, datetime]] = None
    """Standing exclusion interval kept free for the midday break (selective mode)."""

    # collections to fill
    placed: List[ScheduledItem] = field(default_factory=list)
    """Items placed so far, in placement order."""
    buffer_after: Dict[str, int] = field(default_factory=dict)
    """Minutes that must stay free after each placed item, keyed by task id."""
    unscheduled: List[UnscheduledEntry] = field(default_factory=list)
    """Tasks left out, with the reason."""
    committed_minutes: int = 0
    """Total minutes of placed work."""
    continuous_minutes: int = 0
    """Length of the current run of work not yet broken by a qualifying gap."""
    last_task: Optional[Task] = None
    """The most recently placed task (chronologically last in selective mode)."""

    def obstacles(self) -> List[Tuple[datetime, datetime]]:
        """Fixed busy time that no task may intersect."""
        fixed = list(self.blocked) + list(self.reserved)
        if self.midday is not None:
            fixed.append(self.midday)
        return fixed
