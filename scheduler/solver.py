from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple
import math

from ortools.sat.python import cp_model

from core.models import ScheduledItem, Task
from core.state import PlacementState
from exceptions.custom_errors import NoFeasibleSolutionError
from utils.constants import CP_SAT_SEED, CP_SAT_TIMEOUT_SECONDS
from utils.time_utils import merge_intervals
import logging

logger = logging.getLogger(__name__)


@dataclass
class SolverResult:
    status: Any
    """CP-SAT status of the solve."""
    starts: Dict[str, Optional[datetime]] = field(default_factory=dict)
    """New start per displaced task id; None when the task could not be kept."""
    total_shift: int = 0
    """Sum of shifts, in minutes, over the kept tasks."""


def configure_solver(
    timeout: float = CP_SAT_TIMEOUT_SECONDS, seed: int = CP_SAT_SEED
) -> cp_model.CpSolver:
    """Configure the CP solver. A single worker keeps repeated solves identical."""
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.random_seed = seed
    solver.parameters.num_search_workers = 1
    solver.parameters.log_search_progress = False
    return solver


def get_model_size(model: cp_model.CpModel) -> Tuple[int, int]:
    """Get the number of constraints and variables in the model."""
    proto = model.Proto()
    return len(proto.constraints), len(proto.variables)


def _offset(base: datetime, moment: datetime, round_up: bool = False) -> int:
    """Minutes from `base` to `moment`, rounded down unless `round_up`."""
    minutes = (moment - base).total_seconds() / 60
    return math.ceil(minutes) if round_up else math.floor(minutes)


def solve_repair(
    state: PlacementState, displaced: Sequence[ScheduledItem], tasks_by_id: Dict[str, Task]
) -> SolverResult:
    """
    Re-place displaced items with CP-SAT.

    Every displaced item gets an optional interval that may start no earlier than its
    original start (and never before `state.earliest`) and must end by the window end and
    its deadline. Blocked, reserved and all other placed items are fixed intervals. The
    model first keeps as many displaced items as possible, then minimises their total
    shift from the original starts.

    Args:
        state (PlacementState): Day state whose `placed` list holds the fixed items.
        displaced (Sequence[ScheduledItem]): Items to move, at their original positions.
        tasks_by_id (Dict[str, Task]): Task lookup for durations and deadlines.

    Returns:
        SolverResult: New starts per displaced task id.

    Raises:
        NoFeasibleSolutionError: If the solver returns no solution within the time limit.
    """
    base = state.window_start
    horizon = _offset(base, state.window_end)
    model = cp_model.CpModel()

    # fixed busy time, merged so overlapping blocked periods stay one interval
    intervals = []
    busy = merge_intervals(
        list(state.obstacles()) + [(i.start_time, i.end_time) for i in state.placed]
    )
    for idx, (start, end) in enumerate(busy):
        s = max(_offset(base, start), 0)
        e = min(_offset(base, end, round_up=True), horizon)
        if e <= s:
            continue
        intervals.append(model.NewFixedSizeIntervalVar(s, e - s, f"busy_{idx}"))

    # displaced items
    starts: Dict[str, Any] = {}
    presence: Dict[str, Any] = {}
    shifts: List[Any] = []
    for item in displaced:
        task = tasks_by_id[item.task_id]
        duration = task.estimated_time
        original = _offset(base, item.start_time, round_up=True)
        lo = max(original, _offset(base, state.earliest, round_up=True), 0)
        latest = state.window_end if task.deadline is None else min(state.window_end, task.deadline)
        hi = _offset(base, latest) - duration
        if lo > hi:
            logger.debug(f"'{item.title}' has no room left after {item.start_time:%H:%M}")
            continue

        start = model.NewIntVar(lo, hi, f"start_{item.task_id}")
        present = model.NewBoolVar(f"kept_{item.task_id}")
        intervals.append(
            model.NewOptionalFixedSizeIntervalVar(start, duration, present, f"slot_{item.task_id}")
        )
        shift = model.NewIntVar(0, max(hi - original, 0), f"shift_{item.task_id}")
        model.Add(shift == start - original).OnlyEnforceIf(present)
        model.Add(shift == 0).OnlyEnforceIf(present.Not())

        starts[item.task_id] = start
        presence[item.task_id] = present
        shifts.append(shift)

    model.AddNoOverlap(intervals)

    # keeping one more item always beats any amount of shifting
    keep_weight = horizon * max(len(displaced), 1) + 1
    if presence:
        model.Maximize(keep_weight * sum(presence.values()) - sum(shifts))

    num_constraints, num_vars = get_model_size(model)
    logger.info(f"🚀 Repairing {len(displaced)} item(s) with CP-SAT...")
    logger.info(f"→ #constraints = {num_constraints},  #vars = {num_vars}")

    solver = configure_solver()
    status = solver.Solve(model)
    logger.info(f"⏱ Solve time: {solver.WallTime():.2f} seconds")
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        logger.info("⚠️ CP-SAT returned no solution for the repair.")
        raise NoFeasibleSolutionError(
            f"❌ No repair found for {len(displaced)} displaced item(s) "
            f"(solver status {solver.StatusName(status)})."
        )

    result = SolverResult(status=status)
    for item in displaced:
        var = starts.get(item.task_id)
        if var is None or not solver.Value(presence[item.task_id]):
            result.starts[item.task_id] = None
            continue
        result.starts[item.task_id] = base + timedelta(minutes=solver.Value(var))
    result.total_shift = int(sum(solver.Value(s) for s in shifts))
    logger.info(f"✅ Kept {sum(1 for v in result.starts.values() if v)} of {len(displaced)} item(s)")
    return result
