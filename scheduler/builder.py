from datetime import date, datetime
from typing import Sequence

from core.models import (
    BlockedInterval,
    Mode,
    Outcome,
    ReasonCode,
    Schedule,
    ScheduledItem,
    Task,
    TimeConstraints,
)
from exceptions.custom_errors import SynthesisInvariantViolation
from scheduler.reporter import build_outcome
from scheduler.rules import capacity_guard
from scheduler.runner import run_full_pool, run_selective
from scheduler.setup import prefilter_tasks, setup_state, sort_tasks
from scheduler.validator import validate
from utils.validate import ensure_valid_inputs
import logging

logger = logging.getLogger(__name__)


# == Build Day Schedule ==
def synthesize(
    tasks: Sequence[Task],
    blocked_intervals: Sequence[BlockedInterval],
    constraints: TimeConstraints,
    now: datetime,
    day: date,
    timezone: str,
    mode: Mode = Mode.FULL_POOL,
    reserved: Sequence[ScheduledItem] = (),
) -> Outcome:
    """
    Builds a schedule for one day from a task pool.

    In full-pool mode every task is placed at its earliest feasible slot in deadline and
    priority order. In selective mode only the tasks due soon are considered, a midday
    break is kept free and the day is capped so work never runs without breaks.
    Either way the result is checked against every hard rule before it is returned.

    Args:
        tasks (Sequence[Task]): The task pool.
        blocked_intervals (Sequence[BlockedInterval]): Recurring daily blocked times.
        constraints (TimeConstraints): The daily availability window.
        now (datetime): The current instant (tz-aware).
        day (date): The day to schedule.
        timezone (str): IANA zone used to interpret times of day.
        mode (Mode): FULL_POOL or SELECTIVE.
        reserved (Sequence[ScheduledItem]): Calendar items outside the pool, kept as busy time.

    Returns:
        Outcome: The schedule, every left-out task with its reason, and an explanation.

    Raises:
        MalformedInputError: If the inputs are structurally invalid.
        SynthesisInvariantViolation: If the built schedule breaks a hard rule.
    """
    # === Validate inputs ===
    ensure_valid_inputs(tasks, blocked_intervals, constraints, now, timezone)
    mode = Mode(mode)
    selective = mode == Mode.SELECTIVE

    # === Setup ===
    logger.info(f"📋 Building {mode.value} schedule for {len(tasks)} task(s)...")
    state = setup_state(day, timezone, constraints, blocked_intervals, now, reserved, selective)
    ordered = sort_tasks(tasks)

    # === Placement ===
    if selective:
        eligible, left_out = prefilter_tasks(ordered, day, timezone, now)
        state.unscheduled.extend(left_out)
        admitted, held_back = capacity_guard(eligible, state)
        state.unscheduled.extend(held_back)
        logger.info(
            f"🚀 Placing {len(admitted)} task(s); {len(left_out)} filtered out, {len(held_back)} held back"
        )
        run_selective(admitted, state)
    else:
        logger.info(f"🚀 Placing {len(ordered)} task(s)")
        run_full_pool(ordered, state)

    schedule = Schedule(day=day, timezone=timezone, items=tuple(state.placed))

    # === Self-check ===
    result = validate(
        schedule,
        tasks,
        blocked_intervals,
        constraints,
        now,
        unscheduled=state.unscheduled,
        selective=selective,
        reserved=reserved,
    )
    if not result.ok:
        error_msg = ["❌ Built schedule breaks hard rules:\n"]
        error_msg.append("\n".join(f"    • {v.message}" for v in result.violations))
        error_msg = "\n".join(error_msg)
        logger.error(error_msg)
        raise SynthesisInvariantViolation(error_msg, result.violations)

    logger.info(
        f"✅ Scheduled {len(schedule.items)} task(s), {len(state.unscheduled)} left out, "
        f"{state.committed_minutes} min committed"
    )
    return build_outcome(
        schedule,
        tasks,
        state.unscheduled,
        changed=True,
        reason=ReasonCode.SYNTHESIZED,
    )
