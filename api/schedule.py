from schemas.schedule.generate import ScheduleRequest
from schemas.schedule.adjust import AdjustRequest
from fastapi import APIRouter, HTTPException
from scheduler.builder import synthesize
from scheduler.mutator import apply_intent
from core.models import Schedule
from utils.constants import DEFAULT_REPAIR_STRATEGY
from exceptions.custom_errors import *
import os
import traceback
import logging
from docs.schedule.generate import schedule_generate_description
from docs.schedule.adjust import schedule_adjust_description
from utils.helpers.schedule_payload import (
    outcome_to_response,
    resolve_day,
    to_blocked,
    to_constraints,
    to_intent,
    to_item,
    to_task,
    to_unscheduled,
)

router = APIRouter(prefix="/schedule", tags=["Schedule"])
logger = logging.getLogger(__name__)


# generate day schedule
@router.post(
    "/generate",
    response_model=dict,
    description=schedule_generate_description,
    summary="Generate Schedule",
)
async def generate_schedule(request: ScheduleRequest):
    try:
        tasks = [to_task(t) for t in request.tasks]
        reserved = [to_item(r) for r in request.reserved]
        day = resolve_day(request.day, request.timezone, request.now)

        outcome = synthesize(
            tasks=tasks,
            blocked_intervals=[to_blocked(b) for b in request.blockedIntervals],
            constraints=to_constraints(request.timeConstraints),
            now=request.now,
            day=day,
            timezone=request.timezone,
            mode=request.mode,
            reserved=reserved,
        )
        return outcome_to_response(outcome, tasks)

    except tuple(CUSTOM_ERRORS) as e:
        raise HTTPException(status_code=CUSTOM_ERRORS[type(e)], detail=str(e))
    except Exception as e:
        tb = traceback.format_exc()
        raise HTTPException(status_code=500, detail=f"{str(e)}\n\nTraceback:\n{tb}")


# adjust an accepted schedule
@router.post(
    "/adjust",
    response_model=dict,
    description=schedule_adjust_description,
    summary="Adjust Schedule",
)
async def adjust_schedule(request: AdjustRequest):
    try:
        tasks = [to_task(t) for t in request.tasks]
        items = [to_item(i) for i in request.currentSchedule]
        day = resolve_day(request.day, request.timezone, request.now, items)
        strategy = request.strategy or os.getenv("REPAIR_STRATEGY", DEFAULT_REPAIR_STRATEGY)
        intent = to_intent(request.intent)

        outcome = apply_intent(
            current=Schedule(day=day, timezone=request.timezone, items=tuple(items)),
            tasks=tasks,
            blocked_intervals=[to_blocked(b) for b in request.blockedIntervals],
            constraints=to_constraints(request.timeConstraints),
            now=request.now,
            intent=intent,
            unscheduled=[to_unscheduled(u) for u in request.unscheduled],
            strategy=strategy,
        )
        # an added task belongs to the pool from here on
        pool = tasks
        if request.intent.type == "add":
            pool = [t for t in tasks if t.id != intent.task.id] + [intent.task]
        logger.info(f"Adjust finished with {outcome.reason.value}")
        return outcome_to_response(outcome, pool)

    except tuple(CUSTOM_ERRORS) as e:
        raise HTTPException(status_code=CUSTOM_ERRORS[type(e)], detail=str(e))
    except Exception as e:
        tb = traceback.format_exc()
        raise HTTPException(status_code=500, detail=f"{str(e)}\n\nTraceback:\n{tb}")
