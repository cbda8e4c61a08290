from fastapi import APIRouter
from utils.constants import DEFAULT_REPAIR_STRATEGY, REPAIR_STRATEGIES

router = APIRouter(prefix="/health", tags=["Health Check"])


@router.get("/check", summary="Health Check")
def healthcheck():
    return {
        "status": "ok",
        "repairStrategies": REPAIR_STRATEGIES,
        "defaultRepairStrategy": DEFAULT_REPAIR_STRATEGY,
    }
