from dataclasses import dataclass
from typing import Optional

from core.models import ReasonCode, RuleCode


@dataclass
class HardRule:
    code: RuleCode
    message: str
    rejection: Optional[ReasonCode] = None
    """Reason reported when an edit's own target breaks this rule."""


def define_hard_rules() -> dict[RuleCode, HardRule]:
    return {
        RuleCode.DURATION: HardRule(
            RuleCode.DURATION,
            "Scheduled length must match the task's estimated time.",
        ),
        RuleCode.OVERLAP: HardRule(
            RuleCode.OVERLAP,
            "Scheduled tasks must not overlap each other.",
            ReasonCode.REJECTED_OVERLAP,
        ),
        RuleCode.BLOCKED: HardRule(
            RuleCode.BLOCKED,
            "Tasks cannot be placed during a blocked time.",
            ReasonCode.REJECTED_OVERLAP,
        ),
        RuleCode.BOUNDS: HardRule(
            RuleCode.BOUNDS,
            "Tasks must stay inside the daily availability window.",
            ReasonCode.REJECTED_OUT_OF_BOUNDS,
        ),
        RuleCode.DEADLINE: HardRule(
            RuleCode.DEADLINE,
            "Tasks must finish on or before their deadline.",
            ReasonCode.REJECTED_DEADLINE,
        ),
        RuleCode.FUTURE: HardRule(
            RuleCode.FUTURE,
            "Tasks can only be placed in the future.",
            ReasonCode.REJECTED_PAST_START,
        ),
        RuleCode.COMPLETENESS: HardRule(
            RuleCode.COMPLETENESS,
            "Every task must be either scheduled or unscheduled, exactly once.",
        ),
        RuleCode.BURNOUT: HardRule(
            RuleCode.BURNOUT,
            "Continuous work must be broken up by a long enough gap.",
        ),
        RuleCode.MIDDAY: HardRule(
            RuleCode.MIDDAY,
            "A free hour must remain between 12:00 and 14:00.",
        ),
    }


HARD_RULES = define_hard_rules()
