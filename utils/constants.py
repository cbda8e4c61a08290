import json
from datetime import time

from config.paths import CONSTANTS_PATH

"""
Loads configuration constants from config/constants.json and exposes them as module-level variables.
Edit constants.json to change values; import from utils.constants to use in code.
"""

with open(CONSTANTS_PATH, "r", encoding="utf-8") as f:
    _constants = json.load(f)

# Expose constants as variables
PRIORITY_RANKS = _constants["PRIORITY_RANKS"]

# full-pool placement
BUFFER_MINUTES = _constants["BUFFER_MINUTES"]
LONG_TASK_BUFFER_MINUTES = _constants["LONG_TASK_BUFFER_MINUTES"]
LONG_TASK_MINUTES = _constants["LONG_TASK_MINUTES"]

# burnout rule (selective mode)
MIN_GAP_SHORT_MINUTES = _constants["MIN_GAP_SHORT_MINUTES"]
MIN_GAP_LONG_MINUTES = _constants["MIN_GAP_LONG_MINUTES"]
MAX_CONTINUOUS_MINUTES = _constants["MAX_CONTINUOUS_MINUTES"]

# midday break (selective mode)
MIDDAY_WINDOW_START = time.fromisoformat(_constants["MIDDAY_WINDOW_START"])
MIDDAY_WINDOW_END = time.fromisoformat(_constants["MIDDAY_WINDOW_END"])
MIDDAY_BREAK_MINUTES = _constants["MIDDAY_BREAK_MINUTES"]

LOOKAHEAD_DAYS = _constants["LOOKAHEAD_DAYS"]
SLOT_STEP_MINUTES = _constants["SLOT_STEP_MINUTES"]

# cascading repair
REPAIR_STRATEGIES = _constants["REPAIR_STRATEGIES"]
DEFAULT_REPAIR_STRATEGY = _constants["DEFAULT_REPAIR_STRATEGY"]
CP_SAT_TIMEOUT_SECONDS = _constants["CP_SAT_TIMEOUT_SECONDS"]
CP_SAT_SEED = _constants["CP_SAT_SEED"]
