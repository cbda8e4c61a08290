"""
scheduler.rules
---------------

Exposes all scheduling rules by importing from:

- `fixed`: Hard rules every schedule must satisfy (duration, overlap, blocked times, bounds, deadlines, future-only, completeness).
- `high`: Selective-mode rules that keep a day sustainable (burnout gaps, midday break, capacity guard).
- `low`: Soft preferences (intensity spreading).

Allows unified access to all rule definitions via wildcard imports.
"""
from .fixed import *
from .high import *
from .low import *
