"""
scheduler
---------

Main scheduling module. Initializes key components:

- `builder`: Day synthesis in full-pool or selective mode.
- `mutator`: Atomic edits to an accepted schedule, with cascading repair.
- `validator`: Hard-rule checks shared by both.
- `reporter`: Outcome assembly, explanations and tabular views.

Provides high-level access to core scheduling functionality.
"""
from . import builder, mutator, reporter, validator
