schedule_adjust_description = """
Apply one edit to an accepted schedule. The edit either commits as a whole or is rolled back
and the schedule is returned unchanged.

### Request Body

- `tasks`, `blockedIntervals`, `timeConstraints`, `now`, `day`, `timezone`: As for `/schedule/generate`.
- `currentSchedule`: List of scheduled items (`taskId`, `title`, `startTime`, `endTime`)
- `unscheduled`: Pool tasks currently left out, with `taskId` and `reason` (Optional)
- `intent`: One edit, selected by `type`:
    - `{"type": "move", "taskId", "requestedStart"}`: Move a task (a left-out task may be moved in)

    - `{"type": "add", "task", "requestedStart"}`: Add a new task. Without `requestedStart` it
      goes to the earliest free slot.
    - `{"type": "remove", "taskId"}`: Take a task off the schedule
    - `{"type": "query", "text"}`: No change; the schedule comes back as it is
- `strategy`: How displaced items are moved, `nearest` (default) or `cp-sat` (Optional)

### Reasons

- `Applied`: The edit was committed as requested.
- `AppliedWithReflow`: The edit was committed and the items it overlapped were pushed to later
  slots. Items with no later slot are reported as `DisplacedNoSlot`.
- `NoOp`: Nothing to change.
- `Rejected:Overlap`, `Rejected:OutOfBounds`, `Rejected:PastStart`,
  `Rejected:DeadlineViolation`, `Rejected:NoFeasibleSlot`: The edit was rolled back.

### Errors

- `400`: Malformed input, including unknown task ids or adding a task that is already scheduled.
- `422`: The CP-SAT repair found no solution in time.
"""
