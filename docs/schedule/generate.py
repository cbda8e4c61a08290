schedule_generate_description = """
Build a schedule for one day from a task pool.

### Request Body

- `tasks`: List of `TaskIn` objects, which contain the following information:
    - `id`: Primary key of the task, assigned by the caller

    - `title`: Title of the task
    - `estimatedTime`: Length of the task in whole minutes (must be greater than 0)
    - `priority`: One of `low`, `medium`, `high` (default `medium`)
    - `deadline`: ISO 8601 date-time with offset by which the task must finish (Optional)

- `blockedIntervals`: List of `BlockedIntervalIn` objects, recurring every day: (Optional)
    - `title`: Label of the blocked time (e.g. "Lunch", "Sleep")

    - `startTime`: Start as `HH:MM`
    - `endTime`: End as `HH:MM`. An end earlier than the start wraps past midnight.

- `timeConstraints`: The daily availability window:
    - `startTime`: Opening as `HH:MM`

    - `endTime`: Close as `HH:MM`, later than `startTime`

- `now`: Current date-time with offset. Nothing is placed at or before it.
- `day`: The date to schedule (Optional, defaults to the local date of `now`)
- `timezone`: IANA time zone used to read times of day (default `UTC`)
- `mode`: `full` to place the whole pool, or `selective` to fit only what is due soon
  around burnout breaks and a free midday hour (default `full`)
- `reserved`: Items already on the calendar that are not part of the pool. They count as
  busy time and are never moved. (Optional)

### Rules

- Full pool: tasks are sorted by deadline, then priority, then input order, and each goes to
  its earliest free slot. A 10 minute buffer follows each task, 30 minutes after tasks of
  90 minutes or more.
- Selective: tasks past their deadline are `PastDeadline`, tasks due after the next two days
  are `NotDueToday`, tasks that would overfill the day are `CapacityReserved`. After a task of
  90 minutes or more the next gap is at least 30 minutes, otherwise 15, and no run of work
  exceeds 120 minutes.

### Response

- `schedule`: Scheduled items with `taskId`, `title`, `startTime`, `endTime`, `minutes`, `priority`
- `unscheduled`: Every pool task left out, with its `reason`
- `changed`, `reason` (`Synthesized`), `explanation`, `violations`, `summary`

### Errors

- `400`: Malformed input. The message lists every problem found.
- `500`: The built schedule broke a hard rule (a bug; the violations are listed).
"""
