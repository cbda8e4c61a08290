"""
core
----

Core scheduling engine components:

- models:
  Immutable value types shared by every component (Task, BlockedInterval,
  TimeConstraints, ScheduledItem, Schedule, edit intents, Outcome, reason and rule codes).

- HardRule & define_hard_rules:
  Describe the non-negotiable rules and the rejection reason each one maps to.

- ConstraintManager:
  Register and apply rule checks in a controlled sequence.

- ValidationContext & PlacementState:
  Encapsulate the inputs of a validation run and the running state of a placement walk.
"""
