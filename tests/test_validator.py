"""Unit tests for the hard-rule validator."""

from datetime import time, timedelta

from core.models import (
    BlockedInterval,
    ReasonCode,
    RuleCode,
    Schedule,
    ScheduledItem,
    TimeConstraints,
    UnscheduledEntry,
)
from scheduler.validator import validate
from tests.conftest import DAY, TZ, at, item, make_task


class TestHardRules:
    """Each hard rule on its own."""

    def test_valid_schedule_has_no_violations(self, accepted, task_x, task_y, window, now):
        result = validate(accepted, [task_x, task_y], [], window, now)

        assert result.ok
        assert result.violations == ()

    def test_duration_mismatch(self, task_x, window, now):
        short = ScheduledItem("x", "X", at(10), at(10, 20))
        result = validate(Schedule(DAY, TZ, (short,)), [task_x], [], window, now)

        assert result.codes == [RuleCode.DURATION]

    def test_overlap_names_both_items(self, task_x, task_y, window, now):
        schedule = Schedule(DAY, TZ, (item(task_y, at(10)), item(task_x, at(10, 30))))
        result = validate(schedule, [task_x, task_y], [], window, now)

        assert result.codes == [RuleCode.OVERLAP]
        violation = result.violations[0]
        assert violation.task_id == "x"
        assert violation.other_id == "y"

    def test_touching_items_do_not_overlap(self, task_x, task_y, window, now):
        schedule = Schedule(DAY, TZ, (item(task_y, at(10)), item(task_x, at(11))))

        assert validate(schedule, [task_x, task_y], [], window, now).ok

    def test_blocked_interval(self, task_x, standup, window, now):
        schedule = Schedule(DAY, TZ, (item(task_x, at(9, 30)),))
        result = validate(schedule, [task_x], [standup], window, now)

        assert result.codes == [RuleCode.BLOCKED]

    def test_blocked_interval_wrapping_midnight(self, task_x, now):
        sleep = BlockedInterval("Sleep", time(22), time(7))
        early = Schedule(DAY, TZ, (item(task_x, at(6, 30)),))

        result = validate(early, [task_x], [sleep], TimeConstraints(time(6), time(23)), at(5))

        assert result.codes == [RuleCode.BLOCKED]

    def test_out_of_bounds(self, task_y, window, now):
        schedule = Schedule(DAY, TZ, (item(task_y, at(16, 30)),))
        result = validate(schedule, [task_y], [], window, now)

        assert result.codes == [RuleCode.BOUNDS]

    def test_deadline(self, window, now):
        task = make_task("d", 60, deadline=at(10, 30))
        schedule = Schedule(DAY, TZ, (item(task, at(10)),))
        result = validate(schedule, [task], [], window, now)

        assert result.codes == [RuleCode.DEADLINE]

    def test_start_at_now_is_in_the_past(self, task_x, window):
        schedule = Schedule(DAY, TZ, (item(task_x, at(10)),))
        result = validate(schedule, [task_x], [], window, at(10))

        assert result.codes == [RuleCode.FUTURE]

    def test_settled_items_are_exempt_from_future_rule(self, task_x, window):
        placed = item(task_x, at(10))
        schedule = Schedule(DAY, TZ, (placed,))
        result = validate(schedule, [task_x], [], window, at(10, 15), settled=[placed])

        assert result.ok


class TestCompleteness:
    """The scheduled and unscheduled lists together must cover the pool exactly once."""

    def test_missing_task(self, task_x, task_y, window, now):
        schedule = Schedule(DAY, TZ, (item(task_x, at(10)),))
        result = validate(schedule, [task_x, task_y], [], window, now)

        assert result.codes == [RuleCode.COMPLETENESS]
        assert result.involving("y")

    def test_reported_unscheduled_is_complete(self, task_x, task_y, window, now):
        schedule = Schedule(DAY, TZ, (item(task_x, at(10)),))
        left_out = [UnscheduledEntry("y", ReasonCode.NO_FEASIBLE_SLOT)]

        assert validate(schedule, [task_x, task_y], [], window, now, unscheduled=left_out).ok

    def test_both_scheduled_and_unscheduled(self, task_x, window, now):
        schedule = Schedule(DAY, TZ, (item(task_x, at(10)),))
        left_out = [UnscheduledEntry("x", ReasonCode.NO_FEASIBLE_SLOT)]
        result = validate(schedule, [task_x], [], window, now, unscheduled=left_out)

        assert result.codes == [RuleCode.COMPLETENESS]

    def test_unknown_task(self, task_x, window, now):
        ghost = make_task("ghost", 30)
        schedule = Schedule(DAY, TZ, (item(task_x, at(10)), item(ghost, at(11))))
        result = validate(schedule, [task_x], [], window, now)

        assert result.codes == [RuleCode.COMPLETENESS]
        assert result.violations[0].task_id == "ghost"


class TestAllViolationsReported:
    def test_rules_do_not_short_circuit(self, task_x, task_y, standup, window, now):
        # Y starts inside the standup and X ends after the window closes
        late_x = item(task_x, at(16, 45))
        schedule = Schedule(DAY, TZ, (item(task_y, at(9, 30)), late_x))
        result = validate(schedule, [task_x, task_y], [standup], window, now)

        assert RuleCode.BLOCKED in result.codes
        assert RuleCode.BOUNDS in result.codes
        assert result.codes.index(RuleCode.BLOCKED) < result.codes.index(RuleCode.BOUNDS)


class TestSelectiveChecks:
    def test_short_gap_is_burnout(self, window, now):
        a, b = make_task("a", 60), make_task("b", 60)
        schedule = Schedule(DAY, TZ, (item(a, at(9)), item(b, at(10, 5))))
        result = validate(schedule, [a, b], [], window, now, selective=True)

        assert result.codes == [RuleCode.BURNOUT]

    def test_gap_after_long_task_must_be_thirty_minutes(self, window, now):
        a, b = make_task("a", 90), make_task("b", 30)
        schedule = Schedule(DAY, TZ, (item(a, at(9)), item(b, at(10, 50))))
        result = validate(schedule, [a, b], [], window, now, selective=True)

        assert result.codes == [RuleCode.BURNOUT]

    def test_single_long_task_is_allowed(self, window, now):
        a = make_task("a", 150)
        schedule = Schedule(DAY, TZ, (item(a, at(9)),))

        assert validate(schedule, [a], [], window, now, selective=True).ok

    def test_midday_needs_a_free_hour(self, window, now):
        a, b = make_task("a", 60), make_task("b", 60)
        schedule = Schedule(DAY, TZ, (item(a, at(12, 30)), item(b, at(13, 45))))
        result = validate(schedule, [a, b], [], window, now, selective=True)

        assert RuleCode.MIDDAY in result.codes

    def test_reserved_work_counts_toward_the_run(self, window, now):
        done, t = make_task("done", 120), make_task("t", 60)
        schedule = Schedule(DAY, TZ, (item(t, at(11)),))

        result = validate(
            schedule, [t], [], window, now, selective=True, reserved=[item(done, at(9))]
        )

        assert result.codes == [RuleCode.BURNOUT]
        assert len(result.violations) == 2
        assert result.violations[0].other_id == "done"

    def test_back_to_back_reserved_items_are_not_judged(self, window, now):
        first, second, t = make_task("first", 60), make_task("second", 60), make_task("t", 30)
        schedule = Schedule(DAY, TZ, (item(t, at(13)),))
        reserved = [item(first, at(9)), item(second, at(10))]

        assert validate(schedule, [t], [], window, now, selective=True, reserved=reserved).ok

    def test_selective_checks_only_run_when_asked(self, window, now):
        a, b = make_task("a", 60), make_task("b", 60)
        schedule = Schedule(DAY, TZ, (item(a, at(12, 30)), item(b, at(13, 30))))

        assert validate(schedule, [a, b], [], window, now).ok
        assert not validate(schedule, [a, b], [], window, now, selective=True).ok


def test_items_are_ordered_by_start(task_x, task_y):
    schedule = Schedule(DAY, TZ, (item(task_y, at(11)), item(task_x, at(10))))

    assert schedule.task_ids == ["x", "y"]
    assert schedule.items[0].end_time - schedule.items[0].start_time == timedelta(minutes=30)
