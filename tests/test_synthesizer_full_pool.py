"""Unit tests for full-pool synthesis."""

from datetime import time

import pytest

from core.models import BlockedInterval, Mode, Priority, ReasonCode, RuleCode, TimeConstraints
from exceptions.custom_errors import MalformedInputError, SynthesisInvariantViolation
from scheduler.builder import synthesize
from scheduler.runner import place
from scheduler.setup import sort_tasks
from scheduler.validator import validate
from tests.conftest import DAY, TZ, at, item, make_task


def starts(outcome) -> dict:
    return {i.task_id: i.start_time for i in outcome.schedule.items}


def reasons(outcome) -> dict:
    return {u.task_id: u.reason for u in outcome.unscheduled}


class TestOrdering:
    def test_deadline_then_priority_then_input_order(self):
        late = make_task("late", 30, Priority.HIGH, deadline=at(16))
        soon = make_task("soon", 30, Priority.LOW, deadline=at(12))
        free_low = make_task("free_low", 30, Priority.LOW)
        free_high = make_task("free_high", 30, Priority.HIGH)
        free_high_2 = make_task("free_high_2", 30, Priority.HIGH)

        ordered = sort_tasks([free_low, late, free_high, soon, free_high_2])

        assert [t.id for t in ordered] == ["soon", "late", "free_high", "free_high_2", "free_low"]


class TestPlacement:
    def test_long_task_buffer(self, window, now):
        a = make_task("a", 120, Priority.HIGH)
        b = make_task("b", 90, Priority.MEDIUM)

        outcome = synthesize([a, b], [], window, now, DAY, TZ)

        assert outcome.reason == ReasonCode.SYNTHESIZED
        assert outcome.changed is True
        assert starts(outcome)["a"] == at(9)
        assert outcome.schedule.get("a").end_time == at(11)
        assert starts(outcome)["b"] >= at(11, 30)

    def test_short_task_buffer_is_ten_minutes(self, window, now):
        a, b = make_task("a", 30), make_task("b", 30)

        outcome = synthesize([a, b], [], window, now, DAY, TZ)

        assert starts(outcome) == {"a": at(9), "b": at(9, 40)}

    def test_first_start_is_strictly_after_now(self, window):
        a = make_task("a", 30)
        now = at(9, 20).replace(second=30)

        outcome = synthesize([a], [], window, now, DAY, TZ)

        assert starts(outcome)["a"] == at(9, 21)

    def test_blocked_time_is_skipped(self, window, now):
        meeting = BlockedInterval("Meeting", time(9), time(10))
        a = make_task("a", 60)

        outcome = synthesize([a], [meeting], window, now, DAY, TZ)

        assert starts(outcome)["a"] == at(10)

    def test_blocked_time_wrapping_midnight(self):
        sleep = BlockedInterval("Sleep", time(22), time(7))
        a = make_task("a", 30)

        outcome = synthesize([a], [sleep], TimeConstraints(time(6), time(23)), at(5), DAY, TZ)

        assert starts(outcome)["a"] == at(7)

    def test_reserved_items_are_busy_time(self, window, now):
        done = make_task("done", 60)
        a = make_task("a", 30)

        outcome = synthesize([a], [], window, now, DAY, TZ, reserved=[item(done, at(9))])

        assert starts(outcome)["a"] == at(10)
        assert "done" not in outcome.schedule.task_ids

    def test_deadline_task_goes_first(self, window, now):
        urgent = make_task("urgent", 90, Priority.LOW, deadline=at(10, 30))
        big = make_task("big", 60, Priority.HIGH)

        outcome = synthesize([big, urgent], [], window, now, DAY, TZ)

        assert starts(outcome)["urgent"] == at(9)
        assert starts(outcome)["big"] == at(11)


class TestUnscheduled:
    def test_task_longer_than_the_day(self, window, now):
        huge = make_task("huge", 600)
        a = make_task("a", 30)

        outcome = synthesize([huge, a], [], window, now, DAY, TZ)

        assert reasons(outcome) == {"huge": ReasonCode.NO_FEASIBLE_SLOT}
        assert starts(outcome) == {"a": at(9)}
        assert "'HUGE'" in outcome.explanation

    def test_deadline_already_passed(self, window):
        late = make_task("late", 30, deadline=at(9, 30))

        outcome = synthesize([late], [], window, at(10), DAY, TZ)

        assert reasons(outcome) == {"late": ReasonCode.NO_FEASIBLE_SLOT}
        assert outcome.schedule.items == ()

    def test_walk_continues_after_a_failure(self, window, now):
        tight = make_task("tight", 60, deadline=at(9, 30))
        a = make_task("a", 30)

        outcome = synthesize([tight, a], [], window, now, DAY, TZ)

        assert reasons(outcome) == {"tight": ReasonCode.NO_FEASIBLE_SLOT}
        assert starts(outcome) == {"a": at(9)}

    def test_window_opening_after_now_is_empty(self, window):
        a = make_task("a", 30)

        outcome = synthesize([a], [], window, at(17), DAY, TZ)

        assert reasons(outcome) == {"a": ReasonCode.NO_FEASIBLE_SLOT}


class TestGuarantees:
    @pytest.mark.parametrize("mode", [Mode.FULL_POOL, Mode.SELECTIVE])
    def test_every_task_is_accounted_for_once(self, mode, window, now, standup):
        tasks = [
            make_task("a", 45, Priority.HIGH, deadline=at(15)),
            make_task("b", 120, deadline=at(17)),
            make_task("c", 90, Priority.LOW, deadline=at(17)),
            make_task("d", 240, deadline=at(16)),
            make_task("e", 30),
        ]

        outcome = synthesize(tasks, [standup], window, now, DAY, TZ, mode=mode)

        scheduled = set(outcome.schedule.task_ids)
        left_out = [u.task_id for u in outcome.unscheduled]
        assert scheduled.isdisjoint(left_out)
        assert scheduled | set(left_out) == {t.id for t in tasks}
        assert len(left_out) == len(set(left_out))

    def test_result_passes_validation(self, window, now, standup):
        tasks = [make_task(f"t{n}", 25 + 10 * n) for n in range(6)]

        outcome = synthesize(tasks, [standup], window, now, DAY, TZ)

        result = validate(
            outcome.schedule, tasks, [standup], window, now, unscheduled=outcome.unscheduled
        )
        assert result.ok
        for placed in outcome.schedule.items:
            task = next(t for t in tasks if t.id == placed.task_id)
            assert placed.minutes == task.estimated_time

    def test_same_inputs_same_schedule(self, window, now, standup):
        tasks = [make_task(f"t{n}", 20 + 15 * n) for n in range(5)]

        first = synthesize(tasks, [standup], window, now, DAY, TZ)
        second = synthesize(tasks, [standup], window, now, DAY, TZ)

        assert first.schedule == second.schedule
        assert first.unscheduled == second.unscheduled


class TestMalformedInput:
    def test_all_problems_are_listed(self, window, now):
        tasks = [make_task("a", 0), make_task("a", 30)]

        with pytest.raises(MalformedInputError) as exc:
            synthesize(tasks, [], window, now, DAY, TZ)

        message = str(exc.value)
        assert message.startswith("Recheck your inputs:")
        assert "greater than 0" in message
        assert "Duplicate task ids: a" in message

    def test_naive_now(self, window):
        with pytest.raises(MalformedInputError, match="time-zone offset"):
            synthesize([make_task("a", 30)], [], window, at(7).replace(tzinfo=None), DAY, TZ)

    def test_unknown_timezone(self, window, now):
        with pytest.raises(MalformedInputError, match="Unknown time zone"):
            synthesize([make_task("a", 30)], [], window, now, DAY, "Mars/Olympus_Mons")

    def test_inverted_window(self, now):
        with pytest.raises(MalformedInputError, match="must be before its end"):
            synthesize([make_task("a", 30)], [], TimeConstraints(time(17), time(9)), now, DAY, TZ)

    def test_zero_length_blocked_interval(self, window, now):
        empty = BlockedInterval("Nothing", time(10), time(10))

        with pytest.raises(MalformedInputError, match="starts and ends"):
            synthesize([make_task("a", 30)], [empty], window, now, DAY, TZ)


class TestSelfCheck:
    def test_broken_placement_is_an_invariant_violation(self, monkeypatch, window, now, standup):
        def place_in_standup(tasks, state):
            for task in tasks:
                place(state, task, at(9, 15), 0)
            return state

        monkeypatch.setattr("scheduler.builder.run_full_pool", place_in_standup)

        with pytest.raises(SynthesisInvariantViolation, match="breaks hard rules") as exc:
            synthesize([make_task("a", 30)], [standup], window, now, DAY, TZ)

        assert [v.code for v in exc.value.violations] == [RuleCode.BLOCKED]
        assert exc.value.violations[0].task_id == "a"
